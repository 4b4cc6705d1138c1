"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (chatbot.main) calls these services;
they don't handle HTTP requests, only the chat flow and the model call.

MODULES:
    chat_session       - ChatSession: message log, settings, knowledge base, one reply at a time
    prompt_composer    - system prompt + knowledge base + history -> ComposedPrompt
    completion_gateway - one POST to the completion endpoint; always returns display text
"""
