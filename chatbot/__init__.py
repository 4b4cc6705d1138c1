"""
MARKDOWN CHATBOT APPLICATION PACKAGE
====================================

This directory is the main Python package for the chatbot backend.

  from chatbot.main import app
  from chatbot.models import Message, SessionConfig
  from chatbot.services.chat_session import ChatSession

FILE STRUCTURE:
  chatbot/
    __init__.py   - This file; marks 'chatbot' as a package.
    main.py       - FastAPI app and all HTTP endpoints (/chat, /knowledge, /config, /reset, ...).
    models.py     - Pydantic models for messages, settings, prompts and API bodies.
    services/     - Chat session controller, prompt composer, completion gateway.
    utils/        - Helpers: markup rendering, display time.
"""
