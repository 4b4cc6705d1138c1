"""
PROMPT COMPOSER MODULE
======================

Builds the prompt for one completion request from the session's settings, the
uploaded knowledge base (if any) and the conversation log. Pure functions: the
log and the config are read, never modified.

SYSTEM TEXT:
  system_prompt, then "\\nKnowledge Base:\\n" + the whole knowledge document when
  one is loaded. Empty when there is neither.

TURNS:
  Every message in the log, in order, as role + content (display time dropped).
  This includes the greeting and the "uploaded knowledge base" notices.
"""

from typing import Dict, List, Optional, Sequence

from chatbot.models import ComposedPrompt, Message, SessionConfig, Turn

KNOWLEDGE_BASE_HEADER = "\nKnowledge Base:\n"


def compose_prompt(
    config: SessionConfig,
    knowledge_document: Optional[str],
    log: Sequence[Message],
) -> ComposedPrompt:
    """Combine system prompt, knowledge document and message history into one ComposedPrompt."""
    system_text = config.system_prompt
    if knowledge_document:
        system_text += KNOWLEDGE_BASE_HEADER + knowledge_document

    turns = [Turn(role=msg.role, content=msg.content) for msg in log]
    return ComposedPrompt(system_text=system_text, turns=turns)


def outgoing_messages(system_text: str, turns: Sequence[Turn]) -> List[Dict[str, str]]:
    """
    Build the "messages" list for the completion request body.
    A system message leads only when system_text is non-empty; an empty system turn is never sent.
    """
    messages = []
    if system_text:
        messages.append({"role": "system", "content": system_text})
    messages.extend({"role": turn.role, "content": turn.content} for turn in turns)
    return messages
