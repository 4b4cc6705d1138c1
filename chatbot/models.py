"""
DATA MODELS MODULE
==================

This file defines the Pydantic models used by the chat session, the prompt
composer and the HTTP API. FastAPI uses the request/response models to
validate incoming JSON and to serialize snapshots.

MODELS:
  Message          - One entry in the conversation log (role + content + display time). Frozen.
  SessionConfig    - The three settings a user can change: temperature, max_tokens, system_prompt.
  Turn             - A role + content pair sent to the completion endpoint (a Message minus its time).
  ComposedPrompt   - Output of the prompt composer: system text + ordered turns.
  ChatRequest      - Body of POST /chat.
  MessageView      - A Message as the display receives it: rendered markup, never raw text.
  SessionSnapshot  - Everything the display needs to draw the chat window and settings panel.
  ChatResponse     - Body returned by POST /chat (the new reply + the full snapshot).
"""

from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional, Tuple

from config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    MAX_TOKENS_RANGE,
    TEMPERATURE_RANGE,
)

Role = Literal["user", "assistant", "system"]

# Names of the settings a user may change. Anything else is rejected.
CONFIG_FIELDS = ("temperature", "max_tokens", "system_prompt")

# ==============================================================================
# CONVERSATION MODELS
# ==============================================================================

class Message(BaseModel):
    """
    A single message in the conversation log.
    Frozen: once appended it never changes. Order in the log defines chronology.
    """
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: str  # Display time, e.g. "3:07:09 PM".


class SessionConfig(BaseModel):
    """
    Per-session settings. Always fully defined: defaults come from config.py.
    Ranges (temperature 0-1, max_tokens 64-2048) are advisory; nothing here enforces them.
    """
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


class Turn(BaseModel):
    """One role + content pair of the outgoing conversation."""
    role: Role
    content: str


class ComposedPrompt(BaseModel):
    """
    The prompt for one completion request.
    system_text is "" when there is neither a system prompt nor a knowledge base.
    """
    system_text: str
    turns: List[Turn]

# ==============================================================================
# API REQUEST/RESPONSE MODELS
# ==============================================================================

class ChatRequest(BaseModel):
    """
    Request body for POST /chat.
    Empty and whitespace-only messages pass validation here; the API rejects them with 400.
    """
    message: str


class MessageView(BaseModel):
    """A log entry ready for display: html is Markup Renderer output."""
    role: Role
    html: str
    timestamp: str
    label: str  # "Bot" for assistant messages, "You" otherwise.


class SessionSnapshot(BaseModel):
    """
    Read-only view of the session for the display surface.
    awaiting_reply drives the loading indicator and disables the send button.
    The ranges are the min/max of the temperature slider and max-tokens box.
    """
    messages: List[MessageView]
    awaiting_reply: bool
    config: SessionConfig
    temperature_range: Tuple[float, float] = TEMPERATURE_RANGE
    max_tokens_range: Tuple[int, int] = MAX_TOKENS_RANGE
    knowledge_loaded: bool
    knowledge_filename: Optional[str] = None


class ChatResponse(BaseModel):
    """Response body for POST /chat."""
    reply: MessageView
    session: SessionSnapshot
