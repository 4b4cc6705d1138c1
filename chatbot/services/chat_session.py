"""
CHAT SESSION MODULE
===================

The conversation controller. One ChatSession holds everything one chat window
needs: the message log, the settings, the uploaded knowledge base and whether
a reply is pending. The HTTP layer (chatbot.main) only calls into it.

STATES:
  idle            - ready for a message.
  awaiting_reply  - a completion request is running. New messages are rejected
                    until it lands (at most one request in flight).

OPERATIONS:
  submit(text)               - append the user message, ask the model, append the reply.
  ingest_document(name, rd)  - load a .md file as the knowledge base (replaces any previous one).
  update_config(field, val)  - change temperature / max_tokens / system_prompt.
  reset()                    - clear the log back to the greeting (settings and knowledge kept).
  snapshot()                 - rendered view of everything for the display.

Everything runs on one asyncio event loop. The awaiting_reply flag is set
before the first await of a submission, so it works as the lock.
"""

from typing import Any, Awaitable, Callable, List, Optional, Union
import logging
import math

from chatbot.models import (
    CONFIG_FIELDS,
    Message,
    MessageView,
    Role,
    SessionConfig,
    SessionSnapshot,
)
from chatbot.services.completion_gateway import CompletionGateway
from chatbot.services.prompt_composer import compose_prompt
from chatbot.utils.markup import render_markup
from chatbot.utils.time_info import get_display_time
from config import GREETING_MESSAGE, KNOWLEDGE_FILE_EXTENSION

logger = logging.getLogger("Chatbot")

IDLE = "idle"
AWAITING_REPLY = "awaiting_reply"

KNOWLEDGE_FILE_REJECTED = "Please upload a markdown (.md) file."


# ==============================================================================
# ERRORS
# ==============================================================================
# All are ValueErrors: the HTTP layer turns them into 400 responses.

class ChatbotError(ValueError):
    """Base class for input the session refuses. Nothing has been changed when it is raised."""


class KnowledgeFileError(ChatbotError):
    """The uploaded file is not a markdown (.md) file."""


class UnknownConfigFieldError(ChatbotError):
    """update_config() was given a setting name that doesn't exist."""


class ConfigValueError(ChatbotError):
    """A numeric setting was given text that isn't a finite number."""


def _coerce_number(field: str, value: Any, cast: Callable[[Any], Any]):
    """Turn a settings-panel value into a number. Blank input counts as 0, like an emptied number box."""
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return cast(0)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ConfigValueError(f"{field} must be a number, got {value!r}")
    # float() accepts "nan", "inf" and overflows like "1e400"; none of them can be sent as JSON.
    if not math.isfinite(number):
        raise ConfigValueError(f"{field} must be a finite number, got {value!r}")
    return cast(number)


# ==============================================================================
# CHAT SESSION CLASS
# ==============================================================================

class ChatSession:
    """
    Owns the message log, SessionConfig, optional knowledge document and the
    pending-reply flag. The API key is handed in once at construction.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        credential: Optional[str] = None,
        config: Optional[SessionConfig] = None,
    ):
        self.gateway = gateway
        self.credential = credential or ""
        self.config = config or SessionConfig()
        self.knowledge_document: Optional[str] = None
        self.knowledge_filename: Optional[str] = None
        self.pending_input = ""
        self.awaiting_reply = False
        self.messages: List[Message] = [self._greeting()]

    @property
    def state(self) -> str:
        return AWAITING_REPLY if self.awaiting_reply else IDLE

    @staticmethod
    def _greeting() -> Message:
        return Message(role="assistant", content=GREETING_MESSAGE, timestamp=get_display_time())

    def _append(self, role: Role, content: str) -> Message:
        message = Message(role=role, content=content, timestamp=get_display_time())
        self.messages.append(message)
        return message

    # --------------------------------------------------------------------------
    # SENDING MESSAGES
    # --------------------------------------------------------------------------

    def set_input(self, text: str) -> None:
        """Store what is currently typed in the message box."""
        self.pending_input = text

    async def submit(self, text: Optional[str] = None) -> Optional[Message]:
        """
        Send the pending input (or text, if given) and wait for the reply.

        Returns the appended assistant Message, or None when the submission was
        rejected: a reply is already pending, or the input is blank. A rejected
        submission changes nothing and sends no request.
        """
        if self.awaiting_reply:
            logger.warning("Rejected message: a reply is already pending")
            return None
        content = self.pending_input if text is None else text
        if not content.strip():
            return None

        self._append("user", content)
        self.pending_input = ""
        self.awaiting_reply = True
        try:
            # Captured now: a knowledge upload during the request only affects the next one.
            prompt = compose_prompt(self.config, self.knowledge_document, self.messages)
            reply = await self.gateway.complete(
                self.credential,
                prompt.system_text,
                prompt.turns,
                self.config.temperature,
                self.config.max_tokens,
            )
            return self._append("assistant", reply)
        finally:
            self.awaiting_reply = False

    # --------------------------------------------------------------------------
    # KNOWLEDGE BASE
    # --------------------------------------------------------------------------

    async def ingest_document(
        self,
        filename: str,
        read: Callable[[], Awaitable[Union[str, bytes]]],
    ) -> Message:
        """
        Load a markdown file as the knowledge base.

        The extension is checked before read() is called. On success the previous
        document is discarded and a notice is appended to the log.

        Raises:
            KnowledgeFileError: filename doesn't end in .md (nothing is read or changed).
        """
        if not filename.endswith(KNOWLEDGE_FILE_EXTENSION):
            logger.warning("Rejected knowledge file %r: not a markdown file", filename)
            raise KnowledgeFileError(KNOWLEDGE_FILE_REJECTED)

        contents = await read()
        if isinstance(contents, bytes):
            contents = contents.decode("utf-8")

        self.knowledge_document = contents
        self.knowledge_filename = filename
        logger.info("Loaded knowledge base %s (%d characters)", filename, len(contents))
        return self._append("assistant", f"📂 Uploaded markdown knowledge base: **{filename}**")

    # --------------------------------------------------------------------------
    # SETTINGS AND RESET
    # --------------------------------------------------------------------------

    def update_config(self, field: str, value: Any) -> SessionConfig:
        """
        Change one setting. temperature becomes a float, max_tokens an int,
        system_prompt a string. Out-of-range numbers are stored as given.

        Raises:
            UnknownConfigFieldError: field is not one of CONFIG_FIELDS.
            ConfigValueError: a numeric field got something that isn't a finite number.
        """
        if field not in CONFIG_FIELDS:
            raise UnknownConfigFieldError(f"Unknown setting: {field!r}")

        if field == "temperature":
            value = _coerce_number(field, value, float)
        elif field == "max_tokens":
            value = _coerce_number(field, value, int)
        else:
            value = "" if value is None else str(value)

        setattr(self.config, field, value)
        return self.config

    def reset(self) -> None:
        """
        Replace the log with a fresh greeting. Settings and knowledge base stay.
        A reply already pending still arrives and is appended after the greeting.
        """
        self.messages = [self._greeting()]
        logger.info("Chat cleared")

    # --------------------------------------------------------------------------
    # DISPLAY
    # --------------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Everything the display needs, with message bodies already rendered to safe markup."""
        return SessionSnapshot(
            messages=[message_view(msg) for msg in self.messages],
            awaiting_reply=self.awaiting_reply,
            config=self.config.model_copy(),
            knowledge_loaded=bool(self.knowledge_document),
            knowledge_filename=self.knowledge_filename,
        )


def message_view(message: Message) -> MessageView:
    """Render one Message for a chat bubble."""
    return MessageView(
        role=message.role,
        html=render_markup(message.content),
        timestamp=message.timestamp,
        label="Bot" if message.role == "assistant" else "You",
    )
