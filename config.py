"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all chatbot settings: the API key, the completion endpoint,
  the model name, session defaults and the greeting message. Designed for
  single-user use: each person runs their own copy of this backend with their
  own .env, and the one running process holds one conversation.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so the API key stays out of code).
  - Resolves the API key ONCE at import time. The session receives it as a
    plain value; nothing else reads the environment per request.
  - Exposes CHAT_COMPLETIONS_URL and CHAT_MODEL for the completion gateway.
  - Defines the default temperature / max tokens / system prompt for new sessions.
  - Holds the knowledge file extension and the greeting shown at the top of every chat.

USAGE:
  Import what you need: `from config import OPENAI_API_KEY, GREETING_MESSAGE`
"""

import os
import logging
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
# Used when an environment value can't be parsed and we fall back to the default.
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()


def _env_number(name: str, default, cast):
    """
    Read a numeric setting from the environment.
    Returns default when the variable is unset or not a valid number (logged).
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


# ============================================================================
# COMPLETION ENDPOINT CONFIGURATION
# ============================================================================
# Any OpenAI-compatible /chat/completions endpoint works. With no key set the
# chatbot still runs: every reply is a fixed notice asking you to configure one.

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "").strip()
CHAT_COMPLETIONS_URL = os.getenv(
    "CHAT_COMPLETIONS_URL", "https://api.openai.com/v1/chat/completions"
)
CHAT_MODEL = os.getenv("CHAT_MODEL", "gpt-3.5-turbo")

# Transport timeout (seconds) for one completion request. The session itself
# never times out a pending reply; this is the HTTP client's limit.
CHAT_REQUEST_TIMEOUT = _env_number("CHAT_REQUEST_TIMEOUT", 60.0, float)

# ============================================================================
# SESSION DEFAULTS
# ============================================================================
# Applied when a session is created. The ranges are what the settings panel
# offers; the session stores whatever number it is given.

DEFAULT_TEMPERATURE = _env_number("DEFAULT_TEMPERATURE", 0.7, float)
DEFAULT_MAX_TOKENS = _env_number("DEFAULT_MAX_TOKENS", 800, int)
DEFAULT_SYSTEM_PROMPT = os.getenv("DEFAULT_SYSTEM_PROMPT", "")

TEMPERATURE_RANGE = (0.0, 1.0)
MAX_TOKENS_RANGE = (64, 2048)

# ============================================================================
# KNOWLEDGE BASE AND CONVERSATION
# ============================================================================
# Only markdown files are accepted as a knowledge base. The whole file is
# appended to the system prompt; there is no chunking or truncation.

KNOWLEDGE_FILE_EXTENSION = ".md"

GREETING_MESSAGE = (
    "Hi! 👋 I'm your markdown knowledge chatbot. "
    "Upload a markdown file or start chatting."
)

# ============================================================================
# SERVER
# ============================================================================

CHATBOT_HOST = os.getenv("CHATBOT_HOST", "0.0.0.0")
CHATBOT_PORT = _env_number("CHATBOT_PORT", 8000, int)
