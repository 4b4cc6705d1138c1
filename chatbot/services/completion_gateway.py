"""
COMPLETION GATEWAY MODULE
=========================

Sends one chat-completion request to an OpenAI-compatible endpoint and always
comes back with text that can be shown to the user. Used by ChatSession for
every submitted message.

FLOW:
  1. No API key: return NO_CREDENTIAL_REPLY. No network access.
  2. POST {model, messages, temperature, max_tokens} with a Bearer header.
  3. 2xx + choices[0].message.content  -> that content.
     2xx but no usable content          -> EMPTY_REPLY.
     Network error, timeout, non-2xx,
     or a body that isn't JSON          -> ERROR_REPLY_PREFIX + the error text.

complete() never raises. There are no retries: one request per message, and
the user can simply send again.
"""

from typing import Any, Optional, Sequence
import logging

import httpx

from chatbot.models import Turn
from chatbot.services.prompt_composer import outgoing_messages
from config import CHAT_COMPLETIONS_URL, CHAT_MODEL, CHAT_REQUEST_TIMEOUT

logger = logging.getLogger("Chatbot")

# Replies used when the model can't be asked or doesn't answer.
NO_CREDENTIAL_REPLY = (
    "👋 This would call the OpenAI API to answer using your uploaded markdown file "
    "as a knowledge base. (No API key set: please configure it via OPENAI_API_KEY "
    "in your .env)"
)
EMPTY_REPLY = "Sorry, I could not retrieve a response from the model."
ERROR_REPLY_PREFIX = "⚠️ Error talking to OpenAI API: "


def _mask_key(key: str) -> str:
    """Show only the last 4 characters of an API key in logs."""
    return f"...{key[-4:]}" if len(key) > 4 else "****"


def _extract_content(data: Any) -> Optional[str]:
    """Return choices[0].message.content if it is a non-empty string, else None."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, str) and content:
        return content
    return None


# ==============================================================================
# COMPLETION GATEWAY CLASS
# ==============================================================================

class CompletionGateway:
    """
    Talks to the completion endpoint. The API key is passed in on every call
    (ChatSession holds the one resolved at startup); the endpoint and model
    are fixed when the gateway is created.
    """

    def __init__(
        self,
        endpoint_url: str = CHAT_COMPLETIONS_URL,
        model: str = CHAT_MODEL,
        timeout: float = CHAT_REQUEST_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Store endpoint settings. If client is given it is used for every request (and not closed here)."""
        self.endpoint_url = endpoint_url
        self.model = model
        self.timeout = timeout
        self.client = client

    async def _post(self, body: dict, headers: dict) -> httpx.Response:
        """POST the body once, on the shared client if we have one, else on a short-lived client."""
        if self.client is not None:
            return await self.client.post(self.endpoint_url, json=body, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.endpoint_url, json=body, headers=headers)

    async def complete(
        self,
        credential: Optional[str],
        system_text: str,
        turns: Sequence[Turn],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Ask the model for the next assistant reply and return display-ready text.

        Args:
            credential: API key; empty or None selects the fixed no-key reply.
            system_text: System prompt + knowledge base ("" to send no system message).
            turns: The conversation so far, oldest first.
            temperature, max_tokens: Passed through to the endpoint as-is.

        Returns:
            str: The model's reply, EMPTY_REPLY, NO_CREDENTIAL_REPLY, or an error message.
        """
        if not credential:
            logger.warning("No API key configured. Returning the no-key reply.")
            return NO_CREDENTIAL_REPLY

        body = {
            "model": self.model,
            "messages": outgoing_messages(system_text, turns),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }

        try:
            logger.info(
                "Requesting completion (model=%s, turns=%d, key=%s)",
                self.model, len(turns), _mask_key(credential),
            )
            response = await self._post(body, headers)
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            # Network error, timeout, 4xx/5xx or invalid JSON: shown to the user as a message.
            logger.error("Error talking to completion endpoint: %s", e)
            return ERROR_REPLY_PREFIX + (str(e) or type(e).__name__)

        content = _extract_content(data)
        if content is None:
            logger.warning("Completion response had no usable content")
            return EMPTY_REPLY
        return content
