"""
Completion Client for the hosted chat-completion API (Groq).

This module provides a clean interface to the completion API.
It handles:
- API client construction per credential (server key or the user's own)
- Request/response handling
- Normalising the response envelope to a single optional string
- Mapping SDK errors onto the application's error taxonomy

There is deliberately no retry and no provider fallback: a failed call
is reported to the user, who decides whether to try again.
"""
import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional

from groq import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    Groq,
    PermissionDeniedError,
    RateLimitError,
)

from echora.core.config import Settings, get_settings
from echora.core.exceptions import CompletionError, ConfigError, QuotaExceeded
from echora.core.logging_config import get_logger, mask_secret
from echora.llm.prompts import FALLBACK_REPLY

logger = get_logger(__name__)

# SDK clients kept open at once; each holds its own connection pool
MAX_CACHED_CLIENTS = 32


def _as_dict(value: Any) -> Any:
    """Turn SDK response objects into plain dicts/lists."""
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return value


def _text_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _decode_choices(choices: Any) -> Optional[str]:
    """Chat-completions envelope: ``choices[0].message.content``."""
    if not isinstance(choices, list) or not choices:
        return None
    first = _as_dict(choices[0])
    if not isinstance(first, dict):
        return None
    message = _as_dict(first.get("message"))
    if not isinstance(message, dict):
        return None

    content = message.get("content")
    if isinstance(content, list):
        # Some gateways return content as a list of typed parts
        return _decode_parts(content)
    return _text_or_none(content)


def _decode_parts(parts: Any) -> Optional[str]:
    """First non-empty text part of a content-part list."""
    if not isinstance(parts, list):
        return None
    for part in parts:
        part = _as_dict(part)
        if not isinstance(part, dict):
            continue
        if part.get("type") in ("output_text", "text"):
            text = _text_or_none(part.get("text"))
            if text:
                return text
    return None


def _decode_output_items(output: Any) -> Optional[str]:
    """Responses-style envelope: ``output[*].content[*]`` with ``output_text`` parts."""
    if not isinstance(output, list):
        return None
    for item in output:
        item = _as_dict(item)
        if not isinstance(item, dict):
            continue
        text = _decode_parts(item.get("content"))
        if text:
            return text
    return None


def extract_reply_text(response: Any) -> Optional[str]:
    """
    Normalise a completion response to its reply text.

    Accepts either envelope shape the API has used:
    - ``{"choices": [{"message": {"content": "..."}}]}``
    - ``{"output": [{"content": [{"type": "output_text", "text": "..."}]}]}``
      (optionally with a top-level ``output_text`` convenience field)

    Never raises. Returns None when there is no usable text.
    """
    try:
        data = _as_dict(response)
        if not isinstance(data, dict):
            return None

        if "choices" in data:
            return _decode_choices(data.get("choices"))

        if "output" in data or "output_text" in data:
            return _text_or_none(data.get("output_text")) or _decode_output_items(data.get("output"))

        return None
    except Exception as e:
        logger.warning(f"Unreadable completion envelope: {e}")
        return None


class CompletionClient:
    """
    Client for the hosted completion API.

    Example:
        >>> client = CompletionClient()
        >>> client.generate_reply("Hello!", context_block="You are ECHORA...")
        'Hi! How are you today?'
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Callable[..., Any] = Groq,
    ):
        """
        Initialize the client.

        Args:
            settings: Application settings (defaults to get_settings())
            client_factory: Callable building an SDK client from
                ``api_key``/``timeout``/``max_retries`` keyword arguments
        """
        self.settings = settings or get_settings()
        self._client_factory = client_factory
        self._clients: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = threading.Lock()

        self.model = self.settings.llm_model
        self.temperature = self.settings.llm_temperature
        self.max_tokens = self.settings.llm_max_tokens

        logger.info(f"Completion client initialized (model={self.model})")

    def _resolve_key(self, api_key: Optional[str]) -> str:
        key = api_key or self.settings.groq_api_key
        if not key:
            logger.error("No completion API key configured (server or user)")
            raise ConfigError()
        return key

    def _client_for(self, api_key: str) -> Any:
        """SDK client for a key, least recently used ones closed past the cap."""
        with self._lock:
            client = self._clients.get(api_key)
            if client is not None:
                self._clients.move_to_end(api_key)
                return client

            client = self._client_factory(
                api_key=api_key,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
            )
            self._clients[api_key] = client
            evicted = []
            while len(self._clients) > MAX_CACHED_CLIENTS:
                evicted.append(self._clients.popitem(last=False)[1])

        for old in evicted:
            self._close(old)
        return client

    def forget_key(self, api_key: Optional[str]) -> None:
        """Close and drop the client for a key that is no longer in use."""
        if not api_key:
            return
        with self._lock:
            client = self._clients.pop(api_key, None)
        if client is not None:
            logger.debug(f"Closed completion client for {mask_secret(api_key)}")
            self._close(client)

    @property
    def cached_keys(self) -> List[str]:
        with self._lock:
            return list(self._clients)

    @staticmethod
    def _close(client: Any) -> None:
        close = getattr(client, "close", None)
        if close is not None:
            close()

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
    ) -> Optional[str]:
        """
        Send role-tagged messages and return the reply text, if any.

        Raises:
            ConfigError: No API key available
            QuotaExceeded: Rate limit / quota reached, or the key was rejected
            CompletionError: Connection failure, timeout or other API error
        """
        client = self._client_for(self._resolve_key(api_key))
        target_model = model or self.model

        try:
            response = client.chat.completions.create(
                model=target_model,
                messages=messages,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=self.max_tokens,
            )
        except RateLimitError as e:
            logger.warning(f"Completion API rate limited ({target_model}): {e}")
            raise QuotaExceeded(details=str(e)) from e
        except (AuthenticationError, PermissionDeniedError) as e:
            logger.warning(f"Completion API rejected the credential ({target_model})")
            raise QuotaExceeded(
                "The completion API rejected the API key. Check your key and billing, then try again.",
                details=str(e),
            ) from e
        except APITimeoutError as e:
            logger.error(f"Completion API timed out ({target_model})")
            raise CompletionError("Your Echo took too long to answer. Please try again.", details=str(e)) from e
        except APIConnectionError as e:
            logger.error(f"Could not reach completion API: {e}")
            raise CompletionError(details=str(e)) from e
        except APIError as e:
            logger.error(f"Completion API error ({target_model}): {e}")
            raise CompletionError(details=str(e)) from e

        return extract_reply_text(response)

    def generate_reply(
        self,
        user_message: str,
        context_block: str,
        api_key: Optional[str] = None,
    ) -> str:
        """
        Generate the Echo's reply.

        A response without usable text is not an error: the literal
        fallback reply is returned instead.
        """
        text = self.complete(
            messages=[
                {"role": "system", "content": context_block},
                {"role": "user", "content": user_message},
            ],
            api_key=api_key,
        )
        if text is None:
            logger.warning("Completion returned no text; using fallback reply")
            return FALLBACK_REPLY

        logger.debug(f"Generated reply: length={len(text)}")
        return text
