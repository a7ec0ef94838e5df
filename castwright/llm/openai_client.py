"""OpenAI-compatible chat-completions client for character extraction.

Responsibilities:
- Send chat-completions requests to OpenAI or a compatible local server.
- Pace requests through an optional shared `RateLimiter`.
- Raise classified provider exceptions for CLI-level diagnostics.
"""

from __future__ import annotations

import json
import re
import socket
from typing import Any

import requests

from .rate_limiter import RateLimiter

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAIProviderError(RuntimeError):
    """Raised when a chat request fails or returns an unusable payload."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


_API_KEY_PATTERN = re.compile(r"\bsk-[A-Za-z0-9_-]{8,}\b")
_BEARER_PATTERN = re.compile(r"(?i)bearer\s+[A-Za-z0-9._-]{12,}")

_FAILURE_HEADLINES = {
    "invalid_api_key": "Provider authentication failed",
    "insufficient_quota": "Provider quota is insufficient for this request",
    "invalid_model": "Provider rejected the selected model",
    "timeout": "Provider request timed out",
}


def redact_secrets(text: str) -> str:
    """Mask API-key and bearer-token lookalikes in provider output."""

    return _BEARER_PATTERN.sub(
        "Bearer [redacted-token]",
        _API_KEY_PATTERN.sub("[redacted-key]", text),
    )


def classify_http_failure(
    status_code: int,
    provider_message: str,
    provider_code: str | None,
) -> str:
    """Map an HTTP status and provider error payload to a failure kind.

    Args:
        status_code: HTTP status returned by the server.
        provider_message: Human-readable error message from the body.
        provider_code: Optional machine-readable `error.code` value.

    Returns:
        One of `invalid_api_key`, `insufficient_quota`, `invalid_model`,
        `timeout`, or `http_error`.
    """

    message = provider_message.lower()
    code = (provider_code or "").lower()

    if status_code == 401 or "api key" in message:
        return "invalid_api_key"
    if code == "insufficient_quota" or (status_code == 429 and "quota" in message):
        return "insufficient_quota"
    if code == "model_not_found":
        return "invalid_model"
    if "model" in message and any(
        marker in message for marker in ("not found", "does not exist", "invalid")
    ):
        return "invalid_model"
    if status_code in {408, 504} or "timeout" in message or "timed out" in message:
        return "timeout"
    return "http_error"


class OpenAIChatClient:
    """Minimal requests-based chat-completions HTTP client."""

    MAX_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        timeout_seconds: float = 120.0,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize HTTP settings and optional request pacing."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = rate_limiter

    @property
    def targets_default_endpoint(self) -> bool:
        """Return whether requests go to the hosted OpenAI API."""

        return self.base_url == DEFAULT_OPENAI_BASE_URL

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
    ) -> str:
        """Return the first assistant message text for one prompt pair.

        Raises:
            OpenAIProviderError: On missing credentials, HTTP or transport
                failures, and malformed or empty payloads.
        """

        # Local compatible servers usually accept any key.
        if not self.api_key and self.targets_default_endpoint:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY`, use `--api-key`, or "
                "`--prompt-api-key`.",
                failure_kind="invalid_api_key",
            )

        if self.rate_limiter is not None:
            self.rate_limiter.acquire(f"chat:{model}")

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        body = self._post(endpoint_path="/chat/completions", payload=payload)
        return self._extract_message_text(body.decode("utf-8", errors="replace"))

    def _post(self, *, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """POST a JSON payload and return raw response bytes."""

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return bytes(response.content)
        except requests.HTTPError as exc:
            raise self._provider_error_from_http(exc) from exc
        except (requests.Timeout, socket.timeout, TimeoutError) as exc:
            raise OpenAIProviderError(
                "Provider request timed out.",
                failure_kind="timeout",
            ) from exc
        except requests.RequestException as exc:
            raise OpenAIProviderError(
                f"Provider request transport error: {self._shorten(str(exc))}",
                failure_kind="transport",
            ) from exc

    @classmethod
    def _shorten(cls, text: str) -> str:
        """Collapse whitespace and cap message length for terminal output."""

        compact = " ".join(text.split())
        if len(compact) <= cls.MAX_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls.MAX_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _provider_error_from_http(cls, exc: requests.HTTPError) -> OpenAIProviderError:
        """Convert an HTTP error into a classified provider exception."""

        response = exc.response
        status_code = response.status_code if response is not None else 0
        body = ""
        if response is not None:
            body = bytes(response.content).decode("utf-8", errors="replace").strip()

        message, provider_code = cls._parse_error_body(body)
        failure_kind = classify_http_failure(status_code, message, provider_code)
        headline = _FAILURE_HEADLINES.get(failure_kind, "Provider request failed")
        detail = f"{headline} (HTTP {status_code})"
        detail = f"{detail}: {message}" if message else f"{detail}."

        return OpenAIProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )

    @classmethod
    def _parse_error_body(cls, body: str) -> tuple[str, str | None]:
        """Pull `error.message` and `error.code` out of an error body."""

        if not body:
            return "", None
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._shorten(redact_secrets(body)), None

        message = body
        provider_code: str | None = None
        error_payload = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error_payload, dict):
            code = error_payload.get("code")
            if isinstance(code, str) and code.strip():
                provider_code = code.strip()
            text = error_payload.get("message")
            if isinstance(text, str) and text.strip():
                message = text.strip()
        return cls._shorten(redact_secrets(message)), provider_code

    @staticmethod
    def _extract_message_text(raw_payload: str) -> str:
        """Extract the first assistant message text from a completions payload."""

        try:
            payload = json.loads(raw_payload)
        except json.JSONDecodeError as exc:
            raise OpenAIProviderError("Provider returned invalid JSON payload.") from exc

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise OpenAIProviderError("Provider response missing non-empty `choices` list.")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise OpenAIProviderError("Provider response missing `choices[0].message` object.")

        content = message.get("content")
        if isinstance(content, list):
            content = "".join(
                part["text"]
                for part in content
                if isinstance(part, dict)
                and part.get("type") == "text"
                and isinstance(part.get("text"), str)
            )
        if not isinstance(content, str) or not content.strip():
            raise OpenAIProviderError("Provider response message content is empty.")
        return content.strip()
