"""ErrorMapper — classify transport and parse failures, scrubbing secrets.

Every message leaving this module has had each configured secret replaced
by ``[REDACTED]``, and credential-looking query parameters and headers
(``key=...``, ``x-goog-api-key: ...``, ``Authorization: Bearer ...``)
masked, so a failing URL or header dump can be echoed safely.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
from pydantic import SecretStr, ValidationError

from turnbridge.core.errors import BackendError, ErrorKind, TranslationError

REDACTED = "[REDACTED]"

_CREDENTIAL_PATTERNS = [
    re.compile(r"(?i)([?&](?:key|api_key|apikey|access_token)=)[^&\s\"']+"),
    re.compile(r"(?i)(x-goog-api-key[\"']?\s*[:=]\s*[\"']?)[^\s,\"'}]+"),
    re.compile(r"(?i)(authorization[\"']?\s*[:=]\s*[\"']?bearer\s+)[^\s,\"'}]+"),
]

_AUTH_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}
_AUTH_REASONS = ("API_KEY_INVALID", "API_KEY_EXPIRED", "API key not valid")
_RATE_LIMIT_STATUSES = {"RESOURCE_EXHAUSTED"}

_MAX_DETAIL = 500


class ErrorMapper:
    """Maps exceptions and error payloads into :class:`BackendError`.

    Args:
        secrets: Values that must never appear in produced messages,
            typically the configured API key.
    """

    def __init__(self, secrets: Iterable[str | SecretStr | None] = ()) -> None:
        self._secrets: list[str] = []
        for secret in secrets:
            if isinstance(secret, SecretStr):
                secret = secret.get_secret_value()
            if secret:
                self._secrets.append(secret)
        # Longest first so a secret containing another is fully replaced.
        self._secrets.sort(key=len, reverse=True)

    def scrub(self, text: str) -> str:
        """Remove every configured secret and credential-looking token."""
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        for pattern in _CREDENTIAL_PATTERNS:
            text = pattern.sub(lambda m: m.group(1) + REDACTED, text)
        return text

    def error(self, kind: ErrorKind, message: str, *, status_code: int | None = None) -> BackendError:
        """Build a :class:`BackendError` with a scrubbed message."""
        return BackendError(kind, _truncate(self.scrub(message)), status_code=status_code)

    def map(self, exc: BaseException) -> BackendError:
        """Classify ``exc`` into the error taxonomy."""
        if isinstance(exc, BackendError):
            return self.error(exc.kind, exc.message, status_code=exc.status_code)
        if isinstance(exc, httpx.HTTPStatusError):
            response = exc.response
            return self.from_status(response.status_code, _response_text(response))
        if isinstance(exc, httpx.TimeoutException):
            return self.error(ErrorKind.NETWORK, f"Request timed out: {exc}")
        if isinstance(exc, httpx.TransportError):
            return self.error(ErrorKind.NETWORK, f"Connection error: {exc}")
        if isinstance(exc, httpx.HTTPError):
            return self.error(ErrorKind.NETWORK, f"HTTP error: {exc}")
        if isinstance(exc, json.JSONDecodeError):
            return self.error(ErrorKind.INVALID_RESPONSE, f"Malformed JSON: {exc.msg}")
        if isinstance(exc, UnicodeDecodeError):
            return self.error(ErrorKind.INVALID_RESPONSE, f"Response body is not valid {exc.encoding}: {exc.reason}")
        if isinstance(exc, ValidationError):
            return self.error(ErrorKind.INVALID_RESPONSE, f"Unexpected response shape: {exc}")
        if isinstance(exc, KeyError):
            return self.error(ErrorKind.INVALID_RESPONSE, f"Missing required field: {exc}")
        if isinstance(exc, TranslationError):
            return self.error(ErrorKind.OTHER, str(exc))
        return self.error(ErrorKind.OTHER, f"{type(exc).__name__}: {exc}")

    def from_status(self, status_code: int, body: str = "") -> BackendError:
        """Classify a non-success HTTP status and its body."""
        status, detail = _parse_error_body(body)
        kind = _classify(status_code, status, detail or body)
        message = f"Request failed with status {status_code}"
        if detail or body:
            message += f": {detail or body}"
        return self.error(kind, message, status_code=status_code)

    def from_payload(self, payload: Mapping[str, Any]) -> BackendError:
        """Classify an ``{"error": {...}}`` object returned in a response body."""
        error = payload.get("error")
        if not isinstance(error, Mapping):
            return self.error(ErrorKind.INVALID_RESPONSE, f"Malformed error payload: {error!r}")
        code = error.get("code")
        status_code = code if isinstance(code, int) else 0
        status = str(error.get("status") or "")
        detail = str(error.get("message") or "")
        kind = _classify(status_code, status, detail)
        return self.error(
            kind,
            f"Backend returned an error ({status or status_code}): {detail}",
            status_code=status_code or None,
        )


def _classify(status_code: int, status: str, detail: str) -> ErrorKind:
    if status_code in (401, 403) or status in _AUTH_STATUSES:
        return ErrorKind.AUTH
    if any(reason in detail for reason in _AUTH_REASONS):
        return ErrorKind.AUTH
    if status_code == 429 or status in _RATE_LIMIT_STATUSES:
        return ErrorKind.RATE_LIMITED
    return ErrorKind.OTHER


def _parse_error_body(body: str) -> tuple[str, str]:
    """Pull ``status`` and ``message`` out of a Google-style error body."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return "", ""
    if isinstance(data, list) and data:
        data = data[0]
    if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
        return "", ""
    error = data["error"]
    return str(error.get("status") or ""), str(error.get("message") or "")


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except httpx.ResponseNotRead:
        return ""


def _truncate(text: str) -> str:
    if len(text) <= _MAX_DETAIL:
        return text
    return text[: _MAX_DETAIL - 3] + "..."
