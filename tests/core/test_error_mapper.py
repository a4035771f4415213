"""Tests for ErrorMapper classification and secret scrubbing."""

import json

import httpx
import pytest
from pydantic import BaseModel, SecretStr, ValidationError

from turnbridge.core.error_mapper import REDACTED, ErrorMapper
from turnbridge.core.errors import BackendError, ErrorKind, UnknownToolCallError

API_KEY = "AIzaSyFAKE-key-0123456789abcdef"


def _status_error(status_code: int, body: str) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", f"https://example.test/v1beta/models/m:generateContent?key={API_KEY}")
    response = httpx.Response(status_code, text=body, request=request)
    return httpx.HTTPStatusError(f"{status_code} for url {request.url}", request=request, response=response)


class TestScrub:
    def test_configured_secret_never_appears(self) -> None:
        mapper = ErrorMapper([API_KEY])
        exc = mapper.map(RuntimeError(f"request to https://host/path failed; key was {API_KEY}"))
        assert API_KEY not in str(exc)
        assert API_KEY not in exc.message
        assert REDACTED in exc.message

    def test_secretstr_accepted(self) -> None:
        mapper = ErrorMapper([SecretStr(API_KEY), None, ""])
        assert mapper.scrub(f"x {API_KEY} y") == f"x {REDACTED} y"

    def test_query_parameter_masked_without_configured_secret(self) -> None:
        mapper = ErrorMapper()
        scrubbed = mapper.scrub("GET https://host/models?alt=sse&key=abc123&x=1")
        assert "abc123" not in scrubbed
        assert "key=[REDACTED]&x=1" in scrubbed

    def test_header_masked(self) -> None:
        mapper = ErrorMapper()
        scrubbed = mapper.scrub("headers: {'x-goog-api-key': 'sekret', 'Authorization': 'Bearer tok123'}")
        assert "sekret" not in scrubbed
        assert "tok123" not in scrubbed

    def test_longest_secret_first(self) -> None:
        mapper = ErrorMapper(["abc", "abcdef"])
        assert mapper.scrub("abcdef") == REDACTED

    def test_long_messages_truncated_after_scrubbing(self) -> None:
        mapper = ErrorMapper([API_KEY])
        message = "x" * 490 + API_KEY
        exc = mapper.error(ErrorKind.OTHER, message)
        assert len(exc.message) <= 500
        assert API_KEY[:8] not in exc.message


class TestMap:
    def test_backend_error_rescrubbed(self) -> None:
        mapper = ErrorMapper([API_KEY])
        exc = mapper.map(BackendError(ErrorKind.AUTH, f"bad {API_KEY}", status_code=401))
        assert exc.kind is ErrorKind.AUTH
        assert exc.status_code == 401
        assert API_KEY not in exc.message

    def test_rate_limited(self) -> None:
        body = json.dumps({"error": {"code": 429, "status": "RESOURCE_EXHAUSTED", "message": "Quota exceeded"}})
        exc = ErrorMapper([API_KEY]).map(_status_error(429, body))
        assert exc.kind is ErrorKind.RATE_LIMITED
        assert exc.status_code == 429
        assert "Quota exceeded" in exc.message

    def test_auth_status(self) -> None:
        exc = ErrorMapper().map(_status_error(403, "forbidden"))
        assert exc.kind is ErrorKind.AUTH

    def test_auth_from_bad_request_reason(self) -> None:
        body = json.dumps(
            [{"error": {"code": 400, "status": "INVALID_ARGUMENT", "message": "API key not valid. Please pass a valid API key."}}]
        )
        exc = ErrorMapper().map(_status_error(400, body))
        assert exc.kind is ErrorKind.AUTH

    def test_other_status(self) -> None:
        exc = ErrorMapper().map(_status_error(500, "internal"))
        assert exc.kind is ErrorKind.OTHER
        assert "500" in exc.message

    def test_timeout(self) -> None:
        exc = ErrorMapper().map(httpx.ReadTimeout("timed out"))
        assert exc.kind is ErrorKind.NETWORK

    def test_connect_error(self) -> None:
        exc = ErrorMapper([API_KEY]).map(httpx.ConnectError(f"cannot reach host?key={API_KEY}"))
        assert exc.kind is ErrorKind.NETWORK
        assert API_KEY not in str(exc)

    def test_json_decode_error(self) -> None:
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("{oops")
        exc = ErrorMapper().map(exc_info.value)
        assert exc.kind is ErrorKind.INVALID_RESPONSE

    def test_unicode_decode_error(self) -> None:
        exc = ErrorMapper().map(UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"))
        assert exc.kind is ErrorKind.INVALID_RESPONSE
        assert exc.message == "Response body is not valid utf-8: invalid start byte"

    def test_validation_error(self) -> None:
        class Shape(BaseModel):
            value: int

        with pytest.raises(ValidationError) as exc_info:
            Shape.model_validate({"value": "nope"})
        exc = ErrorMapper().map(exc_info.value)
        assert exc.kind is ErrorKind.INVALID_RESPONSE

    def test_key_error(self) -> None:
        exc = ErrorMapper().map(KeyError("candidates"))
        assert exc.kind is ErrorKind.INVALID_RESPONSE
        assert "candidates" in exc.message

    def test_translation_error(self) -> None:
        exc = ErrorMapper().map(UnknownToolCallError("X"))
        assert exc.kind is ErrorKind.OTHER

    def test_unknown_exception(self) -> None:
        exc = ErrorMapper().map(ValueError("odd"))
        assert exc.kind is ErrorKind.OTHER
        assert "ValueError" in exc.message


class TestFromPayload:
    def test_google_error_object(self) -> None:
        payload = {"error": {"code": 401, "status": "UNAUTHENTICATED", "message": "Request had invalid credentials"}}
        exc = ErrorMapper().from_payload(payload)
        assert exc.kind is ErrorKind.AUTH
        assert exc.status_code == 401
        assert "invalid credentials" in exc.message

    def test_malformed_error_object(self) -> None:
        exc = ErrorMapper().from_payload({"error": "nope"})
        assert exc.kind is ErrorKind.INVALID_RESPONSE

    def test_payload_message_scrubbed(self) -> None:
        payload = {"error": {"code": 400, "status": "INVALID_ARGUMENT", "message": f"key {API_KEY} rejected"}}
        exc = ErrorMapper([API_KEY]).from_payload(payload)
        assert API_KEY not in str(exc)
