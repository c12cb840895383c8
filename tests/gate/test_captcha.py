"""Tests for CaptchaVerifier against an httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from urllib.parse import parse_qs

import httpx

from enquiry.gate.captcha import DEFAULT_VERIFY_URL, CaptchaVerifier

Handler = Callable[[httpx.Request], httpx.Response]


def _verifier(handler: Handler, secret: str = "s3cret", enabled: bool = True) -> CaptchaVerifier:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CaptchaVerifier(secret=secret, enabled=enabled, http_client=client)


def _json(body: object, status: int = 200) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=json.dumps(body).encode())

    return handler


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError("verification endpoint must not be called")


class TestShortCircuits:
    def test_disabled_accepts_anything(self) -> None:
        verifier = _verifier(_unreachable, enabled=False)
        assert verifier.enabled is False
        assert asyncio.run(verifier.verify("")) is True

    def test_empty_token_rejected(self) -> None:
        assert asyncio.run(_verifier(_unreachable).verify("  ")) is False

    def test_missing_secret_fails_closed(self) -> None:
        assert asyncio.run(_verifier(_unreachable, secret="").verify("tok")) is False


class TestVerificationCall:
    def test_success(self) -> None:
        verifier = _verifier(_json({"success": True}))
        assert asyncio.run(verifier.verify("tok", "203.0.113.7")) is True

    def test_payload_fields(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        asyncio.run(_verifier(handler).verify("tok", "203.0.113.7"))

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == DEFAULT_VERIFY_URL
        form = parse_qs(request.content.decode())
        assert form == {"secret": ["s3cret"], "response": ["tok"], "remoteip": ["203.0.113.7"]}

    def test_success_false(self) -> None:
        verifier = _verifier(_json({"success": False, "error-codes": ["invalid-input-response"]}))
        assert asyncio.run(verifier.verify("tok")) is False

    def test_truthy_non_boolean_success_rejected(self) -> None:
        assert asyncio.run(_verifier(_json({"success": "yes"})).verify("tok")) is False

    def test_http_error_status(self) -> None:
        assert asyncio.run(_verifier(_json({"success": True}, status=500)).verify("tok")) is False

    def test_non_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        assert asyncio.run(_verifier(handler).verify("tok")) is False

    def test_json_array_body(self) -> None:
        assert asyncio.run(_verifier(_json([True])).verify("tok")) is False

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        assert asyncio.run(_verifier(handler).verify("tok")) is False

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        assert asyncio.run(_verifier(handler).verify("tok")) is False
