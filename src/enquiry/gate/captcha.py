"""reCAPTCHA verification against Google's ``siteverify`` endpoint.

Fails closed: network errors, non-2xx responses, unparseable JSON, an empty
token or a missing secret all count as a failed verification.  Disabling
verification is an explicit configuration state that is logged on every
request.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

DEFAULT_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class CaptchaVerifier:
    """Verify opaque CAPTCHA tokens with a bounded timeout.

    Args:
        secret: The server-side reCAPTCHA secret.
        enabled: When False every token passes (development only).
        verify_url: Verification endpoint.
        timeout: Hard timeout in seconds for the verification call.
        http_client: Optional shared ``httpx.AsyncClient`` (tests inject one
            backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        secret: str,
        enabled: bool = True,
        verify_url: str = DEFAULT_VERIFY_URL,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._secret = secret
        self._enabled = enabled
        self._verify_url = verify_url
        self._timeout = timeout
        self._http_client = http_client

    @property
    def enabled(self) -> bool:
        """Return whether tokens are actually checked."""
        return self._enabled

    @property
    def configured(self) -> bool:
        """Return whether verification can succeed: enabled with a secret."""
        return self._enabled and bool(self._secret)

    async def verify(self, token: str, remote_ip: str | None = None) -> bool:
        """Return True only if the verification service confirms ``token``.

        Args:
            token: The token posted by the CAPTCHA widget.
            remote_ip: The visitor's address, forwarded as ``remoteip``.

        Returns:
            Whether the visitor passed the challenge.
        """
        if not self._enabled:
            logger.warning("captcha_verification_disabled")
            return True

        if not token.strip():
            return False

        if not self._secret:
            logger.error("captcha_secret_missing")
            return False

        payload = {"secret": self._secret, "response": token, "remoteip": remote_ip or ""}

        try:
            data = await self._post(payload)
        except httpx.HTTPError as exc:
            logger.warning("captcha_verification_unreachable", error=type(exc).__name__)
            return False
        except ValueError:
            logger.warning("captcha_response_unparseable")
            return False

        if not isinstance(data, dict):
            logger.warning("captcha_response_unparseable")
            return False

        success = data.get("success") is True
        if not success:
            logger.info("captcha_verification_failed", error_codes=data.get("error-codes"))
        return success

    async def _post(self, payload: dict[str, str]) -> Any:
        if self._http_client is not None:
            response = await self._http_client.post(
                self._verify_url, data=payload, timeout=self._timeout
            )
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(self._verify_url, data=payload)
            response.raise_for_status()
            return response.json()
