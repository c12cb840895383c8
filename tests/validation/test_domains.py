"""Tests for email domain typo suggestions and the DNS MX/A checker."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import dns.exception
import dns.name
import dns.resolver
import pytest

from enquiry.validation.domains import DnsDomainChecker, domain_of, suggest_correction


class TestDomainOf:
    def test_lowercases_domain(self) -> None:
        assert domain_of("Jane@Example.COM") == "example.com"

    def test_no_at_sign(self) -> None:
        assert domain_of("jane") == ""

    def test_uses_last_at_sign(self) -> None:
        assert domain_of('"a@b"@example.com') == "example.com"


class TestSuggestCorrection:
    @pytest.mark.parametrize(
        ("email", "expected"),
        [
            ("jane@gmial.com", "jane@gmail.com"),
            ("jane@yahooo.com", "jane@yahoo.com"),
            ("jane@hotmial.com", "jane@hotmail.com"),
            ("jane@outlok.com", "jane@outlook.com"),
            ("Jane.Doe@GMIAL.com", "Jane.Doe@gmail.com"),
        ],
    )
    def test_known_typos(self, email: str, expected: str) -> None:
        assert suggest_correction(email) == expected

    @pytest.mark.parametrize("email", ["jane@gmail.com", "jane@example.com", "not-an-email"])
    def test_no_suggestion(self, email: str) -> None:
        assert suggest_correction(email) is None


def _checker(*outcomes: object) -> tuple[DnsDomainChecker, AsyncMock]:
    """Build a checker whose resolver returns/raises *outcomes* in order."""
    resolver = MagicMock()
    resolver.resolve = AsyncMock(side_effect=list(outcomes))
    return DnsDomainChecker(timeout=2.0, resolver=resolver), resolver.resolve


class TestDnsDomainChecker:
    """MX first, then A; resolver breakdowns are 'unknown' (None)."""

    def test_mx_record_found(self) -> None:
        checker, resolve = _checker(["mx1"])
        assert asyncio.run(checker.has_mail_records("example.com")) is True
        resolve.assert_awaited_once_with("example.com", "MX", lifetime=2.0)

    def test_falls_back_to_a_record(self) -> None:
        checker, resolve = _checker(dns.resolver.NoAnswer(), ["192.0.2.1"])
        assert asyncio.run(checker.has_mail_records("example.com")) is True
        assert [c.args[1] for c in resolve.await_args_list] == ["MX", "A"]

    def test_no_records_at_all(self) -> None:
        checker, _ = _checker(dns.resolver.NoAnswer(), dns.resolver.NoAnswer())
        assert asyncio.run(checker.has_mail_records("example.com")) is False

    def test_nxdomain_is_invalid(self) -> None:
        checker, resolve = _checker(dns.resolver.NXDOMAIN())
        assert asyncio.run(checker.has_mail_records("no-such-domain.example")) is False
        resolve.assert_awaited_once()

    def test_timeout_is_unknown(self) -> None:
        checker, _ = _checker(dns.exception.Timeout())
        assert asyncio.run(checker.has_mail_records("example.com")) is None

    def test_no_nameservers_is_unknown(self) -> None:
        checker, _ = _checker(dns.resolver.NoNameservers())
        assert asyncio.run(checker.has_mail_records("example.com")) is None

    def test_malformed_name_is_invalid(self) -> None:
        checker, _ = _checker(dns.name.EmptyLabel())
        assert asyncio.run(checker.has_mail_records("bad..example.com")) is False

    def test_empty_answer_falls_through(self) -> None:
        checker, _ = _checker([], [])
        assert asyncio.run(checker.has_mail_records("example.com")) is False
