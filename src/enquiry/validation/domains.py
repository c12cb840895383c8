"""Email domain checks: typo suggestions and DNS MX/A lookups.

Typo suggestions are pure and never block a submission.  The DNS check is
the only I/O in validation; it is bounded by a resolver lifetime and treats
resolver breakdowns (timeouts, no reachable nameservers) as "unknown" so an
outage on our side does not reject real visitors.
"""

from __future__ import annotations

from typing import Protocol

import dns.asyncresolver
import dns.exception
import dns.resolver
import structlog

logger = structlog.get_logger()

# Misspelt domain -> intended domain
DOMAIN_TYPOS: dict[str, str] = {
    "gmial.com": "gmail.com",
    "gmai.com": "gmail.com",
    "gmal.com": "gmail.com",
    "gnail.com": "gmail.com",
    "gmail.co": "gmail.com",
    "yahooo.com": "yahoo.com",
    "yaho.com": "yahoo.com",
    "hotmial.com": "hotmail.com",
    "hotmal.com": "hotmail.com",
    "hotmail.co": "hotmail.com",
    "outlok.com": "outlook.com",
    "outllok.com": "outlook.com",
    "iclod.com": "icloud.com",
    "icloud.co": "icloud.com",
}


def domain_of(email: str) -> str:
    """Return the lowercased domain part of an address, or ``""``."""
    _, sep, domain = email.strip().rpartition("@")
    return domain.lower() if sep else ""


def suggest_correction(email: str) -> str | None:
    """Return the address with a known-typo domain corrected, if any.

    Examples:
        "jane@gmial.com" -> "jane@gmail.com"
        "jane@example.com" -> None
    """
    domain = domain_of(email)
    corrected = DOMAIN_TYPOS.get(domain)
    if corrected is None:
        return None
    local = email.strip().rpartition("@")[0]
    return f"{local}@{corrected}"


class DomainChecker(Protocol):
    """Anything that can tell whether a domain can receive mail."""

    async def has_mail_records(self, domain: str) -> bool | None:
        """Return True/False when known, ``None`` when the lookup itself failed."""
        ...


class DnsDomainChecker:
    """Look up MX, then A, records with dnspython's async resolver.

    Args:
        timeout: Total lifetime in seconds for each record-type query.
        resolver: Optional pre-built resolver (tests inject a mock).
    """

    def __init__(
        self,
        timeout: float = 5.0,
        resolver: dns.asyncresolver.Resolver | None = None,
    ) -> None:
        self._timeout = timeout
        self._resolver = resolver or dns.asyncresolver.Resolver()

    async def has_mail_records(self, domain: str) -> bool | None:
        """Return True if ``domain`` has an MX or A record.

        NXDOMAIN and empty answers mean "no"; resolver failures mean "unknown".
        """
        for record_type in ("MX", "A"):
            try:
                answer = await self._resolver.resolve(
                    domain, record_type, lifetime=self._timeout
                )
            except dns.resolver.NXDOMAIN:
                return False
            except dns.resolver.NoAnswer:
                continue
            except (dns.exception.Timeout, dns.resolver.NoNameservers) as exc:
                logger.warning(
                    "dns_lookup_unavailable",
                    domain=domain,
                    record_type=record_type,
                    error=type(exc).__name__,
                )
                return None
            except dns.exception.DNSException as exc:
                # Malformed names (empty labels, label too long) cannot receive mail.
                logger.info("dns_lookup_rejected", domain=domain, error=type(exc).__name__)
                return False
            if len(answer) > 0:
                return True
        return False
