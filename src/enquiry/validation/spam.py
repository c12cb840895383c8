"""Spam-signature and script-injection scans.

Rules are loaded from a YAML file validated via Pydantic, with built-in
defaults when the file is absent, so operators can extend the keyword list
without a code change.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

import structlog
import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field

logger = structlog.get_logger()

_URL_PATTERN = re.compile(r"https?://|www\.")


class SpamRules(BaseModel):
    """Thresholds and vocabularies for the spam and injection scans."""

    keywords: list[str] = Field(
        default_factory=lambda: [
            "viagra",
            "cialis",
            "lottery",
            "winner",
            "million dollars",
            "click here",
            "act now",
            "limited time",
            "urgent",
        ]
    )
    max_urls: int = 3
    repeated_char_run: int = 10
    uppercase_run: int = 10
    injection_fragments: list[str] = Field(
        default_factory=lambda: [
            "<script",
            "</script>",
            "javascript:",
            "onload=",
            "onerror=",
            "eval(",
            "document.cookie",
            "iframe",
            "embed",
        ]
    )


def load_spam_rules(config_path: Path | None = None) -> SpamRules:
    """Load spam rules from YAML, falling back to defaults.

    Args:
        config_path: Path to a YAML file whose top-level keys match
            ``SpamRules`` fields.  Missing file or ``None`` -> defaults.

    Returns:
        The validated ``SpamRules``.
    """
    if config_path is None or not config_path.exists():
        return SpamRules()

    with config_path.open() as f:
        data = yaml.safe_load(f) or {}

    rules = SpamRules.model_validate(data)
    logger.info(
        "spam_rules_loaded",
        path=str(config_path),
        keywords=len(rules.keywords),
    )
    return rules


class SpamScanner:
    """Compiled form of a ``SpamRules`` instance."""

    def __init__(self, rules: SpamRules | None = None) -> None:
        self.rules = rules or SpamRules()
        alternatives = "|".join(re.escape(k.lower()) for k in self.rules.keywords)
        self._keywords = re.compile(rf"\b(?:{alternatives})\b") if alternatives else None
        self._repeated = re.compile(rf"(.)\1{{{self.rules.repeated_char_run - 1},}}")
        self._uppercase = re.compile(rf"[A-Z]{{{self.rules.uppercase_run},}}")

    def looks_like_spam(self, values: Iterable[str]) -> bool:
        """Return True if the combined field values match any spam signature.

        Values are joined with newlines so runs never span two fields.
        Keyword, URL and repetition checks run on the lowercased text; the
        uppercase-run check needs the original casing.
        """
        combined = "\n".join(values)
        lowered = combined.lower()

        if self._keywords is not None and self._keywords.search(lowered):
            return True
        if len(_URL_PATTERN.findall(lowered)) >= self.rules.max_urls:
            return True
        if self._repeated.search(lowered):
            return True
        return bool(self._uppercase.search(combined))

    def contains_injection(self, text: str) -> bool:
        """Return True if ``text`` contains an HTML/script injection fragment."""
        lowered = text.lower()
        return any(fragment.lower() in lowered for fragment in self.rules.injection_fragments)
