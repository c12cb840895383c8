"""Field validators, spam rules, and the composite form validator."""

from enquiry.validation.domains import (
    DnsDomainChecker,
    DomainChecker,
    suggest_correction,
)
from enquiry.validation.fields import validate_field
from enquiry.validation.form import FormValidator
from enquiry.validation.spam import SpamRules, SpamScanner, load_spam_rules

__all__ = [
    "DnsDomainChecker",
    "DomainChecker",
    "FormValidator",
    "SpamRules",
    "SpamScanner",
    "load_spam_rules",
    "suggest_correction",
    "validate_field",
]
