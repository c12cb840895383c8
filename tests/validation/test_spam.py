"""Tests for spam rules loading and the spam/injection scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from enquiry.validation.spam import SpamRules, SpamScanner, load_spam_rules

REPO_RULES = Path(__file__).resolve().parents[2] / "config" / "spam_rules.yaml"


@pytest.fixture
def scanner() -> SpamScanner:
    return SpamScanner()


class TestLoadSpamRules:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_spam_rules(tmp_path / "nope.yaml") == SpamRules()

    def test_none_gives_defaults(self) -> None:
        assert load_spam_rules(None) == SpamRules()

    def test_partial_file_overrides_only_given_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("keywords:\n  - crypto giveaway\nmax_urls: 5\n")
        rules = load_spam_rules(path)
        assert rules.keywords == ["crypto giveaway"]
        assert rules.max_urls == 5
        assert rules.repeated_char_run == 10

    def test_repository_rules_file_loads(self) -> None:
        rules = load_spam_rules(REPO_RULES)
        assert "viagra" in rules.keywords
        assert rules.max_urls == 3


class TestKeywords:
    @pytest.mark.parametrize(
        "text", ["Buy VIAGRA today", "You are a lottery winner", "Click Here for more"]
    )
    def test_keyword_matches(self, scanner: SpamScanner, text: str) -> None:
        assert scanner.looks_like_spam([text])

    def test_whole_words_only(self, scanner: SpamScanner) -> None:
        assert not scanner.looks_like_spam(["Our winners circle meets on Mondays"])

    def test_keyword_in_name_field_counts(self, scanner: SpamScanner) -> None:
        assert scanner.looks_like_spam(["Viagra", "Doe", "a@b.com", "0411222333", "hello world"])


class TestUrls:
    def test_three_urls_is_spam(self, scanner: SpamScanner) -> None:
        text = "see http://a.example and https://b.example or www.c.example"
        assert scanner.looks_like_spam([text])

    def test_two_urls_is_not(self, scanner: SpamScanner) -> None:
        assert not scanner.looks_like_spam(["see http://a.example and https://b.example"])


class TestRepetition:
    def test_eleven_identical_characters_is_spam(self, scanner: SpamScanner) -> None:
        assert scanner.looks_like_spam(["Hello " + "a" * 11 + " there"])

    def test_nine_identical_characters_is_not(self, scanner: SpamScanner) -> None:
        assert not scanner.looks_like_spam(["Hello " + "a" * 9 + " there"])

    def test_run_does_not_span_fields(self, scanner: SpamScanner) -> None:
        assert not scanner.looks_like_spam(["a" * 6, "a" * 6])

    def test_case_insensitive_run(self, scanner: SpamScanner) -> None:
        assert scanner.looks_like_spam(["AaAaAaAaAaA"])


class TestUppercase:
    def test_shouting_is_spam(self, scanner: SpamScanner) -> None:
        assert scanner.looks_like_spam(["PLEASEREADTHIS now"])

    def test_short_acronyms_are_fine(self, scanner: SpamScanner) -> None:
        assert not scanner.looks_like_spam(["I work at NASA and the ASX"])


class TestInjection:
    @pytest.mark.parametrize(
        "text",
        [
            "<script>alert(1)</script>",
            "JavaScript:void(0)",
            "<img onerror=x>",
            "eval(atob('x'))",
            "steal document.cookie",
            "<iframe src=x>",
            "embed this",
        ],
    )
    def test_detected(self, scanner: SpamScanner, text: str) -> None:
        assert scanner.contains_injection(text)

    def test_plain_text_passes(self, scanner: SpamScanner) -> None:
        assert not scanner.contains_injection("I would like to learn about your program.")


class TestEmptyKeywordList:
    def test_no_keywords_compiles(self) -> None:
        scanner = SpamScanner(SpamRules(keywords=[]))
        assert not scanner.looks_like_spam(["viagra"])
