from datetime import datetime, timezone

import pytest

from string_analyzer.exceptions import EmptyInputError, ValidationError
from string_analyzer.services.analyzer import (
    analyze_string,
    build_record,
    canonicalize,
    compute_sha256,
    is_palindrome,
)


def test_canonicalize_strips_surrounding_whitespace():
    assert canonicalize("  hello world \n") == "hello world"


@pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
def test_canonicalize_rejects_blank(raw):
    with pytest.raises(EmptyInputError):
        canonicalize(raw)


def test_canonicalize_rejects_non_string():
    with pytest.raises(ValidationError):
        canonicalize(42)


def test_analyze_racecar():
    props = analyze_string("Racecar")
    assert props.length == 7
    assert props.is_palindrome is True
    assert props.word_count == 1
    assert props.unique_characters == 5  # R, a, c, e, r
    assert props.character_frequency_map == {"R": 1, "a": 2, "c": 2, "e": 1, "r": 1}
    assert props.sha256_hash == compute_sha256("Racecar")


def test_fingerprint_is_deterministic_and_case_sensitive():
    assert analyze_string("abc").sha256_hash == analyze_string("abc").sha256_hash
    assert compute_sha256("abc") != compute_sha256("ABC")
    assert len(compute_sha256("abc")) == 64


@pytest.mark.parametrize("text", ["Racecar", "nurses run", "A man a plan", "x", "ab", "Aba"])
def test_palindrome_matches_lowercase_reverse(text):
    lowered = text.lower()
    assert is_palindrome(text) == (lowered == lowered[::-1])


def test_internal_whitespace_is_significant():
    props = analyze_string("nurses  run")
    assert props.is_palindrome is False
    assert props.word_count == 2
    assert props.character_frequency_map[" "] == 2


def test_word_count_handles_whitespace_runs():
    assert analyze_string("one\ttwo   three\nfour").word_count == 4


def test_analyze_rejects_empty():
    with pytest.raises(EmptyInputError):
        analyze_string("")


def test_build_record_uses_trimmed_value():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    record = build_record("  level  ", now=now)
    assert record.value == "level"
    assert record.id == compute_sha256("level")
    assert record.id == record.properties.sha256_hash
    assert record.created_at == now
