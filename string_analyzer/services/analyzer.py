import hashlib
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Optional

from string_analyzer.exceptions import EmptyInputError, ValidationError
from string_analyzer.schemas.string import StringProperties, StringRecord


def canonicalize(raw) -> str:
    """Strip surrounding whitespace and reject empty input"""
    if not isinstance(raw, str):
        raise ValidationError("Value must be a string")
    value = raw.strip()
    if not value:
        raise EmptyInputError()
    return value


def compute_sha256(text: str) -> str:
    """Compute SHA-256 hash of a string"""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def is_palindrome(text: str) -> bool:
    """Check if string is palindrome (case-insensitive, whitespace significant)"""
    lowered = text.lower()
    return lowered == lowered[::-1]


def count_unique_characters(text: str) -> int:
    """Count distinct characters in string"""
    return len(set(text))


def count_words(text: str) -> int:
    """Count words separated by runs of whitespace"""
    return len(text.split())


def get_character_frequency(text: str) -> Dict[str, int]:
    """Get frequency map of each character"""
    return dict(Counter(text))


def analyze_string(value: str) -> StringProperties:
    """
    Analyze a canonicalized string and return all computed properties.

    The result depends only on ``value``, so re-analyzing the same string
    always produces the same fingerprint.
    """
    if not value:
        raise EmptyInputError()

    sha256_hash = compute_sha256(value)

    return StringProperties(
        length=len(value),
        is_palindrome=is_palindrome(value),
        unique_characters=count_unique_characters(value),
        word_count=count_words(value),
        sha256_hash=sha256_hash,
        character_frequency_map=get_character_frequency(value),
    )


def build_record(raw: str, now: Optional[datetime] = None) -> StringRecord:
    """Canonicalize, analyze and timestamp a submitted string"""
    value = canonicalize(raw)
    properties = analyze_string(value)

    return StringRecord(
        id=properties.sha256_hash,
        value=value,
        properties=properties,
        created_at=now or datetime.now(timezone.utc),
    )
