import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from string_analyzer.schemas.string import FilterSet

logger = logging.getLogger(__name__)

LONGER_THAN = re.compile(r"\blong(?:er)? than (\d+) characters?\b")
CONTAINS_LETTER = re.compile(r"\bcontains? (?:the )?letter ([^\W\d_])\b")

Setter = Callable[[Dict, object], None]


def _has_any(*phrases: str) -> Callable[[str], bool]:
    return lambda query: any(phrase in query for phrase in phrases)


def _set_palindrome(filters: Dict, _match) -> None:
    filters["is_palindrome"] = True


def _set_single_word(filters: Dict, _match) -> None:
    filters["word_count"] = 1


def _set_min_length(filters: Dict, match) -> None:
    # "longer than N" is strict, so the smallest accepted length is N + 1
    filters["min_length"] = int(match.group(1)) + 1


def _set_contains_character(filters: Dict, match) -> None:
    filters["contains_character"] = match.group(1)


# Ordered (detector, setter) pairs; every rule is tried against the query
RULES: List[Tuple[Callable[[str], object], Setter]] = [
    (_has_any("palindrome", "palindromic"), _set_palindrome),
    (_has_any("single word"), _set_single_word),
    (LONGER_THAN.search, _set_min_length),
    (CONTAINS_LETTER.search, _set_contains_character),
]


def translate(query: str) -> Optional[FilterSet]:
    """
    Parse a natural language query into a FilterSet.

    Examples:
    - "all single word palindromic strings" -> {word_count: 1, is_palindrome: true}
    - "strings longer than 10 characters" -> {min_length: 11}
    - "strings that contain the letter z" -> {contains_character: "z"}

    Returns None when no rule recognises the query.
    """
    lowered = query.lower()
    filters = {}

    for detect, apply in RULES:
        hit = detect(lowered)
        if hit:
            apply(filters, hit)

    if not filters:
        logger.info(f"Unable to parse natural language query: {query!r}")
        return None

    return FilterSet(**filters)
