import logging
import re
from typing import Iterable, List, Optional

from string_analyzer.exceptions import ValidationError
from string_analyzer.schemas.string import FilterSet, StringRecord

logger = logging.getLogger(__name__)

PLAIN_INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_bool(name: str, raw: str) -> bool:
    token = raw.strip().lower()
    if token == "true":
        return True
    if token == "false":
        return False
    raise ValidationError(f"Invalid value for '{name}': expected 'true' or 'false'")


def _parse_int(name: str, raw: str) -> int:
    token = raw.strip()
    if not PLAIN_INTEGER.fullmatch(token):
        raise ValidationError(f"Invalid value for '{name}': expected an integer")
    number = int(token)
    if number < 0:
        raise ValidationError(f"Invalid value for '{name}': must not be negative")
    return number


def parse_filter_params(
    is_palindrome: Optional[str] = None,
    min_length: Optional[str] = None,
    max_length: Optional[str] = None,
    word_count: Optional[str] = None,
    contains_character: Optional[str] = None,
) -> FilterSet:
    """
    Turn raw query-string values into a validated FilterSet.

    Raises ValidationError on the first malformed value, so a bad filter
    never reaches the matcher.
    """
    filters = {}

    if is_palindrome is not None:
        filters["is_palindrome"] = _parse_bool("is_palindrome", is_palindrome)

    if min_length is not None:
        filters["min_length"] = _parse_int("min_length", min_length)

    if max_length is not None:
        filters["max_length"] = _parse_int("max_length", max_length)

    if word_count is not None:
        filters["word_count"] = _parse_int("word_count", word_count)

    if contains_character is not None:
        if len(contains_character) != 1:
            raise ValidationError(
                "Invalid value for 'contains_character': expected exactly one character"
            )
        filters["contains_character"] = contains_character

    return FilterSet(**filters)


def matches(record: StringRecord, filters: FilterSet) -> bool:
    """Check a record against every predicate set on the filter set"""
    props = record.properties

    if filters.is_palindrome is not None and props.is_palindrome != filters.is_palindrome:
        return False

    if filters.min_length is not None and props.length < filters.min_length:
        return False

    if filters.max_length is not None and props.length > filters.max_length:
        return False

    if filters.word_count is not None and props.word_count != filters.word_count:
        return False

    if filters.contains_character is not None:
        if props.character_frequency_map.get(filters.contains_character, 0) <= 0:
            return False

    return True


def apply_filters(records: Iterable[StringRecord], filters: FilterSet) -> List[StringRecord]:
    """Keep the records matching all filters, preserving order"""
    selected = [record for record in records if matches(record, filters)]
    logger.debug(f"Filters {filters.applied()} matched {len(selected)} strings")
    return selected
