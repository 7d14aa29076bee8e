from fastapi import APIRouter, Depends, Query, Request, Response, status
from typing import Optional
import logging

from string_analyzer.crud.string import StringStore
from string_analyzer.exceptions import ConflictError, ValidationError
from string_analyzer.schemas.string import (
    InterpretedQuery,
    NaturalLanguageResponse,
    StringCreate,
    StringListResponse,
    StringRecord,
)
from string_analyzer.services.analyzer import build_record, canonicalize, compute_sha256
from string_analyzer.services.filters import apply_filters, parse_filter_params
from string_analyzer.services.translator import translate

router = APIRouter()
logger = logging.getLogger(__name__)


def get_store(request: Request) -> StringStore:
    """Dependency to provide the application's string store."""
    return request.app.state.store


def fingerprint_of(string_value: str) -> str:
    """Fingerprint of a path value after canonicalization"""
    return compute_sha256(canonicalize(string_value))


@router.post("/strings", response_model=StringRecord, status_code=status.HTTP_201_CREATED)
def create_string(string_data: StringCreate, store: StringStore = Depends(get_store)):
    """
    Analyze and store a string.
    Returns 400 if the value is blank and 409 if it already exists.
    """
    record = build_record(string_data.value)
    try:
        return store.insert(record)
    except ConflictError:
        logger.warning(f"Duplicate insert of string {record.id[:12]}")
        raise


@router.get("/strings", response_model=StringListResponse)
def get_all_strings(
    is_palindrome: Optional[str] = Query(None, description="true or false"),
    min_length: Optional[str] = Query(None, description="Minimum string length"),
    max_length: Optional[str] = Query(None, description="Maximum string length"),
    word_count: Optional[str] = Query(None, description="Exact word count"),
    contains_character: Optional[str] = Query(None, description="Single character to look for"),
    store: StringStore = Depends(get_store),
):
    """
    Get all strings with optional filtering.
    Returns 400 on any malformed filter value.
    """
    filters = parse_filter_params(
        is_palindrome=is_palindrome,
        min_length=min_length,
        max_length=max_length,
        word_count=word_count,
        contains_character=contains_character,
    )

    data = apply_filters(store.list(), filters)

    return StringListResponse(
        data=data,
        count=len(data),
        filters_applied=filters.applied(),
    )


@router.get("/strings/filter-by-natural-language", response_model=NaturalLanguageResponse)
def filter_by_natural_language(
    query: Optional[str] = Query(None, description="Natural language query"),
    store: StringStore = Depends(get_store),
):
    """
    Filter strings using natural language queries.
    Example: "all single word palindromic strings"
    """
    if query is None or not query.strip():
        raise ValidationError("Query parameter 'query' is required")

    filters = translate(query)
    if filters is None:
        raise ValidationError("Unable to parse natural language query")

    data = apply_filters(store.list(), filters)

    return NaturalLanguageResponse(
        data=data,
        count=len(data),
        interpreted_query=InterpretedQuery(
            original=query,
            parsed_filters=filters.applied(),
        ),
    )


@router.get("/strings/{string_value}", response_model=StringRecord)
def get_string(string_value: str, store: StringStore = Depends(get_store)):
    """
    Get analysis for a specific string.
    Returns 404 if string doesn't exist.
    """
    return store.get(fingerprint_of(string_value))


@router.delete("/strings/{string_value}", status_code=status.HTTP_204_NO_CONTENT)
def delete_string(string_value: str, store: StringStore = Depends(get_store)):
    """
    Delete a string from the system.
    Returns 404 if string doesn't exist.
    """
    store.delete(fingerprint_of(string_value))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
