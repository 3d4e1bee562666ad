"""
Keyword filters over assembled records.

Both filters match against one designated field (the posting description),
case-insensitively. Keywords are patterns: each is compiled with IGNORECASE,
the same as prefixing it with "(?i)", and searched anywhere in the text.
"""

from __future__ import annotations

import re
from typing import List, Mapping, Optional, Pattern, Sequence, TypeVar

from jobsift.errors import EmptyKeywordSetError, InvalidKeywordError
from jobsift.models import DESCRIPTION_FIELD

R = TypeVar("R", bound=Mapping)


def compile_keywords(keywords: Sequence[str]) -> List[Pattern[str]]:
    """
    Compile keywords as case-insensitive patterns.

    Every keyword is compiled before any record is matched, so an invalid
    keyword fails the whole call even when short-circuiting would never
    have reached it for any record.
    """
    if not keywords:
        raise EmptyKeywordSetError()
    patterns = []
    for kw in keywords:
        try:
            patterns.append(re.compile(kw, re.IGNORECASE))
        except re.error as e:
            raise InvalidKeywordError(kw, str(e)) from e
    return patterns


def _field_text(record: Mapping, field: str) -> str:
    value = record.get(field)
    return value if isinstance(value, str) else ""


def and_filter(keywords: Sequence[str], records: Sequence[R], field: str = DESCRIPTION_FIELD) -> List[R]:
    """
    Keep records whose `field` matches every keyword.

    Keywords are tried in order and a record is dropped at its first
    non-matching keyword. All keywords are compiled up front (see
    compile_keywords), so a bad pattern raises InvalidKeywordError before
    any record is checked.
    """
    patterns = compile_keywords(keywords)
    filtered = []
    for record in records:
        text = _field_text(record, field)
        if text and all(p.search(text) for p in patterns):
            filtered.append(record)
    return filtered


def or_filter(keywords: Sequence[str], records: Sequence[R], field: str = DESCRIPTION_FIELD) -> List[R]:
    """
    Keep records whose `field` matches at least one keyword.

    Keywords are tried in order and a record is kept at its first match.
    All keywords are compiled up front, as in and_filter.
    """
    patterns = compile_keywords(keywords)
    filtered = []
    for record in records:
        text = _field_text(record, field)
        if text and any(p.search(text) for p in patterns):
            filtered.append(record)
    return filtered


def apply_keyword_filters(
    records: Sequence[R],
    or_keywords: Optional[Sequence[str]] = None,
    and_keywords: Optional[Sequence[str]] = None,
    field: str = DESCRIPTION_FIELD,
) -> List[R]:
    """
    Narrow with the OR list first, then the AND list.

    An empty or missing list skips that stage.
    """
    result = list(records)
    if or_keywords:
        result = or_filter(or_keywords, result, field)
    if and_keywords:
        result = and_filter(and_keywords, result, field)
    return result
