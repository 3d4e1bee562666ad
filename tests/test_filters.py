"""
Tests for the AND / OR keyword filters.
"""
import pytest

from jobsift.errors import EmptyKeywordSetError, InvalidKeywordError
from jobsift.filters import and_filter, apply_keyword_filters, compile_keywords, or_filter
from jobsift.models import Record


def _pick(records, indexes):
    return [records[i] for i in indexes]


@pytest.mark.parametrize("keywords,expected", [
    (["a"], [0, 1, 2, 3, 4, 5, 6, 7]),
    (["a", "b"], [0, 1, 2, 5, 6, 7]),
    (["b", "a"], [0, 1, 2, 5, 6, 7]),
    (["b", "i"], [5, 6, 7]),
    (["g", "i"], []),
])
def test_and_filter(sample_records, keywords, expected):
    assert and_filter(keywords, sample_records) == _pick(sample_records, expected)


@pytest.mark.parametrize("keywords,expected", [
    (["a"], [0, 1, 2, 3, 4, 5, 6, 7]),
    (["a", "b"], list(range(10))),
    (["b", "a"], list(range(10))),
    (["b", "i"], [0, 1, 2, 5, 6, 7, 8, 9]),
    (["g", "i"], [3, 4, 5, 6, 7]),
])
def test_or_filter(sample_records, keywords, expected):
    assert or_filter(keywords, sample_records) == _pick(sample_records, expected)


@pytest.mark.parametrize("fn", [and_filter, or_filter])
def test_empty_keywords_rejected(sample_records, fn):
    with pytest.raises(EmptyKeywordSetError):
        fn([], sample_records)
    with pytest.raises(EmptyKeywordSetError):
        fn([], [])


@pytest.mark.parametrize("fn", [and_filter, or_filter])
def test_case_insensitive(fn):
    records = [Record({"JobDescription": "Python Developer"})]
    assert fn(["python"], records) == records
    assert fn(["PYTHON", "developer"], records) == records


@pytest.mark.parametrize("fn", [and_filter, or_filter])
def test_missing_or_empty_description_never_matches(fn):
    records = [
        Record({"Title": "no description"}),
        Record({"JobDescription": ""}),
        Record({"JobDescription": "has python"}),
    ]
    # ".*" matches the empty string, but an empty field still matches nothing
    assert fn([".*"], records) == [records[2]]


def test_keywords_are_patterns():
    records = [Record({"JobDescription": "Senior C++ engineer"}), Record({"JobDescription": "Go engineer"})]
    assert or_filter([r"c\+\+"], records) == [records[0]]
    assert and_filter([r"^go\b"], records) == [records[1]]


def test_invalid_pattern_raises():
    with pytest.raises(InvalidKeywordError) as exc:
        compile_keywords(["python", "python("])
    assert exc.value.keyword == "python("


def test_filters_preserve_order_and_do_not_mutate(sample_records):
    before = list(sample_records)
    result = or_filter(["b"], sample_records)
    assert sample_records == before
    assert result is not sample_records
    assert [sample_records.index(r) for r in result] == sorted(sample_records.index(r) for r in result)


def test_and_is_at_least_as_strict_as_or(sample_records):
    for keywords in (["a"], ["a", "b"], ["b", "i"], ["g", "i"], ["c", "l"]):
        anded = and_filter(keywords, sample_records)
        ored = or_filter(keywords, sample_records)
        assert len(anded) <= len(ored)
        assert all(r in ored for r in anded)


def test_filters_are_idempotent(sample_records):
    for keywords in (["a"], ["b", "i"], ["g", "i"]):
        once = and_filter(keywords, sample_records)
        assert and_filter(keywords, once) == once
        once = or_filter(keywords, sample_records)
        assert or_filter(keywords, once) == once


def test_custom_field():
    records = [Record({"Title": "Python Dev", "JobDescription": "none"})]
    assert and_filter(["python"], records, field="Title") == records
    assert and_filter(["python"], records) == []


def test_apply_keyword_filters_runs_or_then_and(sample_records):
    result = apply_keyword_filters(sample_records, or_keywords=["g", "i"], and_keywords=["b"])
    assert result == _pick(sample_records, [5, 6, 7])


def test_apply_keyword_filters_skips_empty_stages(sample_records):
    assert apply_keyword_filters(sample_records) == sample_records
    assert apply_keyword_filters(sample_records, or_keywords=[], and_keywords=["g"]) == _pick(sample_records, [3, 4])


class CountingPattern:
    """Literal matcher that records every search."""

    def __init__(self, word, calls):
        self.word = word
        self.calls = calls

    def search(self, text):
        self.calls.append(self.word)
        return self.word in text


def _counting(monkeypatch, calls):
    monkeypatch.setattr(
        "jobsift.filters.compile_keywords",
        lambda keywords: [CountingPattern(k, calls) for k in keywords],
    )


def test_and_filter_stops_at_first_miss(monkeypatch):
    calls = []
    _counting(monkeypatch, calls)
    records = [Record({"JobDescription": "go only"})]
    assert and_filter(["python", "go", "rust"], records) == []
    assert calls == ["python"]


def test_or_filter_stops_at_first_hit(monkeypatch):
    calls = []
    _counting(monkeypatch, calls)
    records = [Record({"JobDescription": "python and go"})]
    assert or_filter(["sql", "python", "go"], records) == records
    assert calls == ["sql", "python"]


def test_bad_keyword_fails_even_if_never_reached():
    records = [Record({"JobDescription": "go only"})]
    # "python" already rules the record out, but every keyword is compiled first
    with pytest.raises(InvalidKeywordError):
        and_filter(["python", "[unclosed"], records)
