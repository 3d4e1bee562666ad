"""
Tests for settings and field schema parsing.
"""
import pytest

from jobsift.config import Settings, parse_field_schema
from jobsift.models import DEFAULT_HEADER_KEY, GOOGLE_JOBS_SCHEMA, FieldSchema, FieldSelector

EXPECTED = FieldSchema([FieldSelector("Title", "h2"), FieldSelector("JobDescription", "p.desc")])


@pytest.mark.parametrize("raw", [
    '{"Title": "h2", "JobDescription": "p.desc"}',
    '[["Title", "h2"], ["JobDescription", "p.desc"]]',
    '[{"name": "Title", "selector": "h2"}, {"name": "JobDescription", "selector": "p.desc"}]',
])
def test_parse_field_schema_formats(raw):
    assert parse_field_schema(raw) == EXPECTED


@pytest.mark.parametrize("raw", [
    "not json",
    '"h2"',
    '[["Title"]]',
    '{"Title": ""}',
    '[["Title", "h2"], ["Title", "h3"]]',
])
def test_parse_field_schema_rejects(raw):
    with pytest.raises(ValueError):
        parse_field_schema(raw)


def test_defaults():
    s = Settings(_env_file=None)
    assert s.get_field_schema() == GOOGLE_JOBS_SCHEMA
    assert GOOGLE_JOBS_SCHEMA.names == ["Title", "Company", "Location", "JobDescription"]
    assert GOOGLE_JOBS_SCHEMA.selector_for("JobDescription") == "span.HBvzbc"
    assert s.and_keywords == []
    assert s.or_keywords == []
    assert s.storage_provider == "json"


def test_keywords_from_comma_string_or_json():
    s = Settings(_env_file=None, and_keywords="python, go", or_keywords='["tech", "software"]')
    assert s.and_keywords == ["python", "go"]
    assert s.or_keywords == ["tech", "software"]


def test_keywords_from_environment(monkeypatch):
    monkeypatch.setenv("JOBSIFT_OR_KEYWORDS", "tech,c\\+\\+")
    monkeypatch.setenv("JOBSIFT_STORAGE_PROVIDER", "sqlite")
    s = Settings(_env_file=None)
    assert s.or_keywords == ["tech", "c\\+\\+"]
    assert s.storage_provider == "sqlite"


def test_to_options():
    s = Settings(
        _env_file=None,
        target_url="https://example.com/jobs",
        header_value="test-agent",
        field_schema='{"Title": "h2", "JobDescription": "p.desc"}',
        and_keywords="python",
        wait_timeout_s=5,
    )
    options = s.to_options()
    assert options.url == "https://example.com/jobs"
    assert options.headers == {DEFAULT_HEADER_KEY: "test-agent"}
    assert options.schema == EXPECTED
    assert options.and_keywords == ["python"]
    assert options.or_keywords == []
    assert options.wait_timeout_s == 5
