"""
Tests for argument parsing and exit codes.
"""
import pytest

from jobsift import cli
from jobsift.errors import ConfigurationError, FetchError, TaggingError, UnbalancedFieldsError
from jobsift.models import FieldSchema, FieldSelector
from jobsift.orchestrator import RunResult
from jobsift.storage import RunStats


def test_parse_args_defaults():
    args = cli.parse_args([])
    assert args.url is None
    assert args.field == []
    assert args.and_keywords is None
    assert args.or_keywords is None
    assert not args.tag


def test_parse_field_args():
    schema = cli.parse_field_args(["Title=h2.title", "JobDescription = div[data-x='a=b']"])
    assert schema == FieldSchema([
        FieldSelector("Title", "h2.title"),
        FieldSelector("JobDescription", "div[data-x='a=b']"),
    ])


@pytest.mark.parametrize("value", ["Title", "=h2", "Title="])
def test_parse_field_args_rejects(value):
    with pytest.raises(ConfigurationError):
        cli.parse_field_args([value])


def test_build_settings_overlays_flags(settings):
    args = cli.parse_args([
        "--url", "https://example.com/jobs",
        "--and", "python,remote",
        "--or", "tech",
        "--storage", "sqlite",
        "--workers", "2",
    ])
    s = cli.build_settings(args, base=settings)
    assert s.target_url == "https://example.com/jobs"
    assert s.and_keywords == ["python", "remote"]
    assert s.or_keywords == ["tech"]
    assert s.storage_provider == "sqlite"
    assert s.crawl_workers == 2
    # untouched values come from the base settings
    assert s.output_path == settings.output_path


def test_build_options_field_flags_override_schema(settings):
    args = cli.parse_args(["-f", "Title=h2", "-f", "JobDescription=p"])
    options = cli.build_options(args, settings)
    assert options.schema.names == ["Title", "JobDescription"]


def test_build_options_bad_schema_json(settings):
    args = cli.parse_args(["--schema", "{nope"])
    with pytest.raises(ConfigurationError):
        cli.build_options(args, settings)


def _patch_pipeline(monkeypatch, settings, outcome):
    calls = []

    async def fake_run_pipeline(options, s, logger=None, tag=False):
        calls.append((options, s, tag))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr("jobsift.orchestrator.run_pipeline", fake_run_pipeline)
    return calls


def test_main_success(monkeypatch, settings, capsys):
    result = RunResult(stats=RunStats(run_id=0, started_at="now", records_extracted=3, records_kept=1, status="ok"))
    calls = _patch_pipeline(monkeypatch, settings, result)

    assert cli.main(["--or", "tech"]) == cli.EXIT_OK
    options, _, tag = calls[0]
    assert options.or_keywords == ["tech"]
    assert not tag
    out = capsys.readouterr().out
    assert "Records kept:      1" in out


@pytest.mark.parametrize("error,code", [
    (ConfigurationError("bad"), cli.EXIT_CONFIG),
    (UnbalancedFieldsError("Title", 2, "Company", 1), cli.EXIT_DATA),
    (FetchError("https://example.com", "HTTP 500", status=500), cli.EXIT_COLLABORATOR),
    (TaggingError("down"), cli.EXIT_COLLABORATOR),
    (RuntimeError("boom"), cli.EXIT_ERROR),
])
def test_main_exit_codes(monkeypatch, settings, error, code):
    _patch_pipeline(monkeypatch, settings, error)
    assert cli.main(["-q"]) == code


def test_main_bad_field_flag(monkeypatch, settings):
    calls = _patch_pipeline(monkeypatch, settings, None)
    assert cli.main(["-q", "--field", "Title"]) == cli.EXIT_CONFIG
    assert calls == []


def test_keyword_flags_keep_regex_quantifiers(settings):
    args = cli.parse_args(["--and", "py(thon){1,2},remote", "--or", r"c\+\+"])
    s = cli.build_settings(args, base=settings)
    assert s.and_keywords == ["py(thon){1,2}", "remote"]
    assert s.or_keywords == [r"c\+\+"]
