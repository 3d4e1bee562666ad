"""
Shared fixtures: fake fetcher, fake LLM client, sample pages and records.
"""
import json
from typing import Dict, List, Optional

import pytest

from jobsift.config import Settings
from jobsift.fetchers.http import FetchResult
from jobsift.llm.provider import LLMClient, LLMConfig, LLMResponse
from jobsift.models import FieldSchema, FieldSelector, Record


JOBS_PAGE = """
<html>
  <head><title>Jobs</title></head>
  <body>
    <div class="job">
      <h2 class="title">Python Developer</h2>
      <div class="company">Acme</div>
      <div class="location">Toronto</div>
      <span class="desc">Build services in Python and Go for our tech team</span>
    </div>
    <div class="job">
      <h2 class="title">Product Designer</h2>
      <div class="company">Globex</div>
      <div class="location">Remote</div>
      <span class="desc">Design in Figma</span>
    </div>
    <div class="job">
      <h2 class="title">Data Intern</h2>
      <div class="company">Initech</div>
      <div class="location">Waterloo</div>
      <span class="desc">Summer co-op, SQL and python, TECH team</span>
    </div>
    <script>var x = "<h2 class='title'>not a job</h2>";</script>
  </body>
</html>
"""

PAGE_URL = "https://jobs.example.com/search?q=python"


class FakeFetcher:
    """Serves canned pages and records every request."""

    def __init__(self, pages: Dict[str, str]):
        self.pages = pages
        self.requests: List[tuple] = []

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        self.requests.append((url, dict(headers or {})))
        if url not in self.pages:
            return FetchResult(url=url, status=404, error="HTTP 404")
        return FetchResult(url=url, status=200, text=self.pages[url], content_type="text/html")


class FakeLLMClient(LLMClient):
    """Returns queued JSON payloads (or errors) in call order."""

    def __init__(self, payloads=None, default=None):
        super().__init__(LLMConfig(api_key="test"))
        self.payloads = list(payloads or [])
        self.default = default
        self.prompts: List[str] = []

    async def complete(self, prompt, system_prompt=None, json_mode=False):
        self.prompts.append(prompt)
        payload = self.payloads.pop(0) if self.payloads else self.default
        if isinstance(payload, LLMResponse):
            return payload
        if payload is None:
            return LLMResponse(error="no response configured")
        return LLMResponse(content=json.dumps(payload), json_data=payload)


@pytest.fixture
def schema():
    return FieldSchema([
        FieldSelector("Title", "h2.title"),
        FieldSelector("Company", "div.company"),
        FieldSelector("Location", "div.location"),
        FieldSelector("JobDescription", "span.desc"),
    ])


@pytest.fixture
def fetcher():
    return FakeFetcher({PAGE_URL: JOBS_PAGE})


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        storage_provider="json",
        output_path=str(tmp_path / "jobs.json"),
        db_path=str(tmp_path / "jobs.db"),
        tags_path=str(tmp_path / "tags.json"),
        logs_file_enabled=False,
        openai_api_key="",
    )


@pytest.fixture
def sample_records():
    return [
        Record({"a": "a a a", "b": "b b b", "JobDescription": "a b c"}),
        Record({"a": "a a a", "b": "b b b", "JobDescription": "a B c"}),
        Record({"a": "a a a", "b": "b b b", "JobDescription": "A b c"}),
        Record({"e": "e e e", "f": "f f f", "JobDescription": "a g f"}),
        Record({"e": "e e e", "f": "f f f", "JobDescription": "A g f"}),
        Record({"h": "h h h", "i": "i i i", "JobDescription": "a i b"}),
        Record({"h": "h h h", "i": "i i i", "JobDescription": "a i B"}),
        Record({"h": "h h h", "i": "i i i", "JobDescription": "b i a"}),
        Record({"k": "k k k", "l": "l l l", "JobDescription": "l b l"}),
        Record({"k": "k k k", "l": "l l l", "JobDescription": "l B l"}),
    ]
