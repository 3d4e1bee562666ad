"""
Application configuration via environment variables.
"""

import json
from functools import lru_cache
from typing import Any, List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings

from jobsift.models import (
    DEFAULT_HEADER_KEY,
    DEFAULT_TARGET_URL,
    DEFAULT_USER_AGENT,
    DESCRIPTION_FIELD,
    GOOGLE_JOBS_SCHEMA,
    FieldSchema,
    FieldSelector,
    ScrapeOptions,
    split_keywords,
)


def parse_field_schema(raw: str) -> FieldSchema:
    """
    Parse a field schema from a JSON string.

    Accepts an object ({"Title": "h2.title", ...}), a list of
    [name, selector] pairs, or a list of {"name": ..., "selector": ...}.
    Raises ValueError on anything else.
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValueError(f"field schema is not valid JSON: {e}") from e

    if isinstance(parsed, dict):
        return FieldSchema.from_mapping(parsed)
    if isinstance(parsed, list):
        fields = []
        for item in parsed:
            if isinstance(item, dict) and "name" in item and "selector" in item:
                fields.append(FieldSelector(str(item["name"]), str(item["selector"])))
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                fields.append(FieldSelector(str(item[0]), str(item[1])))
            else:
                raise ValueError(f"unrecognised field schema entry: {item!r}")
        return FieldSchema(fields)
    raise ValueError("field schema must be a JSON object or list")


def _parse_keyword_list(v: Any) -> List[str]:
    """Parse keywords from JSON string or comma-separated list."""
    if v is None:
        return []
    if isinstance(v, list):
        return [k for k in v if isinstance(k, str) and k.strip()]
    if isinstance(v, str):
        if not v.strip():
            return []
        try:
            parsed = json.loads(v)
            if isinstance(parsed, list):
                return [k for k in parsed if isinstance(k, str) and k.strip()]
        except (json.JSONDecodeError, TypeError):
            pass
        return split_keywords(v)
    return []


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Target
    target_url: str = DEFAULT_TARGET_URL
    header_key: str = DEFAULT_HEADER_KEY
    header_value: str = DEFAULT_USER_AGENT

    # JSON object or list; empty means the built-in Google Jobs schema
    field_schema: str = ""
    description_field: str = DESCRIPTION_FIELD

    # NOTE: Union[...] prevents pydantic-settings from JSON-decoding non-JSON env strings.
    and_keywords: Union[str, List[str], None] = []
    or_keywords: Union[str, List[str], None] = []

    @field_validator("and_keywords", "or_keywords", mode="before")
    @classmethod
    def parse_keywords(cls, v: Any) -> List[str]:
        return _parse_keyword_list(v)

    # Crawl
    request_timeout_s: int = 20
    max_retries: int = 3
    crawl_workers: int = 4
    wait_timeout_s: Optional[float] = None

    # Storage
    storage_provider: str = "json"  # json | sqlite | memory
    output_path: str = "jobs.json"
    db_path: str = "jobs.db"
    csv_path: Optional[str] = None
    xlsx_path: Optional[str] = None
    tags_path: str = "tags.json"

    # Tagging (OpenAI)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: Optional[str] = None
    tag_max_records: int = 25

    # Logging
    log_level: str = "INFO"
    logs_file_enabled: bool = True
    logs_path: str = "logs/jobsift.jsonl"
    logs_max_size_mb: int = 500
    logs_max_backups: int = 5

    class Config:
        env_prefix = "JOBSIFT_"
        env_file = ".env"
        extra = "ignore"

    def get_field_schema(self) -> FieldSchema:
        if not self.field_schema.strip():
            return GOOGLE_JOBS_SCHEMA
        return parse_field_schema(self.field_schema)

    def to_options(self) -> ScrapeOptions:
        """Build the options for one pipeline run."""
        return ScrapeOptions(
            url=self.target_url,
            headers={self.header_key: self.header_value},
            schema=self.get_field_schema(),
            and_keywords=list(self.and_keywords or []),
            or_keywords=list(self.or_keywords or []),
            description_field=self.description_field,
            crawl_workers=self.crawl_workers,
            wait_timeout_s=self.wait_timeout_s,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
