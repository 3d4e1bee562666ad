"""
Core data models for jobsift.

Provides:
- FieldSchema: ordered (field name, selector) pairs driving extraction and assembly
- Record: one immutable, field-keyed row produced by the record assembler
- TagSet / CoopStatus: structured output of the tagging service
- ScrapeOptions: everything a single pipeline run needs
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple


TITLE_FIELD = "Title"
COMPANY_FIELD = "Company"
LOCATION_FIELD = "Location"
DESCRIPTION_FIELD = "JobDescription"

DEFAULT_TARGET_URL = (
    "https://www.google.com/search?q=google+jobs&oq=google+jobs"
    "&sourceid=chrome&ie=UTF-8&ibp=htl;jobs"
)
DEFAULT_HEADER_KEY = "User-Agent"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36"
)


# ----------------------------- Enums -----------------------------

class CoopStatus(str, Enum):
    """Whether a posting is an internship or co-op position."""
    YES = "Yes"
    NO = "No"
    MAYBE = "Maybe"

    @classmethod
    def from_text(cls, text: Any) -> "CoopStatus":
        """Parse a free-form answer; anything unrecognised is MAYBE."""
        t = str(text or "").strip().lower()
        if t in ("yes", "y", "true"):
            return cls.YES
        if t in ("no", "n", "false"):
            return cls.NO
        return cls.MAYBE


# ----------------------------- Utilities -----------------------------

def normalize_text(s: str) -> str:
    """Collapse whitespace and strip."""
    return re.sub(r"\s+", " ", (s or "")).strip()


def now_utc_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def split_keywords(s: str) -> List[str]:
    """
    Split a comma- or newline-separated keyword string.

    Keywords are regex patterns, so a comma only separates keywords when it
    is outside (), [] and {} and not backslash-escaped: "py(thon){1,2},go"
    is two keywords. Keywords are stripped but otherwise kept verbatim.
    """
    parts: List[str] = []
    buf: List[str] = []
    depth = 0
    in_class = False
    escaped = False
    for ch in s or "":
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif in_class:
            # inside [...] only "]" is special
            if ch == "]":
                in_class = False
                depth -= 1
        elif ch == "[":
            in_class = True
            depth += 1
        elif ch in "({":
            depth += 1
        elif ch in ")}" and depth > 0:
            depth -= 1
        elif ch in ",\n" and depth == 0:
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf))
    return [p.strip() for p in parts if p.strip()]


def _split_tag_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        raise ValueError(f"expected a string or list, got {type(value).__name__}")
    out = []
    for item in items:
        item = normalize_text(item)
        if item and item.lower() not in ("none", "n/a"):
            out.append(item)
    return out


# ----------------------------- Field schema -----------------------------

@dataclass(frozen=True)
class FieldSelector:
    """One logical field and the CSS selector that captures it."""
    name: str
    selector: str


class FieldSchema:
    """
    Ordered, immutable set of (field name, selector) pairs.

    The order defines both what gets registered with the crawler and the
    column order of assembled records.
    """

    def __init__(self, fields: Iterable[FieldSelector] = ()):
        items: List[FieldSelector] = []
        seen = set()
        for f in fields:
            if isinstance(f, tuple):
                f = FieldSelector(*f)
            if not f.name:
                raise ValueError("field name must not be empty")
            if not f.selector:
                raise ValueError(f"field {f.name!r} has an empty selector")
            if f.name in seen:
                raise ValueError(f"duplicate field name {f.name!r}")
            seen.add(f.name)
            items.append(f)
        self._fields: Tuple[FieldSelector, ...] = tuple(items)

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "FieldSchema":
        """Build from a {name: selector} mapping, keeping its order."""
        return cls(FieldSelector(str(k), str(v)) for k, v in mapping.items())

    @property
    def names(self) -> List[str]:
        return [f.name for f in self._fields]

    def selector_for(self, name: str) -> str:
        for f in self._fields:
            if f.name == name:
                return f.selector
        raise KeyError(name)

    def to_dict(self) -> Dict[str, str]:
        return {f.name: f.selector for f in self._fields}

    def __iter__(self) -> Iterator[FieldSelector]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldSchema):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"FieldSchema({list(self._fields)!r})"


# Google Jobs result cards
GOOGLE_JOBS_SCHEMA = FieldSchema([
    FieldSelector(TITLE_FIELD, 'h2.KLsYvd[jsname="SBkjJd"]'),
    FieldSelector(COMPANY_FIELD, "div.nJlQNd.sMzDkb"),
    FieldSelector(LOCATION_FIELD, "div.sMzDkb:not(.nJlQNd)"),
    FieldSelector(DESCRIPTION_FIELD, "span.HBvzbc"),
])


# ----------------------------- Record -----------------------------

class Record(Mapping):
    """
    One assembled row: field name -> text value.

    Immutable once created. Compares equal to any mapping with the same items.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping] = None, **kwargs: str):
        d: Dict[str, str] = dict(data or {})
        d.update(kwargs)
        object.__setattr__(self, "_data", d)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Record is immutable")

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def __repr__(self) -> str:
        return f"Record({self._data!r})"

    def to_dict(self) -> Dict[str, str]:
        return dict(self._data)


RecordSet = List[Record]


# ----------------------------- Tagging -----------------------------

@dataclass
class TagSet:
    """Structured tags for one posting description."""
    coop: CoopStatus = CoopStatus.MAYBE
    technologies: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "TagSet":
        """
        Parse the tagging service's JSON object.

        Accepts the short keys the prompt asks for ("coop", "tech", "languages",
        "skills") and their long forms. Raises ValueError on malformed input.
        """
        if not isinstance(data, dict):
            raise ValueError("tag response is not a JSON object")
        missing = [k for k in ("coop", "languages", "skills") if k not in data]
        if "tech" not in data and "technologies" not in data:
            missing.append("tech")
        if missing:
            raise ValueError(f"tag response missing fields: {', '.join(missing)}")
        return cls(
            coop=CoopStatus.from_text(data.get("coop")),
            technologies=_split_tag_list(data.get("tech", data.get("technologies"))),
            languages=_split_tag_list(data.get("languages")),
            skills=_split_tag_list(data.get("skills")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coop": self.coop.value,
            "technologies": list(self.technologies),
            "languages": list(self.languages),
            "skills": list(self.skills),
        }


@dataclass
class TaggedRecord:
    """A record with its tags, or the reason tagging failed."""
    record: Record
    tags: Optional[TagSet] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.tags is not None and not self.error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record": self.record.to_dict(),
            "tags": self.tags.to_dict() if self.tags else None,
            "error": self.error,
        }


# ----------------------------- Options -----------------------------

@dataclass
class ScrapeOptions:
    """Inputs for one pipeline run."""

    url: str = DEFAULT_TARGET_URL
    headers: Dict[str, str] = field(default_factory=lambda: {DEFAULT_HEADER_KEY: DEFAULT_USER_AGENT})
    schema: FieldSchema = field(default_factory=lambda: GOOGLE_JOBS_SCHEMA)
    and_keywords: List[str] = field(default_factory=list)  # AND match
    or_keywords: List[str] = field(default_factory=list)   # OR match
    description_field: str = DESCRIPTION_FIELD

    # Crawl behavior
    crawl_workers: int = 4
    wait_timeout_s: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "headers": dict(self.headers),
            "schema": self.schema.to_dict(),
            "and_keywords": list(self.and_keywords),
            "or_keywords": list(self.or_keywords),
            "description_field": self.description_field,
        }


def records_from_dicts(rows: Sequence[Mapping]) -> RecordSet:
    """Wrap plain mappings (e.g. loaded JSON) as records."""
    return [Record({str(k): str(v) for k, v in row.items()}) for row in rows]
