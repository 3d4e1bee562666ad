"""
jobsift: structured record extraction from search-results pages.

Runs a fixed set of field selectors concurrently over a fetched page,
assembles the matches into uniform records, narrows them with AND/OR
keyword filters, and optionally tags each posting with an LLM.
"""

__version__ = "1.0.0"

from jobsift.filters import and_filter, or_filter
from jobsift.extract import assemble_records
from jobsift.models import FieldSchema, FieldSelector, Record, ScrapeOptions, TagSet, CoopStatus
from jobsift.orchestrator import run_pipeline, extract_records

__all__ = [
    "FieldSchema",
    "FieldSelector",
    "Record",
    "ScrapeOptions",
    "TagSet",
    "CoopStatus",
    "and_filter",
    "or_filter",
    "assemble_records",
    "extract_records",
    "run_pipeline",
]
