"""
LLM-powered tagging of posting descriptions.

Produces a TagSet (co-op flag, technologies, languages, skills) for one
description at a time; tag_records() fans out over a record set.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, TYPE_CHECKING

from jobsift.errors import TaggingError
from jobsift.llm.prompts import TAG_SYSTEM, build_tag_prompt
from jobsift.models import DESCRIPTION_FIELD, Record, TagSet, TaggedRecord

if TYPE_CHECKING:
    from jobsift.llm.provider import LLMClient

logger = logging.getLogger(__name__)


async def tag_description(description: str, client: "LLMClient") -> TagSet:
    """
    Tag a single posting description.

    Raises:
        TaggingError: empty description, failed call, or a response that is
            not a well-formed tag object
    """
    if not description or not description.strip():
        raise TaggingError("unable to create tags for empty job description")

    response = await client.complete_json(build_tag_prompt(description), TAG_SYSTEM)

    if response.error:
        raise TaggingError(f"tagging request failed: {response.error}")
    if response.json_data is None:
        raise TaggingError("tagging response was not valid JSON")

    try:
        return TagSet.from_json(response.json_data)
    except ValueError as e:
        raise TaggingError(f"malformed tagging response: {e}") from e


async def tag_records(
    records: Sequence[Record],
    client: "LLMClient",
    field: str = DESCRIPTION_FIELD,
    max_records: Optional[int] = None,
    concurrency: int = 5,
) -> List[TaggedRecord]:
    """
    Tag multiple records with bounded concurrency.

    Only the first `max_records` records are sent (cost control); failures
    are reported per record instead of aborting the batch.
    """
    to_process = list(records if max_records is None else records[:max_records])
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def tag_one(record: Record) -> TaggedRecord:
        async with semaphore:
            try:
                tags = await tag_description(record.get(field, ""), client)
            except TaggingError as e:
                logger.warning("tagging failed: %s", e)
                return TaggedRecord(record=record, error=str(e))
            return TaggedRecord(record=record, tags=tags)

    return list(await asyncio.gather(*(tag_one(r) for r in to_process)))
