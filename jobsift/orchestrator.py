"""
Main orchestrator for jobsift runs.

Ties together crawling, concurrent field extraction, record assembly,
keyword filtering, storage, and optional tagging into run_pipeline().
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

from jobsift.crawler import Crawler, CrawlRequest, Fetcher
from jobsift.errors import ConfigurationError, CrawlTimeoutError, JobsiftError
from jobsift.extract import Accumulator, CompletionBarrier, FieldExtractor, assemble_records
from jobsift.fetchers.http import HttpFetcher
from jobsift.filters import apply_keyword_filters
from jobsift.llm.provider import LLMConfig, get_llm_client
from jobsift.llm.tag import tag_records
from jobsift.models import DEFAULT_HEADER_KEY, Record, ScrapeOptions, TaggedRecord, now_utc_iso
from jobsift.storage import (
    RecordDatabase,
    RunStats,
    StorageProvider,
    export_records_csv,
    export_records_excel,
    save_records,
    save_tags,
)

if TYPE_CHECKING:
    from jobsift.config import Settings
    from jobsift.llm.provider import LLMClient


@dataclass
class RunResult:
    """Everything a run produced."""
    stats: RunStats
    records: List[Record] = field(default_factory=list)
    filtered: List[Record] = field(default_factory=list)
    tagged: List[TaggedRecord] = field(default_factory=list)


async def extract_records(
    options: ScrapeOptions,
    crawler: Crawler,
    logger: Optional[logging.Logger] = None,
) -> List[Record]:
    """
    Crawl options.url and assemble the captured fragments into records.

    The crawl runs as a task while the driver waits on the completion
    barrier; options.wait_timeout_s bounds the whole wait, fetch included.
    On timeout the crawl is cancelled and the accumulator sealed, so late
    callbacks cannot change it.

    Raises:
        EmptyFieldSchemaError: before any request, if the schema is empty
        FetchError / CrawlError: the crawl failed
        CrawlTimeoutError: extraction unfinished after options.wait_timeout_s
        EmptyInputError / UnbalancedFieldsError: fragments do not form records
    """
    log = logger or logging.getLogger(__name__)

    accumulator = Accumulator(options.schema.names)
    barrier = CompletionBarrier()
    extractor = FieldExtractor(options.schema, accumulator, barrier, logger=log)
    extractor.attach(crawler)

    def set_headers(request: CrawlRequest) -> None:
        for key, value in options.headers.items():
            request.set_header(key, value)
        log.debug("accessing site %s", request.url)

    def report_error(url: str, error: Exception) -> None:
        log.error("crawl of %s failed: %s", url, error)

    crawler.on_request(set_headers)
    crawler.on_error(report_error)

    # The driver's own unit keeps the count above zero until dispatch has
    # finished, so wait() cannot return between two callbacks.
    barrier.begin()

    async def crawl() -> int:
        try:
            return await crawler.visit(options.url)
        finally:
            barrier.end()

    crawl_task = asyncio.ensure_future(crawl())
    loop = asyncio.get_running_loop()
    try:
        done = await loop.run_in_executor(None, barrier.wait, options.wait_timeout_s)
    except BaseException:
        crawl_task.cancel()
        raise

    if not done:
        pending = barrier.pending
        accumulator.seal()
        crawl_task.cancel()
        await asyncio.gather(crawl_task, return_exceptions=True)
        raise CrawlTimeoutError(options.wait_timeout_s or 0, pending)

    fired = await crawl_task
    accumulator.seal()

    log.info("captured %d fragments: %s", fired, accumulator.counts())
    return assemble_records(accumulator)


async def _tag(
    records: List[Record],
    options: ScrapeOptions,
    settings: "Settings",
    llm_client: Optional["LLMClient"],
    log: logging.Logger,
) -> List[TaggedRecord]:
    config = LLMConfig.from_settings(settings)
    client = llm_client or get_llm_client(config)
    if client is None:
        raise ConfigurationError("tagging requested but JOBSIFT_OPENAI_API_KEY is not set")

    log.info("tagging %d of %d records", min(len(records), config.max_records_per_run), len(records))
    return await tag_records(
        records,
        client,
        field=options.description_field,
        max_records=config.max_records_per_run,
        concurrency=config.concurrency,
    )


async def run_pipeline(
    options: ScrapeOptions,
    settings: "Settings",
    logger: Optional[logging.Logger] = None,
    fetcher: Optional[Fetcher] = None,
    tag: bool = False,
    llm_client: Optional["LLMClient"] = None,
) -> RunResult:
    """
    Run a complete extraction session.

    Args:
        options: Target URL, headers, field schema, keyword lists
        settings: Storage, retry and tagging configuration
        logger: Logger for this run (defaults to the module logger)
        fetcher: HTTP fetcher (a new HttpFetcher is created and closed if None)
        tag: Tag the filtered records with the LLM tagging service
        llm_client: Client for tagging (built from settings if None)

    Returns:
        RunResult with assembled and filtered records, tags and statistics
    """
    log = logger or logging.getLogger(__name__)
    try:
        provider = StorageProvider.from_text(settings.storage_provider)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    db: Optional[RecordDatabase] = None
    run_id = 0
    if provider == StorageProvider.SQLITE:
        db = RecordDatabase(settings.db_path)
        run_id = db.start_run(json.dumps(options.to_dict()))

    stats = RunStats(run_id=run_id, started_at=now_utc_iso())
    result = RunResult(stats=stats)

    own_fetcher = fetcher is None
    if fetcher is None:
        fetcher = HttpFetcher(
            timeout_s=settings.request_timeout_s,
            max_retries=settings.max_retries,
            user_agent=options.headers.get(DEFAULT_HEADER_KEY, settings.header_value),
        )
        await fetcher.start()

    try:
        crawler = Crawler(fetcher, max_workers=options.crawl_workers, logger=log)
        result.records = await extract_records(options, crawler, logger=log)
        stats.records_extracted = len(result.records)
        log.info("assembled %d records", len(result.records))
        if not result.records:
            log.warning("no records found at %s", options.url)

        result.filtered = apply_keyword_filters(
            result.records,
            or_keywords=options.or_keywords,
            and_keywords=options.and_keywords,
            field=options.description_field,
        )
        stats.records_kept = len(result.filtered)
        log.info("%d records kept after keyword filters", len(result.filtered))

        # ===================== Save =====================
        stored = save_records(provider, result.filtered, settings.output_path, db=db, run_id=run_id)
        log.info("stored %d records (%s)", stored, provider.value)

        columns = options.schema.names
        if settings.csv_path:
            count = export_records_csv(result.filtered, settings.csv_path, columns)
            log.info("exported %d records to %s", count, settings.csv_path)
        if settings.xlsx_path:
            count = export_records_excel(result.filtered, settings.xlsx_path, columns)
            log.info("exported %d records to %s", count, settings.xlsx_path)

        # ===================== Tagging =====================
        if tag and result.filtered:
            result.tagged = await _tag(result.filtered, options, settings, llm_client, log)
            stats.records_tagged = sum(1 for t in result.tagged if t.ok)
            stats.tag_errors = len(result.tagged) - stats.records_tagged

            save_tags(provider, result.tagged, settings.tags_path, db=db, run_id=run_id)

        stats.status = "ok"
        return result

    except JobsiftError as e:
        stats.status = "failed"
        stats.error = str(e)
        raise

    finally:
        stats.finished_at = now_utc_iso()
        if stats.status == "running":
            stats.status = "failed"
        if own_fetcher:
            await fetcher.close()
        if db is not None:
            db.finish_run(run_id, stats)
            db.close()
