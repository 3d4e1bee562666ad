"""
Command-line interface for jobsift.

Usage:
    python -m jobsift --or "tech,software" --and "python" -v
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from jobsift.config import Settings, get_settings, parse_field_schema
from jobsift.errors import CollaboratorError, ConfigurationError, DataIntegrityError
from jobsift.log import configure_logging
from jobsift.models import FieldSchema, FieldSelector, ScrapeOptions, split_keywords

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_DATA = 3
EXIT_COLLABORATOR = 4
EXIT_INTERRUPTED = 130


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="jobsift",
        description="Extract job postings from a search-results page and filter them by keyword",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default Google Jobs page and selectors, no filtering
  python -m jobsift

  # Keep postings mentioning tech OR software, then require python AND remote
  python -m jobsift --or "tech,software" --and "python,remote"

  # Custom page and field selectors
  python -m jobsift --url https://example.com/jobs \\
      --field "Title=h2.title" --field "JobDescription=div.desc"

  # Store runs in SQLite and tag the results (requires JOBSIFT_OPENAI_API_KEY)
  python -m jobsift --storage sqlite --db ./data/jobs.db --tag -v
""",
    )

    # Target
    parser.add_argument("--url", "-u", default=None, help="Page to scrape (default: JOBSIFT_TARGET_URL)")
    parser.add_argument("--user-agent", default=None, help="User-Agent header value")
    parser.add_argument(
        "--field", "-f",
        action="append",
        default=[],
        metavar="NAME=SELECTOR",
        help="Field to extract (repeatable, in column order)",
    )
    parser.add_argument("--schema", default=None, help="Field schema as JSON (object or list of pairs)")
    parser.add_argument("--description-field", default=None, help="Field the keyword filters match against")

    # Keyword filters
    parser.add_argument(
        "--and", "-a",
        dest="and_keywords",
        default=None,
        help="Patterns that MUST all match (comma-separated, AND logic; commas inside (), [] or {} stay in the pattern)",
    )
    parser.add_argument(
        "--or", "-o",
        dest="or_keywords",
        default=None,
        help="At least ONE of these patterns must match (comma-separated, OR logic)",
    )

    # Output
    parser.add_argument("--storage", choices=["json", "sqlite", "memory"], default=None, help="Storage provider")
    parser.add_argument("--output", default=None, help="JSON output path (json storage)")
    parser.add_argument("--db", default=None, help="SQLite database path (sqlite storage)")
    parser.add_argument("--csv", default=None, help="Also export to CSV")
    parser.add_argument("--xlsx", default=None, help="Also export to Excel")

    # Behavior
    parser.add_argument("--timeout", type=int, default=None, help="Request timeout in seconds")
    parser.add_argument("--wait-timeout", type=float, default=None, help="Max seconds to wait for extraction")
    parser.add_argument("--workers", type=int, default=None, help="Threads dispatching match callbacks")

    # Tagging
    tag_group = parser.add_argument_group("Tagging (requires JOBSIFT_OPENAI_API_KEY)")
    tag_group.add_argument("--tag", action="store_true", help="Tag filtered postings with the LLM")
    tag_group.add_argument("--tag-max", type=int, default=None, help="Max postings to tag (cost control)")
    tag_group.add_argument("--tag-model", default=None, help="OpenAI model to use")

    # Verbosity
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress all output except errors")

    return parser.parse_args(argv)


def parse_field_args(values: List[str]) -> FieldSchema:
    """Parse repeated NAME=SELECTOR arguments."""
    fields = []
    for value in values:
        name, sep, selector = value.partition("=")
        if not sep or not name.strip() or not selector.strip():
            raise ConfigurationError(f"--field expects NAME=SELECTOR, got {value!r}")
        fields.append(FieldSelector(name.strip(), selector.strip()))
    return FieldSchema(fields)


def build_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Overlay command-line values on environment settings."""
    base = base or get_settings()
    update: Dict[str, Any] = {}
    overrides = {
        "target_url": args.url,
        "header_value": args.user_agent,
        "description_field": args.description_field,
        "storage_provider": args.storage,
        "output_path": args.output,
        "db_path": args.db,
        "csv_path": args.csv,
        "xlsx_path": args.xlsx,
        "request_timeout_s": args.timeout,
        "wait_timeout_s": args.wait_timeout,
        "crawl_workers": args.workers,
        "tag_max_records": args.tag_max,
        "openai_model": args.tag_model,
    }
    for key, value in overrides.items():
        if value is not None:
            update[key] = value
    if args.and_keywords is not None:
        update["and_keywords"] = split_keywords(args.and_keywords)
    if args.or_keywords is not None:
        update["or_keywords"] = split_keywords(args.or_keywords)
    return base.model_copy(update=update)


def build_options(args: argparse.Namespace, settings: Settings) -> ScrapeOptions:
    """Build run options, with --field / --schema overriding the configured schema."""
    try:
        options = settings.to_options()
        if args.field:
            options.schema = parse_field_args(args.field)
        elif args.schema:
            options.schema = parse_field_schema(args.schema)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return options


async def async_main(args: argparse.Namespace) -> int:
    """Async entry point."""
    from jobsift.orchestrator import run_pipeline

    try:
        settings = build_settings(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    level = "DEBUG" if args.verbose else ("ERROR" if args.quiet else None)
    logger = configure_logging(settings, level=level)

    try:
        options = build_options(args, settings)

        if not args.quiet:
            print(f"jobsift - Scraping: {options.url}")
            print(f"  Fields: {', '.join(options.schema.names) or 'none'}")
            if options.or_keywords:
                print(f"  Any of: {', '.join(options.or_keywords)}")
            if options.and_keywords:
                print(f"  All of: {', '.join(options.and_keywords)}")
            print()

        result = await run_pipeline(options, settings, logger=logger, tag=args.tag)

        if not args.quiet:
            stats = result.stats
            print()
            print("=" * 50)
            print("Run Summary")
            print("=" * 50)
            print(f"  Records extracted: {stats.records_extracted}")
            print(f"  Records kept:      {stats.records_kept}")
            if args.tag:
                print(f"  Records tagged:    {stats.records_tagged}")
                print(f"  Tag errors:        {stats.tag_errors}")
            print()
            if settings.storage_provider == "json":
                print(f"Output: {settings.output_path}")
            elif settings.storage_provider == "sqlite":
                print(f"Database: {settings.db_path} (run {stats.run_id})")

        return EXIT_OK

    except KeyboardInterrupt:
        if not args.quiet:
            print("\nInterrupted by user")
        return EXIT_INTERRUPTED

    except ConfigurationError as e:
        logger.error("configuration error: %s", e)
        return EXIT_CONFIG

    except DataIntegrityError as e:
        logger.error("data integrity error: %s", e)
        return EXIT_DATA

    except CollaboratorError as e:
        logger.error("collaborator error: %s", e)
        return EXIT_COLLABORATOR

    except Exception as e:
        logger.exception("unexpected error: %s", e)
        return EXIT_ERROR


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    return asyncio.run(async_main(args))


if __name__ == "__main__":
    sys.exit(main())
