"""Export flattened membership records to CSV.

Usage:
    python -m scripts.export_records --environment server [--project PROJECT_ID] [--output members.csv]
Without --project every project of the organization is exported. Reads the
same settings (.env) as the API and goes through the same Redis cache.
Writes to stdout when --output is omitted.
"""

import argparse
import asyncio
import csv
import logging
import sys
from pathlib import Path
from typing import TextIO

import httpx
from dotenv import load_dotenv

from membership_api.application.dtos import AggregationResult
from membership_api.core.config import get_settings
from membership_api.core.lifespan import build_aggregator
from membership_api.domain.exceptions import MembershipException
from membership_api.infrastructure.cache.redis_cache import CacheService
from membership_api.shared.telemetry.logging import setup_logging

logger = logging.getLogger("scripts.export_records")

CSV_COLUMNS = ["Project", "ProjectId", "Group", "GroupId", "Member", "MemberId"]


def write_csv(result: AggregationResult, out: TextIO) -> int:
    """Write records as CSV with the API's column names. Returns rows written."""
    writer = csv.writer(out)
    writer.writerow(CSV_COLUMNS)
    for r in result.records:
        writer.writerow([r.project, r.project_id, r.group, r.group_id, r.member, r.member_id])
    return len(result.records)


async def collect(environment: str, project_id: str | None) -> AggregationResult:
    """Aggregate one project (or all projects) through the configured cache."""
    settings = get_settings()
    cache = None
    if settings.redis_enabled:
        cache = CacheService(settings=settings)
        await cache.connect()
    async with httpx.AsyncClient(timeout=settings.upstream_timeout_seconds) as http_client:
        aggregator = build_aggregator(settings, cache, http_client)
        try:
            if project_id:
                result = await aggregator.project_records(environment, project_id)
            else:
                result = await aggregator.all_records(environment)
        finally:
            if cache is not None:
                await cache.disconnect()
    return result


def report(result: AggregationResult, out: TextIO) -> int:
    """Write result as CSV and log skipped branches; returns the number of failed branches."""
    rows = write_csv(result, out)
    for failure in result.failures:
        logger.warning(
            "Skipped %s of project %s%s: %s",
            failure.level,
            failure.project_name,
            f" group {failure.group_name}" if failure.group_name else "",
            failure.error,
        )
    logger.info("Exported %d records (%d failed branches)", rows, len(result.failures))
    return len(result.failures)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def main(argv: list[str] | None = None) -> None:
    load_dotenv(_project_root() / ".env")
    setup_logging(sys.stderr)
    parser = argparse.ArgumentParser(
        prog="export_records",
        description="Export project/group/member rows to CSV",
    )
    parser.add_argument("--environment", "-e", required=True, help="server or services")
    parser.add_argument("--project", "-p", default=None, help="Project id (default: all projects)")
    parser.add_argument("--output", "-o", default=None, help="CSV file path (default: stdout)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when any project or group could not be fetched",
    )
    args = parser.parse_args(argv)

    try:
        result = asyncio.run(collect(args.environment, args.project))
    except MembershipException as e:
        print(f"{e.message} {e.details or ''}".strip(), file=sys.stderr)
        sys.exit(1)
    if args.output:
        with open(args.output, "w", newline="", encoding="utf-8") as fh:
            failures = report(result, fh)
    else:
        failures = report(result, sys.stdout)
    if args.strict and failures:
        sys.exit(2)


if __name__ == "__main__":
    main()
