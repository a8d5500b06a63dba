#!/usr/bin/env python3
"""Run an IEP extraction batch over a directory of extracted document texts."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List

from iep_backend.batch import (
    BatchResult,
    BatchRunner,
    ExtractionJob,
    build_extraction_operation,
    create_sink,
)
from iep_backend.batch.runner import new_batch_id
from iep_backend.config import get_settings
from iep_backend.llm_client import create_default_client
from iep_backend.rate_limit import RateLimitConfig, RateLimiter
from iep_backend.utils.logging import configure_logging

SUFFIXES = (".txt", ".json")


def load_jobs(directory: Path, *, limit: int | None = None) -> List[ExtractionJob]:
    """Build one job per ``.txt``/``.json`` file, sorted by name.

    A JSON file contributes its ``text`` member when it holds an object with
    one, otherwise its raw content.
    """

    jobs: List[ExtractionJob] = []
    for path in sorted(p for p in directory.iterdir() if p.suffix.lower() in SUFFIXES):
        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            try:
                decoded = json.loads(content)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, dict) and isinstance(decoded.get("text"), str):
                content = decoded["text"]
        jobs.append(ExtractionJob(document_id=path.name, text=content, source_path=str(path)))
        if limit is not None and len(jobs) >= limit:
            break
    return jobs


def print_summary(result: BatchResult) -> None:
    summary = result.summary
    print(f"Batch {summary.batch_id}")
    print(f"  Files:        {summary.total_files}")
    print(f"  Succeeded:    {summary.success_count}")
    print(f"  Failed:       {summary.fail_count}")
    print(f"  Valid:        {summary.validation_passed}")
    print(f"  Confidence:   {summary.avg_confidence:.1%}")
    print(f"  Total cost:   ${summary.total_cost_usd:.4f}")
    print(f"  Avg per file: ${summary.avg_cost_per_file:.4f}")
    print(f"  Total time:   {summary.total_processing_time_ms / 1000:.1f}s")
    for outcome in result.outcomes:
        status = "ok" if outcome.success else f"FAILED ({outcome.error})"
        print(f"  - {outcome.job_id}: {status}")
    if summary.critical_issues:
        print("  Critical issues:")
        for issue in summary.critical_issues:
            print(f"    * {issue}")


async def _main(args: argparse.Namespace) -> int:
    configure_logging(args.log_level)
    settings = get_settings()
    jobs = load_jobs(Path(args.directory), limit=args.limit)
    if not jobs:
        print(f"No {'/'.join(SUFFIXES)} files found in {args.directory}")
        return 1

    limiter = RateLimiter(RateLimitConfig.from_settings(settings))
    batch_id = args.batch_id or new_batch_id()
    runner = BatchRunner(limiter, create_sink(settings, batch_id))
    operation = build_extraction_operation(
        create_default_client(settings), limiter, settings=settings
    )
    print(f"Running {len(jobs)} jobs…")
    result = await runner.run_batch(jobs, operation, batch_id=batch_id)
    print_summary(result)
    return 1 if result.summary.success_count == 0 else 0


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("directory", help="Directory holding one extracted text per document")
    parser.add_argument("--limit", type=int, default=None, help="Process at most this many files")
    parser.add_argument("--batch-id", default=None, help="Override the generated batch identifier")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args(sys.argv[1:])
    sys.exit(asyncio.run(_main(args)))
