#!/usr/bin/env python3
"""
Accessibility Audit Runner
Runs one audit against a running site and writes the aggregate report as JSON

Usage:
    python scripts/run_audit.py URL [--strategy single|sitemap|crawl|paths] [--paths "/\n/about"]

Example:
    python scripts/run_audit.py http://localhost:3000 --strategy crawl --max-pages 20 --fail-on-violations
"""

import argparse
import sys
from pathlib import Path

import requests

from app.features.scan.schemas.audit import AuditRequest
from app.features.scan.services.orchestration.audit_runner import AuditRunner
from app.platform.config import settings
from app.platform.exceptions import AuditError
from app.platform.logger import get_logger

logger = get_logger("run_audit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run an accessibility audit against a running site")
    parser.add_argument("url", help="Base URL of the site to audit")
    parser.add_argument("--strategy", default="single", help="single, sitemap, crawl or paths")
    parser.add_argument("--paths", default="", help="Newline-separated paths for the 'paths' strategy")
    parser.add_argument("--start-path", action="append", dest="start_paths", help="Crawl seed path (repeatable)")
    parser.add_argument("--max-pages", type=int, default=settings.MAX_PAGES)
    parser.add_argument("--wcag-level", default=settings.WCAG_LEVEL, choices=["A", "AA", "AAA"])
    parser.add_argument("--include-best-practices", action="store_true")
    parser.add_argument("--include-experimental", action="store_true")
    parser.add_argument("--threshold", type=int, default=settings.SCORE_THRESHOLD)
    parser.add_argument("--health-check-path", default="/")
    parser.add_argument("--health-check-timeout", type=int, default=settings.HEALTH_CHECK_TIMEOUT)
    parser.add_argument("--skip-health-check", action="store_true")
    parser.add_argument("--output", help="Write the JSON report to this file instead of stdout")
    parser.add_argument("--fail-on-violations", action="store_true",
                        help="Exit with status 1 when the score is below the threshold")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    request = AuditRequest(
        url=args.url,
        strategy=args.strategy,
        scan_paths=args.paths.replace("\\n", "\n"),
        start_paths=args.start_paths or ["/"],
        max_pages=args.max_pages,
        wcag_level=args.wcag_level,
        include_best_practices=args.include_best_practices,
        include_experimental=args.include_experimental,
        threshold=args.threshold,
        health_check=not args.skip_health_check,
        health_check_path=args.health_check_path,
        health_check_timeout=args.health_check_timeout,
    )

    try:
        with requests.Session() as http:
            outcome = AuditRunner(session=http).run(request)
    except AuditError as e:
        logger.error(f"❌ Accessibility audit failed: {e}")
        return 2

    report_json = outcome.model_dump_json(indent=2)
    if args.output:
        Path(args.output).write_text(report_json, encoding="utf-8")
        logger.info(f"📄 JSON report written: {args.output}")
    else:
        print(report_json)

    if not outcome.passed and args.fail_on_violations:
        logger.error(
            f"❌ Accessibility scan failed: Score {outcome.report.overall_score} below threshold {outcome.threshold}"
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
