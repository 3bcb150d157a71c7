#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-02-02
# Description: generate_business_embeddings.py
# -----------------------------------------------------------------------------
"""
Backfill / migrate business embeddings for one embedding version.

Examples:
    python scripts/generate_business_embeddings.py --dry-run
    python scripts/generate_business_embeddings.py --regenerate --batch-size 5
"""
import argparse
import json
import os
import sys
from typing import List, Optional

# Add project root to path (flat layout)
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import settings
from utility.logging_utils import get_logger, set_level

logger = get_logger("scripts.generate_business_embeddings")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate business embeddings for an embedding version")
    parser.add_argument("--version", default=None, help="Target embedding version (default: current model)")
    parser.add_argument("--batch-size", type=int, default=settings.QUEUE_DEFAULTS["batch_size"])
    parser.add_argument("--max-retries", type=int, default=settings.QUEUE_DEFAULTS["max_attempts"])
    parser.add_argument("--retry-delay", type=float, default=1.0, help="Seconds; multiplied by attempt number")
    parser.add_argument("--regenerate", action="store_true", help="Regenerate every business, not just missing ones")
    parser.add_argument("--dry-run", action="store_true", help="Report what would be generated and exit")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default: BIZ_LOG_LEVEL)")
    return parser


def main(argv: Optional[List[str]] = None, container=None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_level(args.log_level)

    if container is None:
        from api.dependencies import get_app_container
        container = get_app_container()

    report = container.generator.validate_embedding_dimensions()
    if not report["valid"] and not args.regenerate:
        logger.error("Dimension check failed: %s", report["issue"])
        logger.error("Recommendation: %s", report["recommendation"])
        return 2

    summary = container.reconciliation_service.migrate_to_version(
        args.version,
        regenerate=args.regenerate,
        dry_run=args.dry_run,
        batch_size=args.batch_size,
        max_retries=args.max_retries,
        retry_delay=args.retry_delay,
    )
    print(json.dumps(summary, indent=2))
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
