"""Command line entry point for building the server directory."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from fediservers.config import CONCURRENCY_ENV_VAR, DEFAULT_CONCURRENCY, FetcherConfig
from fediservers.datastore import publish
from fediservers.models import ServerRecord, UNKNOWN
from fediservers.services.aggregate import aggregate
from fediservers.services.pipeline import EnrichmentPipeline
from fediservers.sources import load_domain_groups

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch NeoDB/Mastodon instance metadata and publish the server directory JSON files.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help=f"Number of parallel workers (default: ${CONCURRENCY_ENV_VAR} or {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument("--data-root", type=Path, default=None, help="Directory receiving the JSON files")
    parser.add_argument("--official", type=Path, default=None, help="Official server list file")
    parser.add_argument("--community", type=Path, default=None, help="Community server list file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def _log_summary(records: List[ServerRecord], total_domains: int) -> None:
    total_users = sum(record.total_users for record in records)
    languages: List[str] = []
    for record in records:
        for language in record.languages:
            if language and language != UNKNOWN and language not in languages:
                languages.append(language)

    logger.info("Processed %d/%d servers (unique domains)", len(records), total_domains)
    logger.info("Total servers in output: %d", len(records))
    logger.info("Total active users across all servers: %s", f"{total_users:,}")
    logger.info("Languages supported: %s", ", ".join(languages))


def run(config: FetcherConfig) -> int:
    """Execute one batch run. Raises ``OSError`` for unreadable or unwritable files."""

    groups = load_domain_groups(config.official_path, config.community_path)
    domains = groups.combined

    logger.info("Processing %d unique servers in a single pool", len(domains))
    pipeline = EnrichmentPipeline.from_config(config)
    records = pipeline.run(domains)

    result = aggregate(records, groups)
    written = publish(result, config.data_root)

    logger.info("Results written:")
    for name, path in written.items():
        logger.info("- %s: %s", name.capitalize(), path)
    _log_summary(result.combined, len(domains))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Load configuration, fetch every listed server and publish the results."""

    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s: %(message)s")

    try:
        config = FetcherConfig.from_env(
            concurrency=args.concurrency,
            data_root=args.data_root,
            official_source=args.official,
            community_source=args.community,
        )
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    try:
        return run(config)
    except OSError as exc:
        logger.error("Could not read or write server directory files: %s", exc)
        return 1
    except Exception:  # noqa: BLE001 - any escaping error aborts the batch
        logger.exception("Fatal error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
