"""Concurrent fetch-and-enrich pipeline turning domains into server records."""

from __future__ import annotations

import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

from fediservers.config import DEFAULT_CONCURRENCY, DEFAULT_JITTER, FetcherConfig
from fediservers.models import ServerRecord
from fediservers.services.extract import capitalize_description
from fediservers.services.fetcher import HomepageCache, InstanceFetcher, build_session
from fediservers.services.normalize import build_server_record, placeholder_record

logger = logging.getLogger(__name__)

__all__ = ["EnrichmentPipeline"]


class EnrichmentPipeline:
    """Process domains on a fixed pool of workers.

    Workers claim the next unprocessed index from a shared counter, build a
    :class:`ServerRecord` for it and pause for a random jitter before taking
    the next one. Per-domain failures degrade to placeholder values; only
    unexpected errors escape :meth:`run`.
    """

    def __init__(
        self,
        fetcher: InstanceFetcher | None = None,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        jitter: float = DEFAULT_JITTER,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.fetcher = fetcher or InstanceFetcher()
        self.concurrency = max(1, concurrency)
        self.jitter = jitter
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: FetcherConfig) -> "EnrichmentPipeline":
        session = build_session(config.user_agent, pool_size=config.concurrency)
        fetcher = InstanceFetcher(session, timeout=config.timeout, cache=HomepageCache())
        return cls(fetcher, concurrency=config.concurrency, jitter=config.jitter)

    def _resolve_icon(self, domain: str, prefix: str) -> str:
        try:
            return self.fetcher.fetch_homepage_icon(domain)
        except Exception as exc:  # noqa: BLE001 - the icon never blocks the record
            logger.warning("%s  Failed to resolve icon for %s: %s", prefix, domain, exc)
            return ""

    def process_domain(self, domain: str, worker_id: Optional[int] = None) -> ServerRecord:
        """Build the record for one domain.

        The description falls back to the homepage meta description when the
        API has none, and the whole record falls back to a placeholder when
        the API cannot be read.
        """

        prefix = f"[w{worker_id}]" if worker_id is not None else ""
        instance = self.fetcher.fetch_instance_info(domain)

        if instance is not None:
            description = instance.description or ""
            if not description.strip():
                logger.info("%s  API description is empty, fetching from homepage...", prefix)
                description = self.fetcher.fetch_homepage_description(domain)
            icon = self._resolve_icon(domain, prefix)
            record = build_server_record(
                instance,
                domain,
                description=capitalize_description(description),
                icon=icon,
            )
            logger.info("%s Processed %s successfully", prefix, domain)
            return record

        logger.info("%s  API failed, attempting to fetch description from homepage...", prefix)
        description = capitalize_description(self.fetcher.fetch_homepage_description(domain))
        icon = self._resolve_icon(domain, prefix)
        logger.warning("%s Created placeholder for %s due to errors", prefix, domain)
        return placeholder_record(domain, description=description, icon=icon)

    def _pause(self) -> None:
        if self.jitter > 0:
            self._sleep(random.uniform(0, self.jitter))

    def run(self, domains: Iterable[str]) -> List[ServerRecord]:
        """Process every domain and return the records in completion order."""

        pending = list(domains)
        if not pending:
            return []

        results: List[ServerRecord] = []
        lock = threading.Lock()
        next_index = 0

        def claim() -> Optional[int]:
            nonlocal next_index
            with lock:
                if next_index >= len(pending):
                    return None
                current = next_index
                next_index += 1
                return current

        def worker(worker_id: int) -> None:
            while True:
                current = claim()
                if current is None:
                    return
                domain = pending[current]
                if not domain:
                    logger.warning("[w%d] Skipping empty domain at position %d", worker_id, current + 1)
                    continue
                logger.info("[w%d] Processing %d/%d: %s", worker_id, current + 1, len(pending), domain)
                results.append(self.process_domain(domain, worker_id))
                self._pause()

        logger.info("Using concurrency: %d", self.concurrency)
        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="fetch-worker") as executor:
            futures = [executor.submit(worker, worker_id) for worker_id in range(1, self.concurrency + 1)]
            for future in futures:
                future.result()

        return results
