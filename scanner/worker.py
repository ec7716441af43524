"""
Bounded-concurrency pool that fetches and classifies every task record.

Each record is owned by exactly one unit of work. Units share only the
semaphore, the fetcher client and the classifier, all read-only. The pool
returns after every record has reached a terminal state.
"""

import asyncio
from typing import List

import structlog

from scanner.classifier import KeywordClassifier
from scanner.fetcher import HTTPFetcher
from scanner.records import MatchResult, TaskRecord

logger = structlog.get_logger(__name__)


class WorkerPool:
    """Runs fetch + classify for each record under a concurrency limit"""

    def __init__(self, fetcher: HTTPFetcher, classifier: KeywordClassifier):
        self.fetcher = fetcher
        self.classifier = classifier

    async def process(
        self,
        records: List[TaskRecord],
        concurrency_limit: int = 5,
        per_task_delay: float = 1.0,
    ) -> None:
        """Process all records and return once every one of them has finished.

        The per-task delay is held inside the concurrency slot, so at most
        ``concurrency_limit`` requests start per ``per_task_delay`` interval.
        """
        if concurrency_limit < 1:
            raise ValueError(f"concurrency_limit must be at least 1, got {concurrency_limit}")
        if per_task_delay < 0:
            raise ValueError(f"per_task_delay must not be negative, got {per_task_delay}")

        seen = set()
        for record in records:
            if record.position in seen:
                raise ValueError(f"Duplicate record position: {record.position}")
            seen.add(record.position)

        total = len(records)
        logger.info("processing_started", total=total, concurrency=concurrency_limit)

        semaphore = asyncio.Semaphore(concurrency_limit)
        await asyncio.gather(*(
            self._run_unit(semaphore, records[index], index, total, per_task_delay)
            for index in range(total)
        ))

        logger.info("processing_finished", total=total)

    async def _run_unit(
        self,
        semaphore: asyncio.Semaphore,
        record: TaskRecord,
        index: int,
        total: int,
        per_task_delay: float,
    ) -> None:
        async with semaphore:
            try:
                await self._process_record(record, index, total)
            except Exception as e:
                record.error = f"Unexpected error: {str(e) or type(e).__name__}"
                logger.error(
                    "record_processing_error",
                    progress=f"{index + 1}/{total}",
                    url=record.url,
                    error=record.error,
                    exc_info=True,
                )
            if per_task_delay:
                await asyncio.sleep(per_task_delay)

    async def _process_record(self, record: TaskRecord, index: int, total: int) -> None:
        progress = f"{index + 1}/{total}"
        logger.info("analyzing_site", progress=progress, url=record.url)

        result = await self.fetcher.fetch(record.url)
        if not result.success:
            record.error = result.error or f"Unexpected status code: {result.status_code}"
            logger.warning("fetch_failed", progress=progress, url=record.url, error=record.error)
            return

        if self.classifier.matches(result.content):
            record.match_result = MatchResult.MATCH
            logger.info("keyword_matched", progress=progress, url=record.url)
        else:
            record.match_result = MatchResult.NO_MATCH
            logger.info("keyword_not_matched", progress=progress, url=record.url)
