"""
Run orchestration: set up logging, load records, process them through the
worker pool, export the report and summarize the run.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

import structlog

from scanner.classifier import KeywordClassifier
from scanner.config import ScanSettings
from scanner.fetcher import HTTPFetcher
from scanner.records import RunSummary
from scanner.worker import WorkerPool
from scanner.workbook import export_records, load_records, output_path_for

logger = structlog.get_logger(__name__)


def setup_logging(level: str = "INFO", log_format: str = "console"):
    """Configure structlog on top of stdlib logging, writing to stdout."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ScanApp:
    """Sequences load -> process -> export for one input workbook."""

    def __init__(self, settings: ScanSettings, fetcher: Optional[HTTPFetcher] = None):
        self.settings = settings
        self.fetcher = fetcher
        self.classifier = KeywordClassifier(settings.keywords)

    def setup_logging(self):
        setup_logging(self.settings.log_level, self.settings.log_format)

    @property
    def output_path(self) -> Path:
        if self.settings.output_file:
            return Path(self.settings.output_file)
        return output_path_for(self.settings.input_file)

    async def run(self) -> RunSummary:
        """Run one scan; workbook failures raise WorkbookError before any report is written."""
        start_time = time.monotonic()
        settings = self.settings

        logger.info(
            "scan_started",
            input=str(settings.input_file),
            keywords=list(settings.keywords),
            concurrency=settings.concurrency,
            task_delay=settings.task_delay,
            timeout=settings.timeout,
        )

        records = load_records(settings.input_file)
        logger.info("records_read", total=len(records))

        fetcher = self.fetcher
        owns_fetcher = fetcher is None
        if owns_fetcher:
            fetcher = HTTPFetcher(
                timeout=settings.timeout,
                user_agent=settings.user_agent,
                max_redirects=settings.max_redirects,
            )

        try:
            pool = WorkerPool(fetcher, self.classifier)
            await pool.process(records, settings.concurrency, settings.task_delay)
        finally:
            if owns_fetcher:
                await fetcher.aclose()

        output_path = self.output_path
        export_records(settings.input_file, output_path, records)

        summary = RunSummary.from_records(records, elapsed=time.monotonic() - start_time)
        logger.info("scan_completed", output=str(output_path), **summary.to_dict())
        return summary
