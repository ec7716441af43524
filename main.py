"""
Entrypoint: load config, scan the websites listed in a workbook, write the report
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog
from dotenv import load_dotenv

from scanner.app import ScanApp, setup_logging
from scanner.config import Config
from scanner.workbook import WorkbookError

DEFAULT_CONFIG_FILE = "config.yaml"

logger = structlog.get_logger(__name__)


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Check the websites listed in a workbook's media_url column for keywords"
    )
    parser.add_argument("input", nargs="?", help="Input workbook (.xlsx)")
    parser.add_argument("-o", "--output", help="Output workbook path (default: timestamped copy of input)")
    parser.add_argument("-c", "--config", help=f"Config file path (default: ./{DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("--concurrency", type=int, help="Maximum concurrent fetches")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--delay", type=float, help="Seconds each worker waits before taking the next site")
    parser.add_argument(
        "-k", "--keyword", action="append", dest="keywords", help="Keyword to look for (repeatable)"
    )
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return parser.parse_args(argv)


def load_settings(args):
    config_path = args.config
    if config_path is None and Path(DEFAULT_CONFIG_FILE).exists():
        config_path = DEFAULT_CONFIG_FILE

    config = Config(config_path)
    return config.to_settings(
        input_file=args.input,
        output_file=args.output,
        keywords=tuple(args.keywords) if args.keywords else None,
        concurrency=args.concurrency,
        timeout=args.timeout,
        task_delay=args.delay,
        log_level=args.log_level.upper() if args.log_level else None,
    )


def main(argv=None) -> int:
    """Initialize dependencies and run the scan"""
    load_dotenv()
    args = parse_args(argv)

    try:
        settings = load_settings(args)
    except (FileNotFoundError, ValueError) as e:
        setup_logging()
        logger.error("invalid_configuration", error=str(e))
        return 1

    app = ScanApp(settings)
    app.setup_logging()

    try:
        asyncio.run(app.run())
    except WorkbookError as e:
        logger.error("scan_failed", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("scan_interrupted")
        return 130
    except Exception as e:
        logger.error("fatal_error", error=str(e), exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
