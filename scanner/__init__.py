"""
Website keyword scanner
"""

from scanner.app import ScanApp
from scanner.classifier import KeywordClassifier, matches
from scanner.config import Config, ScanSettings
from scanner.fetcher import FetchResult, HTTPFetcher, normalize_url
from scanner.records import MatchResult, RunSummary, TaskRecord
from scanner.worker import WorkerPool
from scanner.workbook import WorkbookError, export_records, load_records, output_path_for

__all__ = [
    "ScanApp",
    "KeywordClassifier",
    "matches",
    "Config",
    "ScanSettings",
    "FetchResult",
    "HTTPFetcher",
    "normalize_url",
    "MatchResult",
    "RunSummary",
    "TaskRecord",
    "WorkerPool",
    "WorkbookError",
    "export_records",
    "load_records",
    "output_path_for",
]
