"""
Data models for a scan run
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional


class MatchResult(IntEnum):
    NO_MATCH = 0
    MATCH = 1


@dataclass
class TaskRecord:
    """One input URL and the outcome of processing it.

    ``position`` is the spreadsheet row the outcome is written back to. When
    ``error`` is set, ``match_result`` keeps its default and is not meaningful.
    """

    url: str
    position: int
    match_result: MatchResult = MatchResult.NO_MATCH
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return bool(self.error)

    @property
    def matched(self) -> bool:
        return not self.failed and self.match_result == MatchResult.MATCH


@dataclass
class RunSummary:
    """Counts reported at the end of a run"""

    matched: int
    unmatched: int
    errors: int
    total: int
    elapsed: float = 0.0

    @classmethod
    def from_records(cls, records: Iterable[TaskRecord], elapsed: float = 0.0) -> "RunSummary":
        matched = unmatched = errors = total = 0
        for record in records:
            total += 1
            if record.failed:
                errors += 1
            elif record.match_result == MatchResult.MATCH:
                matched += 1
            else:
                unmatched += 1
        return cls(matched=matched, unmatched=unmatched, errors=errors, total=total, elapsed=elapsed)

    def to_dict(self) -> dict:
        return {
            "matched": self.matched,
            "unmatched": self.unmatched,
            "errors": self.errors,
            "total": self.total,
            "elapsed_seconds": round(self.elapsed, 3),
        }
