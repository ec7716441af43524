"""
Case-insensitive keyword test over fetched page content
"""

from typing import Iterable, Sequence, Tuple


def matches(content: str, keywords: Sequence[str]) -> bool:
    """Return True if any keyword occurs in content, ignoring case."""
    if not content:
        return False

    content_lower = content.lower()
    for keyword in keywords:
        if keyword.lower() in content_lower:
            return True
    return False


class KeywordClassifier:
    """Fixed keyword set applied to fetched page content."""

    def __init__(self, keywords: Iterable[str]):
        self._keywords: Tuple[str, ...] = tuple(
            k.strip() for k in keywords if k and k.strip()
        )
        if not self._keywords:
            raise ValueError("KeywordClassifier requires at least one non-blank keyword")

    @property
    def keywords(self) -> Tuple[str, ...]:
        return self._keywords

    def matches(self, content: str) -> bool:
        return matches(content, self._keywords)
