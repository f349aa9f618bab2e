"""
app/validators/row_validator.py

Row-level checks for scheme report rows that survive column mapping.
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import Any, Iterable


def _normalize(value: str) -> str:
    return "".join(ch for ch in value.strip().lower() if ch.isalnum())


class RowValidator:
    """
    Detects rows that repeat header labels.

    Multi-line headers and merged banner cells often leave a second copy of
    the header below the detected one; those rows must never become schemes.
    """

    def __init__(
        self,
        *,
        header_aliases: Iterable[str],
        similarity_threshold: float = 0.9,
    ) -> None:
        normalized = {_normalize(alias) for alias in header_aliases}
        self._aliases: frozenset[str] = frozenset(alias for alias in normalized if alias)
        self._threshold = max(0.0, min(1.0, similarity_threshold))

    def looks_like_header(self, value: Any) -> bool:
        """
        Return True when ``value`` equals or nearly equals a known header alias.
        """

        if self._is_blank(value) or not isinstance(value, str):
            return False
        normalized = _normalize(value)
        if not normalized:
            return False
        if normalized in self._aliases:
            return True
        return any(
            SequenceMatcher(a=normalized, b=alias).ratio() >= self._threshold
            for alias in self._aliases
            if abs(len(alias) - len(normalized)) <= max(2, len(alias) // 5)
        )

    @staticmethod
    def _is_blank(value: Any) -> bool:
        return value is None or (isinstance(value, str) and value.strip() == "")
