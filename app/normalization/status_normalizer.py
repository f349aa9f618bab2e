"""
app/normalization/status_normalizer.py

Canonicalizes free-text scheme status strings into a closed vocabulary.
"""

from __future__ import annotations

from typing import Callable, Mapping

FULLY_COMPLETED = "Fully Completed"
IN_PROGRESS = "In Progress"
NOT_CONNECTED = "Not-Connected"
NON_FUNCTIONAL = "Non Functional"
FUNCTIONAL = "Functional"
PARTIAL = "Partial"

DEFAULT_SCHEME_STATUS = NOT_CONNECTED

SCHEME_STATUS_VOCABULARY: dict[str, str] = {
    "completed": FULLY_COMPLETED,
    "complete": FULLY_COMPLETED,
    "fully completed": FULLY_COMPLETED,
    "fully-completed": FULLY_COMPLETED,
    "fully complete": FULLY_COMPLETED,
    "in progress": IN_PROGRESS,
    "in-progress": IN_PROGRESS,
    "inprogress": IN_PROGRESS,
    "partial": IN_PROGRESS,
    "partially completed": IN_PROGRESS,
    "partial completed": IN_PROGRESS,
    "ongoing": IN_PROGRESS,
    "not connected": NOT_CONNECTED,
    "not-connected": NOT_CONNECTED,
    "notconnected": NOT_CONNECTED,
    "non functional": NON_FUNCTIONAL,
    "non-functional": NON_FUNCTIONAL,
    "not functional": NON_FUNCTIONAL,
}

FUNCTIONAL_STATUS_VOCABULARY: dict[str, str] = {
    "functional": FUNCTIONAL,
    "completed": FUNCTIONAL,
    "fully completed": FUNCTIONAL,
    "yes": FUNCTIONAL,
    "partial": PARTIAL,
    "partially functional": PARTIAL,
    "non functional": NON_FUNCTIONAL,
    "non-functional": NON_FUNCTIONAL,
    "not functional": NON_FUNCTIONAL,
    "no": NON_FUNCTIONAL,
}

Heuristic = Callable[[str], "str | None"]


def _scheme_heuristic(text: str) -> str | None:
    if "incomplet" in text or "not complet" in text:
        return IN_PROGRESS
    if "complet" in text:
        return FULLY_COMPLETED
    if "progress" in text or "partial" in text:
        return IN_PROGRESS
    if ("non" in text or "not" in text) and "function" in text:
        return NON_FUNCTIONAL
    if "not" in text and "connect" in text:
        return NOT_CONNECTED
    return None


def _functional_heuristic(text: str) -> str | None:
    if ("non" in text or "not" in text) and "function" in text:
        return NON_FUNCTIONAL
    if "partial" in text:
        return PARTIAL
    if "function" in text or "complet" in text:
        return FUNCTIONAL
    return None


def title_words(text: str) -> str:
    return " ".join(word.capitalize() for word in text.split())


class StatusNormalizer:
    """
    Exact vocabulary lookup, then substring heuristics, then title case.

    ``normalize(normalize(s)) == normalize(s)`` holds because every canonical
    value is itself a vocabulary key (lowercased) and title casing leaves the
    lowercased text unchanged.
    """

    def __init__(
        self,
        *,
        vocabulary: Mapping[str, str],
        heuristic: Heuristic | None = None,
    ) -> None:
        self._vocabulary = {key.lower(): value for key, value in vocabulary.items()}
        for canonical in set(self._vocabulary.values()):
            self._vocabulary.setdefault(canonical.lower(), canonical)
        self._heuristic = heuristic

    def normalize(self, value: object) -> str | None:
        if value is None:
            return None
        raw = " ".join(str(value).split())
        if not raw:
            return None

        lowered = raw.lower()
        exact = self._vocabulary.get(lowered)
        if exact is not None:
            return exact
        if self._heuristic is not None:
            guessed = self._heuristic(lowered)
            if guessed is not None:
                return guessed
        return title_words(raw)


scheme_status_normalizer = StatusNormalizer(
    vocabulary=SCHEME_STATUS_VOCABULARY,
    heuristic=_scheme_heuristic,
)
functional_status_normalizer = StatusNormalizer(
    vocabulary=FUNCTIONAL_STATUS_VOCABULARY,
    heuristic=_functional_heuristic,
)


def normalize_status(value: object) -> str | None:
    return scheme_status_normalizer.normalize(value)


def normalize_functional_status(value: object) -> str | None:
    return functional_status_normalizer.normalize(value)


def is_fully_completed(status: str | None) -> bool:
    """
    Completion predicate used by region rollups.
    """

    if not status:
        return False
    return status == FULLY_COMPLETED or "complet" in status.lower()
