# threat_rl/severity.py

"""
Severity vocabulary.

SeverityLevel is a plain classification tag: the engine never compares two
levels by rank, it only checks them for equality.

Public API
----------
SeverityLevel
    critical / high / medium / low

severity_from_score(score) -> SeverityLevel
    CVSS-style 0–10 reference score → level.

severity_from_text(text) -> SeverityLevel | None
    Free-text assessment ("Critical", "high risk", ...) → level, or None when
    nothing recognisable is found.
"""

from enum import Enum
from typing import Optional


class SeverityLevel(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def index(self) -> int:
        """Position of the level in declaration order (row in the belief table)."""
        return _INDEX[self]

    def __str__(self) -> str:
        return self.value


SEVERITY_LEVELS = tuple(SeverityLevel)
_INDEX = {level: i for i, level in enumerate(SEVERITY_LEVELS)}

# Reference-score cut-offs, highest first
_SCORE_THRESHOLDS = (
    (9.0, SeverityLevel.CRITICAL),
    (7.0, SeverityLevel.HIGH),
    (4.0, SeverityLevel.MEDIUM),
)


def severity_from_score(score: float) -> SeverityLevel:
    """
    Map a continuous 0–10 severity score to a level.

        >= 9.0 → critical,  >= 7.0 → high,  >= 4.0 → medium,  else low
    """
    for threshold, level in _SCORE_THRESHOLDS:
        if score >= threshold:
            return level
    return SeverityLevel.LOW


def severity_from_text(text: Optional[str]) -> Optional[SeverityLevel]:
    """
    Case-insensitive substring match, tested in the order critical, high,
    medium, low. Unknown or empty text yields None (treated as "no ground
    truth" by the trainer), never an exception.
    """
    if not text:
        return None
    lower = str(text).lower()
    for level in SEVERITY_LEVELS:
        if level.value in lower:
            return level
    return None


def coerce_severity(value) -> Optional[SeverityLevel]:
    """Accept a SeverityLevel, free text or None."""
    if value is None or isinstance(value, SeverityLevel):
        return value
    return severity_from_text(value)
