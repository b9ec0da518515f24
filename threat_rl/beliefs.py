# threat_rl/beliefs.py

"""
Belief Store — per-class (success, failure) counters.

One Beta-like pair per severity level, kept in a fixed (4, 2) integer table
whose rows follow SeverityLevel declaration order, so every level always has
exactly one pair. Both counts start at the Laplace prior (1, 1) and only ever
grow; the trainer is the only writer.
"""

from __future__ import annotations

import numpy as np

from .config import PRIOR_FAILURE, PRIOR_SUCCESS
from .severity import SEVERITY_LEVELS, SeverityLevel

_SUCCESS = 0
_FAILURE = 1


class BeliefStore:
    """Fixed-size table of (success_count, failure_count) per severity level."""

    def __init__(self, table: np.ndarray | None = None):
        if table is None:
            self._table = self._prior()
        else:
            table = np.asarray(table, dtype=np.int64)
            if table.shape != (len(SEVERITY_LEVELS), 2):
                raise ValueError(f"belief table must have shape (4, 2), got {table.shape}")
            if (table < 1).any():
                raise ValueError("belief counts must be >= 1")
            self._table = table.copy()

    @staticmethod
    def _prior() -> np.ndarray:
        table = np.empty((len(SEVERITY_LEVELS), 2), dtype=np.int64)
        table[:, _SUCCESS] = PRIOR_SUCCESS
        table[:, _FAILURE] = PRIOR_FAILURE
        return table

    # ── Mutation (trainer only) ───────────────────────────────────────────────

    def reset(self) -> None:
        """Back to the (1, 1) prior for every level."""
        self._table = self._prior()

    def record_success(self, level: SeverityLevel) -> None:
        self._table[level.index, _SUCCESS] += 1

    def record_failure(self, level: SeverityLevel) -> None:
        self._table[level.index, _FAILURE] += 1

    # ── Read ──────────────────────────────────────────────────────────────────

    def pair(self, level: SeverityLevel) -> tuple[int, int]:
        row = self._table[level.index]
        return int(row[_SUCCESS]), int(row[_FAILURE])

    def posterior_mean(self, level: SeverityLevel) -> float:
        """success / (success + failure) for the level."""
        success, failure = self.pair(level)
        return success / (success + failure)

    def copy(self) -> "BeliefStore":
        return BeliefStore(self._table)

    def as_array(self) -> np.ndarray:
        """Read-only view of the raw table."""
        view = self._table.view()
        view.flags.writeable = False
        return view

    def is_prior(self) -> bool:
        return bool(np.array_equal(self._table, self._prior()))

    def to_dict(self) -> dict:
        return {
            level.value: {
                "success_count": int(self._table[level.index, _SUCCESS]),
                "failure_count": int(self._table[level.index, _FAILURE]),
            }
            for level in SEVERITY_LEVELS
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, BeliefStore):
            return NotImplemented
        return bool(np.array_equal(self._table, other._table))

    def __repr__(self) -> str:
        pairs = ", ".join(f"{lvl.value}={self.pair(lvl)}" for lvl in SEVERITY_LEVELS)
        return f"BeliefStore({pairs})"
