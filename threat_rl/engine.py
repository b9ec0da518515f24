# threat_rl/engine.py

"""
SeverityEngine — the facade the API and CLI talk to.

One engine instance owns one Corpus and one Trainer. Every public method takes
the same re-entrant lock, so training (including the scratch replays of the
progressive pass), prediction, corpus mutation and import/export never
interleave.

State machine
-------------
    EMPTY ──add / import──▶ LOADED ──train_full / train_progressive──▶ TRAINED

    import_corpus() always lands in LOADED (EMPTY for an empty snapshot) with
    beliefs back at the prior. Adding records never changes the state.

Public API
----------
add_record(record) / add_records(records)
train_full()                -> TrainingSummary
train_progressive()         -> list[WeekSummary]
predict_all()               -> list[Prediction]
predict(record)             -> Prediction      (ad-hoc, not stored)
model_stats()               -> ModelStats
export_corpus()             -> {"cves": [...]}
import_corpus(snapshot)     raises CorpusLoadError, all-or-nothing
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Iterable, Optional, Sequence

from . import classifier
from .beliefs import BeliefStore
from .config import Settings
from .corpus import Corpus
from .records import FeatureRecord, ModelStats, Prediction, TrainingSummary, WeekSummary
from .trainer import Trainer

logger = logging.getLogger(__name__)


class EngineState(Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    TRAINED = "trained"


class SeverityEngine:

    def __init__(self, settings: Optional[Settings] = None, corpus: Optional[Corpus] = None):
        self.settings = settings or Settings()
        self._lock = threading.RLock()
        self._corpus = corpus if corpus is not None else Corpus()
        self._trainer = Trainer()
        self._state = EngineState.LOADED if len(self._corpus) else EngineState.EMPTY

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def state(self) -> EngineState:
        with self._lock:
            return self._state

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def beliefs(self) -> BeliefStore:
        """Snapshot copy of the live beliefs."""
        with self._lock:
            return self._trainer.beliefs.copy()

    def corpus_size(self) -> int:
        with self._lock:
            return len(self._corpus)

    # ── Corpus ────────────────────────────────────────────────────────────────

    def add_record(self, record: FeatureRecord) -> None:
        with self._lock:
            if record.id in self._corpus:
                self._trainer.forget(record.id)
            self._corpus.add(record)
            if self._state is EngineState.EMPTY:
                self._state = EngineState.LOADED

    def add_records(self, records: Iterable[FeatureRecord]) -> None:
        with self._lock:
            for record in records:
                self.add_record(record)

    def export_corpus(self) -> dict:
        with self._lock:
            snapshot = self._corpus.to_snapshot()
        logger.info("[Engine] Exported %d records", len(snapshot["cves"]))
        return snapshot

    def import_corpus(self, snapshot) -> int:
        """
        Replace the corpus wholesale with `snapshot` (mapping or JSON text).

        Parsing happens before anything is touched, so a CorpusLoadError
        leaves corpus, beliefs and annotations exactly as they were.
        Returns the number of records now held.
        """
        corpus = Corpus.from_snapshot(snapshot)
        with self._lock:
            self._corpus = corpus
            self._trainer.reset(clear_annotations=True)
            self._state = EngineState.LOADED if len(corpus) else EngineState.EMPTY
        logger.info(
            "[Engine] Imported %d records (%d labeled); beliefs reset to prior",
            len(corpus), len(corpus.labeled()),
        )
        return len(corpus)

    # ── Training ──────────────────────────────────────────────────────────────

    def train_full(self) -> TrainingSummary:
        with self._lock:
            summary = self._trainer.train_full(self._corpus)
            self._mark_trained()
            return summary

    def train_progressive(self, timeline: Optional[Sequence[str]] = None) -> list[WeekSummary]:
        with self._lock:
            progress = self._trainer.train_progressive(
                self._corpus, timeline=timeline or self.settings.timeline
            )
            self._mark_trained()
            return progress

    def _mark_trained(self) -> None:
        if self._state is not EngineState.EMPTY:
            self._state = EngineState.TRAINED

    # ── Read ──────────────────────────────────────────────────────────────────

    def predict_all(self) -> list[Prediction]:
        with self._lock:
            return self._trainer.predict_all(self._corpus)

    def predict(self, record: FeatureRecord) -> Prediction:
        """Classify a record with the current beliefs without storing it."""
        with self._lock:
            severity, confidence = classifier.predict(record.features, self._trainer.beliefs)
        return Prediction(
            id=record.id,
            predicted_severity=severity,
            confidence=confidence,
            features=record.features,
            ground_truth_severity=record.ground_truth_severity,
        )

    def model_stats(self) -> ModelStats:
        with self._lock:
            return self._trainer.model_stats(self._corpus)

    def annotations(self) -> dict:
        with self._lock:
            return self._trainer.annotations
