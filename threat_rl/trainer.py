# threat_rl/trainer.py

"""
Trainer — owns the Belief Store and every way of updating it.

Update rule (apply_example)
---------------------------
Only the *predicted* class is reinforced:

    prediction == ground truth  → predicted class success_count += 1
    prediction != ground truth  → predicted class failure_count += 1

The ground-truth class is left alone when the two differ. Records without
ground truth are skipped and never counted.

Full retrain (train_full)
-------------------------
Reset to the prior, one pass over the labeled records in corpus order.

Progressive retrain (train_progressive)
---------------------------------------
Reset, then replay the labeled records in corpus order as 4 contiguous
batches of ceil(N / 4). Two accuracies come out of it and must stay apart:

    accuracy_at_time  per record, retrospective: a scratch model replayed
                      over positions 1..p-1 from the prior (live beliefs
                      untouched), annotated on the record.
    week accuracy     per batch, look-ahead: every record 1..end re-predicted
                      with the batch-final live beliefs.

The Trainer is not thread-safe; SeverityEngine serialises access to it.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from . import classifier
from .beliefs import BeliefStore
from .config import DEFAULT_TIMELINE, PROGRESSIVE_WEEKS
from .corpus import Corpus
from .records import (
    FeatureRecord,
    ModelStats,
    Prediction,
    TrainingBatchAnnotation,
    TrainingSummary,
    WeekSummary,
)

logger = logging.getLogger(__name__)


# ── Pure helpers ──────────────────────────────────────────────────────────────

def apply_example(record: FeatureRecord, beliefs: BeliefStore) -> Optional[bool]:
    """
    Apply one labeled record to `beliefs`.

    Returns True / False for a correct / wrong prediction, or None when the
    record has no ground truth (nothing is changed).
    """
    if record.ground_truth_severity is None:
        return None

    predicted, _confidence = classifier.predict(record.features, beliefs)
    if predicted == record.ground_truth_severity:
        beliefs.record_success(predicted)
        return True
    beliefs.record_failure(predicted)
    return False


def replay(records: Iterable[FeatureRecord], beliefs: BeliefStore) -> TrainingSummary:
    """Apply records in order to `beliefs`; tally over the labeled ones."""
    correct = 0
    total = 0
    for record in records:
        outcome = apply_example(record, beliefs)
        if outcome is None:
            continue
        total += 1
        if outcome:
            correct += 1
    return TrainingSummary(accuracy=_ratio(correct, total), sample_count=total)


def batch_bounds(labeled_count: int, weeks: int = PROGRESSIVE_WEEKS) -> list[tuple[int, int]]:
    """
    Half-open [start, end) slices of the replay sequence, one per week.

    Batch size is ceil(N / weeks); trailing batches may be short or empty.
        N=10 → (0,3) (3,6) (6,9) (9,10)
        N=8  → (0,2) (2,4) (4,6) (6,8)
    """
    size = math.ceil(labeled_count / weeks)
    bounds = []
    for week in range(1, weeks + 1):
        start = min((week - 1) * size, labeled_count)
        end = min(week * size, labeled_count)
        bounds.append((start, end))
    return bounds


def week_windows(timeline: Sequence[str], weeks: int = PROGRESSIVE_WEEKS) -> list[tuple[str, str]]:
    """
    Split an inclusive (start, end) ISO-date range into `weeks` contiguous
    windows of equal length; the last window ends on `end`.
    """
    start = date.fromisoformat(timeline[0])
    end = date.fromisoformat(timeline[1])
    span_days = (end - start).days + 1
    windows = []
    for week in range(weeks):
        w_start = start + timedelta(days=span_days * week // weeks)
        if week == weeks - 1:
            w_end = end
        else:
            w_end = start + timedelta(days=span_days * (week + 1) // weeks - 1)
        windows.append((w_start.isoformat(), max(w_start, w_end).isoformat()))
    return windows


def _ratio(correct: int, total: int) -> float:
    return correct / total if total > 0 else 0.0


# ── Trainer ───────────────────────────────────────────────────────────────────

class Trainer:
    """Holds the live BeliefStore plus the last progressive-replay annotations."""

    def __init__(self, beliefs: Optional[BeliefStore] = None):
        self.beliefs = beliefs if beliefs is not None else BeliefStore()
        self._annotations: dict[str, TrainingBatchAnnotation] = {}

    # ── Training ──────────────────────────────────────────────────────────────

    def reset(self, clear_annotations: bool = True) -> None:
        self.beliefs.reset()
        if clear_annotations:
            self._annotations.clear()

    def forget(self, record_id: str) -> None:
        """Drop the replay annotation of a record whose content changed."""
        self._annotations.pop(record_id, None)

    def train_full(self, corpus: Corpus) -> TrainingSummary:
        self.beliefs.reset()
        summary = replay(corpus, self.beliefs)
        logger.info(
            "[Trainer] Full training: %.1f%% accuracy on %d samples",
            summary.accuracy * 100, summary.sample_count,
        )
        return summary

    def train_progressive(
        self,
        corpus: Corpus,
        timeline: Sequence[str] = DEFAULT_TIMELINE,
    ) -> list[WeekSummary]:
        self.beliefs.reset()
        self._annotations.clear()

        sequence = corpus.labeled()
        if not sequence:
            logger.info("[Trainer] Progressive training: no labeled records")
            return []

        windows = week_windows(timeline)
        progress: list[WeekSummary] = []

        for week, (start, end) in enumerate(batch_bounds(len(sequence)), start=1):
            for offset, record in enumerate(sequence[start:end]):
                position = start + offset + 1
                self._annotations[record.id] = TrainingBatchAnnotation(
                    week_index=week,
                    global_position=position,
                    accuracy_at_time=self.accuracy_at_time(sequence, position),
                )
                apply_example(record, self.beliefs)

            week_accuracy = self._lookahead_accuracy(sequence[:end])
            start_date, end_date = windows[week - 1]
            progress.append(WeekSummary(
                week_index=week,
                accuracy=week_accuracy,
                sample_count=end,
                start_date=start_date,
                end_date=end_date,
            ))
            logger.info(
                "[Trainer] Week %d: %.1f%% accuracy on %d samples",
                week, week_accuracy * 100, end,
            )

        return progress

    def accuracy_at_time(self, sequence: Sequence[FeatureRecord], position: int) -> float:
        """
        Retrospective accuracy before `position` (1-based): positions
        1..position-1 replayed on a scratch copy reset to the prior. The live
        beliefs are only read for the snapshot, never written.
        """
        if position < 1:
            raise ValueError(f"position is 1-based, got {position}")
        scratch = self.beliefs.copy()
        scratch.reset()
        summary = replay(sequence[:position - 1], scratch)
        logger.debug(
            "[Trainer] accuracy_at_time(p=%d) = %.4f over %d samples",
            position, summary.accuracy, summary.sample_count,
        )
        return summary.accuracy

    def _lookahead_accuracy(self, records: Sequence[FeatureRecord]) -> float:
        correct = 0
        for record in records:
            predicted, _confidence = classifier.predict(record.features, self.beliefs)
            if predicted == record.ground_truth_severity:
                correct += 1
        return _ratio(correct, len(records))

    # ── Read API ──────────────────────────────────────────────────────────────

    @property
    def annotations(self) -> dict[str, TrainingBatchAnnotation]:
        return dict(self._annotations)

    def predict(self, record: FeatureRecord) -> Prediction:
        severity, confidence = classifier.predict(record.features, self.beliefs)
        return Prediction(
            id=record.id,
            predicted_severity=severity,
            confidence=confidence,
            features=record.features,
            ground_truth_severity=record.ground_truth_severity,
            training_batch=self._annotations.get(record.id),
        )

    def predict_all(self, corpus: Corpus) -> list[Prediction]:
        return [self.predict(record) for record in corpus]

    def model_stats(self, corpus: Corpus) -> ModelStats:
        labeled = [p for p in self.predict_all(corpus) if p.ground_truth_severity is not None]
        correct = sum(1 for p in labeled if p.was_correct)
        return ModelStats(
            total_predictions=len(labeled),
            correct_predictions=correct,
            accuracy=_ratio(correct, len(labeled)),
            beliefs=self.beliefs.to_dict(),
        )
