# threat_rl/records.py

"""
Value types shared by the classifier, trainer and adapters.

Everything here is immutable; `to_dict()` produces the plain JSON-ready shape
used by export, the Flask API and the CLI report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .severity import SeverityLevel, coerce_severity, severity_from_score


@dataclass(frozen=True)
class EngagementFeatures:
    """Social-engagement signal for one vulnerability (classifier input)."""
    expert_engagement: int = 0     # distinct recognised experts
    peak_velocity: float = 0.0     # engagement units / hour, best window
    total_engagement: int = 0      # cumulative shares

    def to_dict(self) -> dict:
        return {
            "expert_engagement": self.expert_engagement,
            "peak_velocity":     self.peak_velocity,
            "total_engagement":  self.total_engagement,
        }


@dataclass(frozen=True)
class FeatureRecord:
    """
    One vulnerability as seen by the engine.

    `ground_truth_severity` accepts a SeverityLevel or free text; text that
    maps to no level is stored as None. When it is absent and a
    `reference_score` is known, the ground truth is derived from the score.
    """
    id: str
    features: EngagementFeatures = field(default_factory=EngagementFeatures)
    ground_truth_severity: Optional[SeverityLevel] = None
    reference_score: Optional[float] = None

    def __post_init__(self):
        truth = coerce_severity(self.ground_truth_severity)
        if truth is None and self.reference_score is not None:
            truth = severity_from_score(self.reference_score)
        object.__setattr__(self, "ground_truth_severity", truth)

    @classmethod
    def create(
        cls,
        id: str,
        expert_engagement: int = 0,
        peak_velocity: float = 0.0,
        total_engagement: int = 0,
        ground_truth_severity=None,
        reference_score: Optional[float] = None,
    ) -> "FeatureRecord":
        return cls(
            id=id,
            features=EngagementFeatures(
                expert_engagement=expert_engagement,
                peak_velocity=peak_velocity,
                total_engagement=total_engagement,
            ),
            ground_truth_severity=ground_truth_severity,
            reference_score=reference_score,
        )

    @property
    def is_labeled(self) -> bool:
        return self.ground_truth_severity is not None

    def to_dict(self) -> dict:
        data = {"id": self.id, "features": self.features.to_dict()}
        if self.ground_truth_severity is not None:
            data["ground_truth_severity"] = self.ground_truth_severity.value
        if self.reference_score is not None:
            data["reference_score"] = self.reference_score
        return data


@dataclass(frozen=True)
class TrainingBatchAnnotation:
    """Where a record landed in the last progressive replay."""
    week_index: int
    global_position: int
    accuracy_at_time: float

    def to_dict(self) -> dict:
        return {
            "week_index":       self.week_index,
            "global_position":  self.global_position,
            "accuracy_at_time": self.accuracy_at_time,
        }


@dataclass(frozen=True)
class TrainingSummary:
    accuracy: float
    sample_count: int

    def to_dict(self) -> dict:
        return {"accuracy": self.accuracy, "sample_count": self.sample_count}


@dataclass(frozen=True)
class WeekSummary:
    """One point of the progressive learning curve (look-ahead accuracy)."""
    week_index: int
    accuracy: float
    sample_count: int
    start_date: str
    end_date: str

    def to_dict(self) -> dict:
        return {
            "week_index":   self.week_index,
            "accuracy":     self.accuracy,
            "sample_count": self.sample_count,
            "start_date":   self.start_date,
            "end_date":     self.end_date,
        }


@dataclass(frozen=True)
class Prediction:
    id: str
    predicted_severity: SeverityLevel
    confidence: float
    features: EngagementFeatures
    ground_truth_severity: Optional[SeverityLevel] = None
    training_batch: Optional[TrainingBatchAnnotation] = None

    @property
    def was_correct(self) -> Optional[bool]:
        if self.ground_truth_severity is None:
            return None
        return self.predicted_severity == self.ground_truth_severity

    def to_dict(self) -> dict:
        data = {
            "id":                 self.id,
            "predicted_severity": self.predicted_severity.value,
            "confidence":         self.confidence,
            "features":           self.features.to_dict(),
        }
        if self.ground_truth_severity is not None:
            data["ground_truth_severity"] = self.ground_truth_severity.value
            data["was_correct"] = self.was_correct
        if self.training_batch is not None:
            data["training_batch"] = self.training_batch.to_dict()
        return data


@dataclass(frozen=True)
class ModelStats:
    total_predictions: int
    correct_predictions: int
    accuracy: float
    beliefs: dict

    def to_dict(self) -> dict:
        return {
            "total_predictions":   self.total_predictions,
            "correct_predictions": self.correct_predictions,
            "accuracy":            self.accuracy,
            "beliefs":             self.beliefs,
        }
