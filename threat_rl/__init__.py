# threat_rl/__init__.py

"""CVE severity prediction from social-engagement signals with per-class beliefs."""

from .beliefs import BeliefStore
from .classifier import classify, predict
from .corpus import Corpus
from .engine import EngineState, SeverityEngine
from .errors import ConfigurationError, CorpusLoadError, ThreatRLError
from .records import (
    EngagementFeatures,
    FeatureRecord,
    ModelStats,
    Prediction,
    TrainingBatchAnnotation,
    TrainingSummary,
    WeekSummary,
)
from .severity import SeverityLevel, severity_from_score, severity_from_text
from .trainer import Trainer

__version__ = "1.0.0"

__all__ = [
    "BeliefStore",
    "classify",
    "predict",
    "Corpus",
    "EngineState",
    "SeverityEngine",
    "ConfigurationError",
    "CorpusLoadError",
    "ThreatRLError",
    "EngagementFeatures",
    "FeatureRecord",
    "ModelStats",
    "Prediction",
    "TrainingBatchAnnotation",
    "TrainingSummary",
    "WeekSummary",
    "SeverityLevel",
    "severity_from_score",
    "severity_from_text",
    "Trainer",
]
