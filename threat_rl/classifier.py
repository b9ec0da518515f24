# threat_rl/classifier.py

"""
Severity Classifier — rule cascade + belief-based confidence.

Pure functions: no I/O, no state between calls.

Public API
----------
classify(features) -> SeverityLevel
    Engagement cascade only (first matching branch wins, OR inside a branch):

        experts >= 3  or  peak velocity > 200   → critical
        experts >= 2  or  peak velocity > 120   → high
        experts >= 1  or  peak velocity > 40    → medium
        otherwise                               → low

predict(features, beliefs) -> (SeverityLevel, float)
    The cascade's level plus the posterior mean of that level's belief pair,
    success / (success + failure), used as the confidence.
"""

from .beliefs import BeliefStore
from .records import EngagementFeatures
from .severity import SeverityLevel

# ── Cascade thresholds ────────────────────────────────────────────────────────
# (min expert count, velocity that must be exceeded, level), highest first
CASCADE = (
    (3, 200.0, SeverityLevel.CRITICAL),
    (2, 120.0, SeverityLevel.HIGH),
    (1, 40.0,  SeverityLevel.MEDIUM),
)
FALLBACK = SeverityLevel.LOW


def classify(features: EngagementFeatures) -> SeverityLevel:
    for min_experts, velocity_floor, level in CASCADE:
        if features.expert_engagement >= min_experts or features.peak_velocity > velocity_floor:
            return level
    return FALLBACK


def predict(features: EngagementFeatures, beliefs: BeliefStore) -> tuple[SeverityLevel, float]:
    """
    Predict the severity for one feature set.

    Parameters
    ----------
    features : engagement signal of the vulnerability
    beliefs  : current belief table (read only)

    Returns
    -------
    (severity, confidence) with confidence in (0, 1)
    """
    severity = classify(features)
    return severity, beliefs.posterior_mean(severity)
