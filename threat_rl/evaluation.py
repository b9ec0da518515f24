# threat_rl/evaluation.py

"""
Evaluation of the engine's predictions against ground truth.

Public API
----------
compute_metrics(y_true, y_pred) -> dict
    accuracy, macro / weighted F1, per-class precision / recall / F1 / support
    and the confusion matrix, all in LABEL_ORDER.

evaluate(predictions) -> dict
    compute_metrics over the labeled predictions (unlabeled ones are skipped).

predictions_frame(predictions) -> pandas.DataFrame
    One flat row per prediction.

generate_text_report(stats, metrics, progress=None) -> str
    Human-readable report: summary, per-class table, learning curve.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .records import ModelStats, Prediction, WeekSummary
from .severity import SEVERITY_LEVELS

logger = logging.getLogger(__name__)

LABEL_ORDER = [level.value for level in SEVERITY_LEVELS]


def _empty_metrics() -> dict:
    return {
        "accuracy":         0.0,
        "macro_f1":         0.0,
        "weighted_f1":      0.0,
        "sample_count":     0,
        "per_class":        {
            label: {"precision": 0.0, "recall": 0.0, "f1": 0.0, "support": 0}
            for label in LABEL_ORDER
        },
        "confusion_matrix": [[0] * len(LABEL_ORDER) for _ in LABEL_ORDER],
    }


def compute_metrics(y_true: list[str], y_pred: list[str]) -> dict:
    """Compute per-class + macro + weighted metrics."""
    if len(y_true) != len(y_pred):
        raise ValueError(f"y_true and y_pred differ in length: {len(y_true)} != {len(y_pred)}")
    if not y_true:
        return _empty_metrics()

    from sklearn.metrics import (
        accuracy_score,
        confusion_matrix,
        f1_score,
        precision_recall_fscore_support,
    )

    acc      = accuracy_score(y_true, y_pred)
    macro_f1 = f1_score(y_true, y_pred, average="macro",    labels=LABEL_ORDER, zero_division=0)
    wt_f1    = f1_score(y_true, y_pred, average="weighted", labels=LABEL_ORDER, zero_division=0)

    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=LABEL_ORDER, average=None, zero_division=0
    )
    per_class: dict[str, dict] = {}
    for i, label in enumerate(LABEL_ORDER):
        per_class[label] = {
            "precision": round(float(precision[i]), 4),
            "recall":    round(float(recall[i]), 4),
            "f1":        round(float(f1[i]), 4),
            "support":   int(support[i]),
        }

    matrix = confusion_matrix(y_true, y_pred, labels=LABEL_ORDER)

    return {
        "accuracy":         round(float(acc), 4),
        "macro_f1":         round(float(macro_f1), 4),
        "weighted_f1":      round(float(wt_f1), 4),
        "sample_count":     len(y_true),
        "per_class":        per_class,
        "confusion_matrix": matrix.tolist(),
    }


def evaluate(predictions: Iterable[Prediction]) -> dict:
    labeled = [p for p in predictions if p.ground_truth_severity is not None]
    y_true = [p.ground_truth_severity.value for p in labeled]
    y_pred = [p.predicted_severity.value for p in labeled]
    metrics = compute_metrics(y_true, y_pred)
    logger.info(
        "[Evaluation] %d labeled predictions: accuracy=%.4f macro_f1=%.4f",
        len(labeled), metrics["accuracy"], metrics["macro_f1"],
    )
    return metrics


def predictions_frame(predictions: Iterable[Prediction]):
    import pandas as pd

    rows = []
    for p in predictions:
        batch = p.training_batch
        rows.append({
            "id":                 p.id,
            "predicted_severity": p.predicted_severity.value,
            "confidence":         p.confidence,
            "ground_truth":       p.ground_truth_severity.value if p.ground_truth_severity else None,
            "was_correct":        p.was_correct,
            "expert_engagement":  p.features.expert_engagement,
            "peak_velocity":      p.features.peak_velocity,
            "total_engagement":   p.features.total_engagement,
            "week_index":         batch.week_index if batch else None,
            "global_position":    batch.global_position if batch else None,
            "accuracy_at_time":   batch.accuracy_at_time if batch else None,
        })
    return pd.DataFrame(rows, columns=[
        "id", "predicted_severity", "confidence", "ground_truth", "was_correct",
        "expert_engagement", "peak_velocity", "total_engagement",
        "week_index", "global_position", "accuracy_at_time",
    ])


def _bar(value: float, width: int = 20) -> str:
    filled = int(round(value * width))
    return "█" * filled + "░" * (width - filled)


def generate_text_report(
    stats: ModelStats,
    metrics: dict,
    progress: Optional[list[WeekSummary]] = None,
) -> str:
    lines = [
        "=" * 72,
        "  CVE SEVERITY PREDICTION — ENGINE REPORT",
        "=" * 72,
        f"  Labeled predictions : {stats.total_predictions:,}",
        f"  Correct             : {stats.correct_predictions:,}",
        f"  Accuracy            : {stats.accuracy*100:.2f}%",
        f"  Macro-F1            : {metrics['macro_f1']*100:.2f}%",
        f"  Weighted-F1         : {metrics['weighted_f1']*100:.2f}%",
        "",
    ]

    # ── Per-class breakdown ──
    lines += [
        f"  {'Label':<12} {'Precision':>10} {'Recall':>8} {'F1':>8} {'Support':>9} {'Belief (s/f)':>14}",
        "  " + "-" * 66,
    ]
    for label in LABEL_ORDER:
        pc = metrics["per_class"].get(label, {})
        belief = stats.beliefs.get(label, {})
        pair = f"{belief.get('success_count', 0)}/{belief.get('failure_count', 0)}"
        lines.append(
            f"  {label:<12} "
            f"{pc.get('precision', 0)*100:>9.2f}% "
            f"{pc.get('recall', 0)*100:>7.2f}% "
            f"{pc.get('f1', 0)*100:>7.2f}% "
            f"{pc.get('support', 0):>9,} "
            f"{pair:>14}"
        )
    lines += ["  " + "-" * 66, ""]

    # ── Learning curve ──
    if progress:
        lines += [
            "  LEARNING CURVE (look-ahead accuracy per week)",
            "  " + "-" * 66,
        ]
        for week in progress:
            lines.append(
                f"  Week {week.week_index}  {week.start_date} → {week.end_date}  "
                f"{_bar(week.accuracy)} {week.accuracy*100:>6.2f}%  (n={week.sample_count})"
            )
        lines += ["  " + "-" * 66, ""]

    lines += ["=" * 72]
    return "\n".join(lines)
