# threat_rl/corpus.py

"""
Corpus — insertion-ordered collection of FeatureRecords keyed by id.

Insertion order is the replay timeline of progressive training, so it is
part of the contract: re-adding an existing id replaces the record but keeps
its original position (last write wins, position of first write).

Snapshots
---------
to_snapshot()          -> {"cves": [record dict, ...]}
Corpus.from_snapshot() <- the same shape, or a JSON string of it

Besides the canonical snake_case record shape the parser accepts camelCase
keys and the legacy collector cache shape:

    {"cve_id": "...", "engagement_metrics": {"expert_count", "peak_velocity",
     "total_retweets", ...}, "actual_severity": "...", "cvss_score": 9.8}

Any other top-level snapshot keys (timestamps, date ranges, ...) are ignored.
Parsing is all-or-nothing: one bad record raises CorpusLoadError and no
Corpus is produced.
"""

from __future__ import annotations

import json
import logging
import math
from numbers import Real
from typing import Iterable, Iterator, Mapping, Optional

from .errors import CorpusLoadError
from .records import EngagementFeatures, FeatureRecord

logger = logging.getLogger(__name__)

# canonical key → accepted aliases, first hit wins
_ID_KEYS = ("id", "cve_id", "cveId")
_FEATURE_KEYS = {
    "expert_engagement": ("expert_engagement", "expertEngagement", "expert_count"),
    "peak_velocity":     ("peak_velocity", "peakVelocity", "velocity"),
    "total_engagement":  ("total_engagement", "totalEngagement", "total_retweets"),
}
_TRUTH_KEYS = ("ground_truth_severity", "groundTruthSeverity", "actual_severity", "severity")
_SCORE_KEYS = ("reference_score", "referenceScore", "cvss_score")


class Corpus:
    """Ordered id → FeatureRecord map."""

    def __init__(self, records: Iterable[FeatureRecord] = ()):
        self._records: dict[str, FeatureRecord] = {}
        self.extend(records)

    # ── Mutation ──────────────────────────────────────────────────────────────

    def add(self, record: FeatureRecord) -> None:
        self._records[record.id] = record

    def extend(self, records: Iterable[FeatureRecord]) -> None:
        for record in records:
            self.add(record)

    def remove(self, record_id: str) -> FeatureRecord:
        return self._records.pop(record_id)

    def clear(self) -> None:
        self._records.clear()

    # ── Read ──────────────────────────────────────────────────────────────────

    def get(self, record_id: str) -> Optional[FeatureRecord]:
        return self._records.get(record_id)

    def records(self) -> list[FeatureRecord]:
        return list(self._records.values())

    def labeled(self) -> list[FeatureRecord]:
        """Records with ground truth, in insertion order (the replay sequence)."""
        return [r for r in self._records.values() if r.is_labeled]

    def ids(self) -> list[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FeatureRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, record_id) -> bool:
        return record_id in self._records

    def __eq__(self, other) -> bool:
        if not isinstance(other, Corpus):
            return NotImplemented
        return list(self._records.items()) == list(other._records.items())

    def __repr__(self) -> str:
        return f"Corpus({len(self)} records, {len(self.labeled())} labeled)"

    # ── Snapshots ─────────────────────────────────────────────────────────────

    def to_snapshot(self) -> dict:
        return {"cves": [r.to_dict() for r in self._records.values()]}

    @classmethod
    def from_snapshot(cls, snapshot) -> "Corpus":
        if isinstance(snapshot, (str, bytes, bytearray)):
            try:
                snapshot = json.loads(snapshot)
            except (ValueError, RecursionError) as exc:
                raise CorpusLoadError(f"Snapshot is not valid JSON: {exc}", cause=exc)

        if not isinstance(snapshot, Mapping):
            raise CorpusLoadError(
                f"Snapshot must be an object with a 'cves' list, got {type(snapshot).__name__}"
            )
        raw_records = snapshot.get("cves")
        if not isinstance(raw_records, list):
            raise CorpusLoadError("Snapshot has no 'cves' list")

        corpus = cls(parse_record(raw, index) for index, raw in enumerate(raw_records))
        logger.debug("[Corpus] Parsed %d records (%d unique ids)", len(raw_records), len(corpus))
        return corpus

    # ── Tabular view ──────────────────────────────────────────────────────────

    def to_dataframe(self):
        """One row per record, insertion order, flat columns."""
        import pandas as pd

        rows = []
        for r in self._records.values():
            rows.append({
                "id":                    r.id,
                "expert_engagement":     r.features.expert_engagement,
                "peak_velocity":         r.features.peak_velocity,
                "total_engagement":      r.features.total_engagement,
                "ground_truth_severity": r.ground_truth_severity.value if r.ground_truth_severity else None,
                "reference_score":       r.reference_score,
            })
        return pd.DataFrame(rows, columns=[
            "id", "expert_engagement", "peak_velocity", "total_engagement",
            "ground_truth_severity", "reference_score",
        ])

    @classmethod
    def from_dataframe(cls, df) -> "Corpus":
        """Rows with the flat columns of to_dataframe() (or any accepted alias)."""
        return cls.from_snapshot({"cves": df.to_dict(orient="records")})


# ── Record parsing ────────────────────────────────────────────────────────────

def parse_record(raw, index: int = 0) -> FeatureRecord:
    """Build a FeatureRecord from one snapshot entry; raises CorpusLoadError."""
    if not isinstance(raw, Mapping):
        raise CorpusLoadError(f"Record #{index} is not an object", record_index=index)

    record_id = _first(raw, _ID_KEYS)
    if _is_missing(record_id) or str(record_id).strip() == "":
        raise CorpusLoadError(f"Record #{index} has no id", record_index=index)
    record_id = str(record_id)

    source = raw.get("features")
    if source is None:
        source = raw.get("engagement_metrics", raw)
    if not isinstance(source, Mapping):
        raise CorpusLoadError(f"Record {record_id}: features must be an object", record_index=index)

    features = EngagementFeatures(
        expert_engagement=_count(source, "expert_engagement", record_id, index),
        peak_velocity=_number(_first(source, _FEATURE_KEYS["peak_velocity"]), "peak_velocity", record_id, index) or 0.0,
        total_engagement=_count(source, "total_engagement", record_id, index),
    )

    truth = _first(raw, _TRUTH_KEYS)
    if _is_missing(truth):
        truth = None
    elif not isinstance(truth, str):
        raise CorpusLoadError(f"Record {record_id}: severity must be text", record_index=index)

    score = _number(_first(raw, _SCORE_KEYS), "reference_score", record_id, index)

    return FeatureRecord(
        id=record_id,
        features=features,
        ground_truth_severity=truth,
        reference_score=score,
    )


def _first(mapping: Mapping, keys):
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _number(value, name: str, record_id: str, index: int) -> Optional[float]:
    if _is_missing(value):
        return None
    if isinstance(value, bool) or not isinstance(value, Real):
        raise CorpusLoadError(
            f"Record {record_id}: {name} must be a number, got {value!r}", record_index=index
        )
    return float(value)


def _count(source: Mapping, name: str, record_id: str, index: int) -> int:
    value = _number(_first(source, _FEATURE_KEYS[name]), name, record_id, index)
    if value is None:
        return 0
    if not value.is_integer():
        raise CorpusLoadError(
            f"Record {record_id}: {name} must be a whole number, got {value!r}", record_index=index
        )
    return int(value)
