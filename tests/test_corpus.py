# tests/test_corpus.py

"""
Test cases for Corpus ordering and snapshot import / export
Run: pytest tests/test_corpus.py -v
"""

import json

import pytest

from threat_rl.corpus import Corpus
from threat_rl.errors import CorpusLoadError
from threat_rl.records import FeatureRecord
from threat_rl.severity import SeverityLevel


class TestCorpusOrder:

    def test_insertion_order(self):
        corpus = Corpus([FeatureRecord.create("a"), FeatureRecord.create("b"), FeatureRecord.create("c")])
        assert corpus.ids() == ["a", "b", "c"]

    def test_last_write_wins_in_place(self):
        """Test: re-adding an id replaces the record but keeps its position"""
        corpus = Corpus([FeatureRecord.create("a"), FeatureRecord.create("b")])
        corpus.add(FeatureRecord.create("a", expert_engagement=3))
        assert corpus.ids() == ["a", "b"]
        assert corpus.get("a").features.expert_engagement == 3
        assert len(corpus) == 2

    def test_labeled_subset(self):
        corpus = Corpus([
            FeatureRecord.create("a", ground_truth_severity="low"),
            FeatureRecord.create("b"),
            FeatureRecord.create("c", reference_score=9.8),
        ])
        assert [r.id for r in corpus.labeled()] == ["a", "c"]
        assert corpus.get("c").ground_truth_severity is SeverityLevel.CRITICAL

    def test_unmapped_truth_is_unlabeled(self):
        record = FeatureRecord.create("x", ground_truth_severity="unknown")
        assert record.ground_truth_severity is None
        assert not record.is_labeled


class TestSnapshots:

    def test_round_trip(self):
        corpus = Corpus([
            FeatureRecord.create("CVE-1", 3, 250.5, 900, "critical", 9.8),
            FeatureRecord.create("CVE-2", 0, 10.0, 12),
        ])
        snapshot = corpus.to_snapshot()
        assert snapshot["cves"][1] == {
            "id": "CVE-2",
            "features": {"expert_engagement": 0, "peak_velocity": 10.0, "total_engagement": 12},
        }
        assert Corpus.from_snapshot(snapshot) == corpus
        assert Corpus.from_snapshot(json.dumps(snapshot)) == corpus

    def test_camel_case_keys(self):
        corpus = Corpus.from_snapshot({"cves": [{
            "id": "CVE-9",
            "features": {"expertEngagement": 2, "peakVelocity": 130.0, "totalEngagement": 40},
            "groundTruthSeverity": "High",
            "referenceScore": 7.5,
        }]})
        record = corpus.get("CVE-9")
        assert record.features.expert_engagement == 2
        assert record.ground_truth_severity is SeverityLevel.HIGH
        assert record.reference_score == 7.5

    def test_legacy_cache_shape(self):
        """Test: collector cache entries with engagement_metrics are accepted"""
        snapshot = {
            "timestamp": "2024-12-01T00:00:00Z",
            "cves": [{
                "cve_id": "CVE-2024-3400",
                "tweets": [],
                "engagement_metrics": {
                    "total_retweets": 3568,
                    "expert_count": 3,
                    "avg_velocity": 148.6,
                    "peak_velocity": 223.0,
                },
                "actual_severity": "critical",
            }, {
                "cve_id": "CVE-2024-0001",
                "engagement_metrics": {"total_retweets": 5, "expert_count": 0, "peak_velocity": 0.3},
                "cvss_score": 5.3,
            }],
        }
        corpus = Corpus.from_snapshot(snapshot)
        first = corpus.get("CVE-2024-3400")
        assert first.features.total_engagement == 3568
        assert first.features.peak_velocity == 223.0
        assert first.ground_truth_severity is SeverityLevel.CRITICAL
        assert corpus.get("CVE-2024-0001").ground_truth_severity is SeverityLevel.MEDIUM

    def test_missing_features_default_to_zero(self):
        corpus = Corpus.from_snapshot({"cves": [{"id": "x"}]})
        assert corpus.get("x").features.expert_engagement == 0
        assert corpus.get("x").features.peak_velocity == 0.0

    @pytest.mark.parametrize("snapshot", [
        "not json",
        [],
        {"records": []},
        {"cves": "nope"},
        {"cves": [42]},
        {"cves": [{"features": {}}]},
        {"cves": [{"id": "a", "features": {"expert_engagement": "three"}}]},
        {"cves": [{"id": "a", "features": {"expert_engagement": 1.5}}]},
        {"cves": [{"id": "a", "features": {"peak_velocity": True}}]},
        {"cves": [{"id": "a", "ground_truth_severity": 3}]},
        b'{"cves": [\xff]}',
    ])
    def test_malformed_raises(self, snapshot):
        with pytest.raises(CorpusLoadError):
            Corpus.from_snapshot(snapshot)

    def test_deeply_nested_json(self):
        """Test: nesting beyond the recursion limit is a load error"""
        with pytest.raises(CorpusLoadError):
            Corpus.from_snapshot("[" * 100000 + "]" * 100000)

    def test_error_carries_record_index(self):
        with pytest.raises(CorpusLoadError) as exc_info:
            Corpus.from_snapshot({"cves": [{"id": "ok"}, {"id": "bad", "features": {"expert_engagement": "x"}}]})
        assert exc_info.value.record_index == 1
        assert exc_info.value.to_dict()["details"]["record_index"] == 1


class TestDataFrame:

    def test_dataframe_round_trip(self):
        corpus = Corpus([
            FeatureRecord.create("a", 1, 50.0, 10, "medium"),
            FeatureRecord.create("b", 0, 5.0, 2),
        ])
        df = corpus.to_dataframe()
        assert list(df["id"]) == ["a", "b"]
        assert Corpus.from_dataframe(df) == corpus
