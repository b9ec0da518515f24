# tests/conftest.py

import pytest

from threat_rl.corpus import Corpus
from threat_rl.records import FeatureRecord


def correct_record(record_id):
    """3 experts → predicted critical, labeled critical."""
    return FeatureRecord.create(record_id, expert_engagement=3, total_engagement=10,
                                ground_truth_severity="critical")


def wrong_record(record_id):
    """No engagement → predicted low, labeled high."""
    return FeatureRecord.create(record_id, ground_truth_severity="high")


@pytest.fixture
def scenario_b_corpus():
    """Alternating correct / wrong predictions, one class per record."""
    return Corpus([
        FeatureRecord.create("B1", expert_engagement=3, ground_truth_severity="critical"),  # critical ✓
        FeatureRecord.create("B2", expert_engagement=2, ground_truth_severity="critical"),  # high ✗
        FeatureRecord.create("B3", expert_engagement=1, ground_truth_severity="medium"),    # medium ✓
        FeatureRecord.create("B4", ground_truth_severity="high"),                           # low ✗
    ])


@pytest.fixture
def ten_record_corpus():
    """Correctness pattern C W C C W C C C W C, with unlabeled records interleaved."""
    pattern = "CWCCWCCCWC"
    corpus = Corpus()
    for i, mark in enumerate(pattern, start=1):
        corpus.add(correct_record(f"R{i}") if mark == "C" else wrong_record(f"R{i}"))
        if i in (2, 7):
            corpus.add(FeatureRecord.create(f"U{i}", expert_engagement=5))
    return corpus
