# tests/test_features.py

"""
Test cases for engagement features derived from posts, and the seed corpus
Run: pytest tests/test_features.py -v
"""

from datetime import datetime, timezone

import pytest

from threat_rl.features import (
    Post,
    engagement_from_posts,
    estimate_engagement,
    is_security_expert,
    record_from_posts,
)
from threat_rl.seed import SEED_ASSESSMENTS, seed_corpus
from threat_rl.severity import SeverityLevel


def at(hour, minute=0):
    return datetime(2024, 4, 12, hour, minute, tzinfo=timezone.utc)


class TestEngagementFromPosts:

    @pytest.fixture
    def posts(self):
        return [
            Post(author="GossiTheDog", created_at=at(10, 5), retweets=100, likes=300, replies=20),
            Post(author="GossiTheDog", created_at=at(10, 40), retweets=50, likes=80, replies=5),
            Post(author="TroyHunt", created_at=at(12, 10), retweets=30, likes=40, replies=2),
            Post(author="random_dev", created_at=at(12, 20), retweets=5, likes=1, replies=0),
        ]

    def test_totals_and_experts(self, posts):
        metrics = engagement_from_posts(posts, now=at(20, 5))
        assert metrics.total_retweets == 185
        assert metrics.total_likes == 421
        assert metrics.total_replies == 27
        assert metrics.expert_count == 2
        assert metrics.expert_usernames == ["GossiTheDog", "TroyHunt"]

    def test_velocities(self, posts):
        """Test: average over hours since first post, peak from hourly buckets"""
        metrics = engagement_from_posts(posts, now=at(20, 5))
        assert metrics.avg_velocity == pytest.approx(18.5)
        assert metrics.peak_velocity == 150

    def test_single_post_uses_average(self):
        post = Post(author="x", created_at=at(10), retweets=100)
        metrics = engagement_from_posts([post], now=at(10, 30))
        assert metrics.avg_velocity == 100
        assert metrics.peak_velocity == 100

    def test_no_posts(self):
        metrics = engagement_from_posts([])
        assert metrics.to_features().expert_engagement == 0
        assert metrics.peak_velocity == 0.0

    def test_requires_timestamps(self):
        with pytest.raises(ValueError):
            engagement_from_posts([Post(author="x", retweets=1)])

    def test_from_dict_with_public_metrics(self):
        post = Post.from_dict({
            "username": "x0rz",
            "created_at": "2024-04-12T10:00:00.000Z",
            "public_metrics": {"retweet_count": 7, "like_count": 9, "reply_count": 1},
        })
        assert post.created_at == at(10)
        assert (post.retweets, post.likes, post.replies) == (7, 9, 1)
        assert is_security_expert(post.author)


class TestEstimate:

    def test_estimate_from_flags(self):
        posts = [
            Post(author="a", retweets=240, is_expert=True),
            Post(author="b", retweets=240, is_expert=False),
        ]
        metrics = estimate_engagement(posts)
        assert metrics.avg_velocity == 20
        assert metrics.peak_velocity == 30
        assert metrics.expert_count == 1

    def test_record_from_posts(self):
        posts = [Post(author="GossiTheDog", retweets=2400, is_expert=True)]
        record = record_from_posts("CVE-X", posts, ground_truth_severity="Critical", estimate=True)
        assert record.features.peak_velocity == 150
        assert record.features.total_engagement == 2400
        assert record.ground_truth_severity is SeverityLevel.CRITICAL


class TestSeedCorpus:

    def test_shape(self):
        corpus = seed_corpus()
        assert len(corpus) == len(SEED_ASSESSMENTS) == 32
        assert len(corpus.labeled()) == 32
        assert corpus.ids()[0] == "CVE-2023-46604"

    def test_timeline_order(self):
        years = [cve_id.split("-")[1] for cve_id in seed_corpus().ids()]
        assert years == sorted(years)

    def test_known_entry(self):
        record = seed_corpus().get("CVE-2023-46604")
        assert record.features.expert_engagement == 3
        assert record.features.total_engagement == 1991
        assert record.features.peak_velocity == pytest.approx(1991 / 24 * 1.5)
        assert record.ground_truth_severity is SeverityLevel.CRITICAL
