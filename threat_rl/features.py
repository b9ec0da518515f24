# threat_rl/features.py

"""
Engagement features from social posts.

Two ways to turn a list of posts about one CVE into EngagementFeatures:

engagement_from_posts(posts, now=None)
    Timestamped posts (what a live collector returns):
      - totals of retweets / likes / replies
      - expert count = distinct authors in SECURITY_EXPERTS (case-insensitive)
      - avg velocity  = total retweets / max(1, hours since the first post)
      - peak velocity = max(summed retweets per UTC hour bucket, avg velocity);
                        a single post only has the average

estimate_engagement(posts)
    Curated posts without reliable timestamps: a flat 24 h window,
    peak = 1.5 × average, expert count = posts flagged `is_expert`.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from .records import EngagementFeatures, FeatureRecord

logger = logging.getLogger(__name__)

SECURITY_EXPERTS = [
    "GossiTheDog",
    "vxunderground",
    "x0rz",
    "MalwareTechBlog",
    "SwiftOnSecurity",
    "taviso",
    "troyhunt",
    "briankrebs",
    "hacks4pancakes",
    "malwrhunterteam",
    "campuscodi",
    "mttaggart",
    "0xdude",
    "cyb3rops",
    "Dominic_Chell",
]
_EXPERTS_LOWER = {name.lower() for name in SECURITY_EXPERTS}

ESTIMATE_WINDOW_HOURS = 24
ESTIMATE_PEAK_FACTOR = 1.5


def is_security_expert(author: str) -> bool:
    return bool(author) and author.lower() in _EXPERTS_LOWER


# ── Posts ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Post:
    author: str
    created_at: Optional[datetime] = None
    retweets: int = 0
    likes: int = 0
    replies: int = 0
    text: str = ""
    is_expert: bool = False

    @classmethod
    def from_dict(cls, data: Mapping) -> "Post":
        """Accepts flat counters or X-style `public_metrics`."""
        metrics = data.get("public_metrics") or {}
        return cls(
            author=str(data.get("author") or data.get("username") or ""),
            created_at=_parse_time(data.get("created_at")),
            retweets=int(data.get("retweets", metrics.get("retweet_count", 0)) or 0),
            likes=int(data.get("likes", metrics.get("like_count", 0)) or 0),
            replies=int(data.get("replies", metrics.get("reply_count", 0)) or 0),
            text=str(data.get("text") or ""),
            is_expert=bool(data.get("is_expert", False)),
        )


def _parse_time(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


# ── Metrics ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EngagementMetrics:
    total_retweets: int = 0
    total_likes: int = 0
    total_replies: int = 0
    expert_count: int = 0
    avg_velocity: float = 0.0
    peak_velocity: float = 0.0
    first_post_time: Optional[datetime] = None
    expert_usernames: list = field(default_factory=list)

    def to_features(self) -> EngagementFeatures:
        return EngagementFeatures(
            expert_engagement=self.expert_count,
            peak_velocity=self.peak_velocity,
            total_engagement=self.total_retweets,
        )

    def to_dict(self) -> dict:
        return {
            "total_retweets":   self.total_retweets,
            "total_likes":      self.total_likes,
            "total_replies":    self.total_replies,
            "expert_count":     self.expert_count,
            "avg_velocity":     self.avg_velocity,
            "peak_velocity":    self.peak_velocity,
            "first_post_time":  self.first_post_time.isoformat() if self.first_post_time else None,
            "expert_usernames": list(self.expert_usernames),
        }


def engagement_from_posts(posts: Iterable[Post], now: Optional[datetime] = None) -> EngagementMetrics:
    posts = list(posts)
    if not posts:
        return EngagementMetrics()

    missing = [p for p in posts if p.created_at is None]
    if missing:
        raise ValueError(f"{len(missing)} post(s) have no created_at; use estimate_engagement()")

    now = _as_utc(now or datetime.now(timezone.utc))
    first = min(_as_utc(p.created_at) for p in posts)
    hours_since_first = max(1.0, (now - first).total_seconds() / 3600)

    total_retweets = sum(p.retweets for p in posts)
    experts: list[str] = []
    for post in posts:
        if is_security_expert(post.author) and post.author not in experts:
            experts.append(post.author)

    avg_velocity = total_retweets / hours_since_first
    peak_velocity = avg_velocity
    if len(posts) > 1:
        hourly = defaultdict(int)
        for post in posts:
            hourly[_as_utc(post.created_at).strftime("%Y-%m-%dT%H")] += post.retweets
        peak_velocity = max(max(hourly.values()), avg_velocity)

    return EngagementMetrics(
        total_retweets=total_retweets,
        total_likes=sum(p.likes for p in posts),
        total_replies=sum(p.replies for p in posts),
        expert_count=len(experts),
        avg_velocity=avg_velocity,
        peak_velocity=float(peak_velocity),
        first_post_time=first,
        expert_usernames=experts,
    )


def estimate_engagement(posts: Iterable[Post]) -> EngagementMetrics:
    posts = list(posts)
    total_retweets = sum(p.retweets for p in posts)
    velocity = total_retweets / ESTIMATE_WINDOW_HOURS
    experts = [p.author for p in posts if p.is_expert]
    return EngagementMetrics(
        total_retweets=total_retweets,
        total_likes=sum(p.likes for p in posts),
        total_replies=sum(p.replies for p in posts),
        expert_count=len(experts),
        avg_velocity=velocity,
        peak_velocity=velocity * ESTIMATE_PEAK_FACTOR,
        expert_usernames=experts,
    )


def record_from_posts(
    record_id: str,
    posts: Iterable[Post],
    ground_truth_severity=None,
    reference_score: Optional[float] = None,
    estimate: bool = False,
    now: Optional[datetime] = None,
) -> FeatureRecord:
    """Build a FeatureRecord from raw posts (estimated or timestamped)."""
    metrics = estimate_engagement(posts) if estimate else engagement_from_posts(posts, now=now)
    logger.debug(
        "[Features] %s: experts=%d peak=%.1f total=%d",
        record_id, metrics.expert_count, metrics.peak_velocity, metrics.total_retweets,
    )
    return FeatureRecord(
        id=record_id,
        features=metrics.to_features(),
        ground_truth_severity=ground_truth_severity,
        reference_score=reference_score,
    )
