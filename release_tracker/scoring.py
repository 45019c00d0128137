"""Rank an org's raw listing and keep its most notable models.

Pure computation on raw Hub entries, no I/O.
"""

import math
from datetime import datetime

from release_tracker.config import MAX_MODELS_PER_ORG
from release_tracker.dates import days_since, parse_timestamp

# (max age in days, bonus), checked in order
RECENCY_BONUS: list[tuple[int, float]] = [(90, 20.0), (180, 10.0), (365, 5.0)]


def safe_count(value: object) -> int:
    """Coerce a raw count field to a non-negative int; anything else is 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, int(value))


def recency_bonus(created_at: datetime | None, now: datetime | None = None) -> float:
    """Bonus for newer models; none when the creation time is unknown."""
    age = days_since(created_at, now)
    for max_age, bonus in RECENCY_BONUS:
        if age < max_age:
            return bonus
    return 0.0


def score_model(entry: dict, now: datetime | None = None) -> float:
    """Notability score: log-scaled downloads and likes plus a recency bonus."""
    score = math.log10(safe_count(entry.get("downloads")) + 1) * 10
    score += math.log10(safe_count(entry.get("likes")) + 1) * 5
    score += recency_bonus(parse_timestamp(entry.get("createdAt")), now)
    return score


def pick_top_models(
    entries: list[dict],
    max_per_org: int = MAX_MODELS_PER_ORG,
    now: datetime | None = None,
) -> list[dict]:
    """Return the *max_per_org* highest-scoring entries, best first.

    The sort is stable, so ties keep the incoming (downloads-descending) order.
    """
    scored = [(score_model(entry, now), entry) for entry in entries]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [entry for _, entry in scored[:max_per_org]]
