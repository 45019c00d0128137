"""Model analytics: per-model metrics, filtering and sorting, recency groups and insights.

Every function is pure: it takes the model list (and an optional ``now``) and
returns fresh values without mutating its input. Callers recompute on every
change to the search text, filters, sort key or dataset.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

from release_tracker.dates import days_since
from release_tracker.models import ModelRelease

TIME_RANGE_DAYS: dict[str, int] = {"24h": 1, "7d": 7, "30d": 30, "90d": 90}
TIME_RANGES = ["all", *TIME_RANGE_DAYS]

SORT_MODES = ["trending", "recent", "popular", "quality", "liked"]

SIZE_LABELS: dict[str, str] = {
    "tiny": "<1B",
    "small": "1-7B",
    "medium": "7-13B",
    "large": "13-70B",
    "huge": "70B+",
}

# (upper bound in billions, bucket), checked in order
_SIZE_BOUNDS: list[tuple[float, str]] = [(1, "tiny"), (7, "small"), (13, "medium"), (70, "large")]

FILTER_CATEGORIES = ("type", "size")


# ---------------------------------------------------------------------------
# Per-model metrics
# ---------------------------------------------------------------------------


def age_days(model: ModelRelease, now: datetime | None = None) -> float:
    """Days since creation, floored at 0; infinite when the date is unknown."""
    return days_since(model.created_at, now)


def age_label(created_at: datetime | None, now: datetime | None = None) -> str:
    """Coarse age label: Today, Yesterday, 3d ago, 2w ago, 4mo ago, 1y ago or Unknown."""
    d = days_since(created_at, now)
    if d < 1:
        return "Today"
    if d < 2:
        return "Yesterday"
    if d < 7:
        return f"{math.floor(d)}d ago"
    if d < 30:
        return f"{math.floor(d / 7)}w ago"
    if d < 365:
        return f"{math.floor(d / 30)}mo ago"
    if math.isinf(d):
        return "Unknown"
    return f"{math.floor(d / 365)}y ago"


def is_new(created_at: datetime | None, now: datetime | None = None) -> bool:
    """True for models created within the last week."""
    return days_since(created_at, now) < 7


def velocity(model: ModelRelease, now: datetime | None = None) -> float:
    """Downloads per day since release (at least one day)."""
    return model.downloads / max(1.0, age_days(model, now))


def velocity_formatted(model: ModelRelease, now: datetime | None = None) -> str:
    v = velocity(model, now)
    if v >= 1_000_000:
        return f"{v / 1_000_000:.1f}M/day"
    if v >= 1_000:
        return f"{v / 1_000:.1f}K/day"
    if v >= 1:
        return f"{round(v)}/day"
    return "<1/day"


def quality_score(model: ModelRelease, now: datetime | None = None) -> float:
    """Composite of popularity, likes, velocity and recency."""
    s = math.log10(model.downloads + 1) * 10
    s += math.log10(model.likes + 1) * 8
    s += min(velocity(model, now) / 100, 30)
    age = age_days(model, now)
    if age < 30:
        s += 15
    elif age < 90:
        s += 10
    elif age < 180:
        s += 5
    return s


def activity_level(model: ModelRelease, now: datetime | None = None) -> str:
    """High above 10K downloads/day, Medium above 500, else Low."""
    v = velocity(model, now)
    if v > 10_000:
        return "High"
    if v > 500:
        return "Medium"
    return "Low"


def param_billions(parameters: str | None) -> float | None:
    """Parse a formatted parameter string (``1.8T``, ``7.6B``, ``335M``) to billions."""
    if not parameters or parameters == "Unknown":
        return None
    digits = re.sub(r"[^0-9.]", "", parameters)
    try:
        num = float(digits)
    except ValueError:
        return None
    if "T" in parameters:
        return num * 1000
    if "B" in parameters:
        return num
    if "M" in parameters and "MoE" not in parameters:
        return num / 1000
    return num


def size_bucket(model: ModelRelease) -> str | None:
    """Size bucket for the size filter, or None when the size is unknown."""
    params = param_billions(model.parameters)
    if params is None:
        return None
    for bound, bucket in _SIZE_BOUNDS:
        if params < bound:
            return bucket
    return "huge"


def within_time_range(model: ModelRelease, time_range: str, now: datetime | None = None) -> bool:
    if time_range == "all":
        return True
    limit = TIME_RANGE_DAYS.get(time_range, math.inf)
    return age_days(model, now) <= limit


# ---------------------------------------------------------------------------
# Filtering and sorting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterState:
    """Search text, time range, filter selections and sort key."""

    search: str = ""
    time_range: str = "all"
    types: tuple[str, ...] = ()
    sizes: tuple[str, ...] = ()
    sort_by: str = "trending"

    def toggle_filter(self, category: str, value: str) -> FilterState:
        """Return a copy with *value* added to or removed from *category*."""
        if category not in FILTER_CATEGORIES:
            raise ValueError(f"Unknown filter category: {category!r}")
        attr = "types" if category == "type" else "sizes"
        current: tuple[str, ...] = getattr(self, attr)
        if value in current:
            updated = tuple(v for v in current if v != value)
        else:
            updated = (*current, value)
        return replace(self, **{attr: updated})

    def cleared(self) -> FilterState:
        """Reset search, time range and filters; keep the sort key."""
        return FilterState(sort_by=self.sort_by)

    @property
    def active_filter_count(self) -> int:
        count = len(self.types) + len(self.sizes)
        if self.search:
            count += 1
        if self.time_range != "all":
            count += 1
        return count


def _matches_search(model: ModelRelease, query: str) -> bool:
    return (
        query in model.name.lower()
        or query in model.company.lower()
        or query in model.pipeline_tag.lower()
        or query in model.hf_id.lower()
        or any(query in tag.lower() for tag in model.tags)
    )


def filter_models(
    models: list[ModelRelease],
    state: FilterState,
    now: datetime | None = None,
) -> list[ModelRelease]:
    """Apply time range, search, type and size filters in that order (AND)."""
    if now is None:
        now = datetime.now(UTC)
    result = list(models)

    if state.time_range != "all":
        result = [m for m in result if within_time_range(m, state.time_range, now)]

    if state.search:
        query = state.search.lower()
        result = [m for m in result if _matches_search(m, query)]

    if state.types:
        result = [m for m in result if m.type in state.types]

    if state.sizes:
        result = [m for m in result if size_bucket(m) in state.sizes]

    return result


def _created_key(model: ModelRelease) -> tuple[bool, float]:
    # Undated models sort last
    if model.created_at is None:
        return (False, 0.0)
    return (True, model.created_at.timestamp())


def sort_models(
    models: list[ModelRelease],
    sort_by: str,
    now: datetime | None = None,
) -> list[ModelRelease]:
    """Return a new list sorted by *sort_by*. Stable; unknown keys keep the order."""
    if now is None:
        now = datetime.now(UTC)

    if sort_by == "trending":
        return sorted(models, key=lambda m: velocity(m, now), reverse=True)
    if sort_by == "recent":
        return sorted(models, key=_created_key, reverse=True)
    if sort_by == "popular":
        return sorted(models, key=lambda m: m.downloads, reverse=True)
    if sort_by == "quality":
        return sorted(models, key=lambda m: quality_score(m, now), reverse=True)
    if sort_by == "liked":
        return sorted(models, key=lambda m: m.likes, reverse=True)
    return list(models)


# ---------------------------------------------------------------------------
# Recency groups, insights and dashboard stats
# ---------------------------------------------------------------------------


RECENCY_LABELS = ["Today", "Yesterday", "This Week", "Older"]


@dataclass
class RecencyGroup:
    label: str
    models: list[ModelRelease] = field(default_factory=list)


def group_by_recency(
    models: list[ModelRelease],
    now: datetime | None = None,
) -> list[RecencyGroup]:
    """Split into Today / Yesterday / This Week / Older, dropping empty groups."""
    if now is None:
        now = datetime.now(UTC)
    groups = [RecencyGroup(label) for label in RECENCY_LABELS]

    for m in models:
        d = age_days(m, now)
        if d < 1:
            groups[0].models.append(m)
        elif d < 2:
            groups[1].models.append(m)
        elif d < 7:
            groups[2].models.append(m)
        else:
            groups[3].models.append(m)

    return [g for g in groups if g.models]


@dataclass
class Insight:
    key: str
    title: str
    subtitle: str
    icon: str
    models: list[ModelRelease] = field(default_factory=list)


INSIGHT_SIZE = 3


def compute_insights(
    models: list[ModelRelease],
    now: datetime | None = None,
) -> list[Insight]:
    """Four independent top-3 rankings; categories with no models are dropped."""
    if now is None:
        now = datetime.now(UTC)

    trending = sort_models(models, "trending", now)[:INSIGHT_SIZE]
    just_released = sort_models(
        [m for m in models if age_days(m, now) < 2], "recent", now
    )[:INSIGHT_SIZE]
    favorites = sort_models(models, "liked", now)[:INSIGHT_SIZE]
    rising = sort_models(
        [m for m in models if age_days(m, now) < 30], "trending", now
    )[:INSIGHT_SIZE]

    insights = [
        Insight("trending", "Trending Now", "Fastest download velocity", "↗", trending),
        Insight("new", "Just Released", "Last 48 hours", "✦", just_released),
        Insight("favorites", "Community Favorites", "Most liked models", "♥", favorites),
        Insight("rising", "Rising Stars", "Fastest growing (<30d)", "★", rising),
    ]
    return [i for i in insights if i.models]


@dataclass
class DashboardStats:
    total_models: int
    new_this_week: int
    total_downloads: int
    most_active_org: tuple[str, int] | None
    filtered_count: int


def compute_stats(
    models: list[ModelRelease],
    filtered: list[ModelRelease],
    now: datetime | None = None,
) -> DashboardStats:
    """Headline numbers for the dashboard."""
    if now is None:
        now = datetime.now(UTC)
    week_ago = now - timedelta(days=7)

    org_counts = Counter(m.company for m in models)
    most_active = org_counts.most_common(1)

    return DashboardStats(
        total_models=len(models),
        new_this_week=sum(
            1 for m in models if m.created_at is not None and m.created_at > week_ago
        ),
        total_downloads=sum(m.downloads for m in models),
        most_active_org=most_active[0] if most_active else None,
        filtered_count=len(filtered),
    )


def available_types(models: list[ModelRelease]) -> list[str]:
    """Sorted distinct model types present in *models*."""
    return sorted({m.type.value for m in models})
