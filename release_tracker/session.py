"""Tracker session: the current dataset, filter state and derived views.

This is the surface the UI layer talks to. The dataset is replaced as a whole
on every load; views are recomputed from it on each access.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime

import httpx

from release_tracker.analytics import (
    DashboardStats,
    FilterState,
    Insight,
    RecencyGroup,
    available_types,
    compute_insights,
    compute_stats,
    filter_models,
    group_by_recency,
    sort_models,
)
from release_tracker.cache import DatasetCache
from release_tracker.models import Dataset, ModelRelease
from release_tracker.service import fetch_all

logger = logging.getLogger(__name__)

MAX_COMPARE = 3


@dataclass
class Progress:
    done: int = 0
    total: int = 0


class Tracker:
    """Holds one Dataset and one FilterState; status is idle|loading|ready|error."""

    def __init__(
        self,
        cache: DatasetCache,
        *,
        client: httpx.AsyncClient | None = None,
        **fetch_options,
    ) -> None:
        self.cache = cache
        self.client = client
        self.fetch_options = fetch_options
        self.status = "idle"
        self.progress = Progress()
        self.dataset = Dataset()
        self.error: str | None = None
        self.filters = FilterState()
        self.compare_list: list[str] = []

    # -- Loading --

    def _on_progress(self, done: int, total: int) -> None:
        self.progress = Progress(done, total)

    async def load(self, *, force: bool = False) -> None:
        """Run a fetch cycle. Errors are recorded, not raised."""
        self.status = "loading"
        self.error = None
        try:
            dataset = await fetch_all(
                self.cache,
                self._on_progress,
                force=force,
                client=self.client,
                **self.fetch_options,
            )
        except Exception as e:
            logger.exception("Failed to fetch model data")
            self.status = "error"
            self.error = str(e) or "Failed to fetch data"
            return
        self.dataset = dataset
        self.status = "ready"

    async def reload(self) -> None:
        """Bypass the cache and fetch a fresh dataset."""
        await self.load(force=True)

    @property
    def ready(self) -> bool:
        return self.status == "ready"

    # -- Filter mutators --

    def set_search(self, search: str) -> None:
        self.filters = replace(self.filters, search=search)

    def set_time_range(self, time_range: str) -> None:
        self.filters = replace(self.filters, time_range=time_range)

    def set_sort_by(self, sort_by: str) -> None:
        self.filters = replace(self.filters, sort_by=sort_by)

    def toggle_filter(self, category: str, value: str) -> None:
        self.filters = self.filters.toggle_filter(category, value)

    def clear_filters(self) -> None:
        self.filters = self.filters.cleared()

    # -- Comparison --

    def toggle_compare(self, model_id: str) -> None:
        """Add or remove a model from the comparison list (at most three)."""
        if model_id in self.compare_list:
            self.compare_list = [i for i in self.compare_list if i != model_id]
        elif len(self.compare_list) < MAX_COMPARE:
            self.compare_list = [*self.compare_list, model_id]

    def clear_compare(self) -> None:
        self.compare_list = []

    # -- Views --

    def filtered_models(self, now: datetime | None = None) -> list[ModelRelease]:
        if not self.ready:
            return []
        filtered = filter_models(self.dataset.model_releases, self.filters, now)
        return sort_models(filtered, self.filters.sort_by, now)

    def compare_models(self) -> list[ModelRelease]:
        return [m for m in self.dataset.model_releases if m.id in self.compare_list]

    def insights(self, now: datetime | None = None) -> list[Insight]:
        if not self.ready:
            return []
        return compute_insights(self.dataset.model_releases, now)

    def whats_new(self, now: datetime | None = None) -> list[RecencyGroup]:
        if not self.ready:
            return []
        return group_by_recency(self.dataset.model_releases, now)

    def stats(self, now: datetime | None = None) -> DashboardStats | None:
        if not self.ready:
            return None
        return compute_stats(self.dataset.model_releases, self.filtered_models(now), now)

    def available_types(self) -> list[str]:
        return available_types(self.dataset.model_releases)
