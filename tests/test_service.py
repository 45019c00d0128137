"""Tests for the fetch cycle and the Tracker session."""

import asyncio

import httpx
import pytest

from release_tracker.analytics import FilterState
from release_tracker.cache import CACHE_KEY, DatasetCache, MemoryCacheStore
from release_tracker.errors import FetchCycleError
from release_tracker.service import build_dataset, fetch_all
from release_tracker.session import MAX_COMPARE, Tracker
from release_tracker.sources.huggingface import FetchReport
from tests.test_cache import sample_dataset
from tests.test_huggingface_source import hub_handler, listing
from tests.test_scoring import NOW, raw_entry


class CountingHub:
    """Mock Hub that records every request it serves."""

    def __init__(self, responses: dict) -> None:
        self.calls: list[httpx.Request] = []
        self.handler = hub_handler(responses, self.calls)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def run_cycle(cache, hub, orgs, **kwargs):
    async def go():
        async with hub.client() as client:
            return await fetch_all(cache, orgs=orgs, client=client, delay=0, **kwargs)

    return asyncio.run(go())


HUB_RESPONSES = {
    "mistralai": [
        raw_entry("mistralai/Mistral-7B-v0.1", downloads=900_000, likes=3_000, days_old=500),
        raw_entry("mistralai/Ministral-8B", downloads=40_000, likes=200, days_old=20),
    ],
    "google": [raw_entry("google/gemma-2-2b", downloads=2_000_000, likes=800, days_old=200)],
    "broken": 500,
}


# ===================================================================
# build_dataset
# ===================================================================


class TestBuildDataset:
    def test_builds_all_parts(self):
        report = FetchReport(
            listings={org: body for org, body in HUB_RESPONSES.items() if org != "broken"}
        )
        report.listings["broken"] = []
        report.failed.append("broken")

        dataset = build_dataset(report, now=NOW)

        assert dataset.fetched_at == NOW
        assert set(dataset.models_by_org) == {"mistralai", "google"}
        assert [m.name for m in dataset.model_releases] == [
            "Ministral-8B",
            "gemma-2-2b",
            "Mistral-7B-v0.1",
        ]
        assert [c.name for c in dataset.companies] == ["Google", "Mistral AI"]
        assert len(dataset.live_updates) == 3
        assert dataset.live_updates[0].text.startswith("Mistral AI released Ministral-8B")

    def test_respects_max_per_org(self):
        report = FetchReport(listings={"Qwen": listing("Qwen", 20)})
        dataset = build_dataset(report, max_per_org=5, now=NOW)
        assert len(dataset.models_by_org["Qwen"]) == 5
        assert len(dataset.model_releases) == 5

    def test_model_ids_are_unique(self):
        report = FetchReport(listings={org: listing(org, 10) for org in ("google", "nvidia")})
        dataset = build_dataset(report, now=NOW)
        ids = [m.id for m in dataset.model_releases]
        assert len(ids) == len(set(ids))


# ===================================================================
# fetch_all
# ===================================================================


class TestFetchAll:
    def test_miss_fetches_and_stores(self):
        store = MemoryCacheStore()
        cache = DatasetCache(store)
        hub = CountingHub(HUB_RESPONSES)

        dataset = run_cycle(cache, hub, list(HUB_RESPONSES))

        assert len(hub.calls) == 3
        assert len(dataset.model_releases) == 3
        assert CACHE_KEY in store
        assert cache.get() == dataset

    def test_fresh_cache_makes_no_requests(self):
        cache = DatasetCache(MemoryCacheStore())
        cached = sample_dataset()
        cache.set(cached)
        hub = CountingHub(HUB_RESPONSES)

        dataset = run_cycle(cache, hub, list(HUB_RESPONSES))

        assert hub.calls == []
        assert dataset == cached

    def test_force_bypasses_cache(self):
        cache = DatasetCache(MemoryCacheStore())
        cache.set(sample_dataset())
        hub = CountingHub(HUB_RESPONSES)

        dataset = run_cycle(cache, hub, list(HUB_RESPONSES), force=True)

        assert len(hub.calls) == 3
        assert "google/gemma-2-2b" in {m.id for m in dataset.model_releases}

    def test_total_failure_raises_and_leaves_cache_alone(self):
        store = MemoryCacheStore()
        cache = DatasetCache(store)
        hub = CountingHub({"a": 500, "b": httpx.ConnectError("refused")})

        with pytest.raises(FetchCycleError, match="No models fetched"):
            run_cycle(cache, hub, ["a", "b"])
        assert CACHE_KEY not in store

    def test_empty_listings_count_as_failure(self):
        hub = CountingHub({"a": [], "b": []})
        with pytest.raises(FetchCycleError):
            run_cycle(DatasetCache(MemoryCacheStore()), hub, ["a", "b"])

    def test_non_finite_counts_do_not_break_the_cycle(self):
        body = b'[{"id": "Qwen/Qwen2.5-7B", "downloads": NaN, "likes": Infinity}]'
        hub = CountingHub({"Qwen": body})

        dataset = run_cycle(DatasetCache(MemoryCacheStore()), hub, ["Qwen"])

        (model,) = dataset.model_releases
        assert model.downloads == 0
        assert model.likes == 0
        assert dataset.companies[0].total_downloads == 0

    def test_progress_reported(self):
        seen = []
        hub = CountingHub(HUB_RESPONSES)
        run_cycle(
            DatasetCache(MemoryCacheStore()),
            hub,
            list(HUB_RESPONSES),
            on_progress=lambda done, total: seen.append((done, total)),
        )
        assert seen[-1] == (3, 3)


# ===================================================================
# Tracker session
# ===================================================================


def make_tracker(responses=HUB_RESPONSES, cache=None):
    hub = CountingHub(responses)
    tracker = Tracker(
        cache or DatasetCache(MemoryCacheStore()),
        client=hub.client(),
        orgs=list(responses),
        delay=0,
    )
    return tracker, hub


class TestTrackerLoading:
    def test_initial_state(self):
        tracker, _ = make_tracker()
        assert tracker.status == "idle"
        assert tracker.dataset.model_releases == []
        assert tracker.error is None
        assert tracker.filters == FilterState()
        assert tracker.compare_list == []

    def test_load_success(self):
        tracker, hub = make_tracker()
        asyncio.run(tracker.load())

        assert tracker.ready
        assert tracker.error is None
        assert len(tracker.dataset.model_releases) == 3
        assert (tracker.progress.done, tracker.progress.total) == (3, 3)
        assert len(hub.calls) == 3

    def test_load_uses_cache_then_reload_bypasses_it(self):
        tracker, hub = make_tracker()

        async def go():
            await tracker.load()
            await tracker.load()
            assert len(hub.calls) == 3
            await tracker.reload()

        asyncio.run(go())
        assert len(hub.calls) == 6
        assert tracker.ready

    def test_load_failure_sets_error(self):
        tracker, _ = make_tracker({"a": 500})
        asyncio.run(tracker.load())

        assert tracker.status == "error"
        assert "No models fetched" in tracker.error
        assert tracker.dataset.model_releases == []

    def test_failed_reload_keeps_previous_dataset(self):
        cache = DatasetCache(MemoryCacheStore())
        cache.set(sample_dataset())
        tracker, _ = make_tracker({"a": 500}, cache=cache)

        async def go():
            await tracker.load()
            assert tracker.ready
            await tracker.reload()

        asyncio.run(go())
        assert tracker.status == "error"
        assert tracker.dataset == sample_dataset()

    def test_views_empty_until_ready(self):
        tracker, _ = make_tracker()
        assert tracker.filtered_models(NOW) == []
        assert tracker.insights(NOW) == []
        assert tracker.whats_new(NOW) == []
        assert tracker.stats(NOW) is None


class TestTrackerState:
    @pytest.fixture
    def tracker(self):
        cache = DatasetCache(MemoryCacheStore())
        cache.set(sample_dataset())
        tracker, _ = make_tracker(cache=cache)
        asyncio.run(tracker.load())
        return tracker

    def test_filter_mutators(self, tracker):
        tracker.set_search("gemma")
        tracker.set_time_range("7d")
        tracker.set_sort_by("popular")
        tracker.toggle_filter("type", "LLM")
        assert tracker.filters == FilterState(
            search="gemma", time_range="7d", types=("LLM",), sort_by="popular"
        )
        assert tracker.filters.active_filter_count == 3

        tracker.clear_filters()
        assert tracker.filters == FilterState(sort_by="popular")

    def test_filtered_models_follow_filters(self, tracker):
        assert len(tracker.filtered_models(NOW)) == 3
        tracker.set_search("gemma")
        assert [m.name for m in tracker.filtered_models(NOW)] == ["gemma-2b"]

    def test_sort_by_popularity(self, tracker):
        tracker.set_sort_by("popular")
        names = [m.name for m in tracker.filtered_models(NOW)]
        assert names == ["gemma-2b", "Mistral-7B", "Mixtral-8x7B"]

    def test_compare_list_capped(self, tracker):
        for model_id in ["a", "b", "c", "d"]:
            tracker.toggle_compare(model_id)
        assert tracker.compare_list == ["a", "b", "c"]
        assert len(tracker.compare_list) == MAX_COMPARE

        tracker.toggle_compare("b")
        assert tracker.compare_list == ["a", "c"]
        tracker.clear_compare()
        assert tracker.compare_list == []

    def test_compare_models(self, tracker):
        tracker.toggle_compare("google/gemma-2b")
        tracker.toggle_compare("missing/model")
        assert [m.id for m in tracker.compare_models()] == ["google/gemma-2b"]

    def test_stats_and_types(self, tracker):
        stats = tracker.stats(NOW)
        assert stats.total_models == 3
        assert tracker.available_types() == ["LLM"]

    def test_insights_and_groups(self, tracker):
        assert len(tracker.insights(NOW)) == 4
        groups = tracker.whats_new(NOW)
        assert [g.label for g in groups] == ["Today", "This Week", "Older"]
        assert [m.name for m in groups[-1].models] == ["Mixtral-8x7B"]
