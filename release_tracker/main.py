"""CLI entry point for the model release tracker."""

import argparse
import asyncio
import logging
import sys

from release_tracker.analytics import (
    SIZE_LABELS,
    SORT_MODES,
    TIME_RANGES,
    FilterState,
    activity_level,
    filter_models,
    sort_models,
    velocity_formatted,
)
from release_tracker.cache import DatasetCache, FileCacheStore
from release_tracker.errors import FetchCycleError
from release_tracker.exporters.json_export import export_dataset
from release_tracker.models import Dataset, ModelType
from release_tracker.notify import (
    is_enabled,
    notify_dataset_refreshed,
    notify_empty_orgs,
    notify_fetch_failure,
)
from release_tracker.registry import TRACKED_ORGS
from release_tracker.service import fetch_all

logger = logging.getLogger(__name__)


def _log_progress(done: int, total: int) -> None:
    logger.info("Progress: %d/%d orgs", done, total)


def run_fetch(cache: DatasetCache, *, refresh: bool = False) -> Dataset:
    """Load the dataset from cache or the Hub."""
    logger.info("=== Fetch ===")
    dataset = asyncio.run(fetch_all(cache, _log_progress, force=refresh))
    logger.info(
        "Dataset ready: %d models from %d companies (fetched %s)",
        len(dataset.model_releases),
        len(dataset.companies),
        dataset.fetched_at.isoformat() if dataset.fetched_at else "unknown",
    )
    return dataset


def run_export(dataset: Dataset):
    """Export the dataset to JSON."""
    logger.info("=== JSON Export ===")
    paths = export_dataset(dataset)
    for name, path in paths.items():
        logger.info("Exported %s -> %s", name, path)
    return paths


def run_list(dataset: Dataset, state: FilterState, limit: int) -> None:
    """Print the filtered, sorted model table."""
    models = sort_models(filter_models(dataset.model_releases, state), state.sort_by)
    print(f"{len(models)} of {len(dataset.model_releases)} models ({state.sort_by})")
    for m in models[:limit]:
        print(
            f"  {m.hf_id:<55} {m.type.value:<11} {m.parameters:>8} "
            f"{m.downloads_formatted:>7} dl  {velocity_formatted(m):>11}  {activity_level(m)}"
        )


def _empty_orgs(dataset: Dataset) -> list[str]:
    return [org for org in TRACKED_ORGS if not dataset.models_by_org.get(org)]


def main():
    parser = argparse.ArgumentParser(description="AI Model Release Tracker")
    parser.add_argument(
        "--step",
        choices=["fetch", "export", "list", "all"],
        default="all",
        help="Which step to run (default: all = fetch + export)",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Bypass the cached dataset and fetch from the Hub",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete the cached dataset before running",
    )
    parser.add_argument("--search", default="", help="Case-insensitive search text")
    parser.add_argument("--time-range", choices=TIME_RANGES, default="all")
    parser.add_argument(
        "--type",
        action="append",
        default=[],
        choices=[t.value for t in ModelType],
        help="Model type filter (repeatable)",
    )
    parser.add_argument(
        "--size",
        action="append",
        default=[],
        choices=list(SIZE_LABELS),
        help="Size bucket filter (repeatable)",
    )
    parser.add_argument("--sort", choices=SORT_MODES, default="trending")
    parser.add_argument("--limit", type=int, default=25, help="Rows to print for --step list")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    cache = DatasetCache(FileCacheStore())
    if args.clear_cache:
        cache.clear()
        logger.info("Cleared dataset cache")

    try:
        dataset = run_fetch(cache, refresh=args.refresh)
    except FetchCycleError as e:
        # No automatic retry: a rerun with --refresh is the recovery path
        logger.error("Fetch cycle failed: %s", e)
        if is_enabled():
            notify_fetch_failure(e)
        sys.exit(1)

    if args.refresh and is_enabled():
        empty = _empty_orgs(dataset)
        if empty:
            notify_empty_orgs(empty)
        notify_dataset_refreshed(
            [
                f"Models: {len(dataset.model_releases)}",
                f"Companies: {len(dataset.companies)}",
                f"Connections: {len(dataset.connections)}",
            ]
        )

    if args.step in ("export", "all"):
        run_export(dataset)

    if args.step == "list":
        state = FilterState(
            search=args.search,
            time_range=args.time_range,
            types=tuple(args.type),
            sizes=tuple(args.size),
            sort_by=args.sort,
        )
        run_list(dataset, state, args.limit)

    logger.info("Done!")


if __name__ == "__main__":
    main()
