"""Fetch cycle: cache check, Hub fetch, selection, normalization, derived data."""

import logging
from datetime import UTC, datetime

import httpx

from release_tracker.cache import DatasetCache
from release_tracker.config import MAX_MODELS_PER_ORG
from release_tracker.derived import (
    build_companies,
    build_connections,
    build_live_updates,
    newest_first,
)
from release_tracker.errors import FetchCycleError
from release_tracker.models import Dataset, ModelRelease
from release_tracker.registry import TRACKED_ORGS
from release_tracker.scoring import pick_top_models
from release_tracker.sources.huggingface import FetchReport, ProgressCallback, fetch_all_orgs
from release_tracker.transform import transform_models

logger = logging.getLogger(__name__)


def build_dataset(
    report: FetchReport,
    max_per_org: int = MAX_MODELS_PER_ORG,
    now: datetime | None = None,
) -> Dataset:
    """Turn raw per-org listings into a complete Dataset."""
    if now is None:
        now = datetime.now(UTC)

    models_by_org: dict[str, list[ModelRelease]] = {}
    all_models: list[ModelRelease] = []

    for org, entries in report.listings.items():
        if not entries:
            continue
        top = pick_top_models(entries, max_per_org=max_per_org, now=now)
        models = transform_models(top, org)
        models_by_org[org] = models
        all_models.extend(models)

    companies = build_companies(models_by_org)
    return Dataset(
        companies=companies,
        model_releases=newest_first(all_models),
        connections=build_connections(companies),
        live_updates=build_live_updates(all_models, now=now),
        models_by_org=models_by_org,
        fetched_at=now,
    )


async def fetch_all(
    cache: DatasetCache,
    on_progress: ProgressCallback | None = None,
    *,
    force: bool = False,
    orgs: list[str] | None = None,
    client: httpx.AsyncClient | None = None,
    **fetch_options,
) -> Dataset:
    """Return the tracked dataset, from cache when fresh, else from the Hub.

    Args:
        cache: Dataset cache consulted first and refreshed after a fetch.
        on_progress: Receives ``(completed, total)`` org counts.
        force: Skip the cache read and always fetch.
        orgs: Org ids to fetch. Defaults to the tracked orgs.
        client: Optional HTTP client, passed through to the fetcher.
        **fetch_options: ``batch_size``, ``delay``, ``limit`` overrides.

    Raises:
        FetchCycleError: If no org yields any model.
    """
    if not force:
        cached = cache.get()
        if cached is not None:
            return cached

    if orgs is None:
        orgs = TRACKED_ORGS

    logger.info("=== Fetch cycle: %d orgs ===", len(orgs))
    report = await fetch_all_orgs(orgs, on_progress, client=client, **fetch_options)

    if report.total_entries == 0:
        raise FetchCycleError(
            f"No models fetched from any of {len(orgs)} orgs "
            f"({len(report.failed)} requests failed)"
        )

    dataset = build_dataset(report)
    logger.info(
        "Fetch cycle complete: %d models, %d companies, %d connections",
        len(dataset.model_releases),
        len(dataset.companies),
        len(dataset.connections),
    )
    if report.failed:
        logger.warning("Orgs unavailable this cycle: %s", ", ".join(report.failed))

    cache.set(dataset)
    return dataset
