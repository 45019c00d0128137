"""Hugging Face Hub source: per-organization model listings via the public API."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from release_tracker.config import (
    FETCH_BATCH_DELAY,
    FETCH_BATCH_SIZE,
    FETCH_LIMIT,
    HF_API_URL,
    HTTP_TIMEOUT,
)
from release_tracker.errors import OrgFetchError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class FetchReport:
    """Raw listings for every requested org, plus the orgs that failed."""

    listings: dict[str, list[dict]] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    @property
    def total_entries(self) -> int:
        return sum(len(entries) for entries in self.listings.values())


def _has_id(entry: object) -> bool:
    return isinstance(entry, dict) and bool(entry.get("id") or entry.get("modelId"))


async def fetch_org_models(
    client: httpx.AsyncClient,
    org: str,
    limit: int = FETCH_LIMIT,
    api_url: str = HF_API_URL,
) -> list[dict]:
    """Fetch the top *limit* models of one org, sorted by downloads descending.

    Raises:
        OrgFetchError: On transport errors, non-success status or a body that
            is not a JSON array.
    """
    params = {
        "author": org,
        "sort": "downloads",
        "direction": "-1",
        "limit": str(limit),
    }
    try:
        response = await client.get(api_url, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise OrgFetchError(org, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise OrgFetchError(org, f"{type(e).__name__}: {e}") from e
    except ValueError as e:
        raise OrgFetchError(org, "response body is not JSON") from e

    if not isinstance(data, list):
        raise OrgFetchError(org, f"expected a JSON array, got {type(data).__name__}")

    entries = [entry for entry in data if _has_id(entry)]
    if len(entries) < len(data):
        logger.debug(
            "Dropped %d listing entries without an id for %s", len(data) - len(entries), org
        )
    return entries


async def fetch_all_orgs(
    orgs: list[str],
    on_progress: ProgressCallback | None = None,
    *,
    batch_size: int = FETCH_BATCH_SIZE,
    delay: float = FETCH_BATCH_DELAY,
    limit: int = FETCH_LIMIT,
    client: httpx.AsyncClient | None = None,
) -> FetchReport:
    """Fetch listings for all orgs in sequential batches of concurrent requests.

    A failing org yields an empty listing and never affects its siblings.
    *on_progress* receives ``(completed, total)`` after each batch resolves.

    Args:
        orgs: Hub org ids, fetched in this order.
        on_progress: Optional progress callback.
        batch_size: Number of concurrent requests per batch.
        delay: Seconds to wait between batches to avoid rate limiting.
        limit: Max entries requested per org.
        client: Optional shared client (tests pass one with a mock transport).
    """
    report = FetchReport()
    total = len(orgs)
    completed = 0

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(HTTP_TIMEOUT, connect=10.0),
            follow_redirects=True,
        )

    try:
        for start in range(0, total, batch_size):
            batch = orgs[start : start + batch_size]
            logger.info(
                "Fetching orgs %d-%d/%d: %s",
                start + 1,
                start + len(batch),
                total,
                ", ".join(batch),
            )
            results = await asyncio.gather(
                *(fetch_org_models(client, org, limit=limit) for org in batch),
                return_exceptions=True,
            )

            for org, result in zip(batch, results):
                if isinstance(result, BaseException):
                    logger.warning("  -> %s", result)
                    report.listings[org] = []
                    report.failed.append(org)
                else:
                    logger.info("  -> %s: %d models", org, len(result))
                    report.listings[org] = result
                completed += 1
                if on_progress is not None:
                    on_progress(completed, total)

            if start + batch_size < total and delay > 0:
                await asyncio.sleep(delay)
    finally:
        if owns_client:
            await client.aclose()

    logger.info(
        "Fetched %d listing entries from %d/%d orgs",
        report.total_entries,
        total - len(report.failed),
        total,
    )
    return report
