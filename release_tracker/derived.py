"""Build companies, research connections and the live feed from transformed models."""

import logging
import math
from datetime import datetime

from release_tracker.dates import time_ago
from release_tracker.models import (
    Company,
    Connection,
    LiveUpdateEntry,
    ModelRelease,
    ResearchCenter,
)
from release_tracker.registry import ORG_TO_COMPANY, RESEARCH_CENTERS, company_color

logger = logging.getLogger(__name__)

LIVE_UPDATE_COUNT = 20

# Connection selection policy
MIN_CONNECTION_DISTANCE = 10
MIN_CONNECTION_SEED = 45


def build_companies(models_by_org: dict[str, list[ModelRelease]]) -> list[Company]:
    """Aggregate per-org models into companies, sorted by total downloads.

    Orgs missing from the registry have no coordinates and are skipped.
    """
    totals: dict[str, dict] = {}

    for org_key, models in models_by_org.items():
        info = ORG_TO_COMPANY.get(org_key)
        if info is None:
            logger.debug("Skipping unregistered org %s", org_key)
            continue

        row = totals.setdefault(
            info.name,
            {
                "id": info.id,
                "name": info.name,
                "hq": info.hq,
                "lat": info.lat,
                "lng": info.lng,
                "color": company_color(info.name),
                "founded": info.founded,
                "models_count": 0,
                "total_downloads": 0,
                "total_likes": 0,
            },
        )
        row["models_count"] += len(models)
        row["total_downloads"] += sum(m.downloads for m in models)
        row["total_likes"] += sum(m.likes for m in models)

    companies = [Company(**row) for row in totals.values()]
    companies.sort(key=lambda c: c.total_downloads, reverse=True)
    return companies


def connection_seed(company_lat: float, center_lng: float) -> float:
    """Coordinate hash deciding whether a company/center pair is connected."""
    return (abs(company_lat * 1000) + abs(center_lng * 1000)) % 100


def build_connections(
    companies: list[Company],
    centers: list[ResearchCenter] | None = None,
) -> list[Connection]:
    """Connect each company to the distant research centers its seed selects.

    Deterministic: identical inputs always produce identical edges.
    """
    if centers is None:
        centers = RESEARCH_CENTERS

    arcs = []
    for company in companies:
        for center in centers:
            dist = math.sqrt((company.lat - center.lat) ** 2 + (company.lng - center.lng) ** 2)
            seed = connection_seed(company.lat, center.lng)
            if dist > MIN_CONNECTION_DISTANCE and seed > MIN_CONNECTION_SEED:
                arcs.append(
                    Connection(
                        start_lat=company.lat,
                        start_lng=company.lng,
                        end_lat=center.lat,
                        end_lng=center.lng,
                        color=company.color,
                        company=company.name,
                        center=center.name,
                    )
                )
    return arcs


def newest_first(models: list[ModelRelease]) -> list[ModelRelease]:
    """Sort by creation time descending; models without a timestamp go last."""
    dated = [m for m in models if m.created_at is not None]
    undated = [m for m in models if m.created_at is None]
    dated.sort(key=lambda m: m.created_at, reverse=True)
    return dated + undated


def build_live_updates(
    models: list[ModelRelease],
    now: datetime | None = None,
) -> list[LiveUpdateEntry]:
    """Feed lines for the most recently created models."""
    return [
        LiveUpdateEntry(
            time=time_ago(m.created_at, now),
            text=f"{m.company} released {m.name} — {m.downloads_formatted} downloads",
            company=m.company,
        )
        for m in newest_first(models)[:LIVE_UPDATE_COUNT]
    ]
