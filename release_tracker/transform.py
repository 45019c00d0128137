"""Normalize raw Hub listing entries into ModelRelease records.

Raw entries are trusted for nothing: missing or malformed fields fall back to
defaults (0 for counts, ``Unknown`` for strings, ``[]`` for tags) instead of
raising.
"""

import logging
import math

from release_tracker.dates import format_date, parse_timestamp
from release_tracker.models import ModelRelease, ModelType
from release_tracker.registry import ORG_TO_COMPANY
from release_tracker.scoring import safe_count

logger = logging.getLogger(__name__)

# Ordered decision list: (pipeline tags, tags, type). First match wins.
_TYPE_RULES: list[tuple[set[str], set[str], ModelType]] = [
    ({"text-to-image"}, {"text-to-image"}, ModelType.IMAGE_GEN),
    ({"image-text-to-text"}, {"image-text-to-text"}, ModelType.MULTIMODAL),
    ({"automatic-speech-recognition"}, set(), ModelType.AUDIO),
    ({"text-generation", "text2text-generation"}, set(), ModelType.LLM),
    ({"feature-extraction"}, set(), ModelType.EMBEDDINGS),
]


def _tags(raw: dict) -> list[str]:
    tags = raw.get("tags")
    if not isinstance(tags, list):
        return []
    return [t for t in tags if isinstance(t, str)]


def format_param_count(total: object) -> str:
    """Format a parameter count with T/B/M suffixes (``1.8T``, ``7.6B``, ``335M``)."""
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        return "Unknown"
    if (isinstance(total, float) and not math.isfinite(total)) or total <= 0:
        return "Unknown"
    if total >= 1e12:
        return f"{total / 1e12:.1f}T"
    if total >= 1e9:
        return f"{total / 1e9:.1f}B"
    if total >= 1e6:
        return f"{total / 1e6:.0f}M"
    return str(int(total))


def format_downloads(n: int | None) -> str:
    """Compact download count: ``0``, ``950``, ``12.3K``, ``4.5M``, ``1.2B``."""
    if not n:
        return "0"
    if n >= 1_000_000_000:
        return f"{n / 1_000_000_000:.1f}B"
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return str(n)


def infer_type(raw: dict) -> ModelType:
    """Classify an entry from its pipeline tag and tags."""
    pipe = raw.get("pipeline_tag")
    if not isinstance(pipe, str):
        pipe = ""
    tags = set(_tags(raw))
    for pipeline_tags, tag_matches, model_type in _TYPE_RULES:
        if pipe in pipeline_tags or tags & tag_matches:
            return model_type
    return ModelType.LLM


def _param_total(raw: dict) -> object:
    safetensors = raw.get("safetensors")
    if not isinstance(safetensors, dict):
        return None
    return safetensors.get("total")


def _highlight(downloads: int, likes: int) -> str | None:
    if downloads > 1_000_000:
        return f"{format_downloads(downloads)} downloads"
    if likes > 100:
        return f"{likes} community likes"
    return None


def transform_model(raw: dict, org_key: str) -> ModelRelease:
    """Map one raw listing entry of *org_key* to a ModelRelease.

    Unknown orgs use the org key as both company name and id.
    """
    info = ORG_TO_COMPANY.get(org_key)
    company_name = info.name if info else org_key
    company_id = info.id if info else org_key

    hf_id = str(raw.get("id") or raw.get("modelId") or "")
    name = hf_id.split("/")[-1] or hf_id
    downloads = safe_count(raw.get("downloads"))
    likes = safe_count(raw.get("likes"))
    downloads_formatted = format_downloads(downloads)
    created_at = parse_timestamp(raw.get("createdAt"))
    pipeline_tag = raw.get("pipeline_tag")

    return ModelRelease(
        id=hf_id,
        hf_id=hf_id,
        name=name,
        company=company_name,
        company_id=company_id,
        date=format_date(created_at),
        created_at=created_at,
        last_modified=parse_timestamp(raw.get("lastModified")),
        parameters=format_param_count(_param_total(raw)),
        type=infer_type(raw),
        open_source=True,
        downloads=downloads,
        downloads_formatted=downloads_formatted,
        likes=likes,
        tags=_tags(raw),
        pipeline_tag=pipeline_tag if isinstance(pipeline_tag, str) else "",
        description=(
            f"{company_name} model with {downloads_formatted} downloads "
            f"and {likes} likes on Hugging Face."
        ),
        highlight=_highlight(downloads, likes),
    )


def transform_models(entries: list[dict], org_key: str) -> list[ModelRelease]:
    """Transform a selected listing, preserving its order."""
    models = [transform_model(raw, org_key) for raw in entries]
    logger.debug("Transformed %d models for %s", len(models), org_key)
    return models
