"""Export the tracked dataset to JSON files for the frontend."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from release_tracker.config import EXPORT_DIR
from release_tracker.models import Dataset

logger = logging.getLogger(__name__)


def _write_json(path: Path, data: object) -> None:
    """Write data as formatted JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")


def _export_rows(name: str, rows: list[BaseModel], output_dir: Path) -> Path:
    path = output_dir / f"{name}.json"
    _write_json(path, [row.model_dump(mode="json") for row in rows])
    logger.info("Exported %d %s to %s", len(rows), name.replace("_", " "), path)
    return path


def export_metadata(dataset: Dataset, output_dir: Path | None = None) -> Path:
    """Export fetch metadata and headline counts to metadata.json."""
    if output_dir is None:
        output_dir = EXPORT_DIR

    metadata = {
        "updated_at": datetime.now(UTC).isoformat(),
        "fetched_at": dataset.fetched_at.isoformat() if dataset.fetched_at else None,
        "models": len(dataset.model_releases),
        "companies": len(dataset.companies),
        "orgs": sorted(dataset.models_by_org),
    }
    path = output_dir / "metadata.json"
    _write_json(path, metadata)
    logger.info("Exported metadata to %s", path)
    return path


def export_dataset(dataset: Dataset, output_dir: Path | None = None) -> dict[str, Path]:
    """Export every part of the dataset. Returns name -> written path."""
    if output_dir is None:
        output_dir = EXPORT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    return {
        "companies": _export_rows("companies", dataset.companies, output_dir),
        "models": _export_rows("models", dataset.model_releases, output_dir),
        "connections": _export_rows("connections", dataset.connections, output_dir),
        "live_updates": _export_rows("live_updates", dataset.live_updates, output_dir),
        "metadata": export_metadata(dataset, output_dir),
    }
