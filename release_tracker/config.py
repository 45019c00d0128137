"""Environment variable loading and configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")


def get_env(key: str, default: str | None = None) -> str:
    """Get an environment variable or raise if missing and no default."""
    value = os.getenv(key, default)
    if value is None:
        raise ValueError(f"Missing required environment variable: {key}")
    return value


def _path_env(key: str, default: Path) -> Path:
    value = os.getenv(key)
    if not value:
        return default
    path = Path(value)
    return path if path.is_absolute() else _PROJECT_ROOT / path


# Hugging Face Hub
HF_API_URL = get_env("HF_API_URL", "https://huggingface.co/api/models")
HTTP_TIMEOUT = float(get_env("HTTP_TIMEOUT", "30"))

# Fetch pacing
FETCH_LIMIT = int(get_env("FETCH_LIMIT", "30"))
FETCH_BATCH_SIZE = int(get_env("FETCH_BATCH_SIZE", "4"))
FETCH_BATCH_DELAY = float(get_env("FETCH_BATCH_DELAY", "0.2"))  # seconds
MAX_MODELS_PER_ORG = int(get_env("MAX_MODELS_PER_ORG", "8"))

# Cache
CACHE_TTL_MINUTES = float(get_env("CACHE_TTL_MINUTES", "30"))

# Paths
CACHE_DIR = _path_env("RELEASE_TRACKER_CACHE_DIR", _PROJECT_ROOT / ".cache")
EXPORT_DIR = _path_env("RELEASE_TRACKER_EXPORT_DIR", _PROJECT_ROOT / "web" / "public" / "data")

# Email notifications, off unless all three are set
SMTP_USER = os.getenv("SMTP_USER")  # Gmail sender address
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")  # Gmail app password
NOTIFY_TO = os.getenv("NOTIFY_TO")  # recipient
