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


# Paths
CACHE_DIR = Path(get_env("LLMFIT_CACHE_DIR", str(Path.home() / ".cache" / "llmfit")))

# Upstream sources
HF_ENDPOINT = get_env("HF_ENDPOINT", "https://huggingface.co").rstrip("/")
GPU_DATABASE_BASE_URL = get_env(
    "GPU_DATABASE_BASE_URL",
    "https://raw.githubusercontent.com/RightNow-AI/RightNow-GPU-Database/main/data",
).rstrip("/")
HTTP_TIMEOUT = float(get_env("LLMFIT_HTTP_TIMEOUT", "30"))

# Cache lifetimes (seconds)
GPU_CACHE_TTL_SECONDS = float(get_env("LLMFIT_GPU_CACHE_TTL", str(7 * 24 * 60 * 60)))
MODEL_CACHE_TTL_SECONDS = float(get_env("LLMFIT_MODEL_CACHE_TTL", str(24 * 60 * 60)))
