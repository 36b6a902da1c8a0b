"""Configuration management for the formula normalizer service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _get_base_dir() -> Path:
    """Project root (the directory holding app.py)."""
    return Path(__file__).resolve().parents[1]


# Load .env from project root when present; real environment variables win
_env_path = _get_base_dir() / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Application settings."""

    base_dir: Path = _get_base_dir()
    host: str = os.getenv("FORMULA_HOST", "127.0.0.1")
    port: int = _env_int("FORMULA_PORT", 3001)
    log_level: str = os.getenv("FORMULA_LOG_LEVEL", "INFO").upper()
    log_file: Path = Path(
        os.getenv("FORMULA_LOG_FILE", str(base_dir / "formula_normalizer.log"))
    )
    # Requests carrying more LaTeX than this are rejected with HTTP 413
    max_latex_chars: int = _env_int("FORMULA_MAX_LATEX_CHARS", 20000)


settings = Settings()
