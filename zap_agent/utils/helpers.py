"""Filesystem and logging helpers."""

import os
import sys
from pathlib import Path

from loguru import logger


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Active data directory (override with ZAP_AGENT_DATA_DIR)."""
    override = os.environ.get("ZAP_AGENT_DATA_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".zap-agent"


def setup_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr at INFO, or DEBUG when verbose."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {name} | {message}",
    )


def truncate(text: str, limit: int = 80) -> str:
    """Compact text to one line for log previews."""
    compact = " ".join((text or "").split())
    if len(compact) <= limit:
        return compact
    return compact[:limit] + "..."
