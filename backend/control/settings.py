from __future__ import annotations

import os
from pathlib import Path

HIGHLIGHT_STRATEGIES: tuple[str, ...] = ("uniqueFeatureIdLookup", "matchedValue")


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _flag(name: str, default: str) -> bool:
    v = (os.getenv(name) or default).strip().lower()
    return v not in {"0", "false", "no", "off"}


def options_path() -> Path:
    return Path(
        os.getenv("MAPSEARCH_CONFIG_PATH") or (_repo_root() / "config" / "search.yaml")
    )


def cache_bust_enabled() -> bool:
    return _flag("MAPSEARCH_CACHE_BUST", "1")


def dedup_enabled() -> bool:
    return _flag("MAPSEARCH_DEDUP", "1")


def http_timeout_s() -> float:
    try:
        return float(os.getenv("MAPSEARCH_HTTP_TIMEOUT_S") or 30.0)
    except ValueError:
        return 30.0


def highlight_strategy() -> str:
    v = (os.getenv("MAPSEARCH_HIGHLIGHT_STRATEGY") or "").strip()
    return v if v in HIGHLIGHT_STRATEGIES else HIGHLIGHT_STRATEGIES[0]


def log_level() -> str:
    return (os.getenv("MAPSEARCH_LOG_LEVEL") or "INFO").strip().upper()
