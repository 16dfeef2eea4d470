"""Runtime configuration, read once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = "INFO"
    movement_history_limit: int = 100
    cas_retries: int = 3
    alerts_file: Path | None = None

    @property
    def alerts_path(self) -> Path:
        return self.alerts_file or self.data_dir / "alerts.jsonl"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``IMS_*`` variables; raise ValueError on bad values."""
        env = os.environ if environ is None else environ

        log_level = env.get("IMS_LOG_LEVEL", "INFO").upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"IMS_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")

        alerts = env.get("IMS_ALERTS_FILE")
        return Settings(
            data_dir=Path(env.get("IMS_DATA_DIR") or DEFAULT_DATA_DIR),
            log_level=log_level,
            movement_history_limit=_positive_int(env, "IMS_MOVEMENT_HISTORY_LIMIT", 100),
            cas_retries=_positive_int(env, "IMS_CAS_RETRIES", 3, allow_zero=True),
            alerts_file=Path(alerts) if alerts else None,
        )


def _positive_int(env: Mapping[str, str], name: str, default: int, allow_zero: bool = False) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(f"{name} must be {'>= 0' if allow_zero else '> 0'}, got {value}")
    return value
