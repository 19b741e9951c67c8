from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = ROOT_DIR / "data"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    log_level: str = "INFO"
    question_count: int = 20
    question_seconds: int = 21
    part1_seconds: int = 420
    part2_seconds: int = 180


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default=%r", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Non-positive %s=%r; using default=%r", name, raw, default)
        return default
    return value


def load_settings() -> Settings:
    data_dir = os.getenv("SALESFIT_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        log_level=(os.getenv("SALESFIT_LOG_LEVEL") or "INFO").upper(),
        question_count=_env_int("SALESFIT_QUESTION_COUNT", 20),
        question_seconds=_env_int("SALESFIT_QUESTION_SECONDS", 21),
        part1_seconds=_env_int("SALESFIT_PART1_SECONDS", 420),
        part2_seconds=_env_int("SALESFIT_PART2_SECONDS", 180),
    )


def configure_logging(level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger.

    Safe to call on every Streamlit rerun: an existing handler is reused.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(getattr(handler, "_salesfit", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler._salesfit = True
    root.addHandler(handler)
