# src/engine/config.py
"""
Scheduler settings, read once from the environment.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class SchedulerConfig:
    database_url: str = "sqlite:///./sensei_scans.db"
    tick_interval: float = 0.8   # seconds between admission ticks
    scan_duration: float = 1.2   # simulated scan latency
    poll_interval: float = 0.1   # how often the driver checks for due completions
    log_level: str = "INFO"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logging.warning(f"Ignoring {name}={raw!r}: not a number, using {default}")
        return default
    if value <= 0:
        logging.warning(f"Ignoring {name}={raw!r}: must be positive, using {default}")
        return default
    return value


def load_config() -> SchedulerConfig:
    defaults = SchedulerConfig()
    return SchedulerConfig(
        database_url=os.getenv("SENSEI_DATABASE_URL", defaults.database_url),
        tick_interval=_float_env("SENSEI_TICK_INTERVAL", defaults.tick_interval),
        scan_duration=_float_env("SENSEI_SCAN_DURATION", defaults.scan_duration),
        poll_interval=_float_env("SENSEI_POLL_INTERVAL", defaults.poll_interval),
        log_level=os.getenv("SENSEI_LOG_LEVEL", defaults.log_level).upper(),
    )


@lru_cache(maxsize=1)
def get_config() -> SchedulerConfig:
    return load_config()
