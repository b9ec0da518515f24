# threat_rl/config.py

"""
Configuration.

Fixed model parameters are module constants; deployment settings come from
THREAT_RL_* environment variables via Settings.from_env().

Environment
-----------
THREAT_RL_LOG_LEVEL        DEBUG | INFO | WARNING | ERROR   (default INFO)
THREAT_RL_LOG_FILE         rotating log file path            (default: console only)
THREAT_RL_TIMELINE_START   ISO date of the first replay week (default 2023-01-01)
THREAT_RL_TIMELINE_END     ISO date of the last replay week  (default 2024-12-31)
THREAT_RL_API_HOST         Flask bind host                   (default 127.0.0.1)
THREAT_RL_API_PORT         Flask bind port                   (default 5000)
THREAT_RL_MAX_CONTENT_MB   request body cap for corpus uploads (default 50)
"""

import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .errors import ConfigurationError

# ── Model constants ───────────────────────────────────────────────────────────

PRIOR_SUCCESS = 1
PRIOR_FAILURE = 1

# Progressive replay is always reported as 4 contiguous batches ("weeks")
PROGRESSIVE_WEEKS = 4

# Placeholder calendar the learning curve is labelled with
DEFAULT_TIMELINE = ("2023-01-01", "2024-12-31")

# ── Deployment settings ───────────────────────────────────────────────────────

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_file: Optional[str] = None
    timeline_start: str = DEFAULT_TIMELINE[0]
    timeline_end: str = DEFAULT_TIMELINE[1]
    api_host: str = "127.0.0.1"
    api_port: int = 5000
    max_content_mb: int = 50

    @property
    def timeline(self) -> tuple[str, str]:
        return self.timeline_start, self.timeline_end

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ

        log_level = env.get("THREAT_RL_LOG_LEVEL", cls.log_level).upper()
        if log_level not in _LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {log_level}", config_key="THREAT_RL_LOG_LEVEL"
            )

        start = _parse_date(env, "THREAT_RL_TIMELINE_START", cls.timeline_start)
        end = _parse_date(env, "THREAT_RL_TIMELINE_END", cls.timeline_end)
        if date.fromisoformat(end) < date.fromisoformat(start):
            raise ConfigurationError(
                f"Timeline ends before it starts: {start} > {end}",
                config_key="THREAT_RL_TIMELINE_END",
            )

        return cls(
            log_level=log_level,
            log_file=env.get("THREAT_RL_LOG_FILE") or None,
            timeline_start=start,
            timeline_end=end,
            api_host=env.get("THREAT_RL_API_HOST", cls.api_host),
            api_port=_parse_int(env, "THREAT_RL_API_PORT", cls.api_port),
            max_content_mb=_parse_int(env, "THREAT_RL_MAX_CONTENT_MB", cls.max_content_mb),
        )


def _parse_int(env, key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}", config_key=key, cause=exc)
    if value <= 0:
        raise ConfigurationError(f"{key} must be > 0, got {value}", config_key=key)
    return value


def _parse_date(env, key: str, default: str) -> str:
    raw = env.get(key) or default
    try:
        return date.fromisoformat(raw).isoformat()
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an ISO date, got {raw!r}", config_key=key, cause=exc)
