from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional

from dotenv import load_dotenv

from . import __version__
from .retry import DEFAULT_RETRY_LIMIT

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"dreamcommerce-python/{__version__}"


def _to_int(v: str, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _to_float(v: str, default: float) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


@dataclass
class Config:
    retry_limit: int = DEFAULT_RETRY_LIMIT
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "WARNING"
    headers: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if self.retry_limit < 0:
            self.retry_limit = 0
        if self.headers is None:
            self.headers = {
                "User-Agent": self.user_agent,
                "Accept": "application/json",
            }

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        retry_limit = _to_int(
            os.getenv("DREAMCOMMERCE_RETRY_LIMIT", str(DEFAULT_RETRY_LIMIT)), DEFAULT_RETRY_LIMIT
        )
        timeout = _to_float(os.getenv("DREAMCOMMERCE_TIMEOUT", str(DEFAULT_TIMEOUT)), DEFAULT_TIMEOUT)
        if timeout <= 0:
            timeout = DEFAULT_TIMEOUT
        user_agent = os.getenv("DREAMCOMMERCE_USER_AGENT", "").strip() or DEFAULT_USER_AGENT
        log_level = os.getenv("DREAMCOMMERCE_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"

        return cls(
            retry_limit=retry_limit,
            timeout=timeout,
            user_agent=user_agent,
            log_level=log_level,
        )
