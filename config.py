"""
config.py - Settings for talking to Steam

.env variables used:
- STEAM_QUERY_TIME_URL      (default: ITwoFactorService/QueryTime/v1)
- STEAM_REQUEST_TIMEOUT_S   (default: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


QUERY_TIME_URL = "https://api.steampowered.com/ITwoFactorService/QueryTime/v1/"
DEFAULT_TIMEOUT_S = 10.0


def _env_first(*names: str) -> str | None:
    for n in names:
        v = os.environ.get(n)
        if v and v.strip():
            return v.strip()
    return None


@dataclass(frozen=True)
class Settings:
    query_time_url: str = QUERY_TIME_URL
    request_timeout_s: float = DEFAULT_TIMEOUT_S


def load_settings(dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv()

    url = _env_first("STEAM_QUERY_TIME_URL") or QUERY_TIME_URL

    raw_timeout = _env_first("STEAM_REQUEST_TIMEOUT_S")
    if raw_timeout is None:
        timeout_s = DEFAULT_TIMEOUT_S
    else:
        try:
            timeout_s = float(raw_timeout)
        except ValueError:
            raise ValueError(f"STEAM_REQUEST_TIMEOUT_S must be a number, got {raw_timeout!r}") from None
        if timeout_s <= 0:
            raise ValueError(f"STEAM_REQUEST_TIMEOUT_S must be > 0, got {raw_timeout!r}")

    return Settings(query_time_url=url, request_timeout_s=timeout_s)
