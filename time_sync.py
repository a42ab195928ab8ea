"""
time_sync.py - Measure local clock drift against Steam

Steam rejects codes generated from a skewed clock. QueryTime returns Steam's
idea of "now"; the difference to the local clock is the time_offset that
steam_totp.generate_auth_code() accepts.

Usage:
    from time_sync import query_time_offset
    from steam_totp import generate_auth_code

    result = query_time_offset()
    code = generate_auth_code(shared_secret, time_offset=result.offset)

One request per call, no retries. Wrap it yourself if you need them.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from config import Settings, load_settings
from errors import MalformedResponseError, TimeQueryError
from steam_totp import get_time


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeOffset:
    offset: int       # seconds to add to the local clock
    latency_ms: int   # request round trip


def _server_time(data: Any) -> int:
    payload = data.get("response") if isinstance(data, dict) else None
    if not isinstance(payload, dict) or not payload.get("server_time"):
        raise MalformedResponseError("Malformed response")

    # server_time comes back as a numeric string
    try:
        return int(payload["server_time"])
    except (TypeError, ValueError):
        raise MalformedResponseError(f"Malformed response: server_time={payload['server_time']!r}") from None


def query_time_offset(
    session: Optional[requests.Session] = None,
    settings: Optional[Settings] = None,
) -> TimeOffset:
    """
    POST QueryTime once and return the offset between Steam and local time.

    Raises TimeQueryError on transport/HTTP failures and
    MalformedResponseError when the body has no usable server_time.
    """
    settings = settings or load_settings()
    http = session or requests

    log.debug(f"QueryTime: POST {settings.query_time_url}")
    start = time.time()
    try:
        r = http.post(
            settings.query_time_url,
            data=b"",
            headers={"Content-Length": "0"},
            timeout=settings.request_timeout_s,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        log.warning(f"QueryTime failed: {e}")
        raise TimeQueryError(str(e) or "Request failed") from e

    try:
        data = r.json()
    except ValueError as e:
        log.warning("QueryTime returned a non-JSON body")
        raise MalformedResponseError("Malformed response: body is not JSON") from e

    server_time = _server_time(data)
    end = time.time()

    result = TimeOffset(
        offset=server_time - get_time(),
        latency_ms=round((end - start) * 1000),
    )
    log.debug(f"QueryTime: offset={result.offset}s latency={result.latency_ms}ms")
    return result


def query_time_offset_callback(
    callback: Callable[[Optional[Exception], Optional[int], Optional[int]], Any],
    session: Optional[requests.Session] = None,
    settings: Optional[Settings] = None,
) -> threading.Thread:
    """
    Callback-style wrapper around query_time_offset().

    Runs the request on a daemon thread, then calls
    callback(None, offset, latency_ms) or callback(error, None, None).
    Every failure goes to the callback, including bad settings and errors
    raised by a caller-supplied session.
    """
    def _run():
        try:
            result = query_time_offset(session=session, settings=settings)
        except Exception as e:
            callback(e, None, None)
            return
        callback(None, result.offset, result.latency_ms)

    t = threading.Thread(target=_run, daemon=True)
    t.start()
    return t
