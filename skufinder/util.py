"""Utility helpers for the SKU finder."""
from __future__ import annotations

import json
import os
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import HttpSettings, load_settings


LOG_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}
DEFAULT_LOG_LEVEL = LOG_LEVELS.get(os.getenv("SKUFINDER_LOG_LEVEL", "INFO").upper(), 20)


def log(level: str, message: str) -> None:
    lvl = LOG_LEVELS.get(level.upper(), 20)
    if lvl >= DEFAULT_LOG_LEVEL:
        now = iso_now()
        print(f"[{now}] {level.upper()}: {message}")


def iso_now() -> str:
    return utc_now().isoformat()


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def epoch_ms() -> int:
    return int(time.time() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def parse_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def format_number(value: float) -> str:
    """Render a number the way the capability feed does (``2`` not ``2.0``)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def make_session(settings: Optional[HttpSettings] = None) -> requests.Session:
    settings = settings or load_settings().http
    session = requests.Session()
    session.headers.update({"User-Agent": settings.user_agent, "Accept": "application/json"})
    retry = Retry(
        total=settings.max_retries,
        read=settings.max_retries,
        connect=settings.max_retries,
        backoff_factor=settings.backoff_s,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=("GET", "POST"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.request = _wrap_request(session.request, settings.timeout_s)  # type: ignore[method-assign]
    return session


def _wrap_request(func, timeout: int):
    def wrapped(method: str, url: str, **kwargs):
        kwargs.setdefault("timeout", timeout)
        return func(method, url, **kwargs)

    return wrapped


def write_json_atomic(path: Path, obj: Any) -> bool:
    payload = json.dumps(obj, indent=2, ensure_ascii=False) + "\n"
    return _write_atomic(path, payload.encode("utf-8"))


def write_csv_atomic(path: Path, rows: Iterable[Dict[str, Any]]) -> bool:
    df = pd.DataFrame(list(rows))
    payload = df.to_csv(index=False) if not df.empty else ""
    return _write_atomic(path, payload.encode("utf-8"))


def write_text_atomic(path: Path, text: str) -> bool:
    return _write_atomic(path, text.encode("utf-8"))


def _write_atomic(path: Path, payload: bytes) -> bool:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=".tmp", suffix=path.suffix)
    with os.fdopen(tmp_fd, "wb") as fh:
        fh.write(payload)
    if path.exists() and path.read_bytes() == payload:
        os.remove(tmp_path)
        return False
    os.replace(tmp_path, path)
    return True


__all__ = [
    "log",
    "iso_now",
    "utc_now",
    "epoch_ms",
    "from_epoch_ms",
    "parse_float",
    "format_number",
    "make_session",
    "write_json_atomic",
    "write_csv_atomic",
    "write_text_atomic",
]
