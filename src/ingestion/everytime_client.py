from __future__ import annotations

import requests

from src.engine.errors import TimetableTransportError
from src.ingestion.feed_config import FeedConfig
from src.utils.log import log_line


def fetch_timetable(identifier: str, config: FeedConfig) -> str:
    """POST the friend-timetable lookup and return the raw XML body."""
    try:
        resp = requests.post(
            config.url,
            data={"identifier": identifier},
            headers=config.headers(),
            timeout=config.timeout_seconds,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        log_line("TIMETABLE", "failed", level="ERROR", identifier=identifier, error=exc)
        raise TimetableTransportError() from exc
    return resp.text or ""
