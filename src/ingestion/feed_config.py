from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

DEFAULT_FEED = {
    "url": "https://api.everytime.kr/find/timetable/table/friend",
    "user_agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "referer": "https://everytime.kr/",
}


@dataclass(frozen=True)
class FeedConfig:
    url: str
    user_agent: str
    referer: str
    timeout_seconds: int

    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        if self.referer:
            headers["Referer"] = self.referer
        return headers


def _coerce_feed(item: dict[str, Any], timeout_seconds: int) -> FeedConfig:
    merged = {**DEFAULT_FEED, **{k: v for k, v in item.items() if v is not None}}
    return FeedConfig(
        url=str(merged.get("url", "")).strip(),
        user_agent=str(merged.get("user_agent", "")).strip(),
        referer=str(merged.get("referer", "")).strip(),
        timeout_seconds=int(merged.get("timeout_seconds", timeout_seconds)),
    )


def load_feed_config(config_path: str, timeout_seconds: int = 10) -> FeedConfig:
    path = Path(config_path)
    raw: dict[str, Any] = {}
    if path.exists():
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        feed = payload.get("timetable_feed", {}) if isinstance(payload, dict) else {}
        raw = feed if isinstance(feed, dict) else {}
    config = _coerce_feed(raw, timeout_seconds)
    if not config.url:
        return _coerce_feed({}, timeout_seconds)
    return config
