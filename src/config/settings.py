from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

TIME_PATTERN = re.compile(r"^\d{2}:\d{2}$")


@dataclass(frozen=True)
class Settings:
    database_url: str
    sqlite_db_path: str
    log_level: str
    timetable_feed_config_path: str
    timetable_timeout_seconds: int
    fixed_schedule_start: str
    fixed_schedule_end: str


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "").strip(),
        sqlite_db_path=os.getenv("SQLITE_DB_PATH", "data/commontime.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        timetable_feed_config_path=os.getenv(
            "TIMETABLE_FEED_CONFIG_PATH", "config/timetable_feed.yaml"
        ),
        timetable_timeout_seconds=int(os.getenv("TIMETABLE_TIMEOUT_SECONDS", "10")),
        fixed_schedule_start=os.getenv("FIXED_SCHEDULE_START", "00:00"),
        fixed_schedule_end=os.getenv("FIXED_SCHEDULE_END", "24:00"),
    )


def validate_settings(settings: Settings) -> list[str]:
    errors: list[str] = []
    if settings.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
        errors.append("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR")
    if not settings.timetable_feed_config_path.strip():
        errors.append("TIMETABLE_FEED_CONFIG_PATH is required")
    if settings.timetable_timeout_seconds <= 0:
        errors.append("TIMETABLE_TIMEOUT_SECONDS must be > 0")
    for name, value in (
        ("FIXED_SCHEDULE_START", settings.fixed_schedule_start),
        ("FIXED_SCHEDULE_END", settings.fixed_schedule_end),
    ):
        if not TIME_PATTERN.match(value):
            errors.append(f"{name} must be HH:MM")
    if (
        TIME_PATTERN.match(settings.fixed_schedule_start)
        and TIME_PATTERN.match(settings.fixed_schedule_end)
        and settings.fixed_schedule_start >= settings.fixed_schedule_end
    ):
        errors.append("FIXED_SCHEDULE_START must be before FIXED_SCHEDULE_END")
    if settings.database_url and not settings.database_url.startswith(
        ("postgres://", "postgresql://")
    ):
        errors.append("DATABASE_URL must start with postgres:// or postgresql://")
    return errors


def ensure_runtime_dirs(settings: Settings) -> None:
    if not settings.database_url:
        Path(settings.sqlite_db_path).parent.mkdir(parents=True, exist_ok=True)
