from __future__ import annotations

import argparse
import json
import sys

from src.config.settings import ensure_runtime_dirs, load_settings, validate_settings
from src.db.sqlite_client import get_connection, init_schema
from src.engine.errors import CommontimeError
from src.engine.fixed_schedule import consolidate_fixed_schedule, seed_reference_slots
from src.ingestion.timetable_normalizer import normalize_external_timetable


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Import a class timetable and print it as weekday slot lists."
    )
    parser.add_argument("--identifier", required=True)
    parser.add_argument(
        "--user-id",
        type=int,
        default=None,
        help="Replace this user's fixed schedule with the imported slots.",
    )
    args = parser.parse_args(argv)

    settings = load_settings()
    errors = validate_settings(settings)
    if errors:
        for error in errors:
            print(f"[CONFIG] {error}", file=sys.stderr)
        return 2

    try:
        schedules = normalize_external_timetable(args.identifier)
    except CommontimeError as exc:
        print(json.dumps(exc.to_dict(), ensure_ascii=False), file=sys.stderr)
        return 1

    if args.user_id is not None:
        ensure_runtime_dirs(settings)
        conn = get_connection(settings.sqlite_db_path)
        try:
            init_schema(conn)
            seed_reference_slots(conn, settings.fixed_schedule_start, settings.fixed_schedule_end)
            consolidate_fixed_schedule(conn, args.user_id, schedules)
        except CommontimeError as exc:
            print(json.dumps(exc.to_dict(), ensure_ascii=False), file=sys.stderr)
            return 1
        finally:
            conn.close()

    payload = {"schedules": [entry.to_dict() for entry in schedules]}
    print(json.dumps(payload, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
