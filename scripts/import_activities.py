#!/usr/bin/env python3
import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import settings
from src.core.logging_config import configure_logging
from src.db.session import SessionLocal, create_tables
from src.schemas.activity import ActivityImport
from src.services.activity_service import delete_all_activities, import_activities


DEFAULT_INPUT = PROJECT_ROOT / "data" / "activities.json"

# Export files use the browser app's camelCase keys.
CAMEL_TO_FIELD = {
    "imageUrl": "image_url",
    "ageGroup": "age_group",
    "groupName": "group_name",
    "detailsUrl": "details_url",
    "isVisible": "is_visible",
    "minAge": "age_min",
    "maxAge": "age_max",
}


def _normalize_row(raw: dict) -> dict:
    row = {CAMEL_TO_FIELD.get(key, key): value for key, value in raw.items()}
    if row.get("id") is not None:
        row["id"] = str(row["id"])
    for key in ("title", "category", "description", "location", "age_group", "schedule", "details_url", "image_url"):
        if row.get(key) is None:
            row.pop(key, None)
    if not isinstance(row.get("price"), (int, float)):
        row["price"] = 0
    return row


def load_rows(path: Path) -> tuple[list[ActivityImport], list[str]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("activities", [])

    rows: list[ActivityImport] = []
    errors: list[str] = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            errors.append(f"row {index}: not an object")
            continue
        try:
            rows.append(ActivityImport.model_validate(_normalize_row(raw)))
        except ValidationError as exc:
            errors.append(f"row {index}: {exc.errors()[0]['msg']}")
    return rows, errors


def main() -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Load an activities.json export. "
            "Print parsed rows, and optionally upsert them into the catalog DB."
        )
    )
    parser.add_argument(
        "--input",
        default=str(DEFAULT_INPUT),
        help="Path to the JSON export (default: data/activities.json).",
    )
    parser.add_argument(
        "--commit",
        action="store_true",
        help="When set, upsert parsed rows into the database.",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete every activity before importing. Without --commit the script exits after deletion.",
    )
    args = parser.parse_args()

    configure_logging(settings.log_level)
    create_tables()

    if args.clear:
        with SessionLocal() as db:
            deleted = delete_all_activities(db)
        print(f"Deleted activities: {deleted}")
        if not args.commit:
            print("Clear completed. Pass --commit with --clear to repopulate immediately.")
            return 0

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Input JSON file not found: {input_path}")
        return 1

    rows, errors = load_rows(input_path)
    for row in rows:
        print(json.dumps(row.model_dump(mode="json"), ensure_ascii=False))
    for error in errors:
        print(f"Skipped {error}")
    print(f"Parsed rows: {len(rows)} (skipped {len(errors)})")

    if not args.commit:
        print("Dry run only. Pass --commit to write to DB.")
        return 0

    with SessionLocal() as db:
        written = import_activities(db, rows)
    print(f"Committed rows: {written}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
