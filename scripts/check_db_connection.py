#!/usr/bin/env python3
import sys
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import make_url

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import settings
from src.db.session import engine


def _masked(value: str | None) -> str:
    if not value:
        return "<empty>"
    if len(value) <= 2:
        return "*" * len(value)
    return f"{value[0]}{'*' * (len(value) - 2)}{value[-1]}"


def main() -> int:
    url = make_url(settings.database_dsn)
    print("DB runtime settings:")
    print(f"- DATABASE_URL set: {bool((settings.database_url or '').strip())}")
    print(f"- driver: {url.drivername}")
    print(f"- host: {url.host!r}")
    print(f"- port: {url.port}")
    print(f"- user: {url.username!r}")
    print(f"- database: {url.database!r}")
    print(f"- password: {_masked(url.password)}")

    if url.password == "change_me":
        print(
            "ERROR: the database password is still set to 'change_me'. "
            "Set your real password in .env."
        )
        return 2

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print(f"OK: Connected to {url.get_backend_name()} and executed SELECT 1.")
        return 0
    except Exception as exc:
        print(f"ERROR: {exc}")
        print("Tip: verify DATABASE_URL (or the MYSQL_* variables) and the user's grants.")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
