# start_app.py
"""Apply migrations and serve the TableTap API."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

import config

ALEMBIC_INI = Path(__file__).resolve().parent / "tabletap" / "alembic.ini"


def migrate() -> None:
    """Upgrade the configured database to the latest revision."""

    try:
        subprocess.run(
            [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI), "upgrade", "head"],
            check=True,
            capture_output=True,
            text=True,
        )
    except subprocess.CalledProcessError as exc:
        if exc.stdout:
            sys.stdout.write(exc.stdout)
        if exc.stderr:
            sys.stderr.write(exc.stderr)
        print(f"database migration failed (exit code {exc.returncode})", file=sys.stderr)
        raise SystemExit(exc.returncode)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--skip-db-migrations",
        action="store_true",
        help="Start without running Alembic migrations",
    )
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    args = parser.parse_args(argv)

    load_dotenv()

    env_flag = os.getenv("SKIP_DB_MIGRATIONS")
    skip = args.skip_db_migrations or (
        env_flag and env_flag.lower() not in {"0", "false"}
    )
    if not skip:
        migrate()
        # Schema is owned by Alembic from here on.
        os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")

    config.get_settings.cache_clear()
    config.get_settings()

    uvicorn.run(
        "tabletap.app.main:app",
        host="0.0.0.0",  # nosec B104: bind for local development
        port=args.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
