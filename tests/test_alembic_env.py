import sqlite3
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _upgrade(url: str) -> None:
    subprocess.run(
        [
            sys.executable,
            "-m",
            "alembic",
            "-c",
            str(ROOT / "tabletap" / "alembic.ini"),
            "-x",
            f"db_url={url}",
            "upgrade",
            "head",
        ],
        check=True,
        cwd=ROOT,
    )


def _tables(path: Path) -> set[str]:
    with sqlite3.connect(path) as conn:
        rows = conn.execute("select name from sqlite_master where type='table'").fetchall()
    return {name for (name,) in rows}


def test_migrations_support_async_and_sync(tmp_path):
    async_db = tmp_path / "async.db"
    sync_db = tmp_path / "sync.db"
    _upgrade(f"sqlite+aiosqlite:///{async_db}")
    _upgrade(f"sqlite:///{sync_db}")
    for path in (async_db, sync_db):
        assert {
            "cafes",
            "orders",
            "order_items",
            "ratings",
            "customers",
            "menu_item_ingredients",
            "inventory_logs",
        } <= _tables(path)
