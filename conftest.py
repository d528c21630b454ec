import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

# Tests configure their own SQLite file per test; these only keep imports offline.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_tabletap.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("SECRET_KEY", "x" * 32)
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")
os.environ.setdefault("VAPID_PUBLIC_KEY", "test-vapid-key")
