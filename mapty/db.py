import sqlite3
from pathlib import Path

SCHEMA_SQL = """\
-- Flat key/value pairs (the workout snapshot is stored under a single key)
CREATE TABLE IF NOT EXISTS kv_store (
    key                 TEXT PRIMARY KEY,
    value               TEXT NOT NULL,
    updated_at          TEXT DEFAULT (datetime('now'))
);
"""

DEFAULT_DB_PATH = Path.home() / "mapty" / "data" / "mapty.db"


def get_db_path(config=None):
    """Resolve the database path from config or fall back to default."""
    if config and "paths" in config and "db" in config["paths"]:
        return Path(config["paths"]["db"])
    return DEFAULT_DB_PATH


def get_connection(config=None):
    """Return a sqlite3 connection using the configured db path."""
    db_path = get_db_path(config)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def ensure_schema(conn):
    conn.executescript(SCHEMA_SQL)
    conn.commit()


def init_db(config=None):
    """Create all tables."""
    conn = get_connection(config)
    ensure_schema(conn)
    conn.close()
    db_path = get_db_path(config)
    print(f"Database initialized at {db_path}")
    return db_path


class KeyValueStore:
    """String-keyed store backed by the kv_store table. Every write commits."""

    def __init__(self, conn):
        self.conn = conn
        ensure_schema(conn)

    def get(self, key: str) -> str | None:
        row = self.conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str):
        self.conn.execute(
            """INSERT INTO kv_store (key, value) VALUES (?, ?)
               ON CONFLICT(key) DO UPDATE
               SET value = excluded.value, updated_at = datetime('now')""",
            (key, value),
        )
        self.conn.commit()

    def delete(self, key: str):
        self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self.conn.commit()
