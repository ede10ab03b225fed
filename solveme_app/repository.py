from __future__ import annotations
from typing import Dict
from contextlib import closing
import time
from solveme_app.db import connect


def upsert_preference(db_path: str, key: str, value: str) -> None:
    with closing(connect(db_path)) as conn, conn:
        conn.execute(
            "INSERT OR REPLACE INTO preferences(key, value, updated) VALUES(?,?,?)",
            (key, value, int(time.time())),
        )


def load_preferences(db_path: str) -> Dict[str, str]:
    with closing(connect(db_path)) as conn:
        cur = conn.execute("SELECT key, value FROM preferences")
        return {r[0]: r[1] for r in cur.fetchall()}
