"""
Local key-value storage for values kept between runs (employee details).
"""

import json
import sqlite3
from pathlib import Path
from typing import Any, Optional

from .models import EmployeeDetails

EMPLOYEE_DETAILS_KEY = "employeeDetails"
DEFAULT_DB_PATH = Path.home() / ".expense_report.db"


def init_store_db(db_path: Path):
    """Initialize SQLite key-value table."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path.as_posix()) as conn:
        cur = conn.cursor()
        cur.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)
        conn.commit()


def get_value(db_path: Path, key: str, default: Any = None) -> Any:
    """Read a JSON value; missing keys and unreadable stores give `default`."""
    try:
        with sqlite3.connect(db_path.as_posix()) as conn:
            cur = conn.cursor()
            cur.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cur.fetchone()
    except sqlite3.Error as e:
        print(f"[WARN] Could not read from {db_path}: {e}")
        return default
    if row is None:
        return default
    try:
        return json.loads(row[0])
    except json.JSONDecodeError:
        return default


def set_value(db_path: Path, key: str, value: Any):
    """Store a JSON-serializable value under `key`."""
    try:
        with sqlite3.connect(db_path.as_posix()) as conn:
            cur = conn.cursor()
            cur.execute("""
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
            """, (key, json.dumps(value, ensure_ascii=False)))
            conn.commit()
    except sqlite3.Error as e:
        print(f"[WARN] Could not save to {db_path}: {e}")


def load_employee_details(db_path: Path) -> Optional[EmployeeDetails]:
    """Return saved employee details, or None if nothing valid is stored."""
    data = get_value(db_path, EMPLOYEE_DETAILS_KEY)
    if not isinstance(data, dict):
        return None
    try:
        return EmployeeDetails(name=data.get("name", ""), id=data.get("id", ""))
    except ValueError:
        return None


def save_employee_details(db_path: Path, details: EmployeeDetails):
    set_value(db_path, EMPLOYEE_DETAILS_KEY, details.to_dict())
