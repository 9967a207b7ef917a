"""
Database images as older deployments left them, built with plain sqlite3.
"""

import sqlite3

# materials as the earliest deployments created it: no code/location/supplier
LEGACY_MATERIALS_DDL = """
CREATE TABLE materials (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    specification TEXT,
    unit TEXT NOT NULL,
    current_stock INTEGER DEFAULT 0,
    min_stock INTEGER DEFAULT 0,
    max_stock INTEGER DEFAULT 0,
    unit_price REAL DEFAULT 0,
    remark TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""

CURRENT_MATERIALS_DDL = """
CREATE TABLE materials (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    specification TEXT,
    unit TEXT NOT NULL,
    current_stock INTEGER DEFAULT 0,
    min_stock INTEGER DEFAULT 0,
    max_stock INTEGER DEFAULT 0,
    unit_price REAL DEFAULT 0,
    location TEXT,
    supplier TEXT,
    remark TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""

INBOUND_DDL = """
CREATE TABLE inbound_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    material_id INTEGER NOT NULL,
    quantity INTEGER NOT NULL,
    unit_price REAL DEFAULT 0,
    total_amount REAL DEFAULT 0,
    supplier TEXT,
    batch_number TEXT,
    production_date DATE,
    expiry_date DATE,
    operator TEXT NOT NULL,
    remark TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (material_id) REFERENCES materials(id)
)
"""


def build_image(*statements: str, rows=(), user_version: int = 0) -> bytes:
    """Run DDL and inserts on a scratch database and return its serialized image."""
    conn = sqlite3.connect(":memory:")
    try:
        for ddl in statements:
            conn.execute(ddl)
        for sql, params in rows:
            conn.execute(sql, params)
        if user_version:
            conn.execute(f"PRAGMA user_version = {int(user_version)}")
        conn.commit()
        return conn.serialize()
    finally:
        conn.close()
