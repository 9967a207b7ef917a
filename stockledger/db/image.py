"""Whole-database image export/import over the engine's SQLite connection.

The engine is expected to hold a single DBAPI connection (Flask-SQLAlchemy
uses ``StaticPool`` for in-memory SQLite), so the image read here is the
same database the session writes to. Callers commit before exporting.
"""

import sqlite3

from stockledger.configs import db
from stockledger.exceptions import CorruptSnapshotError


def supports_images() -> bool:
    raw = db.engine.raw_connection()
    try:
        conn = raw.driver_connection
        return hasattr(conn, "serialize") and hasattr(conn, "deserialize")
    finally:
        raw.close()


def export_image() -> bytes:
    raw = db.engine.raw_connection()
    try:
        return bytes(raw.driver_connection.serialize())
    finally:
        raw.close()


def import_image(data: bytes, key: str = "image") -> None:
    """Replace the current database with ``data``.

    Raises CorruptSnapshotError when SQLite refuses the image, either on
    load or on the first read of its schema.
    """
    db.session.remove()
    raw = db.engine.raw_connection()
    try:
        conn = raw.driver_connection
        conn.deserialize(data)
        conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
    except sqlite3.DatabaseError as e:
        raise CorruptSnapshotError(key, str(e)) from e
    finally:
        raw.close()
