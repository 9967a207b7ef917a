"""
Schema management for the materials database.

The schema version lives inside the image itself (``PRAGMA user_version``),
so it travels with every snapshot. Images written before versioning carry
version 0; for those the ``materials`` columns are inspected to decide which
layout they hold.

Versions:
    1  legacy ``materials`` without ``code`` / ``location`` / ``supplier``
    2  current layout

Only ``materials`` ever changed shape. Upgrading it is a rebuild-with-backfill:
the rows are read into memory, the table is dropped and recreated, and every
row is written back under the new columns. The other tables are only ever
created when missing.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import insert, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.types import DateTime, Integer, Numeric

from stockledger.configs import db
from stockledger.db.models import Material
from stockledger.exceptions import SchemaMigrationError, SchemaVersionError
from stockledger.logging_config import get_logger

logger = get_logger("db.schema")

SCHEMA_VERSION = 2

MATERIALS = Material.__tablename__
REQUIRED_MATERIAL_COLUMNS = ("code", "location", "supplier")

# old column name -> current column name
LEGACY_COLUMN_ALIASES = {"material_code": "code"}


# ---------------- introspection ----------------
def _inspector():
    return inspect(db.session.connection())


def table_exists(name: str) -> bool:
    return _inspector().has_table(name)


def material_columns() -> set[str]:
    return {c["name"] for c in _inspector().get_columns(MATERIALS)}


def stamped_version() -> int:
    return int(db.session.execute(text("PRAGMA user_version")).scalar() or 0)


def _stamp(version: int) -> None:
    # PRAGMA takes no bound parameters
    db.session.execute(text(f"PRAGMA user_version = {int(version)}"))


def detect_version() -> int:
    """Version of the current image; 0 means there is no materials table yet."""
    version = stamped_version()
    if version:
        return version
    if not table_exists(MATERIALS):
        return 0
    columns = material_columns()
    if any(c not in columns for c in REQUIRED_MATERIAL_COLUMNS):
        return 1
    return 2


def create_tables() -> list[str]:
    """Create every missing table; returns the names created."""
    missing = [t.name for t in db.metadata.sorted_tables if not table_exists(t.name)]
    if missing:
        db.metadata.create_all(bind=db.session.connection(), checkfirst=True)
    return missing


# ---------------- backfill coercion ----------------
def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _as_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")
    return d if d.is_finite() else Decimal("0")


def _as_int(value) -> int:
    return int(_as_decimal(value))


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            pass
    return datetime.utcnow()


def _coerce(column, value):
    if isinstance(column.type, DateTime):
        return _as_datetime(value)
    if isinstance(column.type, Numeric):
        return _as_decimal(value)
    if isinstance(column.type, Integer):
        return _as_int(value)
    return _as_text(value)


def backfill_row(old: dict) -> dict:
    """Map one backed-up row onto the current ``materials`` columns.

    Columns the old row lacks take their empty value (``""`` or ``0``).
    The old id is kept when it is a usable integer so movement rows keep
    pointing at the same material.
    """
    source = {k: v for k, v in old.items() if k in Material.__table__.c}
    for legacy, current in LEGACY_COLUMN_ALIASES.items():
        if legacy in old and source.get(current) in (None, ""):
            source[current] = old[legacy]

    row = {}
    for column in Material.__table__.columns:
        if column.primary_key:
            try:
                row[column.name] = int(source[column.name])
            except (KeyError, TypeError, ValueError):
                pass
            continue
        row[column.name] = _coerce(column, source.get(column.name))
    return row


# ---------------- rebuild-with-backfill ----------------
def _backup_materials(conn) -> list[dict]:
    try:
        rows = conn.execute(text(f"SELECT * FROM {MATERIALS}")).mappings().all()
        return [dict(r) for r in rows]
    except SQLAlchemyError as e:
        logger.warning("materials_backup_failed", exc_info=True)
        try:
            count = conn.execute(text(f"SELECT count(*) FROM {MATERIALS}")).scalar()
        except SQLAlchemyError:
            count = 0
        if count:
            raise SchemaMigrationError(
                MATERIALS, f"{count} rows exist but could not be read"
            ) from e
        return []


def rebuild_materials_table(backup: list[dict] | None = None) -> int:
    """Drop and recreate ``materials``, restoring every row. Returns the row count.

    ``backup`` is the row set read before anything was dropped; when omitted
    it is read from the current table. Rows whose id repeats an earlier one
    are restored under a fresh autoincrement id.
    """
    conn = db.session.connection()
    if backup is None:
        backup = _backup_materials(conn)
    logger.info("materials_backup_taken", extra={"rows": len(backup)})

    keyed, unkeyed = [], []
    used_ids = set()
    for old in backup:
        row = backfill_row(old)
        if "id" in row and row["id"] in used_ids:
            del row["id"]
        if "id" in row:
            used_ids.add(row["id"])
            keyed.append(row)
        else:
            unkeyed.append(row)
    if unkeyed:
        logger.warning("materials_ids_reassigned", extra={"rows": len(unkeyed)})

    table = Material.__table__
    table.drop(conn, checkfirst=True)
    table.create(conn)

    # explicit ids first so autoincrement never hands out one of them
    for row in keyed + unkeyed:
        conn.execute(insert(table).values(**row))

    restored = conn.execute(text(f"SELECT count(*) FROM {MATERIALS}")).scalar()
    if restored < len(backup):
        raise SchemaMigrationError(
            MATERIALS, f"restored {restored} of {len(backup)} rows"
        )

    logger.info("materials_table_rebuilt", extra={"rows": restored})
    return restored


# version upgraded *from* -> step; each step gets the pre-migration backup
MIGRATIONS = {
    1: rebuild_materials_table,
}


# ---------------- entry point ----------------
def _migrate(version: int, backup: list[dict] | None) -> bool:
    if version > SCHEMA_VERSION:
        raise SchemaVersionError(version, SCHEMA_VERSION)

    changed = False
    while version < SCHEMA_VERSION:
        logger.info(
            "schema_migration_step",
            extra={"from_version": version, "to_version": version + 1},
        )
        MIGRATIONS[version](backup)
        version += 1
        changed = True

    if create_tables():
        changed = True
    if stamped_version() != SCHEMA_VERSION:
        _stamp(SCHEMA_VERSION)
        changed = True
    return changed


def ensure_schema() -> bool:
    """Bring the current image up to ``SCHEMA_VERSION``.

    Safe to call repeatedly. Returns True when anything was created,
    migrated or stamped, meaning the caller should persist a new snapshot.

    Rows of an outdated ``materials`` table are read once, before any DDL
    runs. SQLite commits DROP/CREATE on its own, so a failed first attempt
    may already have emptied the table; the retry restores from that same
    backup rather than from what is left.
    """
    if not table_exists(MATERIALS):
        created = create_tables()
        _stamp(SCHEMA_VERSION)
        db.session.commit()
        logger.info("schema_created", extra={"tables": created})
        return True

    version = detect_version()
    backup = None
    if version < SCHEMA_VERSION:
        backup = _backup_materials(db.session.connection())

    try:
        changed = _migrate(version, backup)
        db.session.commit()
    except SQLAlchemyError:
        logger.warning("schema_migration_failed_retrying_rebuild", exc_info=True)
        db.session.rollback()
        rebuild_materials_table(backup)
        create_tables()
        _stamp(SCHEMA_VERSION)
        db.session.commit()
        changed = True

    if changed:
        logger.info("schema_ready", extra={"version": SCHEMA_VERSION})
    return changed
