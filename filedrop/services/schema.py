"""Idempotent schema bootstrap: create missing tables and keep exactly one files → users FK."""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import AddConstraint

from filedrop.models import Base, File
from filedrop.models.file import OWNER_FOREIGN_KEY_NAME
from filedrop.services.errors import SchemaError

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("users", "files", "banned_ips")


def _owner_foreign_keys(conn: Connection) -> list[dict]:
    """Reflected FKs on files.uploaded_by that point at users.id."""
    return [
        fk
        for fk in inspect(conn).get_foreign_keys("files")
        if fk["constrained_columns"] == ["uploaded_by"]
        and fk["referred_table"] == "users"
    ]


def _owner_constraint():
    for constraint in File.__table__.foreign_key_constraints:
        if constraint.name == OWNER_FOREIGN_KEY_NAME:
            return constraint
    raise SchemaError(f"Model is missing foreign key {OWNER_FOREIGN_KEY_NAME}")


def _drop_foreign_key(conn: Connection, name: str) -> None:
    quoted = conn.dialect.identifier_preparer.quote(name)
    if conn.dialect.name in ("mysql", "mariadb"):
        conn.execute(text(f"ALTER TABLE files DROP FOREIGN KEY {quoted}"))
    else:
        conn.execute(text(f"ALTER TABLE files DROP CONSTRAINT {quoted}"))


def _reconcile_owner_foreign_key(conn: Connection) -> None:
    fks = _owner_foreign_keys(conn)
    if len(fks) == 1:
        return
    if conn.dialect.name == "sqlite":
        # SQLite cannot ALTER constraints; the FK only exists if CREATE TABLE declared it.
        raise SchemaError(
            f"files.uploaded_by has {len(fks)} foreign keys to users.id; expected 1"
        )
    for fk in fks:
        if fk.get("name"):
            logger.info("Dropping foreign key %s on files.uploaded_by", fk["name"])
            _drop_foreign_key(conn, fk["name"])
    logger.info("Adding foreign key %s on files.uploaded_by", OWNER_FOREIGN_KEY_NAME)
    conn.execute(AddConstraint(_owner_constraint()))


def _create_and_reconcile(engine: Engine) -> None:
    with engine.begin() as conn:
        existing = set(inspect(conn).get_table_names())
        missing = [name for name in REQUIRED_TABLES if name not in existing]
        if missing:
            logger.info("Creating tables: %s", ", ".join(missing))
        Base.metadata.create_all(conn, checkfirst=True)
        _reconcile_owner_foreign_key(conn)


def schema_is_consistent(engine: Engine) -> bool:
    """True if all tables exist and files.uploaded_by has exactly one FK to users.id."""
    with engine.connect() as conn:
        tables = set(inspect(conn).get_table_names())
        if not all(name in tables for name in REQUIRED_TABLES):
            return False
        return len(_owner_foreign_keys(conn)) == 1


def ensure_schema(engine: Engine) -> None:
    """
    Create missing tables and re-establish the files → users foreign key.

    Safe to run on every start. When several instances start together one of
    them may hit "already exists"; that is accepted if the schema is
    consistent afterwards. Any other failure raises SchemaError.
    """
    try:
        _create_and_reconcile(engine)
    except SchemaError:
        raise
    except SQLAlchemyError as e:
        logger.warning("Schema creation raced or failed, re-checking: %s", e)
        try:
            consistent = schema_is_consistent(engine)
        except SQLAlchemyError as check_error:
            raise SchemaError(
                f"Database unreachable while ensuring schema: {check_error}"
            ) from check_error
        if not consistent:
            raise SchemaError(f"Could not ensure schema: {e}") from e
    logger.info("Schema ready: %s", ", ".join(REQUIRED_TABLES))
