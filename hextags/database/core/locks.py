# hextags/database/core/locks.py
from __future__ import annotations

from sqlalchemy import BigInteger, cast, func, literal, select
from sqlalchemy.orm import Session

_INT64 = 1 << 64


def property_lock_key(entity_id: int, property_id: int) -> int:
    """Stable signed 64-bit key for one (entity, property) pair."""
    raw = ((entity_id & 0xFFFFFFFF) << 32) | (property_id & 0xFFFFFFFF)
    return raw - _INT64 if raw >= (1 << 63) else raw


def lock_property(db: Session, entity_id: int, property_id: int) -> None:
    """
    Serialize writers touching the same (entity, property) until the
    surrounding transaction ends. Other pairs are not blocked.

    PostgreSQL: transaction-scoped advisory lock.
    SQLite: no-op; the database-wide write lock already serializes writers.
    """
    if db.get_bind().dialect.name != "postgresql":
        return
    key = property_lock_key(entity_id, property_id)
    db.execute(select(func.pg_advisory_xact_lock(cast(literal(key), BigInteger))))
