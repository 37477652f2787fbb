# hextags/database/core/main.py
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Iterator, List

from sqlalchemy import MetaData, create_engine, event, Column, Table
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hextags.common.settings import get_settings

_settings = get_settings()

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

_serviceobject_first = ("id", "date_created", "last_updated", "data_origin", "meta_data")

class Base(DeclarativeBase):
    # Explicit schema only when one other than "public" is configured
    metadata = MetaData(
        schema=_settings.db_schema,
        naming_convention=NAMING_CONVENTION,
    )

    @classmethod
    def __table_cls__(cls, *args, **kw):
        """Reorder columns so ServiceObject fields come first."""
        if not args:
            return super().__table_cls__(*args, **kw)

        # Positional args are (name, metadata, *columns_and_constraints)
        name, metadata, *rest = args

        cols: List[Column] = [x for x in rest if isinstance(x, Column)]
        others = [x for x in rest if not isinstance(x, Column)]

        priority = {n: i for i, n in enumerate(_serviceobject_first)}
        original_index = {c: i for i, c in enumerate(cols)}

        cols.sort(key=lambda c: (priority.get(c.name, 10_000), original_index[c]))

        return Table(name, metadata, *(cols + others), **kw)


def build_engine(url: str, *, echo: bool = False, **kw: Any) -> Engine:
    """
    Create an Engine with the dialect hooks the tagging core relies on:
      - PostgreSQL: app schema first on the search_path
      - SQLite: foreign keys on, and BEGIN emitted by SQLAlchemy so SAVEPOINTs nest properly
    """
    backend = make_url(url).get_backend_name()
    opts: Dict[str, Any] = {"echo": echo, "future": True}
    if backend == "sqlite":
        opts["connect_args"] = {"check_same_thread": False}
        if make_url(url).database in (None, "", ":memory:"):
            opts["poolclass"] = StaticPool
    elif "poolclass" not in kw:
        opts.update(
            pool_size=_settings.db.pool_size,
            max_overflow=_settings.db.max_overflow,
            pool_pre_ping=_settings.db.pool_pre_ping,
            pool_recycle=_settings.db.pool_recycle,
        )
    opts.update(kw)
    engine = create_engine(url, **opts)

    if backend == "sqlite":
        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_conn, _):
            # let SQLAlchemy own transaction boundaries (pysqlite defers BEGIN otherwise)
            dbapi_conn.isolation_level = None
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

    elif backend == "postgresql" and _settings.db_schema:
        @event.listens_for(engine, "connect")
        def _set_search_path(dbapi_conn, _):
            with dbapi_conn.cursor() as cur:
                cur.execute(f'SET search_path TO "{_settings.db_schema}", public')

    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return build_engine(_settings.database_url, echo=_settings.db.echo)


SessionLocal = sessionmaker(expire_on_commit=False, future=True, autoflush=False)


def get_session() -> Iterator[Session]:
    """
    Yield a transaction-scoped Session bound to the configured engine.
    Commits on success, rolls back on error.
    """
    session: Session = SessionLocal(bind=get_engine())
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
