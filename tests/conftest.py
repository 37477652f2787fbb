# tests/conftest.py
from __future__ import annotations
import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from hextags.common.settings import get_settings
from hextags.database.core.main import build_engine
from hextags.database.models import Base  # <-- imports the models/metadata
from hextags.domain.enums.entity_kind import EntityKind
from hextags.services.catalog.in_memory import InMemoryEntityCatalog

cfg = get_settings()


@pytest.fixture(scope="session")
def _database_url():
    if not cfg.use_testcontainers:
        yield cfg.test_database_url
        return
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(cfg.test_db_image) as pg:
        # Force psycopg (v3) driver in the URL returned by testcontainers (it defaults to psycopg2)
        yield pg.get_connection_url().replace("psycopg2", "psycopg")


def _prepare_schema(engine: Engine) -> None:
    if engine.dialect.name == "postgresql" and cfg.db_schema:
        with engine.begin() as conn:
            conn.execute(text(f'create schema if not exists "{cfg.db_schema}"'))


@pytest.fixture(scope="session")
def db_engine(_database_url) -> Engine:
    engine = build_engine(_database_url)
    _prepare_schema(engine)

    # Skip Alembic here; just create tables from models
    Base.metadata.create_all(bind=engine)

    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db(db_engine) -> Session:
    """
    Per-test Session bound to an outer transaction that is rolled back after
    each test. Session-level commits/rollbacks only touch SAVEPOINTs.
    """
    connection = db_engine.connect()
    trans = connection.begin()
    session = Session(bind=connection, join_transaction_mode="create_savepoint")
    try:
        yield session
    finally:
        session.close()
        trans.rollback()
        connection.close()


# Entity ids used across the suite
CONTENT_1, CONTENT_2, MEDIA_1, MEMBER_1 = 1001, 1002, 2001, 3001
PROP_TAGS, PROP_KEYWORDS = 11, 12


@pytest.fixture()
def catalog() -> InMemoryEntityCatalog:
    cat = InMemoryEntityCatalog()
    for eid in (CONTENT_1, CONTENT_2):
        cat.register(eid, EntityKind.content, properties={"tags": PROP_TAGS, "keywords": PROP_KEYWORDS})
    cat.register(MEDIA_1, EntityKind.media, properties={"tags": PROP_TAGS, "keywords": PROP_KEYWORDS})
    cat.register(MEMBER_1, EntityKind.member, properties={"interests": PROP_TAGS})
    return cat
