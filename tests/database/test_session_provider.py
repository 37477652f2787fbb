# tests/database/test_session_provider.py
from __future__ import annotations

import pytest
from sqlalchemy import delete, func, select

from hextags.database.core import main
from hextags.database.models.tagging import Tag as DBTag, TagRelationship as DBTagRelationship
from hextags.services.tagging.service import TaggingService

CONTENT_1, PROP_TAGS = 1001, 11


@pytest.fixture()
def provider(db_engine, monkeypatch):
    monkeypatch.setattr(main, "get_engine", lambda: db_engine)
    yield main.get_session
    with db_engine.begin() as conn:
        conn.execute(delete(DBTagRelationship))
        conn.execute(delete(DBTag))


def _count(engine, model) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(model)).scalar_one()


def test_get_session_commits_on_success(provider, db_engine):
    gen = provider()
    session = next(gen)
    session.add(DBTag(text="kept", text_key="kept", group="g"))
    with pytest.raises(StopIteration):
        next(gen)
    assert _count(db_engine, DBTag) == 1


def test_get_session_rolls_back_on_error(provider, db_engine):
    gen = provider()
    session = next(gen)
    session.add(DBTag(text="lost", text_key="lost", group="g"))
    session.flush()
    with pytest.raises(RuntimeError):
        gen.throw(RuntimeError("boom"))
    assert _count(db_engine, DBTag) == 0


def test_tagging_is_undone_when_the_caller_fails_later(provider, db_engine, catalog):
    gen = provider()
    svc = TaggingService(next(gen), catalog)
    svc.assign_tags(CONTENT_1, PROP_TAGS, [("tag1", "test"), ("tag2", "test")])
    svc.remove_tags(CONTENT_1, PROP_TAGS, [("tag2", "test")])

    with pytest.raises(RuntimeError):
        gen.throw(RuntimeError("entity save failed"))

    assert _count(db_engine, DBTagRelationship) == 0
    assert _count(db_engine, DBTag) == 0


def test_cascade_is_undone_when_the_entity_deletion_fails(provider, db_engine, catalog):
    gen = provider()
    TaggingService(next(gen), catalog).assign_tags(CONTENT_1, PROP_TAGS, [("tag1", "test")])
    with pytest.raises(StopIteration):
        next(gen)

    gen = provider()
    svc = TaggingService(next(gen), catalog)
    assert svc.entity_deleted(CONTENT_1) == 1
    with pytest.raises(RuntimeError):
        gen.throw(RuntimeError("entity delete failed"))

    assert _count(db_engine, DBTagRelationship) == 1
