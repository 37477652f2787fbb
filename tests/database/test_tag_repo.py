# tests/database/test_tag_repo.py
from __future__ import annotations

from uuid import uuid4

import pytest

from hextags.common.errors import InvalidTag
from hextags.common.settings import TagConfig
from hextags.database.repos.tag_repo import TagRepo
from hextags.domain.entities.tag import TagInput


def test_resolve_creates_once_and_returns_same_id(db):
    repo = TagRepo(db)

    first = repo.resolve("Test", "Test")
    second = repo.resolve("Test", "Test")
    assert first is not None
    assert first == second
    assert len(repo.get_many()) == 1


def test_resolve_distinct_pairs_get_distinct_ids(db):
    repo = TagRepo(db)

    a = repo.resolve("Test", "Test")
    b = repo.resolve("Test2", "Test")
    c = repo.resolve("Test", "Other")
    assert len({a, b, c}) == 3


def test_resolve_trims_whitespace(db):
    repo = TagRepo(db)
    assert repo.resolve("  red ", " colors") == repo.resolve("red", "colors")
    tag = repo.find("red", "colors")
    assert tag.text == "red" and tag.group == "colors"


def test_exact_match_is_the_default(db):
    repo = TagRepo(db)
    assert repo.resolve("Red", "colors") != repo.resolve("red", "colors")


def test_case_folding_is_a_configuration_choice(db):
    repo = TagRepo(db)
    repo.cfg = TagConfig(case_sensitive=False)

    first = repo.resolve("Red", "colors")
    assert repo.resolve("RED", "colors") == first
    assert repo.find("red", "colors").text == "Red"  # first writer's spelling is kept
    # groups are still matched exactly
    assert repo.resolve("red", "Colors") != first


@pytest.mark.parametrize(
    "text,group",
    [("", "g"), ("   ", "g"), ("t", ""), ("t", "  "), (None, "g")],
)
def test_blank_text_or_group_is_rejected(db, text, group):
    repo = TagRepo(db)
    with pytest.raises(InvalidTag):
        repo.resolve(text, group)
    assert repo.get_many() == []


def test_oversized_values_are_rejected(db):
    repo = TagRepo(db)
    repo.cfg = TagConfig(max_text_length=5, max_group_length=3)
    with pytest.raises(InvalidTag):
        repo.resolve("toolong", "g")
    with pytest.raises(InvalidTag):
        repo.resolve("ok", "grp1")
    assert repo.get_many() == []


def test_resolve_many_preserves_order_and_collapses_repeats(db):
    repo = TagRepo(db)
    ids = repo.resolve_many([("b", "g"), ("a", "g"), TagInput("b", "g")])
    assert len(ids) == 2
    assert [t.text for t in repo.get_many(ids)] == ["a", "b"]  # get_many sorts; resolve order is ids
    assert repo.find("b", "g").id == ids[0]


def test_resolve_many_validates_before_creating_anything(db):
    repo = TagRepo(db)
    with pytest.raises(InvalidTag):
        repo.resolve_many([("fine", "g"), ("", "g")])
    assert repo.find("fine", "g") is None


def test_find_never_creates(db):
    repo = TagRepo(db)
    assert repo.find("ghost", "g") is None
    assert repo.get_many() == []


def test_get_many_all_and_by_ids(db):
    repo = TagRepo(db)
    for i in range(1, 5):
        repo.resolve(f"tag{i}", "test")

    everything = repo.get_many()
    assert len(everything) == 4

    subset = repo.get_many([everything[0].id, everything[1].id, everything[2].id])
    assert len(subset) == 3

    # empty id set means "all"; unknown ids are simply omitted
    assert len(repo.get_many([])) == 4
    assert [t.id for t in repo.get_many([everything[3].id, uuid4()])] == [everything[3].id]


def test_resolve_recovers_from_lost_creation_race(db, monkeypatch):
    repo = TagRepo(db)
    existing = repo.resolve("tag1", "test")

    real_find = TagRepo._find_row
    calls = {"n": 0}

    def stale_first_lookup(self, group, key):
        # first lookup misses, as if another writer committed right after it
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find(self, group, key)

    monkeypatch.setattr(TagRepo, "_find_row", stale_first_lookup)

    assert repo.resolve("tag1", "test") == existing
    assert calls["n"] >= 2
    assert len(repo.get_many()) == 1


def test_case_folded_key_must_fit_the_text_column(db):
    repo = TagRepo(db)
    repo.cfg = TagConfig(case_sensitive=False)

    # 150 characters of text fold to a 300 character key
    with pytest.raises(InvalidTag):
        repo.resolve("ß" * 150, "test")
    assert repo.get_many() == []

    assert repo.resolve("ß" * 100, "test") is not None


def test_case_sensitive_key_is_only_bounded_by_text_length(db):
    repo = TagRepo(db)
    assert repo.resolve("ß" * 150, "test") is not None


def test_resolve_many_creates_in_canonical_order(db, monkeypatch):
    repo = TagRepo(db)
    created = []
    original = TagRepo._resolve_valid

    def spy(self, tag):
        created.append((tag.group, tag.text))
        return original(self, tag)

    monkeypatch.setattr(TagRepo, "_resolve_valid", spy)
    ids = repo.resolve_many([("b", "g2"), ("b", "g1"), ("a", "g2")])

    assert created == [("g1", "b"), ("g2", "a"), ("g2", "b")]
    assert ids == [repo.find("b", "g2").id, repo.find("b", "g1").id, repo.find("a", "g2").id]
