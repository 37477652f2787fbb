from uuid import uuid4

import pytest

from hextags.common.errors import InvalidTag
from hextags.domain.entities.tag import Tag, TagInput, TagUsage
from hextags.domain.entities.tagged_entity import TaggedEntity, TaggedProperty


def test_tag_input_trims_and_compares_by_value():
    assert TagInput("  tag1 ", " test") == TagInput("tag1", "test")


@pytest.mark.parametrize("text,group", [("", "g"), (" ", "g"), ("t", ""), ("t", "\t")])
def test_tag_input_rejects_blank(text, group):
    with pytest.raises(InvalidTag) as exc:
        TagInput(text, group)
    assert isinstance(exc.value, ValueError)


def test_tag_input_of_accepts_pairs_inputs_and_tags():
    tag = Tag(id=uuid4(), text="tag1", group="test")
    assert TagInput.of(("tag1", "test")) == TagInput("tag1", "test")
    assert TagInput.of(tag) == TagInput("tag1", "test")
    same = TagInput("tag1", "test")
    assert TagInput.of(same) is same


@pytest.mark.parametrize("bad", ["tag1", "ab", b"ab", ("only-one",), ("a", "b", "c"), ("a", 1), 42])
def test_tag_input_of_rejects_malformed(bad):
    with pytest.raises(InvalidTag):
        TagInput.of(bad)


def test_tag_usage_exposes_tag_fields():
    tag = Tag(id=uuid4(), text="tag1", group="test")
    usage = TagUsage(tag=tag, node_count=2)
    assert (usage.id, usage.text, usage.group, usage.node_count) == (tag.id, "tag1", "test", 2)
    assert tag.pair == ("tag1", "test")


def test_tagged_entity_flattens_tags():
    a = Tag(id=uuid4(), text="a", group="g")
    b = Tag(id=uuid4(), text="b", group="g")
    ent = TaggedEntity(
        entity_id=1,
        tagged_properties=[TaggedProperty(10, [a]), TaggedProperty(11, [a, b])],
    )
    assert [t.text for t in ent.tags] == ["a", "a", "b"]
