# hextags/domain/policies/relationship_scope.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, Mapping, Optional

from hextags.domain.enums.entity_kind import EntityKind


@dataclass(frozen=True)
class RelationshipScope:
    """
    Composable filter over the relationship scan.

    Every field narrows the scan; None means "no restriction". Scopes combine
    with `&`, which intersects entity sets and requires scalar filters to agree
    (conflicting scalars yield an empty scope rather than an error).

    The kind filter is not a column on the relationship table: it is checked
    against the entity catalog after the SQL part of the scan has run.
    """
    entity_ids: Optional[FrozenSet[int]] = None
    property_id: Optional[int] = None
    group: Optional[str] = None
    text_key: Optional[str] = None
    kind: Optional[EntityKind] = None
    empty: bool = False

    # ---------- constructors ----------

    @classmethod
    def for_entity(cls, entity_id: int) -> "RelationshipScope":
        return cls(entity_ids=frozenset({entity_id}))

    @classmethod
    def for_entities(cls, entity_ids: Iterable[int]) -> "RelationshipScope":
        return cls(entity_ids=frozenset(entity_ids))

    @classmethod
    def for_property(cls, entity_id: int, property_id: int) -> "RelationshipScope":
        return cls(entity_ids=frozenset({entity_id}), property_id=property_id)

    @classmethod
    def in_group(cls, group: Optional[str]) -> "RelationshipScope":
        return cls(group=group)

    @classmethod
    def with_text_key(cls, key: str) -> "RelationshipScope":
        return cls(text_key=key)

    @classmethod
    def of_kind(cls, kind: Optional[EntityKind]) -> "RelationshipScope":
        return cls(kind=kind)

    # ---------- composition ----------

    def __and__(self, other: "RelationshipScope") -> "RelationshipScope":
        if self.empty or other.empty:
            return RelationshipScope(empty=True)
        merged = replace(self, entity_ids=_intersect(self.entity_ids, other.entity_ids))
        for name in ("property_id", "group", "text_key", "kind"):
            mine, theirs = getattr(self, name), getattr(other, name)
            if theirs is None:
                continue
            if mine is not None and mine != theirs:
                return RelationshipScope(empty=True)
            merged = replace(merged, **{name: theirs})
        return merged

    @property
    def is_empty(self) -> bool:
        if self.empty:
            return True
        return self.entity_ids is not None and not self.entity_ids

    @property
    def needs_kinds(self) -> bool:
        return self.kind is not None

    def admits_kind(self, entity_id: int, kinds: Mapping[int, EntityKind]) -> bool:
        """Kind predicate; entities the catalog cannot classify never match a kind filter."""
        if self.kind is None:
            return True
        actual = kinds.get(entity_id)
        return actual is not None and self.kind.matches(actual)


def _intersect(a: Optional[FrozenSet], b: Optional[FrozenSet]) -> Optional[FrozenSet]:
    if a is None:
        return b
    if b is None:
        return a
    return a & b
