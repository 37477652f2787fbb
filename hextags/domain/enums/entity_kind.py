from __future__ import annotations
from enum import StrEnum

class EntityKind(StrEnum):
    content = "content"
    media = "media"
    member = "member"
    # query-only wildcard: any of the concrete kinds above
    all = "all"

    @classmethod
    def concrete(cls) -> frozenset["EntityKind"]:
        return frozenset({cls.content, cls.media, cls.member})

    def matches(self, other: "EntityKind") -> bool:
        """True when an entity of kind `other` falls inside this (possibly wildcard) kind."""
        if self is EntityKind.all:
            return other in EntityKind.concrete()
        return self is other
