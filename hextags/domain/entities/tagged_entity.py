# hextags/domain/entities/tagged_entity.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from hextags.domain.entities.tag import Tag


@dataclass
class TaggedProperty:
    property_id: int
    tags: List[Tag] = field(default_factory=list)


@dataclass
class TaggedEntity:
    """
    One entity and the tags found on each of its properties within a query scope.
    Properties appear in ascending id order; tags in assignment order.
    """
    entity_id: int
    tagged_properties: List[TaggedProperty] = field(default_factory=list)

    @property
    def tags(self) -> List[Tag]:
        """Every tag across all properties (may repeat if two properties share a tag)."""
        return [t for p in self.tagged_properties for t in p.tags]
