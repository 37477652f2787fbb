# hextags/domain/entities/links/tag_relationship.py
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class TagRelationship:
    """
    Join entity connecting a property of an entity and a Tag.
    The DB enforces that (entity_id, property_id, tag_id) is unique.
    """
    entity_id: int
    property_id: int
    tag_id: UUID
    sort_order: int = 0
