from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hextags.common.logging import get_logger
from hextags.database.repos.relationship_repo import TagRelationshipRepo
from hextags.database.repos.tag_query import EntityRef, PropertyRef, TagQueryRepo
from hextags.database.repos.tag_repo import TagRepo
from hextags.domain.entities.tag import Tag, TagLike, TagUsage
from hextags.domain.entities.tagged_entity import TaggedEntity
from hextags.domain.enums.entity_kind import EntityKind
from hextags.domain.ports.entity_catalog import EntityCatalogPort
from hextags.services.tagging.cascade import TagCascade

logger = get_logger(__name__)


class TaggingService:
    """
    High-level entry point bundling the tag store, relationship engine,
    query engine and cascade over one Session (one unit of work).
    """

    def __init__(self, db: Session, catalog: EntityCatalogPort):
        self.db = db
        self.catalog = catalog
        self.tags = TagRepo(db)
        self.relationships = TagRelationshipRepo(db, self.tags)
        self.queries = TagQueryRepo(db, catalog, self.tags)
        self.cascade = TagCascade()

    # ----- writes -----

    def assign_tags(
        self,
        entity_id: int,
        property_id: int,
        tags: Iterable[TagLike],
        *,
        replace: bool = False,
    ) -> List[UUID]:
        tags = list(tags)
        ids = self.relationships.assign_tags_to_property(entity_id, property_id, tags, replace=replace)
        logger.info(
            "%s %d tag(s) on entity %s property %s",
            "Replaced with" if replace else "Merged", len(ids), entity_id, property_id,
        )
        return ids

    def remove_tags(self, entity_id: int, property_id: int, tags: Iterable[TagLike]) -> int:
        removed = self.relationships.remove_tags_from_property(entity_id, property_id, tags)
        logger.info("Removed %d tag(s) from entity %s property %s", removed, entity_id, property_id)
        return removed

    def clear_tags(self, entity_id: int, property_id: int) -> int:
        removed = self.relationships.remove_all_tags_from_property(entity_id, property_id)
        logger.info("Cleared %d tag(s) from entity %s property %s", removed, entity_id, property_id)
        return removed

    def entity_deleted(self, entity_id: int) -> int:
        return self.cascade.on_entity_deleted(self.db, entity_id)

    # ----- reads -----

    def tags_for_entity(self, entity: EntityRef, group: Optional[str] = None) -> List[Tag]:
        return self.queries.get_tags_for_entity(entity, group)

    def tags_for_property(self, entity: EntityRef, prop: PropertyRef, group: Optional[str] = None) -> List[Tag]:
        return self.queries.get_tags_for_property(entity, prop, group)

    def tags_for_entity_type(self, kind: EntityKind | str, group: Optional[str] = None) -> List[TagUsage]:
        return self.queries.get_tags_for_entity_type(kind, group)

    def entities_by_tag_group(self, kind: EntityKind | str, group: str) -> List[TaggedEntity]:
        return self.queries.get_tagged_entities_by_tag_group(kind, group)

    def entities_by_tag(self, kind: EntityKind | str, tag_text: str, group: Optional[str] = None) -> List[TaggedEntity]:
        return self.queries.get_tagged_entities_by_tag(kind, tag_text, group)

    def get_many(self, ids: Optional[Iterable[UUID]] = None) -> List[Tag]:
        return self.queries.get_many(ids)
