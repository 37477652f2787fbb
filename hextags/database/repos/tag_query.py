# hextags/database/repos/tag_query.py
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hextags.common.iter import unique_in_order
from hextags.common.strings.normalize import clean_part
from hextags.database.models.tagging import Tag as DBTag, TagRelationship as DBTagRelationship
from hextags.database.repos._mapping import to_domain_tag
from hextags.database.repos.tag_repo import TagRepo
from hextags.domain.entities.links.tag_relationship import TagRelationship
from hextags.domain.entities.tag import Tag, TagUsage
from hextags.domain.entities.tagged_entity import TaggedEntity, TaggedProperty
from hextags.domain.enums.entity_kind import EntityKind
from hextags.domain.policies.relationship_scope import RelationshipScope
from hextags.domain.ports.entity_catalog import EntityCatalogPort

EntityRef = Union[int, UUID]
PropertyRef = Union[int, str]
ScanRow = Tuple[TagRelationship, Tag]


class TagQueryRepo:
    """
    Read-only tag queries. Every view is a RelationshipScope handed to `scan`,
    then shaped in Python (dedup, counting, grouping by entity).
    """

    def __init__(self, session: Session, catalog: EntityCatalogPort, tags: TagRepo | None = None) -> None:
        self.session = session
        self.catalog = catalog
        self.tags = tags or TagRepo(session)

    # ---------- scan primitive ----------

    def scan(self, scope: RelationshipScope) -> List[ScanRow]:
        """
        Relationship rows joined to their tag, ordered by entity, property and
        assignment order, restricted to `scope`.
        """
        if scope.is_empty:
            return []
        R, T = DBTagRelationship, DBTag

        stmt = select(R.entity_id, R.property_id, R.tag_id, R.sort_order, T).join(T, T.id == R.tag_id)
        if scope.entity_ids is not None:
            stmt = stmt.where(R.entity_id.in_(sorted(scope.entity_ids)))
        if scope.property_id is not None:
            stmt = stmt.where(R.property_id == scope.property_id)
        if scope.group is not None:
            stmt = stmt.where(T.group == scope.group)
        if scope.text_key is not None:
            stmt = stmt.where(T.text_key == scope.text_key)
        stmt = stmt.order_by(R.entity_id.asc(), R.property_id.asc(), R.sort_order.asc())

        rows = self.session.execute(stmt).all()
        if scope.needs_kinds:
            kinds = self.catalog.kinds_of({r[0] for r in rows})
            rows = [r for r in rows if scope.admits_kind(r[0], kinds)]

        return [
            (TagRelationship(entity_id, property_id, tag_id, sort_order), to_domain_tag(tag))
            for (entity_id, property_id, tag_id, sort_order, tag) in rows
        ]

    # ---------- per entity / per property ----------

    def get_tags_for_entity(self, entity: EntityRef, group: Optional[str] = None) -> List[Tag]:
        """All tags on any property of the entity, each once (first appearance wins)."""
        entity_id = self._entity_id(entity)
        if entity_id is None:
            return []
        scope = RelationshipScope.for_entity(entity_id) & RelationshipScope.in_group(_opt(group))
        return unique_in_order((tag for _rel, tag in self.scan(scope)), key=lambda t: t.id)

    def get_tags_for_property(
        self,
        entity: EntityRef,
        prop: PropertyRef,
        group: Optional[str] = None,
    ) -> List[Tag]:
        """Tags of one property in assignment order. `prop` is a property id or alias."""
        entity_id = self._entity_id(entity)
        if entity_id is None:
            return []
        property_id = prop if isinstance(prop, int) else self.catalog.property_id_for_alias(entity_id, prop)
        if property_id is None:
            return []
        scope = RelationshipScope.for_property(entity_id, property_id) & RelationshipScope.in_group(_opt(group))
        return [tag for _rel, tag in self.scan(scope)]

    # ---------- aggregates ----------

    def get_tags_for_entity_type(self, kind: EntityKind | str, group: Optional[str] = None) -> List[TagUsage]:
        """
        Distinct tags used by entities of `kind`, with the number of distinct
        entities carrying each. Ordered by group, then text.
        """
        scope = RelationshipScope.of_kind(EntityKind(kind)) & RelationshipScope.in_group(_opt(group))
        by_tag: Dict[UUID, Tag] = {}
        carriers: Dict[UUID, Set[int]] = {}
        for rel, tag in self.scan(scope):
            by_tag.setdefault(tag.id, tag)
            carriers.setdefault(tag.id, set()).add(rel.entity_id)
        usages = [TagUsage(tag=t, node_count=len(carriers[tid])) for tid, t in by_tag.items()]
        usages.sort(key=lambda u: (u.group, u.text))
        return usages

    def get_tagged_entities_by_tag_group(self, kind: EntityKind | str, group: str) -> List[TaggedEntity]:
        """Entities of `kind` with at least one tag in `group`, listing those tags per property."""
        group = clean_part(group)
        if not group:
            return []
        scope = RelationshipScope.of_kind(EntityKind(kind)) & RelationshipScope.in_group(group)
        return _group_by_entity(self.scan(scope))

    def get_tagged_entities_by_tag(
        self,
        kind: EntityKind | str,
        tag_text: str,
        group: Optional[str] = None,
    ) -> List[TaggedEntity]:
        """Entities of `kind` carrying `tag_text` (in any group unless `group` is given)."""
        text = clean_part(tag_text)
        if not text:
            return []
        scope = (
            RelationshipScope.of_kind(EntityKind(kind))
            & RelationshipScope.with_text_key(self.tags.key_for(text))
            & RelationshipScope.in_group(_opt(group))
        )
        return _group_by_entity(self.scan(scope))

    # ---------- vocabulary ----------

    def get_many(self, ids: Optional[Iterable[UUID]] = None) -> List[Tag]:
        return self.tags.get_many(ids)

    # ---------- helpers ----------

    def _entity_id(self, entity: EntityRef) -> Optional[int]:
        if isinstance(entity, UUID):
            return self.catalog.id_for_key(entity)
        return int(entity)


def _opt(group: Optional[str]) -> Optional[str]:
    group = clean_part(group)
    return group or None


def _group_by_entity(rows: List[ScanRow]) -> List[TaggedEntity]:
    """Fold scan rows (already ordered by entity, property, sort order) into TaggedEntity summaries."""
    out: List[TaggedEntity] = []
    current: Optional[TaggedEntity] = None
    for rel, tag in rows:
        if current is None or current.entity_id != rel.entity_id:
            current = TaggedEntity(entity_id=rel.entity_id)
            out.append(current)
        props = current.tagged_properties
        if not props or props[-1].property_id != rel.property_id:
            props.append(TaggedProperty(property_id=rel.property_id))
        props[-1].tags.append(tag)
    return out
