from __future__ import annotations
from typing import Iterable, List, Set
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.orm import Session

from hextags.common.logging import get_logger
from hextags.database.core.locks import lock_property
from hextags.database.core.transaction import atomic
from hextags.database.models.tagging import TagRelationship as DBTagRelationship
from hextags.database.repos.tag_repo import TagRepo
from hextags.domain.entities.links.tag_relationship import TagRelationship
from hextags.domain.entities.tag import TagLike

logger = get_logger(__name__)


class TagRelationshipRepo:
    """
    Writes the (entity, property) <-> tag join.

    Each public mutation is one atomic unit (SAVEPOINT inside the caller's
    transaction) holding the (entity, property) write lock. Tag data is
    validated before anything is written.
    """

    def __init__(self, db: Session, tags: TagRepo | None = None) -> None:
        self.db = db
        self.tags = tags or TagRepo(db)

    # ---------- reads used by the write path ----------

    def list_for_property(self, entity_id: int, property_id: int) -> List[TagRelationship]:
        R = DBTagRelationship
        stmt = (
            select(R.entity_id, R.property_id, R.tag_id, R.sort_order)
            .where(R.entity_id == entity_id, R.property_id == property_id)
            .order_by(R.sort_order.asc())
        )
        return [TagRelationship(*row) for row in self.db.execute(stmt).all()]

    def count_for_entity(self, entity_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(DBTagRelationship)
            .where(DBTagRelationship.entity_id == entity_id)
        )
        return int(self.db.execute(stmt).scalar_one())

    # ---------- mutations ----------

    def assign_tags_to_property(
        self,
        entity_id: int,
        property_id: int,
        tags: Iterable[TagLike],
        replace: bool = False,
    ) -> List[UUID]:
        """
        Attach `tags` to the property.

        - replace=True  -> the property ends up with exactly `tags`, in input order
        - replace=False -> union with what is already there; new tags go last

        Returns the resolved tag ids in input order (duplicates collapsed).
        """
        valid = self.tags.validate_many(tags)
        if not valid and not replace:
            return []

        with atomic(self.db):
            lock_property(self.db, entity_id, property_id)
            tag_ids = self.tags.resolve_many(valid)

            if replace:
                removed = self._delete_rows(entity_id, property_id)
                self._insert_rows(entity_id, property_id, tag_ids, start=0)
                logger.debug(
                    "Replaced tags on entity %s property %s: -%d +%d",
                    entity_id, property_id, removed, len(tag_ids),
                )
                return tag_ids

            present: Set[UUID] = set(
                self.db.execute(
                    select(DBTagRelationship.tag_id).where(
                        DBTagRelationship.entity_id == entity_id,
                        DBTagRelationship.property_id == property_id,
                    )
                ).scalars().all()
            )
            new_ids = [t for t in tag_ids if t not in present]
            if new_ids:
                self._insert_rows(entity_id, property_id, new_ids, start=self._next_sort_order(entity_id, property_id))
            logger.debug(
                "Merged tags on entity %s property %s: +%d (already present %d)",
                entity_id, property_id, len(new_ids), len(tag_ids) - len(new_ids),
            )
            return tag_ids

    def remove_tags_from_property(self, entity_id: int, property_id: int, tags: Iterable[TagLike]) -> int:
        """
        Detach the given (text, group) tags. Tags that were never created, or
        are not attached, are ignored. Returns the number of rows removed.
        """
        valid = self.tags.validate_many(tags)
        if not valid:
            return 0

        with atomic(self.db):
            lock_property(self.db, entity_id, property_id)
            tag_ids = self.tags.find_ids(valid)
            if not tag_ids:
                return 0
            R = DBTagRelationship
            res = self.db.execute(
                delete(R).where(
                    R.entity_id == entity_id,
                    R.property_id == property_id,
                    R.tag_id.in_(tag_ids),
                )
            )
            removed = res.rowcount or 0
        logger.debug("Removed %d tag(s) from entity %s property %s", removed, entity_id, property_id)
        return removed

    def remove_all_tags_from_property(self, entity_id: int, property_id: int) -> int:
        with atomic(self.db):
            lock_property(self.db, entity_id, property_id)
            removed = self._delete_rows(entity_id, property_id)
        logger.debug("Cleared %d tag(s) from entity %s property %s", removed, entity_id, property_id)
        return removed

    def remove_all_for_entity(self, entity_id: int) -> int:
        """Delete every relationship row of the entity; tags themselves are kept."""
        with atomic(self.db):
            res = self.db.execute(delete(DBTagRelationship).where(DBTagRelationship.entity_id == entity_id))
            removed = res.rowcount or 0
        return removed

    # ---------- helpers ----------

    def _delete_rows(self, entity_id: int, property_id: int) -> int:
        R = DBTagRelationship
        res = self.db.execute(delete(R).where(R.entity_id == entity_id, R.property_id == property_id))
        return res.rowcount or 0

    def _next_sort_order(self, entity_id: int, property_id: int) -> int:
        R = DBTagRelationship
        stmt = select(func.max(R.sort_order)).where(R.entity_id == entity_id, R.property_id == property_id)
        current = self.db.execute(stmt).scalar_one()
        return 0 if current is None else int(current) + 1

    def _insert_rows(self, entity_id: int, property_id: int, tag_ids: List[UUID], *, start: int) -> None:
        self.db.add_all(
            DBTagRelationship(entity_id=entity_id, property_id=property_id, tag_id=tid, sort_order=start + i)
            for i, tid in enumerate(tag_ids)
        )
        self.db.flush()
