# hextags/services/tagging/cascade.py
from __future__ import annotations

from sqlalchemy.orm import Session

from hextags.common.logging import get_logger
from hextags.database.repos.relationship_repo import TagRelationshipRepo
from hextags.services.events.entity_events import EntityEvents

logger = get_logger(__name__)


class TagCascade:
    """
    Removes every relationship row of a deleted entity. Tags are left alone.
    Must run in the session that deletes the entity so both commit or roll back together.
    """

    def on_entity_deleted(self, db: Session, entity_id: int) -> int:
        removed = TagRelationshipRepo(db).remove_all_for_entity(entity_id)
        logger.info("Entity %s deleted: removed %d tag relationship(s)", entity_id, removed)
        return removed

    def subscribe(self, events: EntityEvents) -> None:
        events.on_entity_deleted(self.on_entity_deleted)
