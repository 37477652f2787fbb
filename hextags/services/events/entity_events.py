# hextags/services/events/entity_events.py
from __future__ import annotations

from typing import Callable, List

from sqlalchemy.orm import Session

from hextags.common.logging import get_logger

logger = get_logger(__name__)

EntityDeletedHandler = Callable[[Session, int], object]


class EntityEvents:
    """
    In-process entity lifecycle bus.

    The entity-deletion workflow publishes `entity_deleted(session, entity_id)`
    with the session that performs the deletion, so every handler runs inside
    that same transaction. Handler errors propagate to the publisher, which
    lets the whole deletion roll back.
    """

    def __init__(self) -> None:
        self._deleted: List[EntityDeletedHandler] = []

    def on_entity_deleted(self, handler: EntityDeletedHandler) -> EntityDeletedHandler:
        """Register a handler; usable as a decorator."""
        if handler not in self._deleted:
            self._deleted.append(handler)
        return handler

    def unsubscribe(self, handler: EntityDeletedHandler) -> None:
        if handler in self._deleted:
            self._deleted.remove(handler)

    def entity_deleted(self, session: Session, entity_id: int) -> None:
        logger.debug("entity_deleted(%s) -> %d handler(s)", entity_id, len(self._deleted))
        for handler in list(self._deleted):
            handler(session, entity_id)
