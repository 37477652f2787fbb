from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol
from uuid import UUID

from hextags.domain.enums.entity_kind import EntityKind


class EntityCatalogPort(Protocol):
    """
    Read-only view of the external entity store. The tagging core never owns
    entities; it only asks the catalog how to classify and address them.
    """

    def kinds_of(self, entity_ids: Iterable[int]) -> Dict[int, EntityKind]: ...
    # unknown ids are simply absent from the returned mapping

    def id_for_key(self, key: UUID) -> Optional[int]: ...

    def property_id_for_alias(self, entity_id: int, alias: str) -> Optional[int]: ...
