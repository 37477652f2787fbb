# hextags/services/catalog/in_memory.py
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional
from uuid import UUID

from hextags.domain.enums.entity_kind import EntityKind


@dataclass
class _Entry:
    kind: EntityKind
    key: Optional[UUID] = None
    properties: Dict[str, int] = field(default_factory=dict)


class InMemoryEntityCatalog:
    """
    Dict-backed EntityCatalogPort for embedding and tests. The host application
    registers entities as it creates them and forgets them when they are deleted.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, _Entry] = {}
        self._by_key: Dict[UUID, int] = {}
        self._lock = threading.RLock()

    def register(
        self,
        entity_id: int,
        kind: EntityKind | str,
        *,
        key: Optional[UUID] = None,
        properties: Optional[Mapping[str, int]] = None,
    ) -> None:
        kind = EntityKind(kind)
        if kind is EntityKind.all:
            raise ValueError("'all' is a query wildcard, not an entity kind")
        with self._lock:
            self.forget(entity_id)
            self._entries[entity_id] = _Entry(kind=kind, key=key, properties=dict(properties or {}))
            if key is not None:
                self._by_key[key] = entity_id

    def forget(self, entity_id: int) -> None:
        with self._lock:
            entry = self._entries.pop(entity_id, None)
            if entry and entry.key is not None:
                self._by_key.pop(entry.key, None)

    # ----- EntityCatalogPort -----

    def kinds_of(self, entity_ids: Iterable[int]) -> Dict[int, EntityKind]:
        with self._lock:
            return {eid: self._entries[eid].kind for eid in entity_ids if eid in self._entries}

    def id_for_key(self, key: UUID) -> Optional[int]:
        with self._lock:
            return self._by_key.get(key)

    def property_id_for_alias(self, entity_id: int, alias: str) -> Optional[int]:
        with self._lock:
            entry = self._entries.get(entity_id)
            return entry.properties.get(alias) if entry else None
