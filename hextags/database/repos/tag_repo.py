from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hextags.common.errors import InvalidTag
from hextags.common.iter import chunked, unique_in_order
from hextags.common.logging import get_logger
from hextags.common.settings import get_settings
from hextags.common.strings.normalize import text_key
from hextags.database.models.tagging import Tag as DBTag
from hextags.database.repos._mapping import to_domain_tag
from hextags.domain.entities.tag import Tag, TagInput, TagLike

logger = get_logger(__name__)

_IN_CHUNK = 500


class TagRepo:
    """
    The tag vocabulary: one row per (text, group), created on first use and
    never deleted by the tagging core.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.cfg = get_settings().tags

    # ---------- validation / keys ----------

    def validate(self, value: TagLike) -> TagInput:
        tag = TagInput.of(value)
        if len(tag.text) > self.cfg.max_text_length:
            raise InvalidTag(
                f"tag text longer than {self.cfg.max_text_length} characters",
                text=tag.text, group=tag.group,
            )
        if len(tag.group) > self.cfg.max_group_length:
            raise InvalidTag(
                f"tag group longer than {self.cfg.max_group_length} characters",
                text=tag.text, group=tag.group,
            )
        # casefolding can expand the text ("ß" -> "ss"); the key shares the text column width
        if len(self.key_for(tag.text)) > self.cfg.max_text_length:
            raise InvalidTag(
                f"tag text key longer than {self.cfg.max_text_length} characters",
                text=tag.text, group=tag.group,
            )
        return tag

    def validate_many(self, values: Iterable[TagLike]) -> List[TagInput]:
        """Validate everything up front; duplicates (same group + key) collapse to the first."""
        tags = [self.validate(v) for v in values]
        return unique_in_order(tags, key=self._identity)

    def key_for(self, text: str) -> str:
        return text_key(text, case_sensitive=self.cfg.case_sensitive)

    def _identity(self, tag: TagInput) -> Tuple[str, str]:
        return tag.group, self.key_for(tag.text)

    # ---------- reads ----------

    def _find_row(self, group: str, key: str) -> Optional[DBTag]:
        stmt = select(DBTag).where(DBTag.group == group, DBTag.text_key == key).limit(1)
        return self.db.execute(stmt).scalars().first()

    def find(self, text: str, group: str) -> Optional[Tag]:
        """Lookup only; returns None for a pair that was never created."""
        tag = self.validate((text, group))
        row = self._find_row(tag.group, self.key_for(tag.text))
        return to_domain_tag(row) if row else None

    def find_ids(self, tags: Iterable[TagInput]) -> List[UUID]:
        """Ids of the already-existing tags among `tags`, in input order; misses are skipped."""
        out: List[UUID] = []
        for tag in tags:
            row = self._find_row(*self._identity(tag))
            if row:
                out.append(row.id)
        return out

    def get_many(self, ids: Optional[Iterable[UUID]] = None) -> List[Tag]:
        """
        All tags, or only those whose id is in `ids` when it is non-empty.
        Unknown ids are omitted.
        """
        wanted = unique_in_order(ids or [])
        order = (DBTag.group.asc(), DBTag.text_key.asc(), DBTag.text.asc())
        if not wanted:
            rows = self.db.execute(select(DBTag).order_by(*order)).scalars().all()
            return [to_domain_tag(r) for r in rows]

        found: List[DBTag] = []
        for chunk in chunked(wanted, _IN_CHUNK):
            stmt = select(DBTag).where(DBTag.id.in_(chunk))
            found.extend(self.db.execute(stmt).scalars().all())
        found.sort(key=lambda r: (r.group, r.text_key, r.text))
        return [to_domain_tag(r) for r in found]

    # ---------- resolve (find or create) ----------

    def resolve(self, text: str, group: str) -> UUID:
        """
        Id of the tag for (text, group), creating it if needed.
        Safe under concurrent first-time creation of the same pair.
        """
        return self._resolve_valid(self.validate((text, group)))

    def resolve_many(self, tags: Iterable[TagLike]) -> List[UUID]:
        """
        Resolve a sequence, preserving input order (validated before anything is created).
        Rows are looked up and created in (group, key) order so concurrent writers
        take unique-index locks in the same order.
        """
        valid = self.validate_many(tags)
        resolved: Dict[Tuple[str, str], UUID] = {}
        for tag in sorted(valid, key=self._identity):
            resolved[self._identity(tag)] = self._resolve_valid(tag)
        return [resolved[self._identity(t)] for t in valid]

    def _resolve_valid(self, tag: TagInput) -> UUID:
        group, key = self._identity(tag)
        conflict: Optional[IntegrityError] = None
        for attempt in range(1, self.cfg.resolve_retries + 1):
            row = self._find_row(group, key)
            if row:
                return row.id
            try:
                # SAVEPOINT: a lost race only rolls back this insert
                with self.db.begin_nested():
                    row = DBTag(text=tag.text, text_key=key, group=group)
                    self.db.add(row)
                    self.db.flush()
            except IntegrityError as ex:
                conflict = ex
                logger.warning(
                    "Tag (%r, %r) was created concurrently; retrying lookup (attempt %d)",
                    tag.text, group, attempt,
                )
                continue
            logger.debug("Created tag %s (%r, %r)", row.id, tag.text, group)
            return row.id

        row = self._find_row(group, key)
        if row:
            return row.id
        raise conflict
