# hextags/database/repos/_mapping.py
from __future__ import annotations
from hextags.database.models.tagging import Tag as DBTag
from hextags.domain.entities.tag import Tag as DomainTag

def to_domain_tag(row: DBTag) -> DomainTag:
    return DomainTag(id=row.id, text=row.text, group=row.group)
