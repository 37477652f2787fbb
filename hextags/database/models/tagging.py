# hextags/database/models/tagging.py
from __future__ import annotations

from typing import List
from uuid import UUID as UUID_t

from sqlalchemy import (
    ForeignKey, String, Integer, Uuid, UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hextags.database.core.main import Base
from hextags.database.core.service_object import ServiceObject


# =======================
# Tags (vocabulary)
# =======================
class Tag(ServiceObject, Base):
    __tablename__ = "tag"
    __table_args__ = (
        UniqueConstraint("group", "text_key", name="uq_tag_group_text_key"),
        CheckConstraint("length(text) > 0", name="text_not_empty"),
        CheckConstraint('length("group") > 0', name="group_not_empty"),
        Index("ix_tag_text_key", "text_key"),
    )

    text: Mapped[str] = mapped_column(String(200), nullable=False)
    text_key: Mapped[str] = mapped_column(String(200), nullable=False)   # dedup key, see common.strings.normalize
    group: Mapped[str] = mapped_column("group", String(100), nullable=False)

    relationships: Mapped[List["TagRelationship"]] = relationship(
        back_populates="tag",
        passive_deletes=True,
    )


# =======================
# (entity, property) <-> tag
# =======================
class TagRelationship(Base):
    __tablename__ = "tag_relationship"
    __table_args__ = (
        Index("ix_tag_relationship_tag_id", "tag_id"),
        Index("ix_tag_relationship_property", "entity_id", "property_id", "sort_order"),
    )

    # entity and property live in an external store; no FKs to them
    entity_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    property_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    tag_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tag.id", ondelete="RESTRICT"),
        primary_key=True,
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    tag: Mapped["Tag"] = relationship(back_populates="relationships")
