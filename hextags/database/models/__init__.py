# hextags/database/models/__init__.py

from hextags.database.core.main import Base
from hextags.database.models.tagging import (
    Tag,
    TagRelationship,
)

__all__ = [
    "Base",
    "Tag",
    "TagRelationship",
]
