# hextags/domain/entities/tag.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union
from uuid import UUID

from hextags.common.errors import InvalidTag
from hextags.common.strings.normalize import clean_part


@dataclass(frozen=True)
class Tag:
    """
    A persisted (text, group) pair. Shared by every relationship that uses it
    and kept as vocabulary after its last relationship is gone.
    """
    id: UUID
    text: str
    group: str

    @property
    def pair(self) -> Tuple[str, str]:
        return self.text, self.group


@dataclass(frozen=True)
class TagInput:
    """
    Write-side tag value as supplied by callers. Text and group are trimmed;
    blank values raise InvalidTag.
    """
    text: str
    group: str

    def __post_init__(self):
        text = clean_part(self.text)
        group = clean_part(self.group)
        if not text:
            raise InvalidTag("tag text is required", text=self.text, group=self.group)
        if not group:
            raise InvalidTag("tag group is required", text=self.text, group=self.group)
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "group", group)

    @classmethod
    def of(cls, value: "TagLike") -> "TagInput":
        if isinstance(value, TagInput):
            return value
        if isinstance(value, Tag):
            return cls(value.text, value.group)
        if isinstance(value, (str, bytes)):
            raise InvalidTag(f"expected a (text, group) pair, got {value!r}")
        try:
            text, group = value
        except (TypeError, ValueError):
            raise InvalidTag(f"expected a (text, group) pair, got {value!r}") from None
        if not isinstance(text, str) or not isinstance(group, str):
            raise InvalidTag("tag text and group must be strings", text=text, group=group)
        return cls(text, group)


TagLike = Union[TagInput, Tag, Tuple[str, str]]


@dataclass(frozen=True)
class TagUsage:
    """A tag plus the number of distinct entities carrying it within a query scope."""
    tag: Tag
    node_count: int

    @property
    def id(self) -> UUID:
        return self.tag.id

    @property
    def text(self) -> str:
        return self.tag.text

    @property
    def group(self) -> str:
        return self.tag.group
