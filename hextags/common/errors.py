# hextags/common/errors.py
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

# Store-level failures are surfaced unchanged; callers catch this name.
StoreFailure = SQLAlchemyError


class TaggingError(Exception):
    """Base class for errors raised by the tagging core."""


class InvalidTag(TaggingError, ValueError):
    """
    Raised when a tag's text or group is empty, blank or too long.
    Always raised before anything is written to the store.
    """

    def __init__(self, message: str, *, text: object = None, group: object = None) -> None:
        super().__init__(message)
        self.text = text
        self.group = group
