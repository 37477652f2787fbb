# hextags/database/core/transaction.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    All-or-nothing unit as a SAVEPOINT. If the session has no transaction yet
    one is autobegun and left open: committing it stays with the caller.
    Errors roll the savepoint back and propagate unchanged.
    """
    with db.begin_nested():
        yield db
