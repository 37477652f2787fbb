# hextags/common/iter.py
from __future__ import annotations

from typing import Callable, Hashable, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


def chunked(it: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield fixed-size lists from an iterable (last chunk may be smaller)."""
    if size < 1:
        raise ValueError("size must be >= 1")
    buf: list[T] = []
    for x in it:
        buf.append(x)
        if len(buf) >= size:
            yield buf
            buf = []
    if buf:
        yield buf


def unique_in_order(it: Iterable[T], key: Optional[Callable[[T], Hashable]] = None) -> list[T]:
    """Drop repeats, keeping the first occurrence of each item (or of each key)."""
    seen: set = set()
    out: list[T] = []
    for x in it:
        k = key(x) if key else x
        if k in seen:
            continue
        seen.add(k)
        out.append(x)
    return out
