# hextags/common/strings/normalize.py
from __future__ import annotations

import unicodedata
from typing import Optional


def clean_part(value: Optional[str]) -> str:
    """Trim surrounding whitespace; None becomes ''."""
    if value is None:
        return ""
    return str(value).strip()


def text_key(text: str, *, case_sensitive: bool = True) -> str:
    """
    Dedup key for a tag's text.

      - case_sensitive=True  -> the trimmed text, byte for byte
      - case_sensitive=False -> NFKC-normalized and casefolded

    Examples:
      text_key(" Red ")                        -> "Red"
      text_key("Straße", case_sensitive=False) -> "strasse"
    """
    value = clean_part(text)
    if case_sensitive:
        return value
    return unicodedata.normalize("NFKC", value).casefold()
