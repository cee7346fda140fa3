"""Shared text normalization for classification and matching."""
from __future__ import annotations

import re
from typing import List, Optional

_WS_RE = re.compile(r"\s+")
_POSTAL_STRIP_RE = re.compile(r"[\s\-]+")


def collapse_whitespace(text: Optional[str]) -> str:
    """Trim and collapse internal runs of whitespace to single spaces."""
    return _WS_RE.sub(" ", (text or "").strip())


def fold(text: Optional[str]) -> str:
    """Case-fold for comparisons; None becomes an empty string."""
    return collapse_whitespace(text).casefold()


def split_words(text: Optional[str]) -> List[str]:
    return fold(text).split()


def normalize_postal_code(code: Optional[str]) -> str:
    """Upper-case a postal code and drop spaces/hyphens ("k1a 0b1" -> "K1A0B1")."""
    return _POSTAL_STRIP_RE.sub("", (code or "").strip()).upper()
