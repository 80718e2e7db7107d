"""Text normalization helpers shared by reconstruction and alignment."""
from __future__ import annotations

import re
import unicodedata

_WS_RE = re.compile(r"\s+")

# Hangul, CJK ideographs, kana and full-width forms render roughly one em wide
_DENSE_RANGES = (
    (0x1100, 0x11FF),
    (0x2E80, 0x9FFF),
    (0xA960, 0xA97F),
    (0xAC00, 0xD7AF),
    (0xF900, 0xFAFF),
    (0xFF00, 0xFFEF),
    (0x20000, 0x2FA1F),
)


def collapse_whitespace(value: str) -> str:
    """Replace every whitespace run with one space and trim the ends."""

    return _WS_RE.sub(" ", str(value)).strip()


def split_words(value: str) -> list[str]:
    return [part for part in _WS_RE.split(str(value)) if part]


def is_blank(value: str) -> bool:
    return not str(value).strip()


def is_dense_char(ch: str) -> bool:
    code = ord(ch)
    return any(lo <= code <= hi for lo, hi in _DENSE_RANGES)


def dense_ratio(value: str) -> float:
    """Fraction of non-space characters belonging to a dense (CJK-like) script."""

    chars = [ch for ch in value if not ch.isspace()]
    if not chars:
        return 0.0
    return sum(1 for ch in chars if is_dense_char(ch)) / len(chars)


def comparison_key(
    text: str,
    *,
    fold_case: bool = False,
    fold_diacritics: bool = False,
    fold_width: bool = False,
) -> str:
    """Return the string used to decide whether two units are equal.

    Whitespace is always collapsed. ``fold_width`` applies NFKC so that
    full-width and compatibility forms compare equal to their plain
    counterparts, ``fold_diacritics`` strips combining marks and
    ``fold_case`` applies :meth:`str.casefold`.
    """

    key = collapse_whitespace(text)
    if fold_width:
        key = unicodedata.normalize("NFKC", key)
    if fold_diacritics:
        decomposed = unicodedata.normalize("NFD", key)
        key = unicodedata.normalize(
            "NFC", "".join(ch for ch in decomposed if not unicodedata.combining(ch))
        )
    if fold_case:
        key = key.casefold()
    return key
