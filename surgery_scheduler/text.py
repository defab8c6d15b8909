"""
Free-text canonicalization for search, filters and spreadsheet headers.
Case mapping follows Turkish rules: İ/i and I/ı are distinct pairs.
"""

import re
from typing import Optional

_LOWER_SPECIAL = str.maketrans({"İ": "i", "I": "ı"})
_UPPER_SPECIAL = str.maketrans({"i": "İ", "ı": "I"})

# Whole-token shorthand used on the ward lists
ABBREVIATIONS = {
    "nx": "nefrektomi",
    "bx": "biyopsi",
}
_ABBREV_RE = re.compile(r"\b(" + "|".join(ABBREVIATIONS) + r")\b")

TURKISH_ALPHABET = "abcçdefgğhıijklmnoöprsştuüvyz"
_ALPHABET_RANK = {ch: i for i, ch in enumerate(TURKISH_ALPHABET)}


def turkish_lower(s: str) -> str:
    return s.translate(_LOWER_SPECIAL).lower()


def turkish_upper(s: str) -> str:
    return s.translate(_UPPER_SPECIAL).upper()


def normalize(s: Optional[str]) -> str:
    """Trim, Turkish-lowercase, expand abbreviations. Idempotent."""
    if not s:
        return ""
    text = turkish_lower(str(s).strip())
    return _ABBREV_RE.sub(lambda m: ABBREVIATIONS[m.group(1)], text)


def header_key(s: Optional[str]) -> str:
    """Loose key for spreadsheet headers and sheet names (HASTA ADI == hasta adi)."""
    if s is None:
        return ""
    return turkish_lower(str(s).strip()).replace("ı", "i")


def collation_key(s: str):
    """Sort key in Turkish alphabet order; other characters sort after, by code point."""
    lowered = turkish_lower(s)
    return [(_ALPHABET_RANK.get(ch, len(_ALPHABET_RANK) + ord(ch))) for ch in lowered]
