from __future__ import annotations

import re
from typing import Optional

from rapidfuzz.fuzz import ratio as fuzz_ratio
from unidecode import unidecode

from .models import Author


__all__ = [
    "strip_accents",
    "normalize_text",
    "normalize_person_name",
    "author_signature",
    "title_similarity",
]


def strip_accents(s: str) -> str:
    """
    Remove accents and diacritics from a string so visually similar text from
    different locales can be compared more reliably.

    Uses unidecode for Unicode to ASCII transliteration.
    """
    return unidecode(s)


def normalize_text(t: Optional[str]) -> str:
    """
    Normalize free text (titles, keywords) for comparison by stripping
    accents, lowercasing, replacing punctuation with spaces and collapsing
    repeated whitespace.
    """
    if not t:
        return ""
    t2 = strip_accents(str(t)).lower()
    for ch in ",.;:!?\n\t\r'\"-()[]{}":
        t2 = t2.replace(ch, " ")
    return " ".join(t2.split())


def normalize_person_name(n: Optional[str]) -> str:
    """
    Normalize a person name for matching by lowercasing it, stripping accents
    and punctuation, and collapsing extra spaces.
    """
    if not n:
        return ""
    n2 = strip_accents(str(n)).lower()
    n2 = re.sub(r"[^a-z0-9\s]", " ", n2)
    return " ".join(n2.split())


def author_signature(author: Author) -> str:
    """
    Compact "surname initials" key for an author, e.g. Brown / "Max J." -> "brown mj".
    """
    last = re.sub(r"[^a-z0-9]", "", normalize_person_name(author.last))
    initials = "".join(t[0] for t in normalize_person_name(author.rest).split())
    return f"{last} {initials}".strip()


def title_similarity(a: Optional[str], b: Optional[str]) -> float:
    """
    Compute a similarity score between two titles after normalization, returning
    a value between 0 and 1 where higher means more similar.
    """
    norm_a = normalize_text(a or "")
    norm_b = normalize_text(b or "")
    if norm_a == norm_b:
        return 1.0
    # rapidfuzz.fuzz.ratio returns 0-100, normalize to 0-1
    return fuzz_ratio(norm_a, norm_b) / 100.0
