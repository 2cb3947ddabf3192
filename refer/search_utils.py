from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .config import SIM_TITLE_MATCH_THRESHOLD, SIM_DUPLICATE_THRESHOLD, AUTHOR_NAME_SEPARATOR
from .log_utils import logger, LogSource, LogCategory
from .models import Author, Record
from .text_utils import normalize_text, normalize_person_name, author_signature, title_similarity


__all__ = [
    "count_records",
    "record_title",
    "filter_by_keywords",
    "filter_by_author",
    "find_by_title",
    "find_duplicates",
]


def count_records(records: Iterable[Record]) -> int:
    """
    Count the records in a sequence, consuming it. Works on a Reader directly.
    """
    return sum(1 for _ in records)


def record_title(record: Record) -> Optional[str]:
    """
    The title a person would search for: the article title, or for a whole
    book the book title.
    """
    return record.title or record.book


def filter_by_keywords(records: Iterable[Record], keywords: Sequence[str], match_all: bool = False) -> List[Record]:
    """
    Keep records whose %K keywords contain any (or, with match_all, every) of
    the given keywords. Matching ignores case and accents. Records without a
    keyword line never match.
    """
    wanted = {normalize_text(k) for k in keywords if normalize_text(k)}
    if not wanted:
        return []
    hits: List[Record] = []
    for record in records:
        if not record.keywords:
            continue
        have = {normalize_text(k) for k in record.keywords}
        if (wanted <= have) if match_all else (wanted & have):
            hits.append(record)
    logger.debug(f"{len(hits)} record(s) matched keywords {sorted(wanted)}", source=LogSource.SEARCH, category=LogCategory.SEARCH)
    return hits


def _author_matches(author: Author, last: str, initials: str) -> bool:
    sig_last, _, sig_initials = author_signature(author).partition(" ")
    if sig_last != last:
        return False
    if not initials or not sig_initials:
        return True
    return sig_initials.startswith(initials) or initials.startswith(sig_initials)


def filter_by_author(records: Iterable[Record], name: str) -> List[Record]:
    """
    Keep records with an author whose surname matches. The name may be a bare
    surname ("Brown") or "Surname, Given" ("Brown, M."), in which case the
    initials must agree as well.
    """
    surname, _, given = name.partition(AUTHOR_NAME_SEPARATOR.strip())
    last = normalize_person_name(surname).replace(" ", "")
    initials = "".join(t[0] for t in normalize_person_name(given).split())
    if not last:
        return []
    return [r for r in records if any(_author_matches(a, last, initials) for a in r.authors)]


def find_by_title(records: Iterable[Record], title: str, threshold: float = SIM_TITLE_MATCH_THRESHOLD) -> List[Record]:
    """
    Records whose title is at least `threshold` similar to the query, best
    match first.
    """
    if not normalize_text(title):
        return []
    scored = []
    for record in records:
        candidate = record_title(record)
        if not candidate:
            continue
        score = title_similarity(title, candidate)
        if score >= threshold:
            scored.append((score, record))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [record for _, record in scored]


def find_duplicates(record: Record, records: Iterable[Record], threshold: float = SIM_DUPLICATE_THRESHOLD) -> List[Record]:
    """
    Existing records that look like the same publication as `record`: titles
    at least `threshold` similar and, when both have one, the same date.
    Useful before appending a new record to a database file.
    """
    title = record_title(record)
    if not normalize_text(title):
        return []
    dupes: List[Record] = []
    for other in records:
        if other is record:
            continue
        other_title = record_title(other)
        if not other_title or title_similarity(title, other_title) < threshold:
            continue
        if record.date and other.date and normalize_text(record.date) != normalize_text(other.date):
            continue
        dupes.append(other)
    if dupes:
        logger.info(f"{len(dupes)} possible duplicate(s) of '{title}'", source=LogSource.SEARCH, category=LogCategory.SEARCH)
    return dupes
