from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import List, Optional

from .config import AUTHOR_TAG, EDITOR_TAG, KEYWORD_TAG, FIELD_TAGS, TAG_SEPARATOR, AUTHOR_NAME_SEPARATOR
from .exceptions import RecordTypeError


class RecordType(Enum):
    BOOK = "book"
    JOURNAL = "journal"


@dataclass
class Author:
    """
    A person author: the surname and every other name token, in order,
    joined by single spaces.
    """
    last: str
    rest: str

    def to_refer(self) -> str:
        return f"{AUTHOR_TAG}{TAG_SEPARATOR}{self.last}{AUTHOR_NAME_SEPARATOR}{self.rest}"

    def __str__(self) -> str:
        return f"{self.last} {self.rest}"


@dataclass
class Record:
    """
    One refer entry. Repeatable fields are lists, every other field is None
    until a line sets it. Keywords stay None until a %K line is seen, so an
    empty keyword line is distinguishable from no keyword line at all.

    A Record starts empty and is filled in line by line by the grammar
    (see grammar.fold_line). Nothing is checked at construction time; the
    book/journal rule only applies when the record type is asked for.
    """
    authors: List[Author] = field(default_factory=list)
    book: Optional[str] = None
    place: Optional[str] = None
    date: Optional[str] = None
    editors: List[str] = field(default_factory=list)
    government: Optional[str] = None
    issuer: Optional[str] = None
    journal: Optional[str] = None
    keywords: Optional[List[str]] = None
    label: Optional[str] = None
    issue_number: Optional[str] = None
    other: Optional[str] = None
    page_number: Optional[str] = None
    author_np: Optional[str] = None  # author that is not a person
    report: Optional[str] = None
    series: Optional[str] = None
    title: Optional[str] = None
    volume: Optional[str] = None
    annotation: Optional[str] = None

    def is_empty(self) -> bool:
        """
        True while no line has been folded into the record.
        """
        return self == Record()

    def record_type(self) -> RecordType:
        """
        Classify the record from whichever of book and journal is set.
        Recomputed on every call; the record may have changed since.
        """
        has_book = self.book is not None
        has_journal = self.journal is not None
        if has_book and has_journal:
            raise RecordTypeError(RecordTypeError.AMBIGUOUS)
        if has_book:
            return RecordType.BOOK
        if has_journal:
            return RecordType.JOURNAL
        raise RecordTypeError(RecordTypeError.UNDETERMINED)

    def to_refer(self) -> str:
        """
        Serialize to canonical refer text: one line per present field, in tag
        order, each ending in a newline. Absent fields produce no line. The
        blank line that ends a record is left to the writer.
        """
        lines: List[str] = []
        for tag, attr in FIELD_TAGS.items():
            value = getattr(self, attr)
            if tag == AUTHOR_TAG:
                lines.extend(a.to_refer() for a in value)
            elif tag == EDITOR_TAG:
                lines.extend(f"{tag}{TAG_SEPARATOR}{e}" for e in value)
            elif tag == KEYWORD_TAG:
                if value is not None:
                    lines.append(f"{tag}{TAG_SEPARATOR}{' '.join(value)}")
            elif value is not None:
                lines.append(f"{tag}{TAG_SEPARATOR}{value}")
        return "".join(f"{ln}\n" for ln in lines)

    def set_fields(self) -> List[str]:
        """
        Names of the fields that hold a value, in declaration order.
        """
        names = []
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list) and f.name != "keywords":
                if value:
                    names.append(f.name)
            elif value is not None:
                names.append(f.name)
        return names

    def __str__(self) -> str:
        return self.to_refer()
