"""
Citation rendering.

Only Harvard is implemented. Each style is a formatter function registered
in REFERENCE_STYLES; APA is declared so it can be asked for by name but raises
UnsupportedStyleError until it has a formatter.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional, Union

from .config import DEFAULT_STYLE, ET_AL_THRESHOLD
from .exceptions import UnsupportedStyleError
from .log_utils import logger, LogSource, LogCategory
from .models import Record, RecordType

__all__ = ["Style", "REFERENCE_STYLES", "render", "harvard_authors", "harvard_date", "format_harvard"]


class Style(Enum):
    HARVARD = "harvard"
    APA = "apa"

    @classmethod
    def from_name(cls, name: Union[str, "Style"]) -> "Style":
        """
        Look a style up by name, ignoring case.
        """
        if isinstance(name, Style):
            return name
        key = str(name).strip().lower()
        for style in cls:
            if style.value == key:
                return style
        raise UnsupportedStyleError(f"unknown citation style {name!r}")


def harvard_authors(record: Record, use_author_np: bool = False) -> str:
    """
    "Last Rest and Last Rest " for up to four authors, "Last Rest et al., "
    beyond that. With use_author_np and no person authors, the non-person
    author (%Q) stands in.
    """
    if len(record.authors) > ET_AL_THRESHOLD:
        first = record.authors[0]
        return f"{first.last} {first.rest} et al., "
    if record.authors:
        return " and ".join(f"{a.last} {a.rest}" for a in record.authors) + " "
    if use_author_np and record.author_np:
        return f"{record.author_np} "
    return ""


def harvard_date(record: Record) -> str:
    if record.date is not None:
        return f"({record.date}) "
    return ""


def _harvard_book(record: Record, use_author_np: bool = False) -> str:
    # <authors> <(date)> <book>. <place>: <publisher>. <series>, <volume>.
    parts = [harvard_authors(record, use_author_np), harvard_date(record)]
    if record.book is not None:
        parts.append(f"{record.book}. ")
    if record.place is not None:
        parts.append(record.place)
    if record.issuer is not None:
        if record.place is not None:
            parts.append(": ")
        parts.append(f"{record.issuer}. ")
    if record.series is not None:
        parts.append(record.series)
        parts.append(", " if record.volume is not None else ".")
    if record.volume is not None:
        parts.append(f"{record.volume}.")
    return "".join(parts)


def _harvard_journal(record: Record, use_author_np: bool = False) -> str:
    # <authors> <(date)> <title>. <journal>, <volume>(<issue>) <pages>.
    parts = [harvard_authors(record, use_author_np), harvard_date(record)]
    if record.title is not None:
        parts.append(f"{record.title}. ")
    if record.journal is not None:
        parts.append(f"{record.journal}, ")
    if record.volume is not None:
        parts.append(record.volume)
    if record.issue_number is not None:
        parts.append(f"({record.issue_number}) ")
    if record.page_number is not None:
        parts.append(f"{record.page_number}.")
    return "".join(parts)


def format_harvard(record: Record, use_other: bool = False, use_author_np: bool = False) -> str:
    """
    Harvard reference for a book or a journal article. Raises RecordTypeError
    when the record is neither, or both.
    """
    if record.record_type() is RecordType.BOOK:
        text = _harvard_book(record, use_author_np)
    else:
        text = _harvard_journal(record, use_author_np)
    if use_other and record.other is not None:
        text += f" Available at: {record.other}."
    return text


def _unsupported(style: Style) -> Callable[..., str]:
    def formatter(record: Record, use_other: bool = False, use_author_np: bool = False) -> str:
        raise UnsupportedStyleError(f"{style.name} style is not supported yet")
    return formatter


REFERENCE_STYLES: Dict[Style, Callable[..., str]] = {
    Style.HARVARD: format_harvard,
    Style.APA: _unsupported(Style.APA),
}


def render(
    record: Record,
    style: Optional[Union[str, Style]] = DEFAULT_STYLE,
    use_other: bool = False,
    use_author_np: bool = False,
) -> str:
    """
    Render a completed record as a citation string in the named style.
    use_other appends the %O field; use_author_np puts the %Q author in place
    of missing %A authors.
    """
    chosen = Style.from_name(style or DEFAULT_STYLE)
    # classification comes before any style, supported or not
    record.record_type()
    formatter = REFERENCE_STYLES[chosen]
    citation = formatter(record, use_other=use_other, use_author_np=use_author_np)
    logger.debug(f"Rendered {chosen.value} citation", source=LogSource.STYLE, category=LogCategory.RENDER)
    return citation
