"""
Field grammar for refer lines.

Each line is classified by an ordered list of classifier functions. A
classifier returns a FieldMatch when the line carries its tag and None when it
does not, so the first non-None result wins and no exception is involved in
choosing between tags. Exceptions are only raised once a tag has matched and
its payload is malformed (bad author name, bad keyword), or when nothing
matched at all.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Union

from .config import (
    AUTHOR_TAG,
    EDITOR_TAG,
    KEYWORD_TAG,
    SINGLE_VALUE_TAGS,
    FIELD_TAGS,
    TAG_LENGTH,
    TAG_SEPARATOR,
    AUTHOR_NAME_SEPARATOR,
    AUTHOR_NAME_EXTRA_CHARS,
    AUTHOR_MIN_TOKENS,
    DEFAULT_ENCODING,
)
from .exceptions import (
    AuthorFormatError,
    GrammarError,
    KeywordError,
    ReferEncodingError,
    TagNotFoundError,
)
from .log_utils import logger, LogSource, LogCategory
from .models import Author, Record

__all__ = [
    "FieldKind",
    "FieldMatch",
    "CLASSIFIERS",
    "decode_line",
    "parse_author",
    "parse_keywords",
    "classify_line",
    "apply_match",
    "fold_line",
    "fold_lines",
]


class FieldKind(Enum):
    AUTHOR = "author"
    KEYWORDS = "keywords"
    EDITOR = "editor"
    SINGLE = "single"


class FieldMatch(NamedTuple):
    """
    A successfully classified line: which tag matched, the Record attribute it
    fills, how it is applied, and the parsed value (an Author, a keyword list
    or a string).
    """
    tag: str
    attr: str
    kind: FieldKind
    value: Any


def decode_line(raw: Union[bytes, str], line_number: Optional[int] = None, encoding: str = DEFAULT_ENCODING) -> str:
    """
    Turn one raw line into text. Strings pass through unchanged.
    """
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        where = f" on line {line_number}" if line_number is not None else ""
        raise ReferEncodingError(f"invalid {encoding} byte sequence{where}: {e.reason}", line_number) from e


def _strip_terminator(line: str) -> str:
    # only the line ending; a payload may legitimately end in spaces
    return line.rstrip("\r\n")


def _payload(line: str, tag: str) -> Optional[str]:
    prefix = tag + TAG_SEPARATOR
    if line.startswith(prefix):
        return line[len(prefix):]
    return None


def _is_name_token(token: str) -> bool:
    return bool(token) and all(ch.isalpha() or ch in AUTHOR_NAME_EXTRA_CHARS for ch in token)


def parse_author(payload: str) -> Author:
    """
    Parse an author payload into surname and remaining names.

    Both "Surname, Given Middle" and "Surname Given Middle" are accepted. The
    first token is always the surname; the remaining tokens are kept in order
    and joined by single spaces.
    """
    text = payload.strip()
    if AUTHOR_NAME_SEPARATOR in text:
        surname, _, given = text.partition(AUTHOR_NAME_SEPARATOR)
        tokens = [surname.strip()] + given.split()
    else:
        tokens = text.split()
    tokens = [t for t in tokens if t]

    for token in tokens:
        if not _is_name_token(token):
            raise AuthorFormatError(
                f"author name token {token!r} may only contain letters, hyphens and periods",
                line=payload,
            )
    if len(tokens) < AUTHOR_MIN_TOKENS:
        raise AuthorFormatError(
            f"author name has {len(tokens)} token(s), should be formatted <Surname>, <Given names>",
            line=payload,
        )
    return Author(last=tokens[0], rest=" ".join(tokens[1:]))


def parse_keywords(payload: str) -> List[str]:
    """
    Split a keyword payload on spaces. Keywords are letters only; an empty
    payload gives an empty list.
    """
    words = [w for w in payload.strip().split(" ") if w]
    for w in words:
        if not w.isalpha():
            raise KeywordError(f"keyword {w!r} may only contain letters", line=payload)
    return words


def classify_author(line: str) -> Optional[FieldMatch]:
    payload = _payload(line, AUTHOR_TAG)
    if payload is None:
        return None
    return FieldMatch(AUTHOR_TAG, FIELD_TAGS[AUTHOR_TAG], FieldKind.AUTHOR, parse_author(payload))


def classify_keywords(line: str) -> Optional[FieldMatch]:
    payload = _payload(line, KEYWORD_TAG)
    if payload is None:
        return None
    return FieldMatch(KEYWORD_TAG, FIELD_TAGS[KEYWORD_TAG], FieldKind.KEYWORDS, parse_keywords(payload))


def classify_editor(line: str) -> Optional[FieldMatch]:
    payload = _payload(line, EDITOR_TAG)
    if payload is None:
        return None
    return FieldMatch(EDITOR_TAG, FIELD_TAGS[EDITOR_TAG], FieldKind.EDITOR, payload.strip())


def _single_value_classifier(tag: str) -> Callable[[str], Optional[FieldMatch]]:
    attr = FIELD_TAGS[tag]

    def classify(line: str) -> Optional[FieldMatch]:
        payload = _payload(line, tag)
        if payload is None:
            return None
        return FieldMatch(tag, attr, FieldKind.SINGLE, payload.strip())

    classify.__name__ = f"classify_{attr}"
    return classify


# Author, keywords and editor first, then the single-valued tags in tag order
CLASSIFIERS: List[Callable[[str], Optional[FieldMatch]]] = [
    classify_author,
    classify_keywords,
    classify_editor,
] + [_single_value_classifier(t) for t in SINGLE_VALUE_TAGS]


def classify_line(line: str) -> FieldMatch:
    """
    Classify a single line of text. Raises GrammarError when the text holds
    more than one line, TagNotFoundError when no tag matches, and
    AuthorFormatError or KeywordError when the tag matched but the payload is
    malformed.
    """
    text = _strip_terminator(line)
    if "\n" in text or "\r" in text:
        raise GrammarError("line break inside a field line", line=text)
    for classifier in CLASSIFIERS:
        match = classifier(text)
        if match is not None:
            return match
    raise TagNotFoundError(text[:TAG_LENGTH], line=text)


def apply_match(record: Record, match: FieldMatch) -> None:
    """
    Fold one classified line into the record.
    """
    if match.kind is FieldKind.AUTHOR:
        record.authors.append(match.value)
    elif match.kind is FieldKind.EDITOR:
        record.editors.append(match.value)
    elif match.kind is FieldKind.KEYWORDS:
        record.keywords = match.value
    elif not match.value:
        # empty optional fields are dropped rather than stored as ""
        logger.debug(f"Skipping empty {match.tag} field", source=LogSource.GRAMMAR, category=LogCategory.PARSE)
    else:
        setattr(record, match.attr, match.value)


def fold_line(record: Record, line: Union[str, bytes], line_number: Optional[int] = None) -> FieldMatch:
    """
    Decode, classify and apply one line to the record, tagging any grammar
    error with the line number.
    """
    text = decode_line(line, line_number)
    try:
        match = classify_line(text)
    except GrammarError as e:
        if line_number is not None:
            e.at_line(line_number)
        raise
    apply_match(record, match)
    return match


def fold_lines(lines: Iterable[Union[str, bytes]], first_line_number: int = 1) -> Record:
    """
    Fold a sequence of field lines into a fresh Record.
    """
    record = Record()
    for offset, line in enumerate(lines):
        fold_line(record, line, first_line_number + offset)
    return record
