from __future__ import annotations

from typing import Optional

from .config import SNIPPET_MAX_LENGTH

__all__ = [
    "ReferError",
    "ReferIOError",
    "ReferEncodingError",
    "GrammarError",
    "TagNotFoundError",
    "AuthorFormatError",
    "KeywordError",
    "RecordTypeError",
    "UnsupportedStyleError",
    "FILE_IO_ERRORS",
    "DECODE_ERRORS",
]


def _snippet(line: Optional[str]) -> str:
    """
    Shorten an offending line so it can be quoted in an error message.
    """
    if line is None:
        return ""
    text = line.rstrip("\r\n")
    if len(text) > SNIPPET_MAX_LENGTH:
        return text[:SNIPPET_MAX_LENGTH] + "..."
    return text


class ReferError(Exception):
    """
    Base class for every failure raised while reading, writing or rendering
    refer records.
    """


class ReferIOError(ReferError):
    """
    The underlying stream failed to read, write or flush. The original
    OSError is kept as __cause__.
    """


class ReferEncodingError(ReferError):
    """
    A line contained bytes that could not be decoded as text.
    """

    def __init__(self, msg: str, line_number: Optional[int] = None):
        super().__init__(msg)
        self.line_number = line_number


class GrammarError(ReferError, ValueError):
    """
    A line did not match the field grammar. Carries the 1-based line number
    (when known) and a snippet of the line.
    """

    def __init__(self, msg: str, line: Optional[str] = None, line_number: Optional[int] = None):
        self.msg = msg
        self.snippet = _snippet(line)
        self.line_number = line_number
        super().__init__(self._compose())

    def _compose(self) -> str:
        parts = []
        if self.line_number is not None:
            parts.append(f"line {self.line_number}")
        if self.snippet:
            parts.append(f"'{self.snippet}'")
        where = f" ({', '.join(parts)})" if parts else ""
        return f"{self.msg}{where}"

    def at_line(self, line_number: int) -> "GrammarError":
        """
        Attach a line number after the fact; the grammar itself does not know
        where in a stream a line came from.
        """
        self.line_number = line_number
        self.args = (self._compose(),)
        return self


class TagNotFoundError(GrammarError):
    """
    The two-character prefix of a line is not a refer tag.
    """

    def __init__(self, tag: str, line: Optional[str] = None, line_number: Optional[int] = None):
        self.tag = tag
        super().__init__(f"the tag used ({tag!r}) is not a refer tag", line=line, line_number=line_number)


class AuthorFormatError(GrammarError):
    """
    An author line had fewer than two name tokens, or a token with characters
    other than letters, hyphens and periods.
    """


class KeywordError(GrammarError):
    """
    A keyword line held a token that is not purely alphabetic.
    """


class RecordTypeError(ReferError):
    """
    A record cannot be classified as a book or a journal article. The reason
    is "ambiguous" when both are set and "undetermined" when neither is.
    """

    AMBIGUOUS = "ambiguous"
    UNDETERMINED = "undetermined"

    def __init__(self, reason: str):
        self.reason = reason
        if reason == self.AMBIGUOUS:
            detail = "record has both a book (%B) and a journal (%J)"
        else:
            detail = "record has neither a book (%B) nor a journal (%J)"
        super().__init__(f"record type is {reason}: {detail}")


class UnsupportedStyleError(ReferError):
    """
    The requested citation style is unknown or not implemented.
    """


# errors raised by the operating system when a stream or file cannot be used
FILE_IO_ERRORS = (FileNotFoundError, PermissionError, OSError)

# errors raised when converting between bytes and text
DECODE_ERRORS = (UnicodeDecodeError, UnicodeEncodeError)
