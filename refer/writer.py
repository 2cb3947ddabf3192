from __future__ import annotations

import io
from typing import BinaryIO, Iterable, TextIO, Union

from .config import DEFAULT_ENCODING
from .exceptions import DECODE_ERRORS, FILE_IO_ERRORS, GrammarError, ReferEncodingError, ReferIOError
from .grammar import fold_lines
from .log_utils import logger, LogSource, LogCategory
from .models import Record
from .reader import Reader

__all__ = ["Writer", "open_writer"]


class Writer:
    """
    Validate field lines through the refer grammar and append the canonical
    form of each record to a sink.

    Lines are parsed, not copied: whatever the caller passes is rebuilt into a
    Record and re-serialized, so every record written can be read back by a
    Reader. A bad line fails the whole record and nothing of it is written.
    """

    def __init__(self, sink: Union[BinaryIO, TextIO], encoding: str = DEFAULT_ENCODING, *, owns_sink: bool = False):
        self._sink = sink
        self._encoding = encoding
        self._owns_sink = owns_sink
        self._text_sink = isinstance(sink, io.TextIOBase)
        self._line_number = 0
        self._records_written = 0

    @classmethod
    def from_path(cls, path: str, append: bool = False, encoding: str = DEFAULT_ENCODING) -> "Writer":
        """
        Open a refer file for writing, truncating it unless append is set.
        The writer closes the file itself.
        """
        try:
            sink = open(path, "ab" if append else "wb")
        except FILE_IO_ERRORS as e:
            raise ReferIOError(f"cannot open {path}: {e}") from e
        logger.info(f"Opened {path} ({'append' if append else 'write'})", source=LogSource.WRITER, category=LogCategory.WRITE)
        return cls(sink, encoding, owns_sink=True)

    @property
    def line_number(self) -> int:
        """
        Number of field lines accepted so far, across all calls.
        """
        return self._line_number

    @property
    def records_written(self) -> int:
        return self._records_written

    def write_record(self, lines: Iterable[Union[str, bytes]]) -> Record:
        """
        Parse one record's worth of tag-prefixed lines and write its canonical
        text followed by a blank line. Returns the record that was written.
        Raises GrammarError when no line carries a value, since an empty
        record would read back as nothing.
        """
        lines = list(lines)
        record = fold_lines(lines, first_line_number=self._line_number + 1)
        if record.is_empty():
            raise GrammarError("record has no fields to write")
        self._line_number += len(lines)
        self._write(record.to_refer() + "\n")
        self._records_written += 1
        logger.debug(
            f"Wrote record {self._records_written} ({len(lines)} line(s))",
            source=LogSource.WRITER,
            category=LogCategory.WRITE,
        )
        return record

    def write_text(self, text: str) -> int:
        """
        Write every record found in a block of refer text, e.g. one typed into
        an editor. Records whose fields are all empty are skipped. Returns the
        number of records written.
        """
        count = 0
        for record in Reader.from_string(text).records():
            if record.is_empty():
                logger.warn("Skipping record with no field values", source=LogSource.WRITER, category=LogCategory.WRITE)
                continue
            self.write_record(record.to_refer().splitlines())
            count += 1
        return count

    def _write(self, text: str) -> None:
        try:
            data = text if self._text_sink else text.encode(self._encoding)
        except DECODE_ERRORS as e:
            raise ReferEncodingError(f"cannot encode record as {self._encoding}: {e.reason}") from e
        try:
            self._sink.write(data)
        except DECODE_ERRORS as e:
            raise ReferEncodingError(f"cannot encode record: {e.reason}") from e
        except FILE_IO_ERRORS as e:
            raise ReferIOError(f"write failed: {e}") from e

    def flush(self) -> None:
        """
        Hand every record accepted so far to the underlying sink.
        """
        try:
            self._sink.flush()
        except FILE_IO_ERRORS as e:
            raise ReferIOError(f"flush failed: {e}") from e
        logger.success(f"Flushed {self._records_written} record(s)", source=LogSource.WRITER, category=LogCategory.WRITE)

    def close(self) -> None:
        """
        Flush, and close the sink if this writer opened it.
        """
        self.flush()
        if self._owns_sink:
            self._sink.close()

    def __enter__(self) -> "Writer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_writer(sink: Union[BinaryIO, TextIO], encoding: str = DEFAULT_ENCODING) -> Writer:
    """
    Wrap a writable stream in a Writer.
    """
    return Writer(sink, encoding)
