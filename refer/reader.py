from __future__ import annotations

import io
from enum import Enum
from typing import BinaryIO, Iterator, List, Optional, TextIO, Union

from .config import DEFAULT_ENCODING
from .exceptions import DECODE_ERRORS, FILE_IO_ERRORS, ReferEncodingError, ReferError, ReferIOError
from .grammar import decode_line, fold_line
from .log_utils import logger, LogSource, LogCategory
from .models import Record

__all__ = ["ReaderState", "Reader", "open_reader", "read_records"]


class ReaderState(Enum):
    SCANNING = "scanning"          # skipping blank lines before a record
    ACCUMULATING = "accumulating"  # at least one field line folded in
    DONE = "done"                  # stream exhausted or an error was raised


class Reader:
    """
    Pull refer records one at a time from a byte (or text) stream.

    Records are paragraphs of field lines separated by one or more blank
    lines. The last record does not need a trailing blank line. Iteration is
    lazy and forward-only: each next() reads just enough lines to finish one
    record. A malformed line raises from next() in place of the record, after
    which the reader is finished; build a new Reader over a fresh stream to
    start again.
    """

    def __init__(self, stream: Union[BinaryIO, TextIO], encoding: str = DEFAULT_ENCODING, *, owns_stream: bool = False):
        self._stream = stream
        self._encoding = encoding
        self._owns_stream = owns_stream
        self._state = ReaderState.SCANNING
        self._line_number = 0
        self._records_read = 0

    @classmethod
    def from_path(cls, path: str, encoding: str = DEFAULT_ENCODING) -> "Reader":
        """
        Open a refer file for reading. The reader closes the file itself.
        """
        try:
            stream = open(path, "rb")
        except FILE_IO_ERRORS as e:
            raise ReferIOError(f"cannot open {path}: {e}") from e
        logger.info(f"Opened {path}", source=LogSource.READER, category=LogCategory.READ)
        return cls(stream, encoding, owns_stream=True)

    @classmethod
    def from_string(cls, text: str) -> "Reader":
        return cls(io.StringIO(text))

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def line_number(self) -> int:
        """
        Number of lines consumed so far (1-based number of the last line read).
        """
        return self._line_number

    @property
    def records_read(self) -> int:
        return self._records_read

    def records(self) -> "Reader":
        """
        The lazy sequence of records. The reader is its own iterator, so this
        can only be walked once.
        """
        return self

    def __iter__(self) -> Iterator[Record]:
        return self

    def __next__(self) -> Record:
        record = self.read_record()
        if record is None:
            raise StopIteration
        return record

    def _readline(self) -> Union[bytes, str]:
        try:
            return self._stream.readline()
        except DECODE_ERRORS as e:
            # a text stream decodes ahead in chunks, so the exact line is unknown
            raise ReferEncodingError(f"cannot decode text after line {self._line_number}: {e.reason}") from e
        except FILE_IO_ERRORS as e:
            raise ReferIOError(f"read failed after line {self._line_number}: {e}") from e

    def read_record(self) -> Optional[Record]:
        """
        Read the next record, or return None once the stream is exhausted.
        """
        if self._state is ReaderState.DONE:
            return None

        record = Record()
        try:
            while True:
                raw = self._readline()
                if not raw:
                    # end of stream: a pending record is still emitted
                    pending = self._state is ReaderState.ACCUMULATING
                    self._state = ReaderState.DONE
                    return self._emit(record) if pending else None

                self._line_number += 1
                line = decode_line(raw, self._line_number, self._encoding)

                if not line.strip():
                    if self._state is ReaderState.ACCUMULATING:
                        self._state = ReaderState.SCANNING
                        return self._emit(record)
                    continue

                fold_line(record, line, self._line_number)
                self._state = ReaderState.ACCUMULATING
        except ReferError as e:
            self._state = ReaderState.DONE
            logger.error(f"Stopped reading: {e}", source=LogSource.READER, category=LogCategory.ERROR)
            raise

    def _emit(self, record: Record) -> Record:
        self._records_read += 1
        logger.debug(
            f"Record {self._records_read} complete at line {self._line_number}",
            source=LogSource.READER,
            category=LogCategory.READ,
        )
        return record

    def close(self) -> None:
        """
        Close the underlying stream if this reader opened it.
        """
        if self._owns_stream:
            self._stream.close()
        self._state = ReaderState.DONE

    def __enter__(self) -> "Reader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_reader(stream: Union[BinaryIO, TextIO], encoding: str = DEFAULT_ENCODING) -> Reader:
    """
    Wrap a readable stream in a Reader.
    """
    return Reader(stream, encoding)


def read_records(path: str, encoding: str = DEFAULT_ENCODING) -> List[Record]:
    """
    Read every record of a refer file into a list.
    """
    with Reader.from_path(path, encoding) as reader:
        records = list(reader.records())
    logger.step(f"Read {len(records)} record(s) from {path}", source=LogSource.READER, category=LogCategory.READ)
    return records
