import io

import pytest

from refer.exceptions import (
    AuthorFormatError,
    GrammarError,
    KeywordError,
    ReferEncodingError,
    ReferIOError,
    TagNotFoundError,
)
from refer.grammar import fold_lines
from refer.reader import Reader, read_records
from refer.writer import Writer, open_writer
from tests.test_data import BOOK_LINES, JOURNAL_LINES, TWO_RECORDS


def test_write_record_canonical_text():
    """
    Lines are re-serialized in canonical order with a trailing blank line.
    """
    sink = io.BytesIO()
    writer = open_writer(sink)
    writer.write_record(["%T a title", "%A Brown M.", "%D 1972"])

    assert sink.getvalue() == b"%A Brown, M.\n%D 1972\n%T a title\n\n"


def test_write_record_returns_record():
    writer = open_writer(io.BytesIO())
    record = writer.write_record(BOOK_LINES)
    assert record.book == "Our book"
    assert len(record.authors) == 2
    assert writer.records_written == 1
    assert writer.line_number == len(BOOK_LINES)


def test_writer_output_is_readable():
    """
    Reading back what was written gives the same records as folding the
    lines directly.
    """
    sink = io.BytesIO()
    writer = open_writer(sink)
    writer.write_record(BOOK_LINES)
    writer.write_record(JOURNAL_LINES)
    writer.flush()

    sink.seek(0)
    records = list(Reader(sink).records())
    assert records == [fold_lines(BOOK_LINES), fold_lines(JOURNAL_LINES)]


def test_empty_payload_dropped():
    sink = io.BytesIO()
    open_writer(sink).write_record(["%T a title", "%V ", "%X   "])
    assert sink.getvalue() == b"%T a title\n\n"


def test_bad_line_writes_nothing():
    """
    A failing line aborts the whole record; earlier records are untouched.
    """
    sink = io.BytesIO()
    writer = open_writer(sink)
    writer.write_record(["%T kept"])
    before = sink.getvalue()

    test_cases = [
        (["%T lost", "%A Brown"], AuthorFormatError),
        (["%T lost", "%K not-a-word"], KeywordError),
        (["%T lost", "%Z what"], TagNotFoundError),
    ]
    for lines, error in test_cases:
        with pytest.raises(error):
            writer.write_record(lines)
        assert sink.getvalue() == before, f"Partial record written for {lines}"
    assert writer.records_written == 1


def test_line_break_in_line_writes_nothing():
    """
    A line carrying its own line breaks is refused, so one call can never
    produce two records or text the reader rejects.
    """
    sink = io.BytesIO()
    writer = open_writer(sink)
    test_cases = [
        ["%T a\n\n%T injected", "%B Book"],
        ["%T a\n%Z bad"],
    ]
    for lines in test_cases:
        with pytest.raises(GrammarError):
            writer.write_record(lines)
    assert sink.getvalue() == b""
    assert writer.records_written == 0


def test_empty_record_rejected():
    sink = io.BytesIO()
    writer = open_writer(sink)
    for lines in ([], ["%V "], ["%T ", "%X   "]):
        with pytest.raises(GrammarError):
            writer.write_record(lines)
    assert sink.getvalue() == b""
    assert writer.records_written == 0
    assert writer.line_number == 0


def test_unencodable_text():
    """
    Text that cannot be encoded for the sink raises ReferEncodingError and
    nothing is written.
    """
    sink = io.BytesIO()
    writer = open_writer(sink)
    with pytest.raises(ReferEncodingError) as info:
        writer.write_record(["%T bad \udcff"])
    assert isinstance(info.value.__cause__, UnicodeEncodeError)
    assert sink.getvalue() == b""
    assert writer.records_written == 0

    ascii_writer = open_writer(sink, encoding="ascii")
    with pytest.raises(ReferEncodingError):
        ascii_writer.write_record(["%T Café"])


def test_line_numbers_across_calls():
    """
    The writer counts lines across calls for error messages.
    """
    writer = open_writer(io.BytesIO())
    writer.write_record(["%T one", "%D 1999"])
    with pytest.raises(AuthorFormatError) as info:
        writer.write_record(["%T two", "%A Brown"])
    assert info.value.line_number == 4


def test_text_sink_and_bytes_lines():
    sink = io.StringIO()
    writer = Writer(sink)
    writer.write_record([b"%A Brown, M.\n", b"%J A journal\n"])
    assert sink.getvalue() == "%A Brown, M.\n%J A journal\n\n"


def test_write_text():
    """
    A block of refer text is split into records and each one is written.
    """
    sink = io.StringIO()
    writer = Writer(sink)
    count = writer.write_text(TWO_RECORDS)
    assert count == 2
    assert writer.records_written == 2
    assert list(Reader.from_string(sink.getvalue())) == list(Reader.from_string(TWO_RECORDS))


def test_write_text_skips_empty_records():
    sink = io.StringIO()
    writer = Writer(sink)
    assert writer.write_text("%V \n\n%T kept\n\n%X \n") == 1
    assert sink.getvalue() == "%T kept\n\n"


def test_flush_failure():
    class BrokenSink(io.BytesIO):
        def flush(self):
            raise OSError("device gone")

    writer = Writer(BrokenSink())
    writer.write_record(["%T a title"])
    with pytest.raises(ReferIOError):
        writer.flush()


def test_from_path_write_and_append(tmp_path):
    path = str(tmp_path / "db.refer")

    with Writer.from_path(path) as writer:
        writer.write_record(BOOK_LINES)
    with Writer.from_path(path, append=True) as writer:
        writer.write_record(JOURNAL_LINES)

    records = read_records(path)
    assert [r.book for r in records] == ["Our book", None]
    assert records[1].journal == "Advances in Neural Information Processing Systems"

    # without append the file starts over
    with Writer.from_path(path) as writer:
        writer.write_record(["%T only"])
    assert [r.title for r in read_records(path)] == ["only"]
