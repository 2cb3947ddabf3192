import pytest

from refer import grammar
from refer.config import FIELD_TAGS, SINGLE_VALUE_TAGS
from refer.exceptions import (
    AuthorFormatError,
    GrammarError,
    KeywordError,
    ReferEncodingError,
    TagNotFoundError,
)
from refer.models import Author, Record

# ===== AUTHOR NAMES =====

def test_parse_author_formats():
    """
    Test both name conventions and the token character set.
    """
    test_cases = [
        ("Brown, M.", Author("Brown", "M.")),
        ("Brown M.", Author("Brown", "M.")),
        ("Brown, Max J.", Author("Brown", "Max J.")),
        ("Brown Max J.", Author("Brown", "Max J.")),
        ("Carter-Brown, Max", Author("Carter-Brown", "Max")),
        ("Müller, Jürgen", Author("Müller", "Jürgen")),
        ("  Brown,   M.  ", Author("Brown", "M.")),
    ]

    for payload, expected in test_cases:
        output = grammar.parse_author(payload)
        assert output == expected, f"Expected {expected} for '{payload}', got {output}"


def test_parse_author_needs_two_tokens():
    """
    A single name token is not enough.
    """
    for payload in ["Brown", "Brown,", ", M.", "", "   "]:
        with pytest.raises(AuthorFormatError):
            grammar.parse_author(payload)


def test_parse_author_rejects_bad_characters():
    """
    Only letters, hyphens and periods are allowed in a name token.
    """
    for payload in ["O'Brien, M.", "Brown, M2", "Smith & Jones"]:
        with pytest.raises(AuthorFormatError):
            grammar.parse_author(payload)


def test_first_token_is_always_last():
    """
    The surname is the first token regardless of separator.
    """
    author = grammar.parse_author("Max Carter-Brown")
    assert author.last == "Max"
    assert author.rest == "Carter-Brown"

# ===== KEYWORDS =====

def test_parse_keywords():
    """
    Test keyword splitting.
    """
    test_cases = [
        ("keyword another word", ["keyword", "another", "word"]),
        ("single", ["single"]),
        ("double  space", ["double", "space"]),
        ("", []),
    ]

    for payload, expected in test_cases:
        output = grammar.parse_keywords(payload)
        assert output == expected, f"Expected {expected}, got {output}"


def test_parse_keywords_rejects_non_alphabetic():
    """
    Hyphens and periods are fine in names but not in keywords.
    """
    for payload in ["well-known", "v2", "end."]:
        with pytest.raises(KeywordError):
            grammar.parse_keywords(payload)

# ===== CLASSIFICATION =====

def test_classify_every_tag():
    """
    Every tag in the table is recognized and routed to its attribute.
    """
    for tag, attr in FIELD_TAGS.items():
        payload = "Brown, M." if tag == "%A" else "value"
        match = grammar.classify_line(f"{tag} {payload}\n")
        assert match.tag == tag
        assert match.attr == attr


def test_classify_kinds():
    """
    Authors, keywords and editors have their own kinds.
    """
    assert grammar.classify_line("%A Brown, M.").kind is grammar.FieldKind.AUTHOR
    assert grammar.classify_line("%K birds").kind is grammar.FieldKind.KEYWORDS
    assert grammar.classify_line("%E An Editor").kind is grammar.FieldKind.EDITOR
    for tag in SINGLE_VALUE_TAGS:
        assert grammar.classify_line(f"{tag} x").kind is grammar.FieldKind.SINGLE


def test_classify_trims_payload():
    match = grammar.classify_line("%T   a title  \r\n")
    assert match.value == "a title"


def test_classifier_order():
    """
    Author, keyword and editor classifiers are tried before the rest.
    """
    names = [c.__name__ for c in grammar.CLASSIFIERS]
    assert names[:3] == ["classify_author", "classify_keywords", "classify_editor"]
    assert len(names) == len(FIELD_TAGS)


def test_unknown_tag():
    """
    Unknown prefixes raise TagNotFoundError naming the prefix.
    """
    test_cases = [
        ("%Z something", "%Z"),
        ("no tag here", "no"),
        ("%T", "%T"),  # missing the separating space
        ("%Tno space", "%T"),
    ]

    for line, prefix in test_cases:
        with pytest.raises(TagNotFoundError) as info:
            grammar.classify_line(line)
        assert info.value.tag == prefix
        assert isinstance(info.value, GrammarError)


def test_line_break_inside_line():
    """
    Only a trailing line ending is allowed; a break inside the text would
    turn one field into several lines.
    """
    test_cases = [
        "%T a\n\n%T injected",
        "%T a\n%Z bad\n",
        "%T a\rb",
        "%A Brown, M.\n%A Carter, A.",
    ]

    for line in test_cases:
        with pytest.raises(GrammarError):
            grammar.classify_line(line)

    assert grammar.classify_line("%T a title\r\n").value == "a title"

# ===== FOLDING =====

def test_fold_line_single_values():
    record = Record()
    grammar.fold_line(record, "%T a title\n")
    grammar.fold_line(record, "%D 1972\n")
    assert record.title == "a title"
    assert record.date == "1972"


def test_fold_line_skips_empty_payload():
    """
    An empty single-valued field is dropped, not stored as "".
    """
    record = Record()
    grammar.fold_line(record, "%T \n")
    grammar.fold_line(record, "%V    \n")
    assert record.title is None
    assert record.volume is None
    assert record.is_empty()


def test_fold_line_repeatable_fields():
    record = grammar.fold_lines([
        "%A Brown, M.",
        "%A Carter, A.",
        "%E First Editor",
        "%E Second Editor",
    ])
    assert [a.last for a in record.authors] == ["Brown", "Carter"]
    assert record.editors == ["First Editor", "Second Editor"]


def test_fold_line_keywords_seen_but_empty():
    """
    An empty keyword line gives an empty list, not None.
    """
    record = grammar.fold_lines(["%K "])
    assert record.keywords == []
    assert grammar.fold_lines(["%T x"]).keywords is None


def test_fold_line_accepts_bytes():
    record = grammar.fold_lines([b"%A Brown, M.\n", "%T a title".encode("utf-8")])
    assert record.authors == [Author("Brown", "M.")]
    assert record.title == "a title"


def test_fold_line_bad_bytes():
    with pytest.raises(ReferEncodingError) as info:
        grammar.fold_line(Record(), b"%T \xff\xfe\n", line_number=7)
    assert info.value.line_number == 7


def test_fold_lines_reports_line_number():
    """
    Errors carry the line number and a snippet of the line.
    """
    with pytest.raises(AuthorFormatError) as info:
        grammar.fold_lines(["%T fine", "%A Brown"], first_line_number=10)
    assert info.value.line_number == 11
    assert "line 11" in str(info.value)
    assert "Brown" in info.value.snippet
