from __future__ import annotations

# Every field line is a two-character tag, a single space, then the payload.
TAG_LENGTH = 2
TAG_SEPARATOR = " "

# Tag -> Record attribute. Ordering here is the canonical serialization order
# used by Record.to_refer (authors first, annotation last).
FIELD_TAGS = {
    "%A": "authors",
    "%B": "book",
    "%C": "place",
    "%D": "date",
    "%E": "editors",
    "%G": "government",
    "%I": "issuer",
    "%J": "journal",
    "%K": "keywords",
    "%L": "label",
    "%N": "issue_number",
    "%O": "other",
    "%P": "page_number",
    "%Q": "author_np",
    "%R": "report",
    "%S": "series",
    "%T": "title",
    "%V": "volume",
    "%X": "annotation",
}

AUTHOR_TAG = "%A"
EDITOR_TAG = "%E"
KEYWORD_TAG = "%K"

# Tags that hold exactly one string value; a later line overwrites an earlier one
SINGLE_VALUE_TAGS = tuple(t for t in FIELD_TAGS if t not in (AUTHOR_TAG, EDITOR_TAG, KEYWORD_TAG))

# "Surname, Given Middle" is preferred; "Surname Given Middle" is also accepted
AUTHOR_NAME_SEPARATOR = ", "

# Characters allowed in a name token besides letters
AUTHOR_NAME_EXTRA_CHARS = "-."

# Minimum number of name tokens in an author line (surname plus at least one more)
AUTHOR_MIN_TOKENS = 2

# Encoding used to decode input bytes and encode output text
DEFAULT_ENCODING = "utf-8"

# Maximum number of characters of an offending line quoted in error messages
SNIPPET_MAX_LENGTH = 40

# Citation rendering
DEFAULT_STYLE = "harvard"

# More authors than this collapse to "<first author> et al., " in Harvard style
ET_AL_THRESHOLD = 4

# Logging
LOG_NAME = "refer"
LOG_LEVEL = "WARNING"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# similarity level above which a title counts as a match when searching
SIM_TITLE_MATCH_THRESHOLD = 0.8

# similarity level above which two records are reported as likely duplicates
SIM_DUPLICATE_THRESHOLD = 0.9
