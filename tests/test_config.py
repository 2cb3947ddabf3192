from refer.config import (
    FIELD_TAGS,
    SINGLE_VALUE_TAGS,
    TAG_LENGTH,
    ET_AL_THRESHOLD,
    SIM_TITLE_MATCH_THRESHOLD,
    SIM_DUPLICATE_THRESHOLD,
)
from refer.models import Record


def test_tags_are_two_characters():
    """
    Every tag is two characters and maps to a Record attribute.
    """
    for tag, attr in FIELD_TAGS.items():
        assert len(tag) == TAG_LENGTH, f"Tag {tag!r} should be {TAG_LENGTH} characters"
        assert hasattr(Record(), attr), f"Record has no attribute {attr!r} for {tag}"


def test_single_value_tags():
    """
    Author, editor and keyword tags are handled separately from the rest.
    """
    assert len(SINGLE_VALUE_TAGS) == len(FIELD_TAGS) - 3
    for tag in ("%A", "%E", "%K"):
        assert tag not in SINGLE_VALUE_TAGS


def test_config_values_reasonable():
    assert isinstance(ET_AL_THRESHOLD, int), \
        f"ET_AL_THRESHOLD should be int, got {type(ET_AL_THRESHOLD)}"
    assert ET_AL_THRESHOLD >= 1
    assert 0 < SIM_TITLE_MATCH_THRESHOLD <= SIM_DUPLICATE_THRESHOLD <= 1
