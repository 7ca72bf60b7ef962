# ABOUTME: Script-specific text rules: Arabic normalization, transliteration, paragraph codec.
# ABOUTME: Every caller that compares or displays page text routes through these functions.

from maktaba.text.normalize import normalize_arabic, normalize_with_offsets
from maktaba.text.paragraphs import (
    ParseError,
    decode_paragraphs,
    flatten_page_text,
    format_page_text,
    parse_paragraphs,
    serialize_paragraphs,
)
from maktaba.text.transliterate import (
    DEFAULT_TABLE,
    TransliterationTable,
    contains_roman,
    transliterate,
)

__all__ = [
    "DEFAULT_TABLE",
    "ParseError",
    "TransliterationTable",
    "contains_roman",
    "decode_paragraphs",
    "flatten_page_text",
    "format_page_text",
    "normalize_arabic",
    "normalize_with_offsets",
    "parse_paragraphs",
    "serialize_paragraphs",
    "transliterate",
]
