# ABOUTME: Codec for stored page text, a JSON-serialized ordered list of paragraphs.
# ABOUTME: Falls back to the raw text when a page does not decode, for both search and display.

import json
import logging
import re
from collections.abc import Iterable

logger = logging.getLogger(__name__)

# A paragraph opening with "<number> -" starts a new numbered unit (a hadith).
_UNIT_START_RE = re.compile(r"^(\d+)\s*-")


class ParseError(ValueError):
    """Raised when stored page text is not a serialized paragraph list."""


def serialize_paragraphs(paragraphs: Iterable[str]) -> str:
    """Serialize paragraphs the way page files and the store hold them."""
    return json.dumps(list(paragraphs), ensure_ascii=False)


def decode_paragraphs(raw: str) -> list[str]:
    """Decode a serialized paragraph list.

    Raises:
        ParseError: If raw is not JSON or does not hold a list.
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ParseError(f"Page text is not valid JSON: {exc}") from exc
    if not isinstance(parsed, list):
        raise ParseError(f"Page text holds {type(parsed).__name__}, expected a list")
    return [p if isinstance(p, str) else str(p) for p in parsed]


def parse_paragraphs(raw: str) -> list[str]:
    """Decode paragraphs, treating undecodable text as a single paragraph."""
    try:
        return decode_paragraphs(raw)
    except ParseError as exc:
        logger.debug("Using raw page text: %s", exc)
        return [raw]


def flatten_page_text(raw: str) -> str:
    """Join a page's paragraphs with spaces into the text that search scans."""
    return " ".join(parse_paragraphs(raw))


def is_unit_start(paragraph: str) -> bool:
    """Check whether a paragraph opens a numbered unit like "12 - ..."."""
    return _UNIT_START_RE.match(paragraph) is not None


def format_page_text(raw: str) -> str:
    """Render a page for reading.

    Paragraphs are separated by a blank line. A numbered unit that is not
    the first paragraph gets one extra line break before it. Text that
    does not decode is returned unchanged.
    """
    try:
        paragraphs = decode_paragraphs(raw)
    except ParseError:
        return raw

    rendered = []
    for index, paragraph in enumerate(paragraphs):
        if index > 0 and is_unit_start(paragraph):
            rendered.append("\n" + paragraph)
        else:
            rendered.append(paragraph)
    return "\n\n".join(rendered)
