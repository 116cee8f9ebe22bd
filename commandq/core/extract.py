"""Field lookup in XML command responses."""

from __future__ import annotations

import logging
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

__all__ = ["extract_field", "parse_document"]

logger = logging.getLogger(__name__)


def parse_document(text: str | bytes | None) -> Element | None:
    """Parse a raw response into its root element.

    Args:
        text: Raw response body.

    Returns:
        Root element, or None if the body is absent or not well-formed XML.
    """
    if not text:
        return None
    try:
        return ElementTree.fromstring(text)
    except (ElementTree.ParseError, ValueError) as e:
        logger.debug(f"Response is not XML: {e}")
        return None


def extract_field(body: Element | str | bytes | None, field_name: str) -> str | None:
    """Return the text of the first element named field_name.

    The root element itself is a candidate. Raw text is parsed first.
    Never raises: a missing element, an element without text and a body
    that cannot be traversed all give None.

    Args:
        body: Parsed root element or raw XML.
        field_name: Tag to look for.

    Returns:
        Element text, or None.
    """
    try:
        root = parse_document(body) if isinstance(body, (str, bytes)) else body
        element = next(root.iter(field_name))
        return element.text or None
    except Exception:  # noqa: BLE001
        return None
