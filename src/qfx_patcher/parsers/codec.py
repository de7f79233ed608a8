"""Markup tree decoding, encoding and header reattachment."""

import logging
import xml.etree.ElementTree as ET
from typing import Any

from ..models.core import MarkupTree
from ..utils.error_handler import FormatError


logger = logging.getLogger(__name__)

DEFAULT_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'

CANONICAL_MODERN_HEADER = (
    '<?xml version="1.0" standalone="no"?>'
    '<?OFX OFXHEADER="200" VERSION="202" SECURITY="NONE" '
    'OLDFILEUID="NONE" NEWFILEUID="NONE"?>'
)


def _element_to_node(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return element.text or ''

    node = {}
    for child in children:
        node.setdefault(child.tag, []).append(_element_to_node(child))
    return node


def _node_to_element(tag: str, value: Any) -> ET.Element:
    element = ET.Element(tag)
    if isinstance(value, dict):
        for child_tag, items in value.items():
            for item in items:
                element.append(_node_to_element(child_tag, item))
    else:
        element.text = str(value)
    return element


def decode(markup: str) -> MarkupTree:
    """Parse well-formed markup into a tree.

    Each element becomes a list entry under its tag in the parent node, so
    ``tree['OFX']['SIGNONMSGSRSV1'][0]['SONRS'][0]`` walks the signon block
    and leaves come back as single-element lists such as ``['ACME']``.

    Raises:
        FormatError: If the markup is not well formed
    """
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as e:
        raise FormatError(f"Markup is not well formed: {e}") from e

    return {root.tag: _element_to_node(root)}


def encode(tree: MarkupTree, pretty: bool = True) -> str:
    """Serialize a tree back to markup, preceded by a generic XML declaration"""
    if len(tree) != 1:
        raise ValueError(f"Tree must have exactly one root, got {len(tree)}")

    root_tag, root_value = next(iter(tree.items()))
    root = _node_to_element(root_tag, root_value)
    if pretty:
        ET.indent(root, space='  ')

    return DEFAULT_DECLARATION + '\n' + ET.tostring(root, encoding='unicode')


def reattach_header(markup: str, header_text: str) -> str:
    """Swap the generic declaration for the document's own header.

    The result starts with exactly ``header_text``; a line break is added
    after it when the header does not already end with one.
    """
    body = markup
    if body.startswith(DEFAULT_DECLARATION):
        body = body[len(DEFAULT_DECLARATION):].lstrip('\r\n')

    if header_text and not header_text.endswith(('\n', '\r')):
        return header_text + '\n' + body
    return header_text + body
