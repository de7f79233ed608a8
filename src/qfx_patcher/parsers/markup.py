"""Header splitting and legacy SGML normalization."""

import logging
import re

from ..models.core import HeaderDialect, SplitDocument
from ..utils.error_handler import FormatError


logger = logging.getLogger(__name__)

ROOT_TAG = '<OFX>'
LEGACY_HEADER_MARKER = 'OFXHEADER:1'

_WHITESPACE_BETWEEN_TAGS = re.compile(r'>\s+<')
_WHITESPACE_BEFORE_TAG = re.compile(r'\s+<')
_WHITESPACE_AFTER_TAG = re.compile(r'>\s+')
_COMPOUND_TAG = re.compile(r'<(/?)([A-Za-z0-9_]+(?:\.[A-Za-z0-9_]+)+)>')
_OPEN_TAG_WITH_TEXT = re.compile(r'<(\w+)>([^<]+)(</\1>)?')
_BARE_AMPERSAND = re.compile(r'&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#x[0-9A-Fa-f]+);)')


def split_document(text: str) -> SplitDocument:
    """Split raw export text into its header and its markup body.

    The body starts at the first ``<OFX>`` tag and runs to the end of the
    text. The header is everything before it, kept byte for byte.

    Raises:
        FormatError: If the text has no ``<OFX>`` root tag
    """
    index = text.find(ROOT_TAG)
    if index < 0:
        raise FormatError(f"No {ROOT_TAG} root tag found", "MISSING_ROOT_TAG")

    header_text = text[:index]
    body_text = text[index:]

    if LEGACY_HEADER_MARKER in header_text:
        dialect = HeaderDialect.LEGACY_V1
    else:
        dialect = HeaderDialect.MODERN_V2

    logger.debug(f"Detected {dialect.value} header ({len(header_text)} chars)")
    return SplitDocument(dialect=dialect, header_text=header_text, body_text=body_text)


def _close_leaf(match: 're.Match') -> str:
    if match.group(3):
        return match.group(0)
    tag, value = match.group(1), match.group(2)
    return f'<{tag}>{value}</{tag}>'


def normalize_markup(body: str) -> str:
    """Rewrite a legacy SGML body into well-formed markup.

    Legacy bodies leave leaf elements unclosed (``<NAME>ACME``) and may use
    dotted compound names (``<INTU.BID>``). The steps run in a fixed order
    since the leaf-closing step relies on whitespace already being gone:

    1. drop whitespace between ``>`` and ``<``
    2. drop whitespace before ``<``
    3. drop whitespace after ``>``
    4. collapse dotted tag names, ``<A.B>`` becomes ``<AB>``
    5. close every open tag followed by text, unless already closed
    6. escape ampersands that do not start an entity reference

    Container tags (no text after them) are left alone, and running the
    function on its own output changes nothing.
    """
    body = _WHITESPACE_BETWEEN_TAGS.sub('><', body)
    body = _WHITESPACE_BEFORE_TAG.sub('<', body)
    body = _WHITESPACE_AFTER_TAG.sub('>', body)
    body = _COMPOUND_TAG.sub(lambda m: f"<{m.group(1)}{m.group(2).replace('.', '')}>", body)
    body = _OPEN_TAG_WITH_TEXT.sub(_close_leaf, body)
    body = _BARE_AMPERSAND.sub('&amp;', body)
    return body
