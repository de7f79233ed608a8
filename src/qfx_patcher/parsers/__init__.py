"""OFX/QFX markup handling"""

from .markup import split_document, normalize_markup
from .codec import decode, encode, reattach_header, CANONICAL_MODERN_HEADER
from .dates import parse_ofx_date

__all__ = [
    'split_document',
    'normalize_markup',
    'decode',
    'encode',
    'reattach_header',
    'CANONICAL_MODERN_HEADER',
    'parse_ofx_date',
]
