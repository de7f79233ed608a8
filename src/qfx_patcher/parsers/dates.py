"""OFX timestamp decoding."""

import re
from datetime import datetime, timedelta, timezone

from ..utils.error_handler import FormatError


_DATETIME_PART = re.compile(
    r'^(\d{4})(\d{2})(\d{2})'
    r'(?:(\d{2})(\d{2})(?:(\d{2})(?:\.(\d{1,6}))?)?)?$'
)
_OFFSET_PART = re.compile(r'^([+-]?)(\d{1,2})(?:\.(\d+))?$')


def parse_ofx_date(token: str) -> datetime:
    """Parse an OFX timestamp such as ``20221001000000.000[-7:MST]``.

    The digits before the bracket are the wall-clock date and time; the
    bracket holds the UTC offset in hours (fractions allowed, e.g. ``5.5``)
    and an informational zone abbreviation. The returned datetime is
    timezone-aware with that offset.

    Raises:
        FormatError: If the bracket is missing or either part is malformed
    """
    if not isinstance(token, str):
        raise FormatError(f"Timestamp must be text, got {type(token).__name__}", "DATE_PARSE_ERROR")
    token = token.strip()
    bracket = token.find('[')
    if bracket < 0:
        raise FormatError(f"Timestamp has no UTC offset: '{token}'", "DATE_PARSE_ERROR")

    date_part = token[:bracket]
    offset_part = token[bracket + 1:]
    colon = offset_part.find(':')
    if colon >= 0:
        offset_part = offset_part[:colon]
    else:
        offset_part = offset_part.rstrip(']')

    match = _DATETIME_PART.match(date_part)
    if not match:
        raise FormatError(f"Malformed timestamp: '{token}'", "DATE_PARSE_ERROR")

    year, month, day, hour, minute, second, fraction = match.groups()
    microsecond = int(fraction.ljust(6, '0')) if fraction else 0

    try:
        naive = datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0),
            microsecond
        )
        return naive.replace(tzinfo=_parse_offset(offset_part.strip(), token))
    except ValueError as e:
        raise FormatError(f"Invalid timestamp '{token}': {e}", "DATE_PARSE_ERROR") from e


def _parse_offset(offset: str, token: str) -> timezone:
    match = _OFFSET_PART.match(offset)
    if not match:
        raise FormatError(f"Malformed UTC offset in timestamp: '{token}'", "DATE_PARSE_ERROR")

    sign, hours, fraction = match.groups()
    minutes = int(hours) * 60
    if fraction:
        minutes += round(float('0.' + fraction) * 60)
    if sign == '-':
        minutes = -minutes

    # timezone() raises ValueError past +/-24h
    return timezone(timedelta(minutes=minutes))
