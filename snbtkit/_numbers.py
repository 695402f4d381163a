"""snbtkit number classification — which tag does a bare token read as?

Shared by the parser, which turns bare tokens into tags, and the
stringifier, which has to quote any string that would otherwise be read
back as a number or boolean.
"""

from __future__ import annotations

from typing import Optional, Type

from ._constants import (
    BYTE_RE,
    DOUBLE_NO_SUFFIX_RE,
    DOUBLE_RE,
    FLOAT_RE,
    INTEGER_RE,
    LONG_RE,
    SHORT_RE,
)
from ._errors import ERR_OUT_OF_RANGE, SnbtError
from ._tags import (
    Tag,
    TagByte,
    TagDouble,
    TagFloat,
    TagInt,
    TagLong,
    TagShort,
)


def _integer_value(tag_type: Type[Tag], sign: str, digits: str, token: str) -> int:
    """Range-check a decimal digit string, then convert it.

    The comparison runs on the digits themselves: longer than the bound
    means out of range, equally long compares lexicographically.  This
    keeps 64-bit values exact and never hands an oversized token to int().
    """
    if sign == "-":
        limit = str(tag_type.MIN_VALUE)[1:]  # type: ignore[attr-defined]
    else:
        limit = str(tag_type.MAX_VALUE)  # type: ignore[attr-defined]
    if len(digits) > len(limit) or (len(digits) == len(limit) and digits > limit):
        raise SnbtError(
            ERR_OUT_OF_RANGE,
            "{} is out of range for a {}".format(token, tag_type.TAG_NAME))
    value = int(digits)
    return -value if sign == "-" else value


def parse_number(token: str) -> Optional[Tag]:
    """Classify an unquoted token as a numeric or boolean tag.

    Returns None when the token is not a number at all, and raises
    SnbtError(ERR_OUT_OF_RANGE) when it is shaped like one but does not
    fit its type.  The order of the checks is significant: "1b" is a
    byte, "1" an int, "1.0" a double, and "1e5f" a float.
    """
    m = FLOAT_RE.fullmatch(token)
    if m:
        return TagFloat(float(m.group(1)))

    m = BYTE_RE.fullmatch(token)
    if m:
        return TagByte(_integer_value(TagByte, m.group(1), m.group(2), token))

    m = LONG_RE.fullmatch(token)
    if m:
        return TagLong(_integer_value(TagLong, m.group(1), m.group(2), token))

    m = SHORT_RE.fullmatch(token)
    if m:
        return TagShort(_integer_value(TagShort, m.group(1), m.group(2), token))

    m = INTEGER_RE.fullmatch(token)
    if m:
        return TagInt(_integer_value(TagInt, m.group(1), m.group(2), token))

    m = DOUBLE_RE.fullmatch(token)
    if m:
        return TagDouble(float(m.group(1)))

    if DOUBLE_NO_SUFFIX_RE.fullmatch(token):
        return TagDouble(float(token))

    lowered = token.lower()
    if lowered == "true":
        return TagByte(1, prefer_bool=True)
    if lowered == "false":
        return TagByte(0, prefer_bool=True)

    return None


def reads_as_number(token: str) -> bool:
    """True if `token`, written bare, would be read back as a non-string."""
    try:
        return parse_number(token) is not None
    except SnbtError:
        return False
