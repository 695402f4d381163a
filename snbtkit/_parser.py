"""snbtkit parser — SNBT text to a tag tree.

Single forward pass with a cursor; the only lookahead is the two
characters after '[' that tell a typed array ("[I;") from a list.

Grammar:

    Compound := '{' (Member (',' Member)* ','?)? '}'
    Member   := Key ':' Value
    Key      := QuotedString | UnquotedToken
    Value    := Compound | List | Array | QuotedString | NumberOrBareToken
    List     := '[' (Value (',' Value)* ','?)? ']'
    Array    := '[' ('B'|'I'|'L') ';' (Value (',' Value)* ','?)? ']'

Bare tokens that are not numbers, or are numbers out of their type's
range, quietly become strings.  Everything structural is a hard error.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from ._constants import (
    ESCAPE_CHAR,
    MAX_DEPTH,
    QUOTE_CHARS,
    UNQUOTED_CHARS_RE,
    WHITESPACE_RE,
)
from ._errors import (
    ERR_DUPLICATE_KEY,
    ERR_EXPECTED_KEY,
    ERR_EXPECTED_VALUE,
    ERR_INVALID_ESCAPE,
    ERR_LIMIT_DEPTH,
    ERR_MISSING_QUOTE,
    ERR_TRAILING_DATA,
    ERR_TYPE_MISMATCH,
    ERR_UNEXPECTED_TOKEN,
    ERR_WRONG_VALUE_TYPE,
    ParseError,
    SnbtError,
    render_context,
)
from ._numbers import parse_number
from ._tags import (
    ARRAY_TYPES_BY_PREFIX,
    Tag,
    TagCompound,
    TagList,
    TagString,
)

logger = logging.getLogger(__name__)

# Where a quoted string's scan has to stop: its closing quote or an escape.
_QUOTED_STOP_RE = {
    '"': re.compile(r'["\\]'),
    "'": re.compile(r"['\\]"),
}


# ── Reader ────────────────────────────────────────────────────

class _Reader:
    """Cursor over the input.  One instance per parse() call."""

    __slots__ = ("text", "cursor", "depth")

    def __init__(self, text: str) -> None:
        self.text = text
        self.cursor = 0
        self.depth = 0

    def error(self, code: str, reason: str, suggestion: Optional[str] = None) -> ParseError:
        offset = min(self.cursor, len(self.text))
        return ParseError(code, reason, offset, render_context(self.text, self.cursor),
                          suggestion)

    def can_read(self) -> bool:
        return self.cursor < len(self.text)

    def peek(self, offset: int = 0) -> str:
        index = self.cursor + offset
        return self.text[index] if index < len(self.text) else ""

    def pop(self) -> str:
        ch = self.peek()
        self.cursor += 1
        return ch

    def skip_whitespace(self) -> None:
        self.cursor = WHITESPACE_RE.match(self.text, self.cursor).end()

    def has_element_separator(self) -> bool:
        self.skip_whitespace()
        if self.can_read() and self.peek() == ",":
            self.cursor += 1
            self.skip_whitespace()
            return True
        return False

    def expect(self, expected: str) -> None:
        self.skip_whitespace()
        if self.can_read() and self.peek() == expected:
            self.cursor += 1
            return
        found = self.peek() if self.can_read() else "<EOF>"
        # Step past the offending character so the snippet includes it.
        self.cursor += 1
        raise self.error(ERR_UNEXPECTED_TOKEN,
                         "Expected '{}' but got '{}'".format(expected, found))

    def enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise self.error(ERR_LIMIT_DEPTH,
                             "Nesting deeper than {} levels".format(MAX_DEPTH))

    def leave(self) -> None:
        self.depth -= 1

    # ── strings ──

    def read_unquoted_string(self) -> str:
        m = UNQUOTED_CHARS_RE.match(self.text, self.cursor)
        if m is None:
            return ""
        self.cursor = m.end()
        return m.group()

    def read_quoted_string(self) -> str:
        quote = self.pop()
        stop = _QUOTED_STOP_RE[quote]
        parts: List[str] = []
        while True:
            m = stop.search(self.text, self.cursor)
            if m is None:
                self.cursor = len(self.text)
                raise self.error(ERR_MISSING_QUOTE, "Missing termination quote")
            parts.append(self.text[self.cursor:m.start()])
            self.cursor = m.end()
            if m.group() == quote:
                return "".join(parts)
            # Backslash: only the active quote and backslash may follow.
            if not self.can_read():
                raise self.error(ERR_MISSING_QUOTE, "Missing termination quote")
            escaped = self.pop()
            if escaped != quote and escaped != ESCAPE_CHAR:
                raise self.error(ERR_INVALID_ESCAPE, "Invalid escape of '{}'".format(escaped))
            parts.append(escaped)

    # ── values ──

    def read_value(self) -> Tag:
        self.skip_whitespace()
        if not self.can_read():
            raise self.error(ERR_EXPECTED_VALUE, "Expected a value")
        ch = self.peek()

        if ch == "{":
            return self.read_compound()
        if ch == "[":
            after = self.peek(1)
            if after and after not in QUOTE_CHARS and self.peek(2) == ";":
                return self.read_array()
            return self.read_list()
        if ch in QUOTE_CHARS:
            return TagString(self.read_quoted_string())

        token = self.read_unquoted_string()
        if not token:
            raise self.error(ERR_EXPECTED_VALUE, "Expected a value")
        try:
            number = parse_number(token)
        except SnbtError as exc:
            logger.debug("reading %r as a string: %s", token, exc)
            return TagString(token)
        if number is None:
            return TagString(token)
        return number

    def read_compound(self) -> TagCompound:
        self.expect("{")
        self.enter()
        compound = TagCompound()
        self.skip_whitespace()

        while self.can_read() and self.peek() != "}":
            if self.peek() in QUOTE_CHARS:
                key = self.read_quoted_string()
            else:
                key = self.read_unquoted_string()
                if not key:
                    raise self.error(ERR_EXPECTED_KEY, "Expected non-empty key")
            if key in compound:
                raise self.error(ERR_DUPLICATE_KEY, "Duplicate key {!r}".format(key))

            self.expect(":")
            compound.add(key, self.read_value())

            if not self.has_element_separator():
                break
            if not self.can_read():
                raise self.error(ERR_EXPECTED_KEY, "Expected a key")

        self.expect("}")
        self.leave()
        return compound

    def read_list(self) -> TagList:
        self.expect("[")
        self.enter()
        self.skip_whitespace()
        if not self.can_read():
            raise self.error(ERR_EXPECTED_VALUE, "Expected a value")

        lst = TagList()
        while self.peek() != "]":
            value = self.read_value()
            element_type = lst.element_type
            if element_type is not None and type(value) is not element_type:
                raise self.error(
                    ERR_TYPE_MISMATCH,
                    "Unable to insert {} into {} of type {}".format(
                        value.TAG_NAME, lst.TAG_NAME, element_type.TAG_NAME),
                    suggestion="every element of a list must have the same type")
            lst.push(value)
            if not self.has_element_separator():
                break
            if not self.can_read():
                raise self.error(ERR_EXPECTED_VALUE, "Expected a value")

        self.expect("]")
        self.leave()
        return lst

    def read_array(self) -> Tag:
        self.expect("[")
        self.enter()
        prefix = self.pop()
        array_type = ARRAY_TYPES_BY_PREFIX.get(prefix)
        if array_type is None:
            raise self.error(ERR_UNEXPECTED_TOKEN, "Invalid array type '{}' found".format(prefix))
        self.pop()  # ';'
        self.skip_whitespace()
        if not self.can_read():
            raise self.error(ERR_EXPECTED_VALUE, "Expected a value")

        array = array_type()
        while self.peek() != "]":
            value = self.read_value()
            if type(value) is not array_type.ARRAY_TYPE:
                raise self.error(
                    ERR_TYPE_MISMATCH,
                    "Unable to insert {} into {}".format(value.TAG_NAME, array.TAG_NAME),
                    suggestion="{}; arrays only hold {} values".format(
                        prefix, array_type.ARRAY_TYPE.TAG_NAME))
            array.push(value)
            if not self.has_element_separator():
                break
            if not self.can_read():
                raise self.error(ERR_EXPECTED_VALUE, "Expected a value")

        self.expect("]")
        self.leave()
        return array


def parse(text: str) -> TagCompound:
    """Parse SNBT text holding exactly one compound.

    Raises ParseError (a SnbtError) carrying the offset and a context
    snippet.  There is no partial result on failure.
    """
    if not isinstance(text, str):
        raise SnbtError(ERR_WRONG_VALUE_TYPE,
                        "parse() expects str, not {}".format(type(text).__name__))
    reader = _Reader(text)
    try:
        compound = reader.read_compound()
        reader.skip_whitespace()
        if reader.can_read():
            reader.cursor += 1
            raise reader.error(ERR_TRAILING_DATA, "Trailing data found")
    except ParseError as exc:
        logger.debug("parse failed at offset %d: %s", exc.offset, exc.reason)
        raise
    return compound
