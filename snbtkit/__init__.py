"""snbtkit — read and write SNBT, the textual form of NBT tag trees.

Parse text into typed tags, build or edit trees through a validating
tag model, and render them back under configurable formatting.

Quick start:
    >>> from snbtkit import parse, stringify
    >>> tag = parse('{a:1b,b:[1,2,3],c:{}}')
    >>> print(stringify(tag, indent=2))
    {
      a: 1b,
      b: [1, 2, 3],
      c: {}
    }
    >>> stringify(tag, deflate=True)
    '{a:1b,b:[1,2,3],c:{}}'

Tags are strongly typed.  Integers are range-checked for their width,
and a list accepts only one element type:
    >>> from snbtkit import TagByte, TagList, TagInt
    >>> TagByte(127).value
    127
    >>> TagList(values=[TagInt(1), TagInt(2)]).element_type is TagInt
    True
"""

from __future__ import annotations

from ._constants import MAX_DEPTH
from ._errors import (
    ERR_ALREADY_OWNED,
    ERR_DUPLICATE_KEY,
    ERR_EXPECTED_KEY,
    ERR_EXPECTED_VALUE,
    ERR_INVALID_COERCION,
    ERR_INVALID_ESCAPE,
    ERR_LIMIT_DEPTH,
    ERR_MISSING_QUOTE,
    ERR_NOT_A_TAG_TYPE,
    ERR_OUT_OF_RANGE,
    ERR_TRAILING_DATA,
    ERR_TYPE_ALREADY_SET,
    ERR_TYPE_MISMATCH,
    ERR_UNEXPECTED_TOKEN,
    ERR_WRONG_KEY_TYPE,
    ERR_WRONG_VALUE_TYPE,
    ParseError,
    SnbtError,
)
from ._parser import parse
from ._stringify import (
    Span,
    SpanType,
    Stringifier,
    StringifierOptions,
    compare_alphabetically,
    compare_by_type,
    compare_by_type_then_alphabetically,
    stringify,
    stringify_to_spans,
)
from ._tags import (
    DISPLAY_ORDER,
    TAG_TYPES,
    Tag,
    TagByte,
    TagByteArray,
    TagCompound,
    TagDouble,
    TagFloat,
    TagInt,
    TagIntArray,
    TagList,
    TagLong,
    TagLongArray,
    TagShort,
    TagString,
)

__version__ = "1.0.0"

__all__ = [
    # Public API functions
    "parse",
    "stringify",
    "stringify_to_spans",
    # Stringifier configuration and output
    "Stringifier",
    "StringifierOptions",
    "Span",
    "SpanType",
    "compare_alphabetically",
    "compare_by_type",
    "compare_by_type_then_alphabetically",
    # Tag model
    "Tag",
    "TagByte",
    "TagShort",
    "TagInt",
    "TagLong",
    "TagFloat",
    "TagDouble",
    "TagString",
    "TagCompound",
    "TagList",
    "TagByteArray",
    "TagIntArray",
    "TagLongArray",
    "TAG_TYPES",
    "DISPLAY_ORDER",
    "MAX_DEPTH",
    # Exceptions
    "SnbtError",
    "ParseError",
    # Error codes
    "ERR_OUT_OF_RANGE",
    "ERR_INVALID_COERCION",
    "ERR_DUPLICATE_KEY",
    "ERR_WRONG_KEY_TYPE",
    "ERR_WRONG_VALUE_TYPE",
    "ERR_NOT_A_TAG_TYPE",
    "ERR_TYPE_ALREADY_SET",
    "ERR_TYPE_MISMATCH",
    "ERR_ALREADY_OWNED",
    "ERR_UNEXPECTED_TOKEN",
    "ERR_MISSING_QUOTE",
    "ERR_INVALID_ESCAPE",
    "ERR_TRAILING_DATA",
    "ERR_EXPECTED_VALUE",
    "ERR_EXPECTED_KEY",
    "ERR_LIMIT_DEPTH",
]
