"""snbtkit constants — value ranges, token patterns, and parser limits.

Everything here is immutable module state.  The tag classes read their
bounds from this module so that the parser's digit-string range checks
and the constructors' integer range checks can never disagree.
"""

from __future__ import annotations

import re

# ── Integer ranges ───────────────────────────────────────────
# Python ints are arbitrary-precision, so every integer variant has to
# be range-checked explicitly after truncation.

BYTE_MIN: int = -(2**7)
BYTE_MAX: int = 2**7 - 1
SHORT_MIN: int = -(2**15)
SHORT_MAX: int = 2**15 - 1
INT_MIN: int = -(2**31)
INT_MAX: int = 2**31 - 1
LONG_MIN: int = -(2**63)
LONG_MAX: int = 2**63 - 1

# ── Infinity aliases ─────────────────────────────────────────
# There is no SNBT literal for infinity.  These tokens overflow to
# infinity when read back as float32 / float64 respectively.
FLOAT_INFINITY_ALIAS: str = "9e99"
DOUBLE_INFINITY_ALIAS: str = "9e999"

# ── Token patterns ───────────────────────────────────────────
# Characters allowed in an unquoted key or value.  Anything else forces
# quoting on output.
UNQUOTED_CHARS_RE = re.compile(r"[a-zA-Z0-9._+\-]+")
NEEDS_QUOTES_RE = re.compile(r"[^a-zA-Z0-9._+\-]")
WHITESPACE_RE = re.compile(r"\s*")

# Number literals, tried in this order by the classifier.  Integer forms
# disallow leading zeros ("007" is a string).
FLOAT_RE = re.compile(r"([-+]?(?:[0-9]+\.?|[0-9]*\.[0-9]+)(?:e[-+]?[0-9]+)?)f", re.IGNORECASE)
BYTE_RE = re.compile(r"([-+]?)(0|[1-9][0-9]*)b", re.IGNORECASE)
LONG_RE = re.compile(r"([-+]?)(0|[1-9][0-9]*)l", re.IGNORECASE)
SHORT_RE = re.compile(r"([-+]?)(0|[1-9][0-9]*)s", re.IGNORECASE)
INTEGER_RE = re.compile(r"([-+]?)(0|[1-9][0-9]*)")
DOUBLE_RE = re.compile(r"([-+]?(?:[0-9]+\.?|[0-9]*\.[0-9]+)(?:e[-+]?[0-9]+)?)d", re.IGNORECASE)
DOUBLE_NO_SUFFIX_RE = re.compile(
    r"[-+]?(?:(?:[0-9]+\.|[0-9]*\.[0-9]+)(?:e[-+]?[0-9]+)?|[0-9]+e[-+]?[0-9]+)", re.IGNORECASE)

QUOTE_CHARS: str = "\"'"
ESCAPE_CHAR: str = "\\"

# ── Parser limits ────────────────────────────────────────────
# Each nesting level costs a few interpreter frames in both the parser
# and the stringifier, so this stays well under the default recursion
# limit.
MAX_DEPTH: int = 256

# Characters of input shown before the cursor in a parse error.
ERROR_CONTEXT_CHARS: int = 35
ERROR_CONTEXT_MARKER: str = "<--[HERE]"
ERROR_CONTEXT_ELLIPSIS: str = "..."
# Newlines in the snippet are shown as this, so the message stays on one line.
ERROR_CONTEXT_NEWLINE: str = "\u21b5"

# ── Stringifier option values ────────────────────────────────
QUOTE_PREFERENCES = ("onlyDouble", "preferDouble", "preferSingle", "onlySingle")
BOOL_PREFERENCES = ("always", "never", "preserve")
SUFFIX_LETTERS: str = "bslfd"
