"""snbtkit error codes and exception classes.

Two families share one base class:

  - model errors, raised by tag constructors and by the compound/list
    mutation methods the moment a rule would be broken;
  - parse errors, which additionally carry the cursor offset and a short
    snippet of the input leading up to it.

Callers that only care about "did it work" catch SnbtError; callers that
branch on the failure compare `.code` against the ERR_* strings below.
"""

from __future__ import annotations

from typing import Optional

from ._constants import (
    ERROR_CONTEXT_CHARS,
    ERROR_CONTEXT_ELLIPSIS,
    ERROR_CONTEXT_MARKER,
    ERROR_CONTEXT_NEWLINE,
)

# ── Tag model ────────────────────────────────────────────────

ERR_OUT_OF_RANGE: str = "ERR_OUT_OF_RANGE"            # integer outside its variant's bounds
ERR_INVALID_COERCION: str = "ERR_INVALID_COERCION"    # value can't become the variant's type
ERR_DUPLICATE_KEY: str = "ERR_DUPLICATE_KEY"          # compound already has the key
ERR_WRONG_KEY_TYPE: str = "ERR_WRONG_KEY_TYPE"        # compound key is not a str
ERR_WRONG_VALUE_TYPE: str = "ERR_WRONG_VALUE_TYPE"    # not a tag instance
ERR_NOT_A_TAG_TYPE: str = "ERR_NOT_A_TAG_TYPE"        # not one of the concrete variants
ERR_TYPE_ALREADY_SET: str = "ERR_TYPE_ALREADY_SET"    # list type redeclared
ERR_TYPE_MISMATCH: str = "ERR_TYPE_MISMATCH"          # element variant differs from list type
ERR_ALREADY_OWNED: str = "ERR_ALREADY_OWNED"          # container already has a parent, or cycle

# ── Parser ───────────────────────────────────────────────────

ERR_UNEXPECTED_TOKEN: str = "ERR_UNEXPECTED_TOKEN"
ERR_MISSING_QUOTE: str = "ERR_MISSING_QUOTE"
ERR_INVALID_ESCAPE: str = "ERR_INVALID_ESCAPE"
ERR_TRAILING_DATA: str = "ERR_TRAILING_DATA"
ERR_EXPECTED_VALUE: str = "ERR_EXPECTED_VALUE"
ERR_EXPECTED_KEY: str = "ERR_EXPECTED_KEY"
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"              # nesting deeper than MAX_DEPTH


class SnbtError(Exception):
    """Exception for tag model, parse, and stringify errors.

    The `.code` attribute is one of the ERR_* strings above.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


class ParseError(SnbtError):
    """A failure while reading SNBT text.

    `.offset` is the cursor position at the time of failure, `.context`
    the rendered snippet ending in the HERE marker, and `.reason` the
    message without the snippet.
    """

    def __init__(self, code: str, reason: str, offset: int, context: str,
                 suggestion: Optional[str] = None) -> None:
        super().__init__(code, "{} at: {}".format(reason, context))
        self.reason = reason
        self.offset = offset
        self.context = context
        self.suggestion = suggestion


def render_context(text: str, cursor: int) -> str:
    """Render up to ERROR_CONTEXT_CHARS of `text` before `cursor`.

    The snippet is prefixed with an ellipsis when it had to be cut, and
    always ends with the HERE marker.  Newlines are drawn as a return
    arrow so the snippet fits on one line.
    """
    end = min(len(text), cursor)
    prefix = ERROR_CONTEXT_ELLIPSIS if end > ERROR_CONTEXT_CHARS else ""
    start = max(0, end - ERROR_CONTEXT_CHARS)
    snippet = text[start:end].replace("\n", ERROR_CONTEXT_NEWLINE)
    return prefix + snippet + ERROR_CONTEXT_MARKER
