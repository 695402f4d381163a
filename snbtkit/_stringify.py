"""snbtkit stringifier — tag tree to SNBT text.

Rendering is a depth-first walk that yields (text, SpanType) pairs.
stringify() joins the text; stringify_to_spans() wraps each pair in a
Span carrying its 1-based line and column, so both outputs come from the
same walk and always concatenate to the same string.

Layout hinges on one question asked repeatedly of the same nodes: can
this tag be written on a single line?  The answers are memoized in a
dict that lives for exactly one call.
"""

from __future__ import annotations

import dataclasses
import enum
import functools
import logging
import math
import re
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from ._constants import (
    BOOL_PREFERENCES,
    ESCAPE_CHAR,
    MAX_DEPTH,
    NEEDS_QUOTES_RE,
    QUOTE_PREFERENCES,
    SUFFIX_LETTERS,
)
from ._errors import ERR_LIMIT_DEPTH, ERR_WRONG_VALUE_TYPE, SnbtError
from ._numbers import reads_as_number
from ._tags import (
    DISPLAY_ORDER,
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
    _to_float32,
)

logger = logging.getLogger(__name__)


class SpanType(enum.Enum):
    BRACE = "brace"
    SEPARATOR = "separator"
    SPACE = "space"
    STRING = "string"
    QUOTE = "quote"
    ESCAPE = "escape"
    NUMBER = "number"
    SIGN = "sign"
    SUFFIX = "suffix"
    BOOLEAN = "boolean"
    PREFIX = "prefix"


@dataclasses.dataclass(frozen=True)
class Span:
    """One fragment of rendered text and where it starts (1-based)."""

    text: str
    category: SpanType
    line: int
    col: int


_Fragment = Tuple[str, SpanType]
_Member = Tuple[str, Tag]

# Splits string content into runs that are copied verbatim and single
# characters that need a backslash, for each choice of quote.
_ESCAPE_SPLIT_RE = {
    '"': re.compile(r'(["\\])|[^"\\]+'),
    "'": re.compile(r"(['\\])|[^'\\]+"),
}


# ── Sort comparators ─────────────────────────────────────────
# Comparators over (key, tag) pairs, for StringifierOptions.compound_sort.

_DISPLAY_RANK: Dict[type, int] = {cls: i for i, cls in enumerate(DISPLAY_ORDER)}


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_alphabetically(a: _Member, b: _Member) -> int:
    """Order members by key, case-insensitively first, then case-sensitively."""
    return _cmp(a[0].lower(), b[0].lower()) or _cmp(a[0], b[0])


def compare_by_type(a: _Member, b: _Member) -> int:
    """Order members by DISPLAY_ORDER; lists then by their element type."""
    tag_a, tag_b = a[1], b[1]
    result = _cmp(_DISPLAY_RANK[type(tag_a)], _DISPLAY_RANK[type(tag_b)])
    if result or type(tag_a) is not TagList:
        return result
    # Untyped (empty) lists sort before every typed list.
    rank_a = _DISPLAY_RANK.get(tag_a.element_type, -1)  # type: ignore[attr-defined]
    rank_b = _DISPLAY_RANK.get(tag_b.element_type, -1)  # type: ignore[attr-defined]
    return _cmp(rank_a, rank_b)


def compare_by_type_then_alphabetically(a: _Member, b: _Member) -> int:
    return compare_by_type(a, b) or compare_alphabetically(a, b)


# ── Options ──────────────────────────────────────────────────

def _normalize_suffixes(value: Any) -> FrozenSet[str]:
    """Reduce every accepted capitalize_suffix form to a set of letters.

    Accepted: a bool (all or none), a string or iterable of letters, or a
    mapping from letter to bool with an optional "default" entry for the
    letters it does not name.
    """
    if isinstance(value, bool):
        return frozenset(SUFFIX_LETTERS) if value else frozenset()
    if isinstance(value, Mapping):
        unknown = set(value) - set(SUFFIX_LETTERS) - {"default"}
        if unknown:
            raise ValueError("unknown suffix letters in capitalize_suffix: {}".format(
                ", ".join(sorted(map(str, unknown)))))
        default = bool(value.get("default", False))
        return frozenset(c for c in SUFFIX_LETTERS if bool(value.get(c, default)))
    if isinstance(value, Iterable):
        letters = set()
        for letter in value:
            if not isinstance(letter, str) or letter.lower() not in SUFFIX_LETTERS:
                raise ValueError(
                    "capitalize_suffix letters must be among {!r}, got {!r}".format(
                        SUFFIX_LETTERS, letter))
            letters.add(letter.lower())
        return frozenset(letters)
    raise TypeError("capitalize_suffix must be a bool, a string, or a mapping, not {}".format(
        type(value).__name__))


@dataclasses.dataclass(frozen=True)
class StringifierOptions:
    """Every knob the stringifier has.  Validated and normalized on creation.

    `indent` may be given as a number of spaces; it is stored as a string.
    `capitalize_suffix` is stored as the frozenset of suffix letters to
    write in upper case.
    """

    deflate: bool = False
    indent: Union[str, int] = "\t"
    brackets_own_line: bool = False
    collapse_adjacent_brackets: bool = False
    collapse_primitive_lists: bool = True
    trailing_comma: bool = False
    compound_sort: Optional[Callable[[_Member, _Member], int]] = None
    always_quote_keys: bool = False
    always_quote_strings: bool = True
    quote_preference: str = "preferDouble"
    bytes_as_bools: str = "preserve"
    capitalize_suffix: Any = False

    def __post_init__(self) -> None:
        for name in ("deflate", "brackets_own_line", "collapse_adjacent_brackets",
                     "collapse_primitive_lists", "trailing_comma",
                     "always_quote_keys", "always_quote_strings"):
            object.__setattr__(self, name, bool(getattr(self, name)))

        indent = self.indent
        # bool before int
        if isinstance(indent, bool) or not isinstance(indent, (str, int)):
            raise TypeError("indent must be a string or a number of spaces, not {}".format(
                type(indent).__name__))
        if isinstance(indent, int):
            if indent < 0:
                raise ValueError("indent must not be negative, got {}".format(indent))
            object.__setattr__(self, "indent", " " * indent)

        if self.compound_sort is not None and not callable(self.compound_sort):
            raise TypeError("compound_sort must be a comparator function or None")
        if self.quote_preference not in QUOTE_PREFERENCES:
            raise ValueError("quote_preference must be one of {}, got {!r}".format(
                ", ".join(QUOTE_PREFERENCES), self.quote_preference))
        if self.bytes_as_bools not in BOOL_PREFERENCES:
            raise ValueError("bytes_as_bools must be one of {}, got {!r}".format(
                ", ".join(BOOL_PREFERENCES), self.bytes_as_bools))
        object.__setattr__(self, "capitalize_suffix",
                           _normalize_suffixes(self.capitalize_suffix))


# ── Stringifier ──────────────────────────────────────────────

class Stringifier:
    """Renders tags with a fixed set of options.

    Instances are immutable and hold no per-call state, so one instance
    can serve any number of calls, including concurrent ones.
    """

    DEFAULT: "Stringifier"

    __slots__ = ("_options",)

    def __init__(self, options: Optional[StringifierOptions] = None, **kwargs: Any) -> None:
        if options is None:
            options = StringifierOptions(**kwargs)
        elif not isinstance(options, StringifierOptions):
            raise TypeError("options must be a StringifierOptions, not {}".format(
                type(options).__name__))
        elif kwargs:
            options = dataclasses.replace(options, **kwargs)
        self._options = options

    @property
    def options(self) -> StringifierOptions:
        return self._options

    def replace(self, **changes: Any) -> "Stringifier":
        """Return a new Stringifier with some options changed."""
        return Stringifier(dataclasses.replace(self._options, **changes))

    def __repr__(self) -> str:
        return "Stringifier({!r})".format(self._options)

    def stringify(self, tag: Tag) -> str:
        return "".join(text for text, _ in self._render(tag))

    def stringify_to_spans(self, tag: Tag) -> Iterator[Span]:
        """Render `tag` as a lazy sequence of Spans.

        The argument is checked immediately; everything else happens as
        the iterator is consumed.  Each call returns a fresh iterator.
        """
        return self._spans(self._render(tag))

    @staticmethod
    def _spans(fragments: Iterator[_Fragment]) -> Iterator[Span]:
        line = col = 1
        for text, category in fragments:
            yield Span(text, category, line, col)
            newlines = text.count("\n")
            if newlines:
                line += newlines
                col = len(text) - text.rfind("\n")
            else:
                col += len(text)

    def _render(self, tag: Tag) -> Iterator[_Fragment]:
        # Not a generator: a non-tag argument fails here, not on first next().
        return self._value(tag, "\n", {}, 1)

    # ── one-line determination ──

    def _list_is_one_line(self, tag: Any, memo: Dict[int, bool], depth: int) -> bool:
        key = id(tag)
        if key in memo:
            return memo[key]
        if depth > MAX_DEPTH:
            raise _depth_error()

        element_type = tag.element_type
        if element_type is None or element_type.IS_PRIMITIVE:
            result = True
        elif element_type is TagCompound:
            result = all(len(item) == 0 for item in tag)
        elif not self._options.collapse_primitive_lists:
            result = False
        else:
            result = all(len(item) <= 1 and self._list_is_one_line(item, memo, depth + 1)
                         for item in tag)
        memo[key] = result
        return result

    def _is_one_line(self, tag: Tag, memo: Dict[int, bool], depth: int) -> bool:
        if tag.IS_PRIMITIVE:
            return True
        if isinstance(tag, TagCompound):
            return len(tag) == 0
        return self._list_is_one_line(tag, memo, depth)

    # ── dispatch ──

    def _value(self, tag: Tag, indent: str, memo: Dict[int, bool],
               depth: int) -> Iterator[_Fragment]:
        if isinstance(tag, TagString):
            return self._string(tag.value, False)
        if isinstance(tag, TagByte):
            return self._byte(tag)
        if isinstance(tag, (TagShort, TagInt, TagLong)):
            return self._integer(tag)
        if isinstance(tag, (TagFloat, TagDouble)):
            return self._float(tag)
        if depth > MAX_DEPTH:
            raise _depth_error()
        if isinstance(tag, TagCompound):
            return self._compound(tag, indent, memo, depth)
        if isinstance(tag, (TagList, TagByteArray, TagIntArray, TagLongArray)):
            return self._list(tag, indent, memo, depth)
        raise SnbtError(
            ERR_WRONG_VALUE_TYPE,
            "Cannot stringify {!r} of type {}, it is not a tag".format(tag, type(tag).__name__))

    # ── strings ──

    def _quote_for(self, text: str) -> str:
        preference = self._options.quote_preference
        if preference == "onlyDouble":
            return '"'
        if preference == "onlySingle":
            return "'"
        # Whichever quote the content uses less needs fewer escapes.
        balance = text.count('"') - text.count("'")
        if balance > 0:
            return "'"
        if balance < 0:
            return '"'
        return "'" if preference == "preferSingle" else '"'

    def _needs_quotes(self, text: str, is_key: bool) -> bool:
        opts = self._options
        if opts.always_quote_keys if is_key else opts.always_quote_strings:
            return True
        if not text or NEEDS_QUOTES_RE.search(text):
            return True
        # Keys are always read back as strings; values are not.
        return not is_key and reads_as_number(text)

    def _string(self, text: str, is_key: bool) -> Iterator[_Fragment]:
        if not self._needs_quotes(text, is_key):
            yield text, SpanType.STRING
            return
        quote = self._quote_for(text)
        yield quote, SpanType.QUOTE
        for m in _ESCAPE_SPLIT_RE[quote].finditer(text):
            if m.group(1):
                yield ESCAPE_CHAR + m.group(1), SpanType.ESCAPE
            else:
                yield m.group(), SpanType.STRING
        yield quote, SpanType.QUOTE

    # ── numbers ──

    def _suffix(self, letter: str) -> _Fragment:
        if letter in self._options.capitalize_suffix:
            letter = letter.upper()
        return letter, SpanType.SUFFIX

    def _byte(self, tag: TagByte) -> Iterator[_Fragment]:
        mode = self._options.bytes_as_bools
        as_bool = mode == "always" or (mode == "preserve" and tag.prefer_bool)
        if as_bool and tag.value in (0, 1):
            yield ("true" if tag.value else "false"), SpanType.BOOLEAN
        else:
            yield from self._integer(tag)

    def _integer(self, tag: Any) -> Iterator[_Fragment]:
        value = tag.value
        if value < 0:
            yield "-", SpanType.SIGN
            value = -value
        yield str(value), SpanType.NUMBER
        if tag.SUFFIX:
            yield self._suffix(tag.SUFFIX)

    def _float(self, tag: Any) -> Iterator[_Fragment]:
        value = tag.value
        if math.copysign(1.0, value) < 0:
            yield "-", SpanType.SIGN
            value = -value
        if math.isinf(value):
            text = tag.INFINITY_ALIAS
        elif isinstance(tag, TagFloat):
            text = _float32_repr(value)
        else:
            text = repr(value)
        yield text, SpanType.NUMBER
        yield self._suffix(tag.SUFFIX)

    # ── containers ──

    def _members(self, tag: TagCompound) -> Iterable[_Member]:
        sort = self._options.compound_sort
        if sort is None:
            return tag.items()
        return sorted(tag.items(), key=functools.cmp_to_key(sort))

    def _compound(self, tag: TagCompound, indent: str, memo: Dict[int, bool],
                  depth: int) -> Iterator[_Fragment]:
        opts = self._options
        yield "{", SpanType.BRACE
        if not len(tag):
            yield "}", SpanType.BRACE
            return

        inner = indent + opts.indent
        first = True
        for key, value in self._members(tag):
            if not first:
                yield ",", SpanType.SEPARATOR
            first = False
            if not opts.deflate:
                yield inner, SpanType.SPACE
            yield from self._string(key, True)
            yield ":", SpanType.SEPARATOR
            if not opts.deflate:
                if opts.brackets_own_line and not self._is_one_line(value, memo, depth + 1):
                    yield inner, SpanType.SPACE
                else:
                    yield " ", SpanType.SPACE
            yield from self._value(value, inner, memo, depth + 1)

        if not opts.deflate:
            if opts.trailing_comma:
                yield ",", SpanType.SEPARATOR
            yield indent, SpanType.SPACE
        yield "}", SpanType.BRACE

    def _list(self, tag: Any, indent: str, memo: Dict[int, bool],
              depth: int) -> Iterator[_Fragment]:
        opts = self._options
        yield "[", SpanType.BRACE
        one_line = opts.deflate or self._list_is_one_line(tag, memo, depth)

        if tag.ARRAY_PREFIX:
            yield tag.ARRAY_PREFIX, SpanType.PREFIX
            yield ";", SpanType.SEPARATOR
            if one_line and len(tag) and not opts.deflate:
                yield " ", SpanType.SPACE

        if not len(tag):
            yield "]", SpanType.BRACE
            return

        # Brackets share a line with the first and last element when the
        # whole list fits on one line, or when asked to and both ends are
        # themselves multi-line.
        collapse = one_line or (
            opts.collapse_adjacent_brackets
            and not self._is_one_line(tag[0], memo, depth + 1)
            and not self._is_one_line(tag[-1], memo, depth + 1))
        if one_line:
            inner = " "
        elif collapse:
            inner = indent
        else:
            inner = indent + opts.indent

        first = True
        for item in tag:
            if not first:
                yield ",", SpanType.SEPARATOR
            if not (first and collapse) and not opts.deflate:
                yield inner, SpanType.SPACE
            first = False
            yield from self._value(item, inner, memo, depth + 1)

        if not collapse and not opts.deflate:
            if opts.trailing_comma:
                yield ",", SpanType.SEPARATOR
            yield indent, SpanType.SPACE
        yield "]", SpanType.BRACE


def _depth_error() -> SnbtError:
    logger.debug("refusing to stringify a tree nested deeper than %d levels", MAX_DEPTH)
    return SnbtError(ERR_LIMIT_DEPTH, "Nesting deeper than {} levels".format(MAX_DEPTH))


def _float32_repr(value: float) -> str:
    """Shortest decimal that reads back as the same float32."""
    for precision in range(1, 10):
        candidate = float("{:.{}g}".format(value, precision))
        if _to_float32(candidate) == value:
            return repr(candidate)
    return repr(value)


Stringifier.DEFAULT = Stringifier()


def _stringifier_for(options: Optional[StringifierOptions], kwargs: Dict[str, Any]) -> Stringifier:
    if options is None and not kwargs:
        return Stringifier.DEFAULT
    return Stringifier(options, **kwargs)


def stringify(tag: Tag, options: Optional[StringifierOptions] = None, **kwargs: Any) -> str:
    """Render `tag` as SNBT text.

    Options come either as a StringifierOptions or as keyword arguments
    (or both, keywords winning), e.g. ``stringify(tag, deflate=True)``.
    """
    return _stringifier_for(options, kwargs).stringify(tag)


def stringify_to_spans(tag: Tag, options: Optional[StringifierOptions] = None,
                       **kwargs: Any) -> Iterator[Span]:
    """Render `tag` as a lazy sequence of highlighted Spans."""
    return _stringifier_for(options, kwargs).stringify_to_spans(tag)
