"""snbtkit tag model — the closed set of tag variants and their rules.

Twelve concrete variants, grouped by capability:

    primitive    TagString, TagByte, TagShort, TagInt, TagLong,
                 TagFloat, TagDouble
    compound     TagCompound            (str -> Tag, insertion ordered)
    list-like    TagList                (element type fixed at runtime)
                 TagByteArray, TagIntArray, TagLongArray
                                        (element type fixed per class)

Primitives are immutable values.  Containers grow only through add(),
set() and push(), each of which validates before touching any state, so
a failed call leaves the container exactly as it was.

Containers own their children exclusively: a compound or list can be
attached to one parent at most, and never to itself or one of its own
descendants.  Primitives are shared freely since nothing can change them.
"""

from __future__ import annotations

import math
import numbers
import struct
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Type

from ._constants import (
    BYTE_MAX,
    BYTE_MIN,
    DOUBLE_INFINITY_ALIAS,
    FLOAT_INFINITY_ALIAS,
    INT_MAX,
    INT_MIN,
    LONG_MAX,
    LONG_MIN,
    SHORT_MAX,
    SHORT_MIN,
)
from ._errors import (
    ERR_ALREADY_OWNED,
    ERR_DUPLICATE_KEY,
    ERR_INVALID_COERCION,
    ERR_NOT_A_TAG_TYPE,
    ERR_OUT_OF_RANGE,
    ERR_TYPE_ALREADY_SET,
    ERR_TYPE_MISMATCH,
    ERR_WRONG_KEY_TYPE,
    ERR_WRONG_VALUE_TYPE,
    SnbtError,
)

# Decimal inputs whose exponent puts them past 10**20 are out of range for
# every integer variant; reject them before int() builds a huge number.
_MAX_DECIMAL_EXPONENT = 20


def _type_name(value: Any) -> str:
    if isinstance(value, Tag):
        return type(value).TAG_NAME
    return type(value).__name__


class Tag:
    """Base of every tag variant.  Not instantiable on its own."""

    TAG_NAME: str = ""
    IS_PRIMITIVE: bool = False
    IS_LISTLIKE: bool = False

    __slots__ = ()

    def __init__(self) -> None:
        if type(self) not in TAG_TYPES:
            raise SnbtError(
                ERR_NOT_A_TAG_TYPE,
                "{} is an abstract tag class and cannot be instantiated".format(
                    type(self).__name__))

    def __repr__(self) -> str:
        from ._stringify import stringify
        return "{}({})".format(type(self).__name__, stringify(self, deflate=True))


# ── Primitives ────────────────────────────────────────────────

class _Primitive(Tag):
    IS_PRIMITIVE = True
    DEFAULT_VALUE: Any = None

    __slots__ = ("_value",)

    def __init__(self, value: Any = None) -> None:
        super().__init__()
        if value is None:
            value = self.DEFAULT_VALUE
        object.__setattr__(self, "_value", self._coerce(value))

    @classmethod
    def _coerce(cls, value: Any) -> Any:
        raise NotImplementedError

    @property
    def value(self) -> Any:
        return self._value

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("{} is immutable".format(type(self).__name__))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._value))


class TagString(_Primitive):
    TAG_NAME = "TAG_String"
    DEFAULT_VALUE = ""

    __slots__ = ()

    @classmethod
    def _coerce(cls, value: Any) -> str:
        return str(value)


class _Integer(_Primitive):
    """Integer variants: truncate toward zero, then range-check."""

    DEFAULT_VALUE = 0
    MIN_VALUE: int = 0
    MAX_VALUE: int = 0
    SUFFIX: str = ""

    __slots__ = ()

    @classmethod
    def _out_of_range(cls, value: Any, orig: Any) -> SnbtError:
        coerced = "" if value is orig else " (coerced from {!r})".format(orig)
        return SnbtError(
            ERR_OUT_OF_RANGE,
            "Value {}{} is out of range for a {} (min: {}, max: {})".format(
                value, coerced, cls.TAG_NAME, cls.MIN_VALUE, cls.MAX_VALUE))

    @classmethod
    def _invalid(cls, orig: Any) -> SnbtError:
        return SnbtError(
            ERR_INVALID_COERCION,
            "Cannot convert {!r} of type {} to a {}".format(
                orig, _type_name(orig), cls.TAG_NAME))

    @classmethod
    def _coerce(cls, value: Any) -> int:
        result = cls._truncate(value)
        if result < cls.MIN_VALUE or result > cls.MAX_VALUE:
            raise cls._out_of_range(result, value)
        return result

    @classmethod
    def _truncate(cls, orig: Any) -> int:
        # bool is an int subclass; int() turns True/False into 1/0, which
        # is exactly the coercion we want, so no special case is needed.
        if isinstance(orig, int):
            return int(orig)

        value = orig
        if isinstance(value, str):
            # Decimal keeps every digit of a 64-bit value; float() would not.
            try:
                value = Decimal(value)
            except InvalidOperation:
                raise cls._invalid(orig)

        if isinstance(value, Decimal):
            if value.is_nan():
                raise cls._invalid(orig)
            if value.is_infinite() or value.adjusted() > _MAX_DECIMAL_EXPONENT:
                raise cls._out_of_range(value, orig)
            return int(value)

        if isinstance(value, float):
            if math.isnan(value):
                raise cls._invalid(orig)
            if math.isinf(value):
                raise cls._out_of_range(value, orig)
            return int(value)

        if isinstance(value, numbers.Real):
            return math.trunc(value)

        raise cls._invalid(orig)


class TagByte(_Integer):
    """An 8-bit integer.

    `prefer_bool` asks the stringifier to render 0/1 as false/true when
    its bytes_as_bools option is "preserve".  It defaults to whether the
    raw value was a bool.  It is a rendering hint only and does not take
    part in equality.
    """

    TAG_NAME = "TAG_Byte"
    MIN_VALUE = BYTE_MIN
    MAX_VALUE = BYTE_MAX
    SUFFIX = "b"

    __slots__ = ("_prefer_bool",)

    def __init__(self, value: Any = None, *, prefer_bool: Optional[bool] = None) -> None:
        super().__init__(value)
        if prefer_bool is None:
            prefer_bool = isinstance(value, bool)
        object.__setattr__(self, "_prefer_bool", bool(prefer_bool))

    @property
    def prefer_bool(self) -> bool:
        return self._prefer_bool


class TagShort(_Integer):
    TAG_NAME = "TAG_Short"
    MIN_VALUE = SHORT_MIN
    MAX_VALUE = SHORT_MAX
    SUFFIX = "s"

    __slots__ = ()


class TagInt(_Integer):
    TAG_NAME = "TAG_Int"
    MIN_VALUE = INT_MIN
    MAX_VALUE = INT_MAX
    SUFFIX = ""

    __slots__ = ()


class TagLong(_Integer):
    TAG_NAME = "TAG_Long"
    MIN_VALUE = LONG_MIN
    MAX_VALUE = LONG_MAX
    SUFFIX = "l"

    __slots__ = ()


def _to_float32(value: float) -> float:
    """Round a float64 to the nearest float32.

    Magnitudes that round past the largest float32 become infinities,
    like a hardware float conversion would.
    """
    try:
        return struct.unpack(">f", struct.pack(">f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


class _Floating(_Primitive):
    DEFAULT_VALUE = 0.0
    SUFFIX: str = ""
    INFINITY_ALIAS: str = ""

    __slots__ = ()

    @classmethod
    def _coerce(cls, orig: Any) -> float:
        try:
            value = float(orig)
        except OverflowError:
            # int too large for a float64
            value = math.inf if orig > 0 else -math.inf
        except (TypeError, ValueError):
            raise SnbtError(
                ERR_INVALID_COERCION,
                "Cannot convert {!r} of type {} to a {}".format(
                    orig, _type_name(orig), cls.TAG_NAME))
        if math.isnan(value):
            raise SnbtError(
                ERR_INVALID_COERCION,
                "NaN has no SNBT representation and cannot be stored in a {}".format(
                    cls.TAG_NAME))
        return value


class TagFloat(_Floating):
    TAG_NAME = "TAG_Float"
    SUFFIX = "f"
    INFINITY_ALIAS = FLOAT_INFINITY_ALIAS

    __slots__ = ()

    @classmethod
    def _coerce(cls, orig: Any) -> float:
        return _to_float32(super()._coerce(orig))


class TagDouble(_Floating):
    TAG_NAME = "TAG_Double"
    SUFFIX = "d"
    INFINITY_ALIAS = DOUBLE_INFINITY_ALIAS

    __slots__ = ()


# ── Containers ────────────────────────────────────────────────

class _Container(Tag):
    __slots__ = ("_owner",)

    def __init__(self) -> None:
        super().__init__()
        self._owner: Optional[_Container] = None

    def _check_adoptable(self, child: Tag) -> None:
        if not isinstance(child, _Container):
            return
        if child._owner is not None:
            raise SnbtError(
                ERR_ALREADY_OWNED,
                "This {} already belongs to another tag".format(child.TAG_NAME))
        node: Optional[_Container] = self
        while node is not None:
            if node is child:
                raise SnbtError(
                    ERR_ALREADY_OWNED,
                    "A {} cannot be inserted into itself or its own descendants".format(
                        child.TAG_NAME))
            node = node._owner

    def _initial(self, values: Any) -> Iterator[Any]:
        try:
            return iter(values)
        except TypeError:
            raise SnbtError(
                ERR_INVALID_COERCION,
                "Initial contents of a {} must be iterable, not {}".format(
                    self.TAG_NAME, _type_name(values)))

    @staticmethod
    def _adopt(parent: "_Container", child: Tag) -> None:
        if isinstance(child, _Container):
            child._owner = parent

    @staticmethod
    def _release(child: Tag) -> None:
        if isinstance(child, _Container):
            child._owner = None

    __hash__ = None  # type: ignore[assignment]


class TagCompound(_Container):
    """An insertion-ordered mapping of string keys to tags."""

    TAG_NAME = "TAG_Compound"

    __slots__ = ("_map",)

    def __init__(self, values: Any = None) -> None:
        super().__init__()
        self._map: Dict[str, Tag] = {}
        if values is not None:
            items = values.items() if hasattr(values, "items") else values
            for item in self._initial(items):
                try:
                    key, value = item
                except (TypeError, ValueError):
                    raise SnbtError(
                        ERR_INVALID_COERCION,
                        "Compound members must be (key, tag) pairs, got {!r}".format(item))
                self.add(key, value)

    def add(self, key: str, value: Tag) -> "TagCompound":
        """Insert a new member.  Fails if `key` is already present."""
        if not isinstance(key, str):
            raise SnbtError(
                ERR_WRONG_KEY_TYPE,
                "Compound keys must be strings, but {!r} is of type {}".format(
                    key, _type_name(key)))
        if key in self._map:
            raise SnbtError(
                ERR_DUPLICATE_KEY,
                "Attempted to insert duplicate key {!r} into compound".format(key))
        return self.set(key, value)

    def set(self, key: str, value: Tag) -> "TagCompound":
        """Insert or overwrite a member.  Overwriting keeps the key's position."""
        if not isinstance(key, str):
            raise SnbtError(
                ERR_WRONG_KEY_TYPE,
                "Compound keys must be strings, but {!r} is of type {}".format(
                    key, _type_name(key)))
        if not isinstance(value, Tag):
            raise SnbtError(
                ERR_WRONG_VALUE_TYPE,
                "The value {!r} is of type {}, not a tag".format(value, _type_name(value)))
        old = self._map.get(key)
        if old is value:
            return self
        self._check_adoptable(value)
        if old is not None:
            self._release(old)
        self._map[key] = value
        self._adopt(self, value)
        return self

    def get(self, key: str, default: Optional[Tag] = None) -> Optional[Tag]:
        return self._map.get(key, default)

    def keys(self):
        return self._map.keys()

    def values(self):
        return self._map.values()

    def items(self):
        return self._map.items()

    def __getitem__(self, key: str) -> Tag:
        return self._map[key]

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def __iter__(self) -> Iterator[str]:
        return iter(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def __eq__(self, other: object) -> bool:
        if type(other) is not TagCompound:
            return NotImplemented
        return self._map == other._map  # type: ignore[attr-defined]


class _ListLike(_Container):
    IS_LISTLIKE = True
    ARRAY_PREFIX: str = ""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        super().__init__()
        self._items: List[Tag] = []

    @property
    def element_type(self) -> Optional[Type[Tag]]:
        raise NotImplementedError

    def _describe(self) -> str:
        return self.TAG_NAME

    def push(self, value: Tag) -> "_ListLike":
        """Append `value`.  It must match the element type, if one is set."""
        if not isinstance(value, Tag):
            raise SnbtError(
                ERR_WRONG_VALUE_TYPE,
                "The value {!r} is of type {}, not a tag".format(value, _type_name(value)))
        element_type = self.element_type
        if element_type is not None and type(value) is not element_type:
            raise SnbtError(
                ERR_TYPE_MISMATCH,
                "Cannot insert {} into {}".format(value.TAG_NAME, self._describe()))
        self._check_adoptable(value)
        if element_type is None:
            self._fix_type(type(value))
        self._items.append(value)
        self._adopt(self, value)
        return self

    def _fix_type(self, tag_type: Type[Tag]) -> None:
        raise NotImplementedError

    def get(self, index: int) -> Tag:
        return self._items[index]

    def __getitem__(self, index):
        return self._items[index]

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        if self._items != other._items:  # type: ignore[attr-defined]
            return False
        # An empty list's element type has no textual form.
        return not self._items or self.element_type is other.element_type  # type: ignore[attr-defined]


class TagList(_ListLike):
    """A homogeneous list.  The first push fixes the element type for good."""

    TAG_NAME = "TAG_List"

    __slots__ = ("_element_type",)

    def __init__(self, element_type: Optional[Type[Tag]] = None,
                 values: Iterable[Tag] = ()) -> None:
        super().__init__()
        self._element_type: Optional[Type[Tag]] = None
        if element_type is not None:
            self.set_type(element_type)
        for value in self._initial(values):
            self.push(value)

    @property
    def element_type(self) -> Optional[Type[Tag]]:
        return self._element_type

    def set_type(self, tag_type: Type[Tag]) -> None:
        """Declare the element type of a list that has none yet."""
        if self._element_type is not None:
            raise SnbtError(
                ERR_TYPE_ALREADY_SET,
                "List's type is already set to {}, changing it to {} is not allowed".format(
                    self._element_type.TAG_NAME,
                    getattr(tag_type, "TAG_NAME", None) or repr(tag_type)))
        if tag_type not in TAG_TYPES:
            raise SnbtError(
                ERR_NOT_A_TAG_TYPE,
                "The type {!r} is not a concrete tag type".format(tag_type))
        self._element_type = tag_type

    def _fix_type(self, tag_type: Type[Tag]) -> None:
        self._element_type = tag_type

    def _describe(self) -> str:
        return "{} of type {}".format(self.TAG_NAME, self._element_type.TAG_NAME)


class _Array(_ListLike):
    ARRAY_TYPE: Type[Tag] = Tag

    __slots__ = ()

    def __init__(self, values: Iterable[Tag] = ()) -> None:
        super().__init__()
        for value in self._initial(values):
            self.push(value)

    @property
    def element_type(self) -> Type[Tag]:
        return self.ARRAY_TYPE


class TagByteArray(_Array):
    TAG_NAME = "TAG_Byte_Array"
    ARRAY_TYPE = TagByte
    ARRAY_PREFIX = "B"

    __slots__ = ()


class TagIntArray(_Array):
    TAG_NAME = "TAG_Int_Array"
    ARRAY_TYPE = TagInt
    ARRAY_PREFIX = "I"

    __slots__ = ()


class TagLongArray(_Array):
    TAG_NAME = "TAG_Long_Array"
    ARRAY_TYPE = TagLong
    ARRAY_PREFIX = "L"

    __slots__ = ()


# ── Static tables ─────────────────────────────────────────────

TAG_TYPES: Tuple[Type[Tag], ...] = (
    TagByte,
    TagShort,
    TagInt,
    TagLong,
    TagFloat,
    TagDouble,
    TagString,
    TagCompound,
    TagList,
    TagByteArray,
    TagIntArray,
    TagLongArray,
)

# Ordering used when sorting compound members by type.
DISPLAY_ORDER: Tuple[Type[Tag], ...] = (
    TagString,
    TagByte,
    TagShort,
    TagInt,
    TagLong,
    TagFloat,
    TagDouble,
    TagCompound,
    TagByteArray,
    TagIntArray,
    TagLongArray,
    TagList,
)

ARRAY_TYPES_BY_PREFIX = {cls.ARRAY_PREFIX: cls for cls in (TagByteArray, TagIntArray, TagLongArray)}
