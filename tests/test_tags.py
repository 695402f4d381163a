"""Unit tests for the snbtkit tag model.

Organized by feature area: primitive construction and coercion, then
compounds, lists and arrays, then ownership of container tags.
"""

from __future__ import annotations

import math
import os
import struct
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from snbtkit import (
    DISPLAY_ORDER,
    ERR_ALREADY_OWNED,
    ERR_DUPLICATE_KEY,
    ERR_INVALID_COERCION,
    ERR_NOT_A_TAG_TYPE,
    ERR_OUT_OF_RANGE,
    ERR_TYPE_ALREADY_SET,
    ERR_TYPE_MISMATCH,
    ERR_WRONG_KEY_TYPE,
    ERR_WRONG_VALUE_TYPE,
    TAG_TYPES,
    SnbtError,
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


# ── Integer ranges ────────────────────────────────────────────

class TestIntegerRanges(unittest.TestCase):
    def assertOutOfRange(self, cls, value):
        with self.assertRaises(SnbtError) as ctx:
            cls(value)
        self.assertEqual(ctx.exception.code, ERR_OUT_OF_RANGE)

    def test_byte_bounds(self):
        self.assertEqual(TagByte(127).value, 127)
        self.assertEqual(TagByte(-128).value, -128)
        self.assertOutOfRange(TagByte, 128)
        self.assertOutOfRange(TagByte, -129)

    def test_short_bounds(self):
        self.assertEqual(TagShort(32767).value, 32767)
        self.assertEqual(TagShort(-32768).value, -32768)
        self.assertOutOfRange(TagShort, 32768)

    def test_int_bounds(self):
        self.assertEqual(TagInt(2**31 - 1).value, 2**31 - 1)
        self.assertEqual(TagInt(-(2**31)).value, -(2**31))
        self.assertOutOfRange(TagInt, 2**31)
        self.assertOutOfRange(TagInt, -(2**31) - 1)

    def test_long_bounds(self):
        self.assertEqual(TagLong(2**63 - 1).value, 2**63 - 1)
        self.assertEqual(TagLong(-(2**63)).value, -(2**63))
        self.assertOutOfRange(TagLong, 2**63)

    def test_out_of_range_message_names_bounds(self):
        with self.assertRaises(SnbtError) as ctx:
            TagByte(200)
        msg = str(ctx.exception)
        self.assertIn("TAG_Byte", msg)
        self.assertIn("-128", msg)
        self.assertIn("127", msg)

    def test_default_value_is_zero(self):
        self.assertEqual(TagInt().value, 0)
        self.assertEqual(TagLong().value, 0)


# ── Integer coercion ──────────────────────────────────────────

class TestIntegerCoercion(unittest.TestCase):
    def test_floats_truncate_toward_zero(self):
        self.assertEqual(TagInt(3.9).value, 3)
        self.assertEqual(TagInt(-3.9).value, -3)

    def test_truncation_happens_before_range_check(self):
        self.assertEqual(TagByte(127.9).value, 127)
        self.assertEqual(TagByte(-128.9).value, -128)

    def test_strings_are_exact(self):
        """A long held in a string never passes through a float."""
        self.assertEqual(TagLong("9223372036854775807").value, 2**63 - 1)
        self.assertEqual(TagLong("-9223372036854775808").value, -(2**63))

    def test_string_past_long_max(self):
        with self.assertRaises(SnbtError) as ctx:
            TagLong("9223372036854775808")
        self.assertEqual(ctx.exception.code, ERR_OUT_OF_RANGE)

    def test_decimal_string_truncates(self):
        self.assertEqual(TagInt("12.7").value, 12)
        self.assertEqual(TagInt("-12.7").value, -12)

    def test_huge_exponent_string_is_out_of_range(self):
        with self.assertRaises(SnbtError) as ctx:
            TagLong("1e400")
        self.assertEqual(ctx.exception.code, ERR_OUT_OF_RANGE)

    def test_bool_becomes_zero_or_one(self):
        self.assertEqual(TagInt(True).value, 1)
        self.assertEqual(TagShort(False).value, 0)

    def test_non_numeric_string(self):
        with self.assertRaises(SnbtError) as ctx:
            TagInt("abc")
        self.assertEqual(ctx.exception.code, ERR_INVALID_COERCION)

    def test_nan(self):
        with self.assertRaises(SnbtError) as ctx:
            TagInt(float("nan"))
        self.assertEqual(ctx.exception.code, ERR_INVALID_COERCION)

    def test_infinity(self):
        with self.assertRaises(SnbtError) as ctx:
            TagLong(float("inf"))
        self.assertEqual(ctx.exception.code, ERR_OUT_OF_RANGE)

    def test_unconvertible_type(self):
        with self.assertRaises(SnbtError) as ctx:
            TagInt([1])
        self.assertEqual(ctx.exception.code, ERR_INVALID_COERCION)


# ── Byte booleans ─────────────────────────────────────────────

class TestBytePreferBool(unittest.TestCase):
    def test_bool_input_prefers_bool(self):
        self.assertTrue(TagByte(True).prefer_bool)
        self.assertEqual(TagByte(True).value, 1)

    def test_int_input_does_not(self):
        self.assertFalse(TagByte(1).prefer_bool)

    def test_explicit_flag(self):
        self.assertTrue(TagByte(0, prefer_bool=True).prefer_bool)
        self.assertFalse(TagByte(True, prefer_bool=False).prefer_bool)

    def test_flag_does_not_affect_equality(self):
        self.assertEqual(TagByte(1, prefer_bool=True), TagByte(1))
        self.assertEqual(hash(TagByte(1, prefer_bool=True)), hash(TagByte(1)))


# ── Floating point ────────────────────────────────────────────

class TestFloating(unittest.TestCase):
    def test_float_rounds_to_float32(self):
        expected = struct.unpack(">f", struct.pack(">f", 0.1))[0]
        self.assertEqual(TagFloat(0.1).value, expected)
        self.assertNotEqual(TagFloat(0.1).value, 0.1)

    def test_double_keeps_float64(self):
        self.assertEqual(TagDouble(0.1).value, 0.1)

    def test_float_overflow_becomes_infinity(self):
        self.assertEqual(TagFloat(1e39).value, math.inf)
        self.assertEqual(TagFloat(-1e39).value, -math.inf)

    def test_huge_int_becomes_infinity(self):
        self.assertEqual(TagDouble(10**400).value, math.inf)

    def test_string_input(self):
        self.assertEqual(TagDouble("1.5").value, 1.5)

    def test_nan_is_rejected(self):
        for cls in (TagFloat, TagDouble):
            with self.assertRaises(SnbtError) as ctx:
                cls(float("nan"))
            self.assertEqual(ctx.exception.code, ERR_INVALID_COERCION)

    def test_garbage_is_rejected(self):
        with self.assertRaises(SnbtError) as ctx:
            TagDouble("x")
        self.assertEqual(ctx.exception.code, ERR_INVALID_COERCION)

    def test_negative_zero_is_kept(self):
        self.assertEqual(math.copysign(1.0, TagDouble(-0.0).value), -1.0)
        self.assertEqual(math.copysign(1.0, TagFloat(-0.0).value), -1.0)


# ── Primitive behavior ────────────────────────────────────────

class TestPrimitives(unittest.TestCase):
    def test_string_coerces(self):
        self.assertEqual(TagString(5).value, "5")
        self.assertEqual(TagString().value, "")

    def test_immutable(self):
        tag = TagInt(3)
        with self.assertRaises(AttributeError):
            tag.value = 4
        with self.assertRaises(AttributeError):
            tag.other = 4
        self.assertEqual(tag.value, 3)

    def test_equality_is_per_variant(self):
        self.assertEqual(TagInt(1), TagInt(1))
        self.assertNotEqual(TagInt(1), TagLong(1))
        self.assertNotEqual(TagInt(1), 1)

    def test_hashable(self):
        self.assertEqual(len({TagInt(1), TagInt(1), TagString("1")}), 2)

    def test_repr_uses_snbt(self):
        self.assertEqual(repr(TagInt(5)), "TagInt(5)")
        self.assertEqual(repr(TagString("x")), 'TagString("x")')
        self.assertEqual(repr(TagCompound({"a": TagByte(1)})), "TagCompound({a:1b})")


# ── Closed variant set ────────────────────────────────────────

class TestVariantSet(unittest.TestCase):
    def test_twelve_variants(self):
        self.assertEqual(len(TAG_TYPES), 12)
        self.assertEqual(set(DISPLAY_ORDER), set(TAG_TYPES))

    def test_display_order_ends(self):
        self.assertIs(DISPLAY_ORDER[0], TagString)
        self.assertIs(DISPLAY_ORDER[-1], TagList)

    def test_capability_flags(self):
        self.assertTrue(TagInt.IS_PRIMITIVE)
        self.assertFalse(TagInt.IS_LISTLIKE)
        self.assertFalse(TagCompound.IS_PRIMITIVE)
        self.assertFalse(TagCompound.IS_LISTLIKE)
        self.assertTrue(TagList.IS_LISTLIKE)
        self.assertTrue(TagLongArray.IS_LISTLIKE)

    def test_base_is_abstract(self):
        with self.assertRaises(SnbtError) as ctx:
            Tag()
        self.assertEqual(ctx.exception.code, ERR_NOT_A_TAG_TYPE)


# ── Compounds ─────────────────────────────────────────────────

class TestCompound(unittest.TestCase):
    def test_add_and_lookup(self):
        c = TagCompound().add("a", TagInt(1)).add("b", TagString("x"))
        self.assertEqual(len(c), 2)
        self.assertEqual(c["a"], TagInt(1))
        self.assertEqual(c.get("b"), TagString("x"))
        self.assertIsNone(c.get("missing"))
        self.assertIn("a", c)
        self.assertEqual(list(c), ["a", "b"])

    def test_duplicate_key(self):
        c = TagCompound().add("a", TagInt(1))
        with self.assertRaises(SnbtError) as ctx:
            c.add("a", TagInt(2))
        self.assertEqual(ctx.exception.code, ERR_DUPLICATE_KEY)
        self.assertEqual(c["a"], TagInt(1))

    def test_set_overwrites_in_place(self):
        c = TagCompound().add("a", TagInt(1)).add("b", TagInt(2))
        c.set("a", TagInt(3))
        self.assertEqual(list(c.keys()), ["a", "b"])
        self.assertEqual(c["a"], TagInt(3))

    def test_wrong_key_type(self):
        with self.assertRaises(SnbtError) as ctx:
            TagCompound().add(1, TagInt(1))
        self.assertEqual(ctx.exception.code, ERR_WRONG_KEY_TYPE)

    def test_wrong_value_type(self):
        c = TagCompound()
        with self.assertRaises(SnbtError) as ctx:
            c.add("a", 1)
        self.assertEqual(ctx.exception.code, ERR_WRONG_VALUE_TYPE)
        self.assertEqual(len(c), 0)

    def test_initial_contents(self):
        from_mapping = TagCompound({"a": TagInt(1), "b": TagInt(2)})
        from_pairs = TagCompound([("a", TagInt(1)), ("b", TagInt(2))])
        self.assertEqual(from_mapping, from_pairs)
        self.assertEqual(list(from_pairs.items()), [("a", TagInt(1)), ("b", TagInt(2))])

    def test_bad_initial_contents(self):
        for bogus in (5, "ab", [("a",)], [1]):
            with self.assertRaises(SnbtError) as ctx:
                TagCompound(bogus)
            self.assertEqual(ctx.exception.code, ERR_INVALID_COERCION)

    def test_equality_ignores_order(self):
        self.assertEqual(TagCompound({"a": TagInt(1), "b": TagInt(2)}),
                         TagCompound({"b": TagInt(2), "a": TagInt(1)}))
        self.assertNotEqual(TagCompound({"a": TagInt(1)}), TagCompound({"a": TagLong(1)}))

    def test_unhashable(self):
        with self.assertRaises(TypeError):
            hash(TagCompound())


# ── Lists ─────────────────────────────────────────────────────

class TestList(unittest.TestCase):
    def test_first_push_fixes_type(self):
        lst = TagList()
        self.assertIsNone(lst.element_type)
        lst.push(TagInt(1))
        self.assertIs(lst.element_type, TagInt)

    def test_type_lock(self):
        lst = TagList().push(TagInt(1))
        with self.assertRaises(SnbtError) as ctx:
            lst.push(TagString("x"))
        self.assertEqual(ctx.exception.code, ERR_TYPE_MISMATCH)
        self.assertIn("TAG_String", str(ctx.exception))
        self.assertIn("TAG_Int", str(ctx.exception))
        self.assertEqual(len(lst), 1)
        self.assertIs(lst.element_type, TagInt)

    def test_declared_type(self):
        lst = TagList(TagString)
        with self.assertRaises(SnbtError) as ctx:
            lst.push(TagInt(1))
        self.assertEqual(ctx.exception.code, ERR_TYPE_MISMATCH)

    def test_set_type_once(self):
        lst = TagList()
        lst.set_type(TagDouble)
        with self.assertRaises(SnbtError) as ctx:
            lst.set_type(TagDouble)
        self.assertEqual(ctx.exception.code, ERR_TYPE_ALREADY_SET)

    def test_set_type_after_push(self):
        lst = TagList(values=[TagInt(1)])
        with self.assertRaises(SnbtError) as ctx:
            lst.set_type(TagLong)
        self.assertEqual(ctx.exception.code, ERR_TYPE_ALREADY_SET)

    def test_set_type_rejects_non_tag_types(self):
        for bogus in (int, str, Tag, "TAG_Int"):
            with self.assertRaises(SnbtError) as ctx:
                TagList().set_type(bogus)
            self.assertEqual(ctx.exception.code, ERR_NOT_A_TAG_TYPE)

    def test_push_non_tag(self):
        with self.assertRaises(SnbtError) as ctx:
            TagList().push(5)
        self.assertEqual(ctx.exception.code, ERR_WRONG_VALUE_TYPE)

    def test_indexing(self):
        lst = TagList(values=[TagInt(1), TagInt(2), TagInt(3)])
        self.assertEqual(lst.get(0), TagInt(1))
        self.assertEqual(lst.get(-1), TagInt(3))
        self.assertEqual(lst[1], TagInt(2))
        self.assertEqual([t.value for t in lst], [1, 2, 3])

    def test_equality(self):
        self.assertEqual(TagList(values=[TagInt(1)]), TagList(values=[TagInt(1)]))
        self.assertNotEqual(TagList(values=[TagInt(1)]), TagList(values=[TagLong(1)]))
        self.assertNotEqual(TagList(values=[TagInt(1)]), TagIntArray([TagInt(1)]))

    def test_non_iterable_values(self):
        for build in (lambda: TagList(values=5), lambda: TagIntArray(5)):
            with self.assertRaises(SnbtError) as ctx:
                build()
            self.assertEqual(ctx.exception.code, ERR_INVALID_COERCION)

    def test_empty_lists_equal_whatever_their_type(self):
        self.assertEqual(TagList(), TagList(TagInt))


# ── Arrays ────────────────────────────────────────────────────

class TestArrays(unittest.TestCase):
    def test_fixed_element_types(self):
        self.assertIs(TagByteArray().element_type, TagByte)
        self.assertIs(TagIntArray().element_type, TagInt)
        self.assertIs(TagLongArray().element_type, TagLong)

    def test_prefixes(self):
        self.assertEqual(TagByteArray.ARRAY_PREFIX, "B")
        self.assertEqual(TagIntArray.ARRAY_PREFIX, "I")
        self.assertEqual(TagLongArray.ARRAY_PREFIX, "L")
        self.assertEqual(TagList.ARRAY_PREFIX, "")

    def test_mismatch(self):
        arr = TagIntArray([TagInt(1)])
        with self.assertRaises(SnbtError) as ctx:
            arr.push(TagByte(1))
        self.assertEqual(ctx.exception.code, ERR_TYPE_MISMATCH)
        self.assertIn("TAG_Int_Array", str(ctx.exception))
        self.assertEqual(len(arr), 1)


# ── Ownership ─────────────────────────────────────────────────

class TestOwnership(unittest.TestCase):
    def test_container_has_one_parent(self):
        child = TagCompound()
        TagCompound().add("x", child)
        with self.assertRaises(SnbtError) as ctx:
            TagList().push(child)
        self.assertEqual(ctx.exception.code, ERR_ALREADY_OWNED)

    def test_no_self_insertion(self):
        c = TagCompound()
        with self.assertRaises(SnbtError) as ctx:
            c.add("self", c)
        self.assertEqual(ctx.exception.code, ERR_ALREADY_OWNED)
        self.assertEqual(len(c), 0)

    def test_no_cycles(self):
        outer = TagCompound()
        inner = TagCompound()
        outer.add("inner", inner)
        with self.assertRaises(SnbtError) as ctx:
            inner.add("outer", outer)
        self.assertEqual(ctx.exception.code, ERR_ALREADY_OWNED)

    def test_no_cycles_through_lists(self):
        lst = TagList()
        c = TagCompound()
        lst.push(c)
        with self.assertRaises(SnbtError) as ctx:
            c.add("list", lst)
        self.assertEqual(ctx.exception.code, ERR_ALREADY_OWNED)

    def test_overwritten_child_is_released(self):
        child = TagCompound()
        first = TagCompound().add("x", child)
        first.set("x", TagInt(1))
        TagCompound().add("y", child)

    def test_setting_same_child_again(self):
        child = TagList()
        c = TagCompound().add("x", child)
        c.set("x", child)
        self.assertIs(c["x"], child)

    def test_primitives_are_shared_freely(self):
        shared = TagInt(7)
        a = TagCompound().add("n", shared)
        b = TagList().push(shared).push(shared)
        self.assertIs(a["n"], b[1])


if __name__ == "__main__":
    unittest.main()
