"""Tests for native value to SCVal conversion."""

from __future__ import annotations

import pytest
from builders import ACCOUNT, CONTRACT_ID, map_of, struct, t, tuple_of, udt, union, vec
from stellar_sdk import scval

from soroban_introspect.contract.metadata import SpecMetadata
from soroban_introspect.exceptions import ConversionError, ParseError
from soroban_introspect.transform.converter import ValueConverter, is_result_shape
from soroban_introspect.transform.ordering import compare_xdr
from soroban_introspect.transform.primitives import primitive_wire_tag
from soroban_introspect.types import (
    Composite,
    CompositeKind,
    EnumMetadata,
    EnumVariant,
    Named,
    Parameter,
    Primitive,
    VariantKind,
)

U32 = Primitive("U32")
I128 = Primitive("I128")
ADDRESS = Primitive("Address")


@pytest.fixture
def converter() -> ValueConverter:
    return ValueConverter()


def _action_param() -> Parameter:
    metadata = EnumMetadata(
        "Action",
        (
            EnumVariant("None", VariantKind.VOID),
            EnumVariant("Some", VariantKind.TUPLE, (ADDRESS, I128)),
            EnumVariant("Point", VariantKind.TUPLE, (Composite(CompositeKind.TUPLE, (U32, U32)),)),
        ),
    )
    return Parameter("action", Named("Action"), enum_metadata=metadata)


def _level_param() -> Parameter:
    metadata = EnumMetadata(
        "Level",
        (
            EnumVariant("Low", VariantKind.INTEGER, value=1),
            EnumVariant("High", VariantKind.INTEGER, value=2),
        ),
    )
    return Parameter("level", Named("Level"), enum_metadata=metadata)


def _record_param(*fields: tuple[str, Primitive]) -> Parameter:
    components = tuple(Parameter(name, type_expr) for name, type_expr in fields)
    return Parameter("record", Named("Record"), components=components)


class TestPrimitives:
    def test_integers(self, converter):
        assert converter.to_wire_value(7, "U32") == scval.to_uint32(7)
        assert converter.to_wire_value("-5", "I64") == scval.to_int64(-5)
        big = "170141183460469231731687303715884105727"
        assert converter.to_native(converter.to_wire_value(big, I128)) == int(big)

    @pytest.mark.parametrize("value", [-1, 2**32, "1.5", True, None])
    def test_invalid_u32(self, converter, value):
        with pytest.raises(ConversionError):
            converter.to_wire_value(value, "U32")

    def test_bool(self, converter):
        assert converter.to_wire_value(True, "Bool") == scval.to_bool(True)
        assert converter.to_wire_value("false", "Bool") == scval.to_bool(False)
        with pytest.raises(ConversionError):
            converter.to_wire_value(1, "Bool")

    def test_strings_and_symbols(self, converter):
        assert converter.to_wire_value("hi", "ScString") == scval.to_string("hi")
        assert converter.to_wire_value("hi", "ScSymbol") == scval.to_symbol("hi")
        with pytest.raises(ConversionError):
            converter.to_wire_value(5, "ScSymbol")

    def test_addresses(self, converter):
        assert converter.to_wire_value(ACCOUNT, "Address") == scval.to_address(ACCOUNT)
        assert converter.to_wire_value(CONTRACT_ID, "Address") == scval.to_address(CONTRACT_ID)
        with pytest.raises(ConversionError):
            converter.to_wire_value("GNOTANADDRESS", "Address")

    def test_bytes_n_length(self, converter):
        assert converter.to_wire_value("0x01020304", "BytesN<4>") == scval.to_bytes(
            b"\x01\x02\x03\x04"
        )
        with pytest.raises(ConversionError):
            converter.to_wire_value(b"\x01\x02\x03", "BytesN<4>")

    def test_bytes_from_base64(self, converter):
        assert converter.to_wire_value("AQID", "Bytes") == scval.to_bytes(b"\x01\x02\x03")

    def test_typed_wrapper_is_unwrapped(self, converter):
        assert converter.to_wire_value({"type": "U32", "value": 9}, U32) == scval.to_uint32(9)

    def test_scval_passes_through(self, converter):
        value = scval.to_symbol("ready")
        assert converter.to_wire_value(value, "U32") is value

    def test_malformed_type_string(self, converter):
        with pytest.raises(ParseError):
            converter.to_wire_value(1, "Vec<U32")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (5, scval.to_int128(5)),
            (True, scval.to_bool(True)),
            ("hello", scval.to_string("hello")),
            (None, scval.to_void()),
            ([1, "a"], scval.to_vec([scval.to_int128(1), scval.to_string("a")])),
        ],
    )
    def test_val_is_inferred_from_native_type(self, converter, value, expected):
        assert converter.to_wire_value(value, "Val") == expected

    def test_unknown_type_name_is_inferred(self, converter):
        assert converter.to_wire_value(7, "Foo") == scval.to_int128(7)

    def test_val_without_inference(self, converter):
        with pytest.raises(ConversionError):
            converter.to_wire_value(object(), "Val")


class TestComposites:
    def test_vec(self, converter):
        assert converter.to_wire_value([1, 2], "Vec<U32>") == scval.to_vec(
            [scval.to_uint32(1), scval.to_uint32(2)]
        )
        with pytest.raises(ConversionError):
            converter.to_wire_value("1,2", "Vec<U32>")

    def test_option_none_is_void(self, converter):
        assert converter.to_wire_value(None, "Option<U32>") == scval.to_void()
        assert converter.to_wire_value(3, "Option<U32>") == scval.to_uint32(3)

    def test_tuple_length(self, converter):
        assert converter.to_wire_value([1, True], "Tuple<U32, Bool>") == scval.to_vec(
            [scval.to_uint32(1), scval.to_bool(True)]
        )
        with pytest.raises(ConversionError):
            converter.to_wire_value([1], "Tuple<U32, Bool>")

    def test_map_sorted_by_key(self, converter):
        wire = converter.to_wire_value({"z": 1, "a": 2}, "Map<ScSymbol, U32>")

        assert list(converter.to_native(wire)) == ["a", "z"]

    def test_map_keeps_caller_order_when_requested(self):
        converter = ValueConverter(sort_map_entries=False)

        wire = converter.to_wire_value({"z": 1, "a": 2}, "Map<ScSymbol, U32>")

        assert list(converter.to_native(wire)) == ["z", "a"]

    def test_map_accepts_pairs(self, converter):
        wire = converter.to_wire_value(
            [{"key": "x", "value": 1}, ("y", 2)], "Map<ScSymbol, U32>"
        )

        assert converter.to_native(wire) == {"x": 1, "y": 2}

    def test_result_ok(self, converter):
        wire = converter.to_wire_value({"ok": 5}, "Result<U32, ScSymbol>")

        assert converter.to_native(wire) == {"ok": 5}

    def test_result_err(self, converter):
        wire = converter.to_wire_value({"err": "bad"}, "Result<U32, ScSymbol>")

        assert converter.to_native(wire) == {"err": "bad"}

    @pytest.mark.parametrize("value", [{}, {"ok": 1, "err": "x"}, 5])
    def test_result_without_single_branch_passes_through(self, converter, value):
        assert converter.to_wire_value(value, "Result<U32, ScSymbol>") == value

    def test_is_result_shape(self):
        assert is_result_shape({"ok": 1})
        assert is_result_shape({"err": 1})
        assert not is_result_shape({"ok": 1, "err": 2})
        assert not is_result_shape([("ok", 1)])


class TestUserDefinedTypes:
    def test_record_fields_in_canonical_order(self, converter):
        param = _record_param(("b", U32), ("a", U32))

        wire = converter.to_wire_value({"b": 1, "a": 2}, param.type, param)

        assert list(converter.to_native(wire)) == ["a", "b"]
        assert converter.to_native(wire) == {"a": 2, "b": 1}

    def test_record_missing_field(self, converter):
        param = _record_param(("a", U32), ("b", U32))

        with pytest.raises(ConversionError) as excinfo:
            converter.to_wire_value({"a": 1}, param.type, param)

        assert excinfo.value.details["missing"] == ["b"]

    def test_record_unknown_field(self, converter):
        param = _record_param(("a", U32))

        with pytest.raises(ConversionError) as excinfo:
            converter.to_wire_value({"a": 1, "c": 2}, param.type, param)

        assert excinfo.value.details["unknown"] == ["c"]

    def test_tuple_struct_is_vec(self, converter):
        param = _record_param(("0", U32), ("1", Primitive("ScSymbol")))

        wire = converter.to_wire_value([4, "x"], param.type, param)

        assert wire == scval.to_vec([scval.to_uint32(4), scval.to_symbol("x")])

    def test_enum_tuple_variant_is_flattened(self, converter):
        param = _action_param()

        wire = converter.to_wire_value(
            {"tag": "Some", "values": [ACCOUNT, 42]}, param.type, param
        )

        assert wire == scval.to_vec(
            [scval.to_symbol("Some"), scval.to_address(ACCOUNT), scval.to_int128(42)]
        )

    def test_enum_void_variant(self, converter):
        param = _action_param()

        wire = converter.to_wire_value("None", param.type, param)

        assert wire == scval.to_vec([scval.to_symbol("None")])

    def test_enum_single_tuple_payload(self, converter):
        param = _action_param()

        wire = converter.to_wire_value({"tag": "Point", "values": [1, 2]}, param.type, param)

        assert wire == scval.to_vec(
            [
                scval.to_symbol("Point"),
                scval.to_vec([scval.to_uint32(1), scval.to_uint32(2)]),
            ]
        )

    def test_enum_unknown_tag(self, converter):
        param = _action_param()

        with pytest.raises(ConversionError):
            converter.to_wire_value("Maybe", param.type, param)

    def test_enum_payload_count(self, converter):
        param = _action_param()

        with pytest.raises(ConversionError):
            converter.to_wire_value({"tag": "Some", "values": [ACCOUNT]}, param.type, param)

    @pytest.mark.parametrize("value", ["High", 2, {"tag": "High"}])
    def test_integer_enum(self, converter, value):
        param = _level_param()

        assert converter.to_wire_value(value, param.type, param) == scval.to_uint32(2)

    def test_integer_enum_unknown(self, converter):
        param = _level_param()

        with pytest.raises(ConversionError):
            converter.to_wire_value("Mid", param.type, param)

    def test_named_without_schema(self, converter):
        with pytest.raises(ConversionError):
            converter.to_wire_value({"a": 1}, Named("Mystery"))

    def test_vec_of_records_uses_hint(self, converter):
        record = _record_param(("b", U32), ("a", U32))
        vec_type = Composite(CompositeKind.VEC, (Named("Record"),))
        param = Parameter("items", vec_type, components=record.components)

        wire = converter.to_wire_value([{"a": 1, "b": 2}], param.type, param)

        assert converter.to_native(wire) == [{"a": 1, "b": 2}]


def _shape_metadata() -> SpecMetadata:
    return SpecMetadata(
        [
            struct("Point", [("x", t("U32")), ("y", t("U32"))]),
            union("Shape", [("Empty", []), ("At", [udt("Point")])]),
        ]
    )


class TestNestedUserDefinedTypes:
    def test_union_with_struct_payload(self, converter):
        param = _shape_metadata().build_parameter("shape", Named("Shape"))

        wire = converter.to_wire_value(
            {"tag": "At", "values": [{"x": 1, "y": 2}]}, param.type, param
        )

        assert converter.to_native(wire) == ["At", {"x": 1, "y": 2}]

    def test_map_with_struct_values(self, converter):
        metadata = _shape_metadata()
        type_expr = metadata.resolve_type(map_of(t("SYMBOL"), udt("Point")))
        param = metadata.build_parameter("points", type_expr)

        wire = converter.to_wire_value(
            [{"key": "a", "value": {"x": 1, "y": 2}}], param.type, param
        )

        assert converter.to_native(wire) == {"a": {"x": 1, "y": 2}}

    def test_tuple_with_struct_element(self, converter):
        metadata = _shape_metadata()
        type_expr = metadata.resolve_type(tuple_of(t("U32"), udt("Point")))
        param = metadata.build_parameter("pair", type_expr)

        wire = converter.to_wire_value([7, {"x": 3, "y": 4}], param.type, param)

        assert converter.to_native(wire) == [7, {"x": 3, "y": 4}]

    def test_vec_of_maps_with_union_values(self, converter):
        metadata = _shape_metadata()
        type_expr = metadata.resolve_type(vec(map_of(t("SYMBOL"), udt("Shape"))))
        param = metadata.build_parameter("layers", type_expr)

        wire = converter.to_wire_value([{"s": "Empty"}], param.type, param)

        assert converter.to_native(wire) == [{"s": ["Empty"]}]

    def test_recursive_union_terminates(self):
        metadata = SpecMetadata(
            [union("List", [("Nil", []), ("Cons", [t("U32"), udt("List")])])]
        )

        param = metadata.build_parameter("list", Named("List"))

        cons = param.enum_metadata.variant("Cons")
        inner = cons.payload_hint(1).enum_metadata.variant("Cons")
        assert inner.payload_hints == ()


class TestHelpers:
    def test_compare_xdr(self):
        assert compare_xdr(b"\x01", b"\x01") == 0
        assert compare_xdr(b"\x01", b"\x01\x00") == -1
        assert compare_xdr(b"\x02", b"\x01\xff") == 1
        assert compare_xdr(b"", b"\x00") == -1

    @pytest.mark.parametrize(
        ("name", "tag"),
        [("U32", "u32"), ("ScSymbol", "symbol"), ("BytesN<32>", "bytes"), ("Foo", "foo")],
    )
    def test_primitive_wire_tag(self, name, tag):
        assert primitive_wire_tag(name) == tag
