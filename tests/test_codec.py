"""Unit tests for the encoding engine."""

from __future__ import annotations

import pytest
from eth_abi import encode as abi_encode

from invocant.errors import ArgumentMismatch, DecodeTruncated, MalformedData, ValueOutOfRange
from invocant.pneuma.abi import MethodSignature, Mutability
from invocant.pneuma.codec import ERROR_SELECTOR, PANIC_SELECTOR, CallData, EncodingEngine, function_selector
from invocant.pneuma.types import Address, Array, Bool, Bytes, String, UInt, parse_type


def word(value: int) -> bytes:
    return value.to_bytes(32, "big")


@pytest.fixture()
def codec() -> EncodingEngine:
    return EncodingEngine()


class TestSelector:
    """Tests for function selectors."""

    @pytest.mark.parametrize(
        "name, types, expected",
        [
            ("transfer", ["address", "uint256"], "a9059cbb"),
            ("balanceOf", ["address"], "70a08231"),
            ("decimals", [], "313ce567"),
            ("deposit", [], "d0e30db0"),
            ("withdraw", ["uint256"], "2e1a7d4d"),
        ],
    )
    def test_known_selectors(self, name: str, types: list[str], expected: str) -> None:
        assert function_selector(name, [parse_type(t) for t in types]).hex() == expected

    def test_bare_uint_canonicalised(self) -> None:
        assert function_selector("withdraw", [parse_type("uint")]).hex() == "2e1a7d4d"


class TestEncode:
    """Tests for call-data encoding."""

    def test_sum_of_one_value(self, codec: EncodingEngine) -> None:
        signature = MethodSignature.build("sum", ["uint256[]"], ["string", "uint256"], Mutability.PURE)
        calldata = codec.encode(signature, [Array([UInt(16)])])

        assert isinstance(calldata, CallData)
        assert calldata.selector == signature.selector
        # offset to tail, array length, element
        assert calldata.arguments == word(0x20) + word(1) + word(16)

    def test_no_arguments_is_selector_only(self, codec: EncodingEngine) -> None:
        signature = MethodSignature.build("decimals", [], ["uint8"], Mutability.PURE)
        assert codec.encode(signature, []) == bytes.fromhex("313ce567")

    def test_static_then_dynamic(self, codec: EncodingEngine) -> None:
        signature = MethodSignature.build("sumWithHelper", ["address", "uint256[]"], ["uint256"], Mutability.VIEW)
        helper = Address(b"\x11" * 20)
        calldata = codec.encode(signature, [helper, Array([UInt(1), UInt(2)])])

        expected = (
            b"\x00" * 12 + b"\x11" * 20
            + word(0x40)
            + word(2) + word(1) + word(2)
        )
        assert calldata.arguments == expected

    def test_argument_count_mismatch(self, codec: EncodingEngine) -> None:
        signature = MethodSignature.build("withdraw", ["uint256"])
        with pytest.raises(ArgumentMismatch, match="expected 1 arguments, got 0"):
            codec.encode(signature, [])

    def test_unencodable_string(self, codec: EncodingEngine) -> None:
        signature = MethodSignature.build("setName", ["string"], [], Mutability.VIEW)
        with pytest.raises(ArgumentMismatch, match="setName\\(string\\)"):
            codec.encode(signature, [String("\ud800")])

    def test_uint8_overflow(self, codec: EncodingEngine) -> None:
        signature = MethodSignature.build("setSmall", ["uint8"])
        with pytest.raises(ValueOutOfRange) as excinfo:
            codec.encode(signature, [UInt(300)])
        assert excinfo.value.index == 0
        assert excinfo.value.method == "setSmall(uint8)"

    def test_shape_mismatch_names_argument(self, codec: EncodingEngine) -> None:
        signature = MethodSignature.build("transfer", ["address", "uint256"])
        with pytest.raises(ArgumentMismatch) as excinfo:
            codec.encode(signature, [Address(b"\x01" * 20), String("10")])
        assert excinfo.value.index == 1


class TestDecode:
    """Tests for return-data decoding."""

    def test_sum_result(self, codec: EncodingEngine) -> None:
        raw = word(0x40) + word(16) + word(0)
        result = codec.decode([parse_type("string"), parse_type("uint256")], raw)
        assert result == [String(""), UInt(16)]

    def test_decimals_result(self, codec: EncodingEngine) -> None:
        raw = b"\x00" * 31 + bytes([18])
        assert codec.decode([parse_type("uint8")], raw) == [UInt(18)]

    def test_no_outputs(self, codec: EncodingEngine) -> None:
        assert codec.decode([], b"") == []

    def test_truncated_static(self, codec: EncodingEngine) -> None:
        with pytest.raises(DecodeTruncated) as excinfo:
            codec.decode([parse_type("uint256")], b"\x00" * 31)
        assert excinfo.value.expected == 32
        assert excinfo.value.actual == 31

    def test_truncated_string_counts_length_slot(self, codec: EncodingEngine) -> None:
        with pytest.raises(DecodeTruncated) as excinfo:
            codec.decode([parse_type("string")], word(0x20))
        assert excinfo.value.expected == 64
        assert excinfo.value.actual == 32

    def test_empty_result_for_non_empty_outputs(self, codec: EncodingEngine) -> None:
        with pytest.raises(DecodeTruncated):
            codec.decode([parse_type("uint8")], b"")

    def test_truncated_tail(self, codec: EncodingEngine) -> None:
        # head claims a 5-byte string but the tail is missing
        raw = word(0x20) + word(5)
        with pytest.raises(DecodeTruncated):
            codec.decode([parse_type("string")], raw)

    def test_invalid_utf8(self, codec: EncodingEngine) -> None:
        raw = word(0x20) + word(1) + b"\xff" + b"\x00" * 31
        with pytest.raises(MalformedData):
            codec.decode([parse_type("string")], raw)

    def test_address_and_bool(self, codec: EncodingEngine) -> None:
        raw = b"\x00" * 12 + b"\xab" * 20 + word(1)
        result = codec.decode([parse_type("address"), parse_type("bool")], raw)
        assert result == [Address(b"\xab" * 20), Bool(True)]


class TestRoundTrip:
    """decode(t, encode(t, v)) == v, including dynamic-inside-dynamic."""

    @pytest.mark.parametrize(
        "types, values",
        [
            (["uint256[][]"], [Array([Array([UInt(1), UInt(2)]), Array([]), Array([UInt(3)])])]),
            (["string[]", "bytes"], [Array([String("alpha"), String(""), String("Ω")]), Bytes(b"\x00" * 33)]),
            (["string[2][]"], [Array([Array([String("a"), String("b")]), Array([String("c"), String("d" * 40)])])]),
            (["uint8[2][3]", "bool"], [Array([Array([UInt(i), UInt(i + 1)]) for i in range(3)]), Bool(False)]),
        ],
    )
    def test_round_trip(self, codec: EncodingEngine, types: list[str], values: list) -> None:
        descriptors = [parse_type(t) for t in types]
        encoded = codec.encode_values(descriptors, values)
        assert codec.decode(descriptors, encoded) == values


class TestRevertReason:
    """Tests for revert payload decoding."""

    def test_error_string(self, codec: EncodingEngine) -> None:
        data = ERROR_SELECTOR + abi_encode(["string"], ["Insufficient balance"])
        assert codec.decode_revert_reason(data) == "Insufficient balance"

    def test_panic(self, codec: EncodingEngine) -> None:
        data = PANIC_SELECTOR + abi_encode(["uint256"], [0x11])
        assert codec.decode_revert_reason(data) == "panic code 0x11"

    def test_custom_error_unrecognised(self, codec: EncodingEngine) -> None:
        assert codec.decode_revert_reason(bytes.fromhex("deadbeef")) is None
