import math

import numpy as np
import pytest

from ieeeview.datatypes import (
    FLOAT_TYPE_SPECS,
    FloatKind,
    describe_fields,
    float32_from_fields,
    float64_from_fields,
    format_float,
    group_from_left,
    group_from_right,
    raw_from_fields,
    to_float32_fields,
    to_float64_fields,
)


def test_float32_one() -> None:
    fields = to_float32_fields(1.0)
    assert fields.kind == FloatKind.NORMAL
    assert fields.sign_bit == 0
    assert fields.exponent_bits == 127
    assert fields.mantissa == 0
    assert fields.exponent_unbiased == 0
    assert fields.hex == "3f800000"
    assert fields.bits == "00111111100000000000000000000000"
    assert fields.hex_grouped == "3f 80 00 00"
    assert fields.bits_grouped8 == "00111111 10000000 00000000 00000000"


def test_float64_one() -> None:
    fields = to_float64_fields(1.0)
    assert fields.kind == "Normal"
    assert fields.exponent_bits == 1023
    assert fields.mantissa_high == 0
    assert fields.mantissa_low == 0
    assert fields.exponent_unbiased == 0
    assert fields.hex == "3ff0000000000000"
    assert fields.hex_grouped == "3f f0 00 00 00 00 00 00"
    assert len(fields.bits) == 64


def test_float32_negative_value() -> None:
    fields = to_float32_fields(-1.25)
    assert fields.hex == "bfa00000"
    assert fields.sign_bit == 1
    assert fields.sign_bits_str == "1"
    assert fields.exponent_bits_str == "01111111"
    assert fields.mantissa_bits_str == "01000000000000000000000"


def test_field_slices_cover_whole_bit_string() -> None:
    for fields in (to_float32_fields(0.1), to_float64_fields(0.1)):
        spec = fields.spec
        assert len(fields.sign_bits_str) == 1
        assert len(fields.exponent_bits_str) == spec.exponent_bits
        assert len(fields.mantissa_bits_str) == spec.mantissa_bits
        assert fields.sign_bits_str + fields.exponent_bits_str + fields.mantissa_bits_str == fields.bits


def test_pretty_separates_the_three_fields() -> None:
    assert to_float32_fields(-1.25).pretty == "1 01111111 01000000000000000000000"
    assert to_float64_fields(1.0).pretty == "0 01111111111 " + "0" * 52


def test_exponent_grouping_widths() -> None:
    assert to_float32_fields(1.0).exponent_grouped4 == "0111 1111"
    assert to_float64_fields(1.0).exponent_grouped4 == "011 1111 1111"


def test_mantissa_grouping_widths() -> None:
    single = to_float32_fields(0.1).mantissa_grouped4
    double = to_float64_fields(0.1).mantissa_grouped4

    assert [len(group) for group in single.split(" ")] == [4, 4, 4, 4, 4, 3]
    assert [len(group) for group in double.split(" ")] == [4] * 13
    assert single == "1001 1001 1001 1001 1001 101"


def test_float64_mantissa_split() -> None:
    fields = to_float64_fields(0.1)
    assert fields.hex == "3fb999999999999a"
    assert fields.mantissa_high == 0x99999
    assert fields.mantissa_low == 0x9999999A
    assert fields.mantissa_value == 0x999999999999A


def test_zero_kinds_and_sign() -> None:
    pos = to_float32_fields(0.0)
    neg = to_float32_fields(-0.0)

    assert pos.kind == FloatKind.ZERO
    assert pos.hex == "00000000"
    assert pos.exponent_unbiased is None
    assert neg.kind == FloatKind.ZERO
    assert neg.sign_bit == 1
    assert neg.hex == "80000000"
    assert to_float64_fields(-0.0).hex == "8000000000000000"


def test_subnormal_classification() -> None:
    smallest_single = float(np.nextafter(np.float32(0.0), np.float32(1.0), dtype=np.float32))
    single = to_float32_fields(smallest_single)
    double = to_float64_fields(5e-324)

    assert single.kind == FloatKind.SUBNORMAL
    assert single.hex == "00000001"
    assert single.exponent_unbiased == -126
    assert double.kind == FloatKind.SUBNORMAL
    assert double.hex == "0000000000000001"
    assert double.exponent_unbiased == -1022


def test_normal_value_narrowed_to_single_subnormal() -> None:
    fields = to_float32_fields(1e-40)
    assert fields.kind == FloatKind.SUBNORMAL
    assert to_float64_fields(1e-40).kind == FloatKind.NORMAL


def test_infinity_fields() -> None:
    single = to_float32_fields(math.inf)
    double = to_float64_fields(-math.inf)

    assert single.kind == FloatKind.INFINITY
    assert single.hex == "7f800000"
    assert single.exponent_unbiased is None
    assert single.nan_payload is None
    assert double.kind == FloatKind.INFINITY
    assert double.hex == "fff0000000000000"


def test_narrowing_overflow_saturates() -> None:
    fields = to_float32_fields(1e39)
    assert fields.kind == FloatKind.INFINITY
    assert fields.hex == "7f800000"
    assert to_float64_fields(1e39).kind == FloatKind.NORMAL


def test_narrowing_rounds_ties_to_even() -> None:
    # 1 + 2^-24 sits halfway between 1 and the next float32; 1 has the even mantissa.
    assert to_float32_fields(1.0 + 2.0**-24).hex == "3f800000"
    # 1 + 3*2^-24 sits halfway between mantissas 1 and 2; 2 is even.
    assert to_float32_fields(1.0 + 3 * 2.0**-24).hex == "3f800002"
    assert to_float32_fields(0.1).hex == "3dcccccd"


def test_nan_payload_single() -> None:
    fields = to_float32_fields(math.nan)
    payload = fields.nan_payload

    assert fields.kind == FloatKind.NAN
    assert fields.exponent_unbiased is None
    assert payload is not None
    assert payload.value == fields.mantissa
    assert payload.bits == fields.mantissa_bits_str
    assert payload.grouped4 == fields.mantissa_grouped4
    assert payload.hex_padded == "400000"


def test_nan_payload_double() -> None:
    fields = to_float64_fields(math.nan)
    payload = fields.nan_payload

    assert fields.kind == "NaN"
    assert fields.mantissa_high == 0x80000
    assert fields.mantissa_low == 0
    assert payload is not None
    assert payload.hex_padded == "8000000000000"
    assert len(payload.hex_padded) == 13


def test_nan_payload_keeps_custom_bits() -> None:
    single_nan = float(np.array([0x7FC00005], dtype=np.uint32).view(np.float32)[0])
    double_nan = float(np.array([0x7FF8000000000005], dtype=np.uint64).view(np.float64)[0])

    single = to_float32_fields(single_nan)
    double = to_float64_fields(double_nan)

    assert single.kind == FloatKind.NAN
    assert single.hex == "7fc00005"
    assert single.nan_payload is not None
    assert single.nan_payload.hex_padded == "400005"
    assert double.kind == FloatKind.NAN
    assert double.mantissa_high == 0x80000
    assert double.mantissa_low == 5
    assert double.nan_payload is not None
    assert double.nan_payload.hex_padded == "8000000000005"


@pytest.mark.parametrize(
    "value",
    [0.0, -0.0, 1.0, -1.25, 0.1, 1e308, -2.2250738585072014e-308, 5e-324, math.pi, math.inf],
)
def test_float64_fields_round_trip(value: float) -> None:
    fields = to_float64_fields(value)
    rebuilt = float64_from_fields(fields)

    assert to_float64_fields(rebuilt).hex == fields.hex
    assert raw_from_fields(fields) == int(fields.hex, 16)
    assert math.copysign(1.0, rebuilt) == math.copysign(1.0, value)


def test_float32_fields_round_trip_matches_narrowed_value() -> None:
    fields = to_float32_fields(0.1)
    assert float32_from_fields(fields) == float(np.float32(0.1))


def test_type_spec_biases() -> None:
    assert FLOAT_TYPE_SPECS["float32"].bias == 127
    assert FLOAT_TYPE_SPECS["float64"].bias == 1023
    assert FLOAT_TYPE_SPECS["float32"].min_exponent == -126
    assert FLOAT_TYPE_SPECS["float64"].min_exponent == -1022


def test_grouping_helpers() -> None:
    assert group_from_right("11111111111", 4) == "111 1111 1111"
    assert group_from_left("11111111111", 4) == "1111 1111 111"
    assert group_from_left("3f800000", 2) == "3f 80 00 00"
    assert group_from_right("", 4) == ""


def test_describe_fields_paths() -> None:
    assert describe_fields(to_float32_fields(1.0)) == "(-1)^0 * (1 + 0/2^23) * 2^(127-127)"
    assert describe_fields(to_float64_fields(5e-324)) == "(-1)^0 * (1 / 2^52) * 2^(1-1023)"
    assert describe_fields(to_float32_fields(-0.0)) == "(-1)^1 * 0 -> -0"
    assert "infinity" in describe_fields(to_float64_fields(math.inf))
    assert "NaN" in describe_fields(to_float64_fields(math.nan))


def test_format_float() -> None:
    assert format_float(math.nan) == "NaN"
    assert format_float(math.inf) == "+inf"
    assert format_float(-math.inf) == "-inf"
    assert format_float(-0.0) == "-0.0"
    assert format_float(0.5) == "0.5"
