from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

import numpy as np


class FloatKind(str, Enum):
    ZERO = "Zero"
    SUBNORMAL = "Subnormal"
    NORMAL = "Normal"
    INFINITY = "Infinity"
    NAN = "NaN"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FloatTypeSpec:
    name: str
    bits: int
    exponent_bits: int
    mantissa_bits: int
    numpy_dtype: Any

    @property
    def bias(self) -> int:
        return (1 << (self.exponent_bits - 1)) - 1

    @property
    def exponent_all_ones(self) -> int:
        return (1 << self.exponent_bits) - 1

    @property
    def min_exponent(self) -> int:
        return 1 - self.bias


FLOAT_TYPE_SPECS: dict[str, FloatTypeSpec] = {
    "float32": FloatTypeSpec(
        name="float32",
        bits=32,
        exponent_bits=8,
        mantissa_bits=23,
        numpy_dtype=np.float32,
    ),
    "float64": FloatTypeSpec(
        name="float64",
        bits=64,
        exponent_bits=11,
        mantissa_bits=52,
        numpy_dtype=np.float64,
    ),
}

FLOAT32 = FLOAT_TYPE_SPECS["float32"]
FLOAT64 = FLOAT_TYPE_SPECS["float64"]


def group_from_right(digits: str, group_size: int, separator: str = " ") -> str:
    parts: list[str] = []
    remaining = digits
    while remaining:
        parts.append(remaining[-group_size:])
        remaining = remaining[:-group_size]
    return separator.join(reversed(parts))


def group_from_left(digits: str, group_size: int, separator: str = " ") -> str:
    return separator.join(
        digits[idx : idx + group_size] for idx in range(0, len(digits), group_size)
    )


@dataclass(frozen=True)
class NanPayload:
    value: int
    bits: str
    grouped4: str
    hex_padded: str


class _FieldViews:
    """Display strings derived from ``bits``/``hex`` by fixed-width slicing."""

    spec: FloatTypeSpec
    kind: FloatKind
    bits: str
    hex: str

    @property
    def hex_grouped(self) -> str:
        return group_from_left(self.hex, 2)

    @property
    def bits_grouped8(self) -> str:
        return group_from_left(self.bits, 8)

    @property
    def sign_bits_str(self) -> str:
        return self.bits[:1]

    @property
    def exponent_bits_str(self) -> str:
        return self.bits[1 : 1 + self.spec.exponent_bits]

    @property
    def mantissa_bits_str(self) -> str:
        return self.bits[1 + self.spec.exponent_bits :]

    @property
    def pretty(self) -> str:
        return f"{self.sign_bits_str} {self.exponent_bits_str} {self.mantissa_bits_str}"

    @property
    def exponent_grouped4(self) -> str:
        # 11 exponent bits split as 3+4+4.
        return group_from_right(self.exponent_bits_str, 4)

    @property
    def mantissa_grouped4(self) -> str:
        return group_from_left(self.mantissa_bits_str, 4)

    @property
    def mantissa_value(self) -> int:
        return int(self.mantissa_bits_str, 2)

    @property
    def nan_payload(self) -> NanPayload | None:
        if self.kind is not FloatKind.NAN:
            return None
        hex_digits = -(-self.spec.mantissa_bits // 4)
        return NanPayload(
            value=self.mantissa_value,
            bits=self.mantissa_bits_str,
            grouped4=self.mantissa_grouped4,
            hex_padded=format(self.mantissa_value, f"0{hex_digits}x"),
        )


@dataclass(frozen=True)
class Float32Fields(_FieldViews):
    kind: FloatKind
    sign_bit: int
    exponent_bits: int
    mantissa: int
    exponent_unbiased: int | None
    hex: str
    bits: str

    @property
    def spec(self) -> FloatTypeSpec:
        return FLOAT32


@dataclass(frozen=True)
class Float64Fields(_FieldViews):
    kind: FloatKind
    sign_bit: int
    exponent_bits: int
    mantissa_high: int
    mantissa_low: int
    exponent_unbiased: int | None
    hex: str
    bits: str

    @property
    def spec(self) -> FloatTypeSpec:
        return FLOAT64


FloatFields = Union[Float32Fields, Float64Fields]


def _uint_dtype_for_bits(bits: int) -> Any:
    if bits == 32:
        return np.uint32
    if bits == 64:
        return np.uint64
    raise ValueError(f"Unsupported float width: {bits}")


def _raw_from_value(value: float, spec: FloatTypeSpec) -> int:
    # Narrowing past float32 range saturates to +-inf; numpy warns about it.
    with np.errstate(over="ignore"):
        np_value = np.array([value], dtype=np.float64).astype(spec.numpy_dtype)
    return int(np_value.view(_uint_dtype_for_bits(spec.bits))[0])


def _value_from_raw(raw: int, spec: FloatTypeSpec) -> float:
    np_raw = np.array([raw], dtype=_uint_dtype_for_bits(spec.bits))
    return float(np_raw.view(spec.numpy_dtype)[0])


def classify_bits(exponent_raw: int, mantissa_raw: int, spec: FloatTypeSpec) -> FloatKind:
    if exponent_raw == 0:
        return FloatKind.ZERO if mantissa_raw == 0 else FloatKind.SUBNORMAL
    if exponent_raw == spec.exponent_all_ones:
        return FloatKind.INFINITY if mantissa_raw == 0 else FloatKind.NAN
    return FloatKind.NORMAL


def _unbiased_exponent(kind: FloatKind, exponent_raw: int, spec: FloatTypeSpec) -> int | None:
    if kind is FloatKind.NORMAL:
        return exponent_raw - spec.bias
    if kind is FloatKind.SUBNORMAL:
        return spec.min_exponent
    return None


def _split_raw(raw: int, spec: FloatTypeSpec) -> dict[str, Any]:
    sign_bit = (raw >> (spec.bits - 1)) & 1
    exponent_raw = (raw >> spec.mantissa_bits) & spec.exponent_all_ones
    mantissa_raw = raw & ((1 << spec.mantissa_bits) - 1)
    kind = classify_bits(exponent_raw, mantissa_raw, spec)

    return {
        "kind": kind,
        "sign_bit": sign_bit,
        "exponent_bits": exponent_raw,
        "mantissa_raw": mantissa_raw,
        "exponent_unbiased": _unbiased_exponent(kind, exponent_raw, spec),
        "hex": format(raw, f"0{spec.bits // 4}x"),
        "bits": format(raw, f"0{spec.bits}b"),
    }


def _float32_fields_from_raw(raw: int) -> Float32Fields:
    parts = _split_raw(raw, FLOAT32)
    mantissa_raw = parts.pop("mantissa_raw")
    return Float32Fields(mantissa=mantissa_raw, **parts)


def _float64_fields_from_raw(raw: int) -> Float64Fields:
    parts = _split_raw(raw, FLOAT64)
    mantissa_raw = parts.pop("mantissa_raw")
    # 52-bit mantissa kept as 20 high bits + 32 low bits.
    return Float64Fields(
        mantissa_high=mantissa_raw >> 32,
        mantissa_low=mantissa_raw & 0xFFFFFFFF,
        **parts,
    )


def to_float32_fields(value: float) -> Float32Fields:
    """Encode ``value`` as binary32 (round to nearest, ties to even) and split it."""
    return _float32_fields_from_raw(_raw_from_value(value, FLOAT32))


def to_float64_fields(value: float) -> Float64Fields:
    return _float64_fields_from_raw(_raw_from_value(value, FLOAT64))


def raw_from_fields(fields: FloatFields) -> int:
    spec = fields.spec
    if isinstance(fields, Float32Fields):
        mantissa_raw = fields.mantissa
    else:
        mantissa_raw = (fields.mantissa_high << 32) | fields.mantissa_low
    return (
        (fields.sign_bit << (spec.bits - 1))
        | (fields.exponent_bits << spec.mantissa_bits)
        | mantissa_raw
    )


def float32_from_fields(fields: Float32Fields) -> float:
    return _value_from_raw(raw_from_fields(fields), FLOAT32)


def float64_from_fields(fields: Float64Fields) -> float:
    return _value_from_raw(raw_from_fields(fields), FLOAT64)


def format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+inf" if value > 0 else "-inf"
    if value == 0.0 and math.copysign(1.0, value) < 0:
        return "-0.0"
    return format(value, ".17g")


def describe_fields(fields: FloatFields) -> str:
    spec = fields.spec
    sign = fields.sign_bit
    mantissa_raw = fields.mantissa_value

    if fields.kind is FloatKind.NAN:
        return "Exponent all 1s with non-zero mantissa -> NaN"
    if fields.kind is FloatKind.INFINITY:
        return "Exponent all 1s with zero mantissa -> infinity"
    if fields.kind is FloatKind.ZERO:
        return f"(-1)^{sign} * 0 -> {'-' if sign else '+'}0"
    if fields.kind is FloatKind.SUBNORMAL:
        return (
            f"(-1)^{sign} * ({mantissa_raw} / 2^{spec.mantissa_bits}) "
            f"* 2^(1-{spec.bias})"
        )
    return (
        f"(-1)^{sign} * (1 + {mantissa_raw}/2^{spec.mantissa_bits}) "
        f"* 2^({fields.exponent_bits}-{spec.bias})"
    )
