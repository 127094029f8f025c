from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, ClassVar, Literal, Union

from .datatypes import (
    Float32Fields,
    FloatFields,
    describe_fields,
    format_float,
    to_float32_fields,
    to_float64_fields,
)
from .parsing import Incomplete, Invalid, ParseOptions, Valid, classify

logger = logging.getLogger(__name__)

Precision = Literal["float32", "float64"]
PRECISIONS: tuple[Precision, ...] = ("float32", "float64")


@dataclass(frozen=True)
class ViewIncomplete:
    state: ClassVar[str] = "Incomplete"
    normalized_text: str
    message: str


@dataclass(frozen=True)
class ViewInvalid:
    state: ClassVar[str] = "Invalid"
    normalized_text: str
    message: str


@dataclass(frozen=True)
class ViewValid:
    state: ClassVar[str] = "Valid"
    normalized_text: str
    value: float
    precision: Precision
    fields: FloatFields


ViewResult = Union[ViewIncomplete, ViewInvalid, ViewValid]


def build_view(
    text: str,
    precision: Precision,
    options: ParseOptions | None = None,
) -> ViewResult:
    """Classify ``text`` and, when it is a complete literal, decompose it.

    The parsed value is always a double; the float32 view narrows that
    double rather than parsing the text a second time.
    """
    if precision not in PRECISIONS:
        raise ValueError(f"Unsupported precision: {precision!r}")

    outcome = classify(text, options)
    logger.debug("classified %r as %s", text, outcome.kind)

    if isinstance(outcome, Incomplete):
        return ViewIncomplete(normalized_text=outcome.normalized_text, message=outcome.reason)
    if isinstance(outcome, Invalid):
        return ViewInvalid(normalized_text=outcome.normalized_text, message=outcome.reason)
    if not isinstance(outcome, Valid):
        raise TypeError(f"Unexpected parse outcome: {outcome!r}")

    if precision == "float32":
        fields: FloatFields = to_float32_fields(outcome.value)
    else:
        fields = to_float64_fields(outcome.value)

    return ViewValid(
        normalized_text=outcome.normalized_text,
        value=outcome.value,
        precision=precision,
        fields=fields,
    )


def build_views(
    text: str,
    options: ParseOptions | None = None,
) -> dict[str, ViewResult]:
    return {precision: build_view(text, precision, options) for precision in PRECISIONS}


def _fields_payload(fields: FloatFields) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "kind": fields.kind.value,
        "signBit": fields.sign_bit,
        "exponentBits": fields.exponent_bits,
        "exponentUnbiased": fields.exponent_unbiased,
        "hex": fields.hex,
        "bits": fields.bits,
        "pretty": fields.pretty,
        "hexGrouped": fields.hex_grouped,
        "bitsGrouped8": fields.bits_grouped8,
        "signBitsStr": fields.sign_bits_str,
        "exponentBitsStr": fields.exponent_bits_str,
        "mantissaBitsStr": fields.mantissa_bits_str,
        "exponentGrouped4": fields.exponent_grouped4,
        "mantissaGrouped4": fields.mantissa_grouped4,
    }
    if isinstance(fields, Float32Fields):
        payload["mantissaBits"] = fields.mantissa
    else:
        payload["mantissaHigh"] = fields.mantissa_high
        payload["mantissaLow"] = fields.mantissa_low

    nan_payload = fields.nan_payload
    if nan_payload is not None:
        payload["payloadBits"] = nan_payload.bits
        payload["payloadGrouped4"] = nan_payload.grouped4
        payload["payloadHexPadded"] = nan_payload.hex_padded
    return payload


def view_to_payload(view: ViewResult) -> dict[str, Any]:
    """Flatten a view into JSON-safe values for a UI message."""
    payload: dict[str, Any] = {
        "state": view.state,
        "normalizedText": view.normalized_text,
    }
    if not isinstance(view, ViewValid):
        payload["message"] = view.message
        return payload

    value = view.value
    payload["value"] = value if math.isfinite(value) else format_float(value)
    payload["precision"] = view.precision
    payload["bits"] = _fields_payload(view.fields)
    return payload


def view_rows(view: ViewResult) -> list[tuple[str, str]]:
    if not isinstance(view, ViewValid):
        return [("state", view.state), ("reason", view.message)]

    fields = view.fields
    rows = [
        ("state", view.state),
        ("normalized", view.normalized_text),
        ("kind", fields.kind.value),
        ("hex (bytes)", fields.hex_grouped),
        ("bits (bytes)", fields.bits_grouped8),
        ("s", fields.sign_bits_str),
        ("e", fields.exponent_grouped4),
        ("m", fields.mantissa_grouped4),
        ("exponent(bits)", str(fields.exponent_bits)),
        (
            "exponent(unbiased)",
            "-" if fields.exponent_unbiased is None else str(fields.exponent_unbiased),
        ),
    ]
    if isinstance(fields, Float32Fields):
        rows.append(("mantissa (uint)", str(fields.mantissa)))
    else:
        rows.append(("mantissaHigh(20)", str(fields.mantissa_high)))
        rows.append(("mantissaLow(32)", str(fields.mantissa_low)))

    nan_payload = fields.nan_payload
    if nan_payload is not None:
        rows.append(("NaN payload (bits)", nan_payload.grouped4))
        rows.append(("NaN payload (hex)", nan_payload.hex_padded))

    rows.append(("formula", describe_fields(fields)))
    return rows
