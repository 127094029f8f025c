from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import ClassVar, Union

REASON_EMPTY = "empty"
REASON_LEADING_PLUS = "leading plus is not allowed"
REASON_INCOMPLETE_NAN = "incomplete NaN token"
REASON_INCOMPLETE_INFINITY = "incomplete Infinity token"
REASON_SIGN_ONLY = "sign only"
REASON_DOT_ONLY = "dot only"
REASON_EXPONENT_MARKER_ONLY = "exponent marker only"
REASON_EXPONENT_SIGN_ONLY = "exponent sign only"
REASON_INVALID_SYNTAX = "invalid numeric syntax"
REASON_PARSED_TO_NAN = "parsed to NaN"
REASON_INFINITY_NOT_ALLOWED = "infinity is not allowed"

_MANTISSA = r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)"
_EXPONENT_MARKER_ONLY_RE = re.compile(_MANTISSA + r"[eE]")
_EXPONENT_SIGN_ONLY_RE = re.compile(_MANTISSA + r"[eE][+-]")
_DECIMAL_LITERAL_RE = re.compile(_MANTISSA + r"(?:[eE][+-]?[0-9]+)?")
_SIGN_SPLIT_RE = re.compile(r"([+-]?)(.*)", re.DOTALL)
_ALPHA_RE = re.compile(r"[A-Za-z]+")

# ECMAScript WhiteSpace + LineTerminator. Unlike str.strip(), this trims the
# BOM and keeps the \x1c-\x1f separators and \x85.
_TRIM_CHARS = "\t\n\v\f\r " + "".join(
    map(chr, (0x00A0, 0x1680, *range(0x2000, 0x200B), 0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF))
)


@dataclass(frozen=True)
class ParseOptions:
    allow_leading_plus: bool = True
    allow_infinity_synonyms: bool = True
    allow_nan: bool = True
    case_insensitive_specials: bool = True


DEFAULT_PARSE_OPTIONS = ParseOptions()


@dataclass(frozen=True)
class Incomplete:
    """A legal prefix of a literal that is not complete yet."""

    kind: ClassVar[str] = "Incomplete"
    reason: str
    normalized_text: str


@dataclass(frozen=True)
class Invalid:
    """Input that the grammar rejects."""

    kind: ClassVar[str] = "Invalid"
    reason: str
    normalized_text: str


@dataclass(frozen=True)
class Valid:
    kind: ClassVar[str] = "Valid"
    value: float
    normalized_text: str


ParseOutcome = Union[Incomplete, Invalid, Valid]


def _is_alpha_only(text: str) -> bool:
    return _ALPHA_RE.fullmatch(text) is not None


def _classify_special(text: str, options: ParseOptions) -> ParseOutcome | None:
    match = _SIGN_SPLIT_RE.fullmatch(text)
    if match is None:
        return None
    sign, body = match.group(1), match.group(2)
    folded = body.lower() if options.case_insensitive_specials else body

    if options.allow_nan:
        nan_token = "nan" if options.case_insensitive_specials else "NaN"
        if folded == nan_token:
            # NaN has no numeric sign; the typed sign is kept in the text only.
            return Valid(value=math.nan, normalized_text=sign + "NaN")
        if (
            options.case_insensitive_specials
            and _is_alpha_only(body)
            and len(folded) < 3
            and "nan".startswith(folded)
        ):
            return Incomplete(reason=REASON_INCOMPLETE_NAN, normalized_text=text)

    if options.allow_infinity_synonyms:
        if options.case_insensitive_specials:
            tokens = ("inf", "infinity")
        else:
            tokens = ("Inf", "Infinity")
        if folded in tokens:
            value = -math.inf if sign == "-" else math.inf
            return Valid(value=value, normalized_text=sign + "Infinity")

        # Every proper prefix of "inf" is also a proper prefix of "infinity",
        # so "i" and "in" land here while "inf" was accepted above.
        if (
            options.case_insensitive_specials
            and _is_alpha_only(body)
            and len(folded) < len("infinity")
            and "infinity".startswith(folded)
        ):
            return Incomplete(reason=REASON_INCOMPLETE_INFINITY, normalized_text=text)

    return None


def _incomplete_number_reason(text: str, options: ParseOptions) -> str | None:
    if text == "-" or (options.allow_leading_plus and text == "+"):
        return REASON_SIGN_ONLY
    if text in {".", "-."} or (options.allow_leading_plus and text == "+."):
        return REASON_DOT_ONLY
    if _EXPONENT_MARKER_ONLY_RE.fullmatch(text):
        return REASON_EXPONENT_MARKER_ONLY
    if _EXPONENT_SIGN_ONLY_RE.fullmatch(text):
        return REASON_EXPONENT_SIGN_ONLY
    return None


def _normalize_numeric_text(text: str, options: ParseOptions) -> str:
    if options.allow_leading_plus and text.startswith("+"):
        return text[1:]
    return text


def classify(text: str, options: ParseOptions | None = None) -> ParseOutcome:
    """Classify ``text`` as a complete, partial or rejected float literal.

    Always returns exactly one of :class:`Valid`, :class:`Incomplete` or
    :class:`Invalid`. The checks run in a fixed order: empty input, leading
    plus policy, NaN tokens, Infinity tokens, partially typed numbers, and
    finally the decimal grammar ``[+-]?(digits[.digits*]|.digits+)([eE][+-]?digits+)?``.
    """
    opts = options if options is not None else DEFAULT_PARSE_OPTIONS
    trimmed = text.strip(_TRIM_CHARS)

    if not trimmed:
        return Incomplete(reason=REASON_EMPTY, normalized_text="")

    if not opts.allow_leading_plus and trimmed.startswith("+"):
        return Invalid(reason=REASON_LEADING_PLUS, normalized_text=trimmed)

    special = _classify_special(trimmed, opts)
    if special is not None:
        return special

    incomplete_reason = _incomplete_number_reason(trimmed, opts)
    if incomplete_reason is not None:
        return Incomplete(reason=incomplete_reason, normalized_text=trimmed)

    if _DECIMAL_LITERAL_RE.fullmatch(trimmed) is None:
        return Invalid(reason=REASON_INVALID_SYNTAX, normalized_text=trimmed)

    value = float(trimmed)
    if math.isnan(value):
        return Invalid(reason=REASON_PARSED_TO_NAN, normalized_text=trimmed)
    if not opts.allow_infinity_synonyms and math.isinf(value):
        return Invalid(reason=REASON_INFINITY_NOT_ALLOWED, normalized_text=trimmed)

    return Valid(value=value, normalized_text=_normalize_numeric_text(trimmed, opts))
