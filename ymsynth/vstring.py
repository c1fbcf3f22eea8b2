"""Small printf-style formatter and number-to-text helpers.

The formatter follows the behaviour of a compact embedded ``vsprintf``:
integer conversions work on 16-bit values, a sign is written before any
space padding, a precision truncates digits rather than padding them, and
unknown conversions (including ``%%``) produce no output.
"""

from __future__ import annotations

import io
import operator
import re
from typing import Any, Callable, Iterator

FIX32_FRAC_BITS = 10
FIX16_FRAC_BITS = 6

_UINT_LIMIT = 500_000_000
_UINT_OVERFLOW_TEXT = ">500000000"
_INT_UNDERFLOW_TEXT = "<-500000000"
_NULL_TEXT = "<NULL>"
_HEX_MAX_LENGTH = 16
_POINTER_WIDTH = 8
_STRNLEN_MAX = 0xFFFF

_UPPER_HEX = "0123456789ABCDEF"
_LOWER_HEX = "0123456789abcdef"

_SPEC = re.compile(
    r"%(?P<flags>[-+ 0]*)"
    r"(?P<width>\d+|\*)?"
    r"(?P<dot>\.(?P<precision>\d+|\*)?)?"
    r"[hlL]?"
    r"(?P<conv>.)?",
    re.DOTALL,
)


def _to_s16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _to_hex(value: int, digits: str) -> str:
    if not value:
        return "0"
    text = []
    while value:
        text.append(digits[value & 0xF])
        value >>= 4
    return "".join(reversed(text))


def _u16_to_str(value: int, min_size: int) -> str:
    return str(value).zfill(min_size)


class _Arguments:
    """Hands out format arguments in order, raising when they run out."""

    def __init__(self, args: tuple) -> None:
        self._values: Iterator[Any] = iter(args)

    def next(self) -> Any:
        try:
            return next(self._values)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def next_int(self) -> int:
        return operator.index(self.next())


def _char_of(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("%c requires an int or a single character")
        return value
    return chr(operator.index(value) & 0xFF)


def sprintf(fmt: str, *args: Any) -> str:
    """Format ``args`` according to ``fmt`` and return the resulting text.

    Supported conversions are ``c s p x X n u d i`` with the flags
    ``- + space 0``, a width or ``*``, and a precision or ``.*``.
    ``%n`` takes a list and appends the number of characters written so far.
    """
    out = io.StringIO()
    arguments = _Arguments(args)
    position = 0

    for match in _SPEC.finditer(fmt):
        out.write(fmt[position:match.start()])
        position = match.end()

        left_align = plus_sign = zero_pad = space_sign = False
        for flag in match.group("flags"):
            if flag == "-":
                left_align = True
            elif flag == "+":
                plus_sign = True
            elif flag == " ":
                if not plus_sign:
                    space_sign = True
            else:
                zero_pad = True

        width = -1
        width_text = match.group("width")
        if width_text == "*":
            width = _to_s16(arguments.next_int())
            if width < 0:
                width = -width
                left_align = True
        elif width_text:
            width = int(width_text)

        precision = -1
        if match.group("dot"):
            precision_text = match.group("precision")
            if precision_text == "*":
                precision = _to_s16(arguments.next_int())
            elif precision_text:
                precision = int(precision_text)
            if precision < 0:
                precision = 0

        if left_align:
            zero_pad = False

        conv = match.group("conv")
        if conv is None:
            break

        if conv == "c":
            char = _char_of(arguments.next())
            padding = " " * max(0, width - 1)
            out.write(char + padding if left_align else padding + char)
            continue

        if conv == "s":
            value = arguments.next()
            text = _NULL_TEXT if value is None else str(value)
            text = text[: min(len(text), precision & _STRNLEN_MAX)]
            padding = " " * max(0, width - len(text))
            out.write(text + padding if left_align else padding + text)
            continue

        if conv == "n":
            arguments.next().append(out.tell())
            continue

        negative = False
        if conv in "pxX":
            if conv == "p" and width == -1:
                width = _POINTER_WIDTH
                zero_pad = True
            digits = _to_hex(
                arguments.next_int() & 0xFFFF,
                _LOWER_HEX if conv == "x" else _UPPER_HEX,
            )
            plus_sign = False
        elif conv == "u":
            digits = str(arguments.next_int() & 0xFFFF)
            plus_sign = False
        elif conv in "di":
            number = _to_s16(arguments.next_int())
            negative = number < 0
            digits = str(abs(number))
        else:
            continue

        length = len(digits) if precision < 0 else min(len(digits), precision)
        digits = digits[:length]

        if negative:
            sign = "-"
        elif plus_sign:
            sign = "+"
        elif space_sign:
            sign = " "
        else:
            sign = ""
        if sign:
            width -= 1

        pad_count = max(0, width - length)
        if left_align:
            out.write(sign + digits + " " * pad_count)
        else:
            out.write(sign + ("0" if zero_pad else " ") * pad_count + digits)

    out.write(fmt[position:])
    return out.getvalue()


def uint_to_str(value: int, min_size: int) -> str:
    """Decimal text of ``value``, zero-padded to ``min_size`` characters.

    Values above 500000000 give the text ``">500000000"``.
    """
    if value < 0:
        raise ValueError(f"value must not be negative, got {value}")
    if value > _UINT_LIMIT:
        return _UINT_OVERFLOW_TEXT
    if value > 10000:
        high, low = divmod(value, 10000)
        return _u16_to_str(high, min_size - 4 if min_size > 4 else 1) + _u16_to_str(
            low, 4
        )
    return _u16_to_str(value, min_size)


def int_to_str(value: int, min_size: int) -> str:
    """Signed decimal text of ``value``; the digits are zero-padded to ``min_size``.

    Values below -500000000 give the text ``"<-500000000"``.
    """
    if value < -_UINT_LIMIT:
        return _INT_UNDERFLOW_TEXT
    if value < 0:
        return "-" + uint_to_str(-value, min_size)
    return uint_to_str(value, min_size)


def int_to_hex(value: int, min_size: int) -> str:
    """Upper-case hexadecimal text of a 32-bit value, zero-padded to ``min_size``.

    The result is never longer than 16 characters; zero with ``min_size`` 0
    gives an empty string.
    """
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"value must be a 32-bit unsigned integer, got {value}")
    digits = _to_hex(value, _UPPER_HEX) if value else ""
    return digits.rjust(min(max(min_size, 0), _HEX_MAX_LENGTH), "0")[
        :_HEX_MAX_LENGTH
    ]


def _fixed_to_str(
    value: int, frac_bits: int, integer_text: Callable[[int], str], num_decimals: int
) -> str:
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    whole = integer_text(magnitude >> frac_bits)
    frac = ((magnitude & ((1 << frac_bits) - 1)) * 1000) >> frac_bits
    frac_text = str(frac)
    if len(frac_text) < num_decimals:
        frac_text = frac_text.ljust(num_decimals, "0")
    else:
        frac_text = frac_text[:num_decimals]
    return f"{sign}{whole}.{frac_text}"


def fix32_to_str(value: int, num_decimals: int) -> str:
    """Text of a raw fix32 value (10 fractional bits) with ``num_decimals`` decimals."""
    if not -(1 << 31) <= value < (1 << 31):
        raise ValueError(f"fix32 value out of range: {value}")
    return _fixed_to_str(
        value, FIX32_FRAC_BITS, lambda whole: uint_to_str(whole, 1), num_decimals
    )


def fix16_to_str(value: int, num_decimals: int) -> str:
    """Text of a raw fix16 value (6 fractional bits) with ``num_decimals`` decimals."""
    if not -(1 << 15) <= value < (1 << 15):
        raise ValueError(f"fix16 value out of range: {value}")
    return _fixed_to_str(
        value, FIX16_FRAC_BITS, lambda whole: _u16_to_str(whole, 1), num_decimals
    )