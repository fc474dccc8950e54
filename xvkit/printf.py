"""A small printf understanding %d, %u, %x (with l/ll), %p, %s and %%."""

from __future__ import annotations

import operator
import re
from typing import Any, Iterable, TextIO

_DIGITS = "0123456789ABCDEF"
_MASK64 = (1 << 64) - 1

_SPEC = re.compile(r"%(ll[dux]|l[dux]|[duxps%]|.)?", re.S)

_INTEGER_SPECS = {
    "d": (10, True),
    "ld": (10, True),
    "lld": (10, True),
    "u": (10, False),
    "lu": (10, False),
    "llu": (10, False),
    "x": (16, False),
    "lx": (16, False),
    "llx": (16, False),
}


def _int32(value: int) -> int:
    return ((value + (1 << 31)) % (1 << 32)) - (1 << 31)


def _format_int(value: Any, base: int, signed: bool) -> str:
    xx = _int32(operator.index(value))
    negative = signed and xx < 0
    x = -xx if negative else xx & 0xFFFFFFFF
    digits = []
    while True:
        x, rem = divmod(x, base)
        digits.append(_DIGITS[rem])
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _format_ptr(value: Any) -> str:
    return "0x" + format(operator.index(value) & _MASK64, "016X")


def vformat(fmt: str, args: Iterable[Any]) -> str:
    """Format ``args`` according to ``fmt`` and return the text."""
    values = iter(args)

    def take() -> Any:
        try:
            return next(values)
        except StopIteration:
            raise ValueError(f"not enough arguments for format {fmt!r}") from None

    def convert(m: re.Match) -> str:
        spec = m.group(1)
        if spec is None:  # a lone '%' ends the format
            return ""
        if spec in _INTEGER_SPECS:
            base, signed = _INTEGER_SPECS[spec]
            return _format_int(take(), base, signed)
        if spec == "p":
            return _format_ptr(take())
        if spec == "s":
            s = take()
            return "(null)" if s is None else str(s)
        if spec == "%":
            return "%"
        # Unknown sequence: print it to draw attention.
        return "%" + spec

    return _SPEC.sub(convert, fmt)


def fprintf(stream: TextIO, fmt: str, *args: Any) -> None:
    """Format ``args`` with ``fmt`` and write the result to ``stream``."""
    stream.write(vformat(fmt, args))