"""Small string helpers and open-mode flags used by the user programs."""

from __future__ import annotations

import re
from enum import IntFlag
from itertools import zip_longest
from typing import TextIO


class OpenFlag(IntFlag):
    """Mode bits accepted by ``open``."""

    O_RDONLY = 0x000
    O_WRONLY = 0x001
    O_RDWR = 0x002
    O_CREATE = 0x200
    O_TRUNC = 0x400


_LEADING_DIGITS = re.compile(r"[0-9]*")


def strcmp(p: str, q: str) -> int:
    """Compare two strings; the sign of the result gives their order.

    A NUL character ends a string just like its real end does.
    """
    for a, b in zip_longest(p, q, fillvalue="\0"):
        if a == "\0" or a != b:
            return ord(a) - ord(b)
    return 0


def atoi(s: str) -> int:
    """Parse the leading decimal digits of ``s`` (no sign, no spaces)."""
    digits = _LEADING_DIGITS.match(s).group()
    value = int(digits) if digits else 0
    return ((value + (1 << 31)) % (1 << 32)) - (1 << 31)


def gets(stream: TextIO, maxlen: int) -> str:
    """Read one line of at most ``maxlen - 1`` characters.

    Reading stops after a newline or carriage return, which is kept,
    or at end of input; an empty result means end of input.
    """
    chars: list[str] = []
    while len(chars) + 1 < maxlen:
        c = stream.read(1)
        if not c:
            break
        chars.append(c)
        if c in ("\n", "\r"):
            break
    return "".join(chars)