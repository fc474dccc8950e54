"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import BinaryIO, Optional, Sequence

from xvkit.printf import fprintf

_CHUNK = 512
_SPACE = b" \r\t\n\v\0"


@dataclass(frozen=True)
class Counts:
    """Line, word and byte totals of one input."""

    lines: int
    words: int
    chars: int


def count(stream: BinaryIO) -> Counts:
    """Count the lines, words and bytes of a binary stream."""
    lines = words = chars = 0
    inword = False
    for chunk in iter(lambda: stream.read(_CHUNK), b""):
        chars += len(chunk)
        lines += chunk.count(b"\n")
        for byte in chunk:
            if byte in _SPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return Counts(lines, words, chars)


def _report(stream: BinaryIO, name: str) -> bool:
    try:
        counts = count(stream)
    except OSError:
        sys.stdout.write("wc: read error\n")
        return False
    fprintf(sys.stdout, "%d %d %d %s\n", counts.lines, counts.words, counts.chars, name)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Count the named files, or standard input; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        return 0 if _report(sys.stdin.buffer, "") else 1
    for path in args:
        try:
            f = open(path, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {path}\n")
            return 1
        with f:
            if not _report(f, path):
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())