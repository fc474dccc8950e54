"""Print the input lines that match a tiny regular expression.

Only the operators ``^``, ``.``, ``*`` and ``$`` are understood.
"""

from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

_BUFSIZE = 1024


def _matchhere(re: str, ri: int, text: str, ti: int) -> bool:
    if ri == len(re):
        return True
    if ri + 1 < len(re) and re[ri + 1] == "*":
        return _matchstar(re[ri], re, ri + 2, text, ti)
    if re[ri] == "$" and ri + 1 == len(re):
        return ti == len(text)
    if ti < len(text) and (re[ri] == "." or re[ri] == text[ti]):
        return _matchhere(re, ri + 1, text, ti + 1)
    return False


def _matchstar(c: str, re: str, ri: int, text: str, ti: int) -> bool:
    while True:
        if _matchhere(re, ri, text, ti):
            return True
        if ti < len(text) and (text[ti] == c or c == "."):
            ti += 1
        else:
            return False


def match(re: str, text: str) -> bool:
    """True if the expression ``re`` matches somewhere in ``text``."""
    if re.startswith("^"):
        return _matchhere(re, 1, text, 0)
    return any(_matchhere(re, 0, text, i) for i in range(len(text) + 1))


def grep(pattern: str, stream: TextIO, out: TextIO) -> None:
    """Write every newline-terminated line of ``stream`` matching ``pattern``.

    Input is read through a fixed buffer; a line too long for it ends
    the search, and a last line without a newline is never printed.
    """
    pending = ""
    while True:
        chunk = stream.read(_BUFSIZE - 1 - len(pending))
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split("\n")
        for line in lines:
            if match(pattern, line):
                out.write(line + "\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run grep on the named files, or on standard input; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, *paths = args
    if not paths:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for path in paths:
        try:
            f = open(path, newline="", errors="replace")
        except OSError:
            sys.stdout.write(f"grep: cannot open {path}\n")
            return 1
        with f:
            grep(pattern, f, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())