"""Write the arguments, separated by spaces, to standard output."""

from __future__ import annotations

import sys
from typing import Optional, Sequence


def echo(args: Sequence[str]) -> str:
    """The text echo prints for ``args``; nothing at all when there are none."""
    if not args:
        return ""
    return " ".join(args) + "\n"


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the arguments and return 0."""
    args = sys.argv[1:] if argv is None else list(argv)
    sys.stdout.write(echo(args))
    return 0


if __name__ == "__main__":
    sys.exit(main())