"""Copy files, or standard input, to standard output."""

from __future__ import annotations

import sys
from typing import BinaryIO, Optional, Sequence

_CHUNK = 512


def cat(stream: BinaryIO, out: BinaryIO) -> None:
    """Copy all of ``stream`` to ``out``.

    Raises OSError with a message naming whether reading or writing failed.
    """
    while True:
        try:
            data = stream.read(_CHUNK)
        except OSError as exc:
            raise OSError("cat: read error") from exc
        if not data:
            return
        try:
            written = out.write(data)
        except OSError as exc:
            raise OSError("cat: write error") from exc
        if written is not None and written != len(data):
            raise OSError("cat: write error")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Concatenate the named files to standard output; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    sys.stdout.flush()
    out = sys.stdout.buffer
    try:
        if not args:
            cat(sys.stdin.buffer, out)
            return 0
        for path in args:
            try:
                f = open(path, "rb")
            except OSError:
                sys.stderr.write(f"cat: cannot open {path}\n")
                return 1
            with f:
                cat(f, out)
    except OSError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    finally:
        out.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())