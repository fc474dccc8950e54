"""Small file and process commands: ln, mkdir, rm and kill."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from typing import Optional, Sequence

from xvkit.ulib import atoi

_KILL = getattr(signal, "SIGKILL", signal.SIGTERM)


def _args(argv: Optional[Sequence[str]]) -> list[str]:
    return sys.argv[1:] if argv is None else list(argv)


def ln_main(argv: Optional[Sequence[str]] = None) -> int:
    """Make a hard link ``new`` to ``old``."""
    args = _args(argv)
    if len(args) != 2:
        sys.stderr.write("Usage: ln old new\n")
        return 1
    old, new = args
    try:
        os.link(old, new)
    except OSError:
        sys.stderr.write(f"link {old} {new}: failed\n")
    return 0


def mkdir_main(argv: Optional[Sequence[str]] = None) -> int:
    """Create each directory, stopping at the first failure."""
    args = _args(argv)
    if not args:
        sys.stderr.write("Usage: mkdir files...\n")
        return 1
    for path in args:
        try:
            os.mkdir(path)
        except OSError:
            sys.stderr.write(f"mkdir: {path} failed to create\n")
            break
    return 0


def _unlink(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.unlink(path)


def rm_main(argv: Optional[Sequence[str]] = None) -> int:
    """Remove each file or empty directory, stopping at the first failure."""
    args = _args(argv)
    if not args:
        sys.stderr.write("Usage: rm files...\n")
        return 1
    for path in args:
        try:
            _unlink(path)
        except OSError:
            sys.stderr.write(f"rm: {path} failed to delete\n")
            break
    return 0


def kill_main(argv: Optional[Sequence[str]] = None) -> int:
    """Kill each process id given; ids that name no process are ignored."""
    args = _args(argv)
    if not args:
        sys.stderr.write("usage: kill pid...\n")
        return 1
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue
        with contextlib.suppress(OSError):
            os.kill(pid, _KILL)
    return 0


if __name__ == "__main__":
    sys.exit(rm_main())