"""List files and directory contents with type, inode number and size."""

from __future__ import annotations

import os
import stat
import sys
from enum import IntEnum
from typing import Optional, Sequence, TextIO

from xvkit.printf import fprintf

DIRSIZ = 14  # longest name a directory entry holds
_BUFSIZE = 512


class FileType(IntEnum):
    """Type numbers shown in a listing."""

    DIR = 1
    FILE = 2
    DEVICE = 3


def _file_type(mode: int) -> FileType:
    if stat.S_ISDIR(mode):
        return FileType.DIR
    if stat.S_ISREG(mode):
        return FileType.FILE
    return FileType.DEVICE


def fmtname(path: str) -> str:
    """The last component of ``path``, blank-padded to DIRSIZ characters."""
    name = path[path.rfind("/") + 1:]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _line(out: TextIO, path: str, st: os.stat_result) -> None:
    kind = _file_type(st.st_mode)
    fprintf(out, "%s %d %d %d\n", fmtname(path), int(kind), st.st_ino, st.st_size)


def ls(path: str, out: TextIO, err: TextIO) -> None:
    """List ``path``: one line for a file, one line per entry for a directory."""
    try:
        st = os.stat(path)
    except OSError:
        err.write(f"ls: cannot open {path}\n")
        return
    if _file_type(st.st_mode) is not FileType.DIR:
        _line(out, path, st)
        return
    if len(path) + 1 + DIRSIZ + 1 > _BUFSIZE:
        out.write("ls: path too long\n")
        return
    try:
        names = os.listdir(path)
    except OSError:
        err.write(f"ls: cannot open {path}\n")
        return
    for name in [".", "..", *names]:
        full = f"{path}/{name[:DIRSIZ]}"
        try:
            entry = os.stat(full)
        except OSError:
            out.write(f"ls: cannot stat {full}\n")
            continue
        _line(out, full, entry)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """List each named path, or the current directory; return 0."""
    args = sys.argv[1:] if argv is None else list(argv)
    for path in args or ["."]:
        ls(path, sys.stdout, sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())