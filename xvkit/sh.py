"""Command-line parsing for the shell: pipes, lists, redirections, background jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, TextIO, Union

from xvkit.ulib import OpenFlag, gets

MAXARGS = 10
MAXLINE = 100
MAX_MESSAGE = 512
PROMPT = "$ "

_WHITESPACE = " \t\r\n\v"
_SYMBOLS = "<|>&;()"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


class ShellSyntaxError(ValueError):
    """A command line could not be parsed."""

    def __init__(self, message: str, leftovers: Optional[str] = None) -> None:
        super().__init__(message)
        self.leftovers = leftovers


@dataclass
class ExecCmd:
    """Run a program with arguments."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with descriptor ``fd`` reopened on ``file``."""

    cmd: "Command"
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run ``left``, then ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run ``cmd`` without waiting for it."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class Scanner:
    """Splits a command line into words and operator tokens."""

    def __init__(self, text: str) -> None:
        self.text = text.split("\0", 1)[0]
        self.pos = 0

    def _skip_space(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _current(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    @property
    def rest(self) -> str:
        """The unconsumed text."""
        return self.text[self.pos:]

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, toks: str) -> bool:
        """Skip blanks; true if the next character is one of ``toks``."""
        self._skip_space()
        c = self._current()
        return bool(c) and c in toks

    def get_token(self) -> tuple[str, str]:
        """Consume one token and return (kind, text).

        Kind is the operator character, '+' for '>>', 'a' for a word,
        or '' at the end of the line.
        """
        self._skip_space()
        start = self.pos
        c = self._current()
        if c == "":
            kind = ""
        elif c in "|();&<":
            kind = c
            self.pos += 1
        elif c == ">":
            self.pos += 1
            kind = ">"
            if self._current() == ">":
                kind = "+"
                self.pos += 1
        else:
            kind = "a"
            while (
                self.pos < len(self.text)
                and self.text[self.pos] not in _WHITESPACE
                and self.text[self.pos] not in _SYMBOLS
            ):
                self.pos += 1
        word = self.text[start:self.pos]
        self._skip_space()
        return kind, word


_REDIRECTS = {
    "<": (OpenFlag.O_RDONLY, 0),
    ">": (OpenFlag.O_WRONLY | OpenFlag.O_CREATE | OpenFlag.O_TRUNC, 1),
    "+": (OpenFlag.O_WRONLY | OpenFlag.O_CREATE, 1),
}


def _parse_line(sc: Scanner) -> Command:
    cmd = _parse_pipe(sc)
    while sc.peek("&"):
        sc.get_token()
        cmd = BackCmd(cmd)
    if sc.peek(";"):
        sc.get_token()
        cmd = ListCmd(cmd, _parse_line(sc))
    return cmd


def _parse_pipe(sc: Scanner) -> Command:
    cmd = _parse_exec(sc)
    if sc.peek("|"):
        sc.get_token()
        cmd = PipeCmd(cmd, _parse_pipe(sc))
    return cmd


def _parse_redirs(cmd: Command, sc: Scanner) -> Command:
    while sc.peek("<>"):
        tok, _ = sc.get_token()
        kind, file = sc.get_token()
        if kind != "a":
            raise ShellSyntaxError("missing file for redirection")
        mode, fd = _REDIRECTS[tok]
        cmd = RedirCmd(cmd, file, mode, fd)
    return cmd


def _parse_block(sc: Scanner) -> Command:
    if not sc.peek("("):
        raise ShellSyntaxError("parseblock")
    sc.get_token()
    cmd = _parse_line(sc)
    if not sc.peek(")"):
        raise ShellSyntaxError("syntax - missing )")
    sc.get_token()
    return _parse_redirs(cmd, sc)


def _parse_exec(sc: Scanner) -> Command:
    if sc.peek("("):
        return _parse_block(sc)
    exec_cmd = ExecCmd()
    ret: Command = _parse_redirs(exec_cmd, sc)
    while not sc.peek("|)&;"):
        kind, word = sc.get_token()
        if kind == "":
            break
        if kind != "a":
            raise ShellSyntaxError("syntax")
        exec_cmd.argv.append(word)
        if len(exec_cmd.argv) >= MAXARGS:
            raise ShellSyntaxError("too many args")
        ret = _parse_redirs(ret, sc)
    return ret


def parse_command(line: str) -> Command:
    """Parse one command line into a command tree."""
    sc = Scanner(line)
    cmd = _parse_line(sc)
    sc.peek("")
    if not sc.at_end():
        raise ShellSyntaxError("syntax", leftovers=sc.rest)
    return cmd


def bang_message(args: list[str]) -> str:
    """Text printed by the ``!`` built-in: the words, with any holding "os" in blue.

    Raises ValueError when there is no message or it is too long.
    """
    if not args:
        raise ValueError("No message provided")
    total = sum(len(arg.encode()) + 1 for arg in args)
    if total > MAX_MESSAGE:
        raise ValueError("Message too long")
    words = (f"{_BLUE}{arg}{_RESET} " if "os" in arg else f"{arg} " for arg in args)
    return "".join(words) + "\n"


def read_command(stream: TextIO, prompt_out: TextIO) -> Optional[str]:
    """Prompt, then read one line of input; None at end of input."""
    prompt_out.write(PROMPT)
    line = gets(stream, MAXLINE)
    if not line or line[0] == "\0":
        return None
    return line


def split_cd(line: str) -> Optional[str]:
    """The directory of a ``cd`` line (last character dropped), else None."""
    if not line.startswith("cd "):
        return None
    return line[:-1][3:]