"""User-space tools, a shell parser and an Sv39 virtual-memory model from a small teaching operating system."""

__version__ = "0.1.0"

__all__ = [
    "cat",
    "echo",
    "elf",
    "fileops",
    "grep",
    "ls",
    "printf",
    "riscv",
    "sh",
    "ulib",
    "umalloc",
    "vm",
    "wc",
]