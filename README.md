# xvkit

The user-space tools of a small teaching operating system, its shell's
command-line parser, and a model of its RISC-V Sv39 virtual memory, as a
plain Python package with no third-party dependencies.

## What is inside

- `xvkit.riscv` – page arithmetic and page-table-entry helpers:
  `pg_round_up`, `pg_round_down`, `pa2pte`, `pte2pa`, `pte_flags`, `px`,
  `make_satp`, the `PTE_*` and status-register bit masks, `PGSIZE`,
  `MAXVA`, and system limits such as `NPROC`, `MAXARG` and `MAXPATH`.
- `xvkit.elf` – `ElfHeader` and `ProgramHeader` with `from_bytes` and
  `to_bytes` for 64-bit little-endian ELF headers, and
  `ProgramHeader.is_loadable`. Short input or a bad magic number raises
  `ElfFormatError`.
- `xvkit.vm` – `PhysicalMemory`, a page allocator over a simulated RAM
  starting at `KERNBASE`, and `AddressSpace`, a three-level page table with
  `walk`, `walkaddr`, `map_pages`, `unmap`, `load_first`, `grow`, `shrink`,
  `destroy`, `copy_to`, `clear_user`, `copy_out`, `copy_in` and
  `copy_in_str`. Broken invariants raise `VMPanic`; running out of pages
  raises `MemoryError`; bad user addresses raise `ValueError`.
- `xvkit.umalloc` – `Heap`, a first-fit free-list allocator over a break of
  fixed size, with `malloc` (returns `None` when out of memory), `free` and
  `free_units`.
- `xvkit.printf` – `vformat` and `fprintf`, understanding `%d`, `%u`, `%x`
  (with `l` and `ll`), `%p`, `%s` and `%%`. Integers are printed as 32-bit
  values; unknown sequences are printed as they stand.
- `xvkit.ulib` – `strcmp`, `atoi` and `gets` with the classic semantics,
  and the `OpenFlag` mode bits.
- `xvkit.sh` – the shell's command parser: `parse_command` turns a line into
  a tree of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`;
  syntax errors raise `ShellSyntaxError`. `Scanner` is the tokenizer;
  `split_cd`, `read_command` and `bang_message` cover the rest of the
  shell's line handling.
- Small tools working on the host's files: `grep` (with `^ . * $`), `wc`,
  `cat`, `echo`, `ls`, and `ln`, `mkdir`, `rm`, `kill` in `xvkit.fileops`.

## Installing

```
pip install .
```

## Command-line tools

```
xv-echo hello world
xv-cat notes.txt
xv-grep '^ab*c$' notes.txt
xv-wc notes.txt
xv-ls .
xv-mkdir newdir
xv-ln notes.txt notes-link.txt
xv-rm notes-link.txt
xv-kill 12345
```

With no file arguments, `xv-cat`, `xv-grep` and `xv-wc` read standard input,
and `xv-ls` lists the current directory. `xv-ls` prints each name padded to
14 characters, then a type number (1 directory, 2 file, 3 anything else),
the inode number and the size. `xv-rm` removes files and empty directories.
`xv-mkdir` and `xv-rm` stop at the first path that fails. `xv-kill` sends
SIGKILL where the host has it and ignores ids that name no process.

## Library use

```python
from xvkit.grep import match
from xvkit.printf import vformat
from xvkit.riscv import PTE_W, pg_round_up
from xvkit.sh import parse_command
from xvkit.umalloc import Heap
from xvkit.vm import AddressSpace, PhysicalMemory

match("^ab*c", "abbbcd")          # True
vformat("%d pages at %p", [3, 0x1000])
pg_round_up(4097)                 # 8192

tree = parse_command("cat < in.txt | grep x > out.txt; echo done &")

heap = Heap(limit=64 * 1024)
block = heap.malloc(100)
heap.free(block)

memory = PhysicalMemory(npages=64)
space = AddressSpace(memory)
size = space.grow(0, 8192, PTE_W)  # user pages are readable; add write access
space.copy_out(0, b"hello\0")
space.copy_in_str(0, 64)           # b"hello"
space.destroy(size)
```

## What the package does not do

- There is no kernel here: no processes, scheduler, traps, file system or
  disk image. `xvkit.vm` models page tables over simulated memory only.
- The shell is a parser, not an interactive shell: there is no command that
  runs parsed command trees, and nothing forks, pipes or redirects.
- ELF headers can be read and written, but nothing loads an executable.

## Running the tests

```
pip install .[test]
pytest
```