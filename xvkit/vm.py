"""Sv39 user address spaces built on a simulated pool of physical pages."""

from __future__ import annotations

import struct
from typing import Optional

from xvkit.riscv import (
    MAXVA,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    pa2pte,
    pg_round_down,
    pg_round_up,
    pte2pa,
    pte_flags,
    px,
)

KERNBASE = 0x80000000  # physical address of the first simulated page

_PTE = struct.Struct("<Q")
_PTES_PER_TABLE = PGSIZE // _PTE.size
_MASK64 = (1 << 64) - 1

PteSlot = tuple[int, int]  # (page-table page, index within it)


class VMPanic(RuntimeError):
    """An invariant of the paging code was broken; the kernel would stop."""


class PhysicalMemory:
    """A fixed number of physical pages handed out one at a time."""

    def __init__(self, npages: int) -> None:
        if npages < 0:
            raise ValueError("page count cannot be negative")
        self.base = KERNBASE
        self.npages = npages
        self._data = bytearray(npages * PGSIZE)
        # Lowest address on top so it is handed out first.
        self._free = [self.base + i * PGSIZE for i in reversed(range(npages))]
        self._free_set = set(self._free)

    def _offset(self, pa: int, n: int) -> int:
        if n < 0 or pa < self.base or pa + n > self.base + len(self._data):
            raise ValueError(f"physical range {pa:#x}+{n} is outside memory")
        return pa - self.base

    def alloc(self) -> Optional[int]:
        """Take one free page; return its address, or None when none are left."""
        if not self._free:
            return None
        pa = self._free.pop()
        self._free_set.discard(pa)
        return pa

    def free(self, pa: int) -> None:
        """Give a page back to the pool."""
        if pa % PGSIZE or not self.base <= pa < self.base + len(self._data):
            raise ValueError(f"free: bad physical address {pa:#x}")
        if pa in self._free_set:
            raise ValueError(f"free: page {pa:#x} is already free")
        self._free.append(pa)
        self._free_set.add(pa)

    def read(self, pa: int, n: int) -> bytes:
        """Read ``n`` bytes starting at physical address ``pa``."""
        off = self._offset(pa, n)
        return bytes(self._data[off:off + n])

    def write(self, pa: int, data: bytes) -> None:
        """Write ``data`` starting at physical address ``pa``."""
        off = self._offset(pa, len(data))
        self._data[off:off + len(data)] = data

    def read_pte(self, table: int, index: int) -> int:
        """Read entry ``index`` of the page-table page at ``table``."""
        if not 0 <= index < _PTES_PER_TABLE:
            raise ValueError(f"PTE index {index} out of range")
        return _PTE.unpack(self.read(table + index * _PTE.size, _PTE.size))[0]

    def write_pte(self, table: int, index: int, value: int) -> None:
        """Store ``value`` as entry ``index`` of the page-table page at ``table``."""
        if not 0 <= index < _PTES_PER_TABLE:
            raise ValueError(f"PTE index {index} out of range")
        self.write(table + index * _PTE.size, _PTE.pack(value & _MASK64))

    def free_count(self) -> int:
        """Number of pages not handed out."""
        return len(self._free)

    def _zeroed_page(self) -> Optional[int]:
        pa = self.alloc()
        if pa is not None:
            self.write(pa, bytes(PGSIZE))
        return pa


class AddressSpace:
    """A three-level Sv39 page table and the user memory it maps."""

    def __init__(self, memory: PhysicalMemory) -> None:
        self.memory = memory
        root = memory._zeroed_page()
        if root is None:
            raise MemoryError("no physical page left for a page table")
        self.root = root

    def _get(self, slot: PteSlot) -> int:
        return self.memory.read_pte(*slot)

    def _set(self, slot: PteSlot, value: int) -> None:
        self.memory.write_pte(*slot, value)

    def walk(self, va: int, alloc: bool) -> Optional[PteSlot]:
        """Locate the leaf PTE for ``va``, creating table pages if ``alloc``.

        Returns the (table, index) of the entry, or None when a table page
        is missing and cannot or may not be created.
        """
        if va >= MAXVA:
            raise VMPanic("walk")
        table = self.root
        for level in (2, 1):
            index = px(level, va)
            pte = self.memory.read_pte(table, index)
            if pte & PTE_V:
                table = pte2pa(pte)
            else:
                if not alloc:
                    return None
                child = self.memory._zeroed_page()
                if child is None:
                    return None
                self.memory.write_pte(table, index, pa2pte(child) | PTE_V)
                table = child
        return table, px(0, va)

    def walkaddr(self, va: int) -> Optional[int]:
        """Physical address of the user page at ``va``, or None if not mapped."""
        if va >= MAXVA:
            return None
        slot = self.walk(va, False)
        if slot is None:
            return None
        pte = self._get(slot)
        if not pte & PTE_V or not pte & PTE_U:
            return None
        return pte2pa(pte)

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map ``size`` bytes at ``va`` to physical memory from ``pa``.

        Raises MemoryError when a page-table page cannot be allocated.
        """
        if va % PGSIZE:
            raise VMPanic("mappages: va not aligned")
        if size % PGSIZE:
            raise VMPanic("mappages: size not aligned")
        if size == 0:
            raise VMPanic("mappages: size")
        for a in range(va, va + size, PGSIZE):
            slot = self.walk(a, True)
            if slot is None:
                raise MemoryError("mappages: out of page-table pages")
            if self._get(slot) & PTE_V:
                raise VMPanic("mappages: remap")
            self._set(slot, pa2pte(pa + (a - va)) | perm | PTE_V)

    def unmap(self, va: int, npages: int, do_free: bool) -> None:
        """Remove ``npages`` existing mappings from ``va``, optionally freeing them."""
        if va % PGSIZE:
            raise VMPanic("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            slot = self.walk(a, False)
            if slot is None:
                raise VMPanic("uvmunmap: walk")
            pte = self._get(slot)
            if not pte & PTE_V:
                raise VMPanic("uvmunmap: not mapped")
            if pte_flags(pte) == PTE_V:
                raise VMPanic("uvmunmap: not a leaf")
            if do_free:
                self.memory.free(pte2pa(pte))
            self._set(slot, 0)

    def load_first(self, src: bytes) -> None:
        """Place ``src`` (shorter than a page) at virtual address 0."""
        if len(src) >= PGSIZE:
            raise VMPanic("uvmfirst: more than a page")
        mem = self.memory._zeroed_page()
        if mem is None:
            raise MemoryError("uvmfirst: out of memory")
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_R | PTE_X | PTE_U)
        self.memory.write(mem, bytes(src))

    def grow(self, oldsz: int, newsz: int, xperm: int) -> int:
        """Grow user memory from ``oldsz`` to ``newsz`` and return the new size.

        On running out of memory the pages added so far are released and
        MemoryError is raised.
        """
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            mem = self.memory._zeroed_page()
            if mem is None:
                self.shrink(a, oldsz)
                raise MemoryError("uvmalloc: out of memory")
            try:
                self.map_pages(a, PGSIZE, mem, PTE_R | PTE_U | xperm)
            except MemoryError:
                self.memory.free(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz: int, newsz: int) -> int:
        """Release user pages to bring the size from ``oldsz`` to ``newsz``."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def _freewalk(self, table: int) -> None:
        entries = _PTE.iter_unpack(self.memory.read(table, PGSIZE))
        for index, (pte,) in enumerate(entries):
            if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
                self._freewalk(pte2pa(pte))
                self.memory.write_pte(table, index, 0)
            elif pte & PTE_V:
                raise VMPanic("freewalk: leaf")
        self.memory.free(table)

    def destroy(self, sz: int) -> None:
        """Free ``sz`` bytes of user memory, then every page-table page."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self._freewalk(self.root)

    def copy_to(self, other: AddressSpace, sz: int) -> None:
        """Copy the first ``sz`` bytes of memory and mappings into ``other``.

        On failure the pages already copied are released and MemoryError
        is raised.
        """
        for va in range(0, sz, PGSIZE):
            slot = self.walk(va, False)
            if slot is None:
                raise VMPanic("uvmcopy: pte should exist")
            pte = self._get(slot)
            if not pte & PTE_V:
                raise VMPanic("uvmcopy: page not present")
            mem = other.memory.alloc()
            if mem is not None:
                other.memory.write(mem, self.memory.read(pte2pa(pte), PGSIZE))
                try:
                    other.map_pages(va, PGSIZE, mem, pte_flags(pte))
                    continue
                except MemoryError:
                    other.memory.free(mem)
            other.unmap(0, va // PGSIZE, True)
            raise MemoryError("uvmcopy: out of memory")

    def clear_user(self, va: int) -> None:
        """Make the page at ``va`` inaccessible to user mode."""
        slot = self.walk(va, False)
        if slot is None:
            raise VMPanic("uvmclear")
        self._set(slot, self._get(slot) & ~PTE_U)

    def copy_out(self, dstva: int, data: bytes) -> None:
        """Copy ``data`` into user memory at ``dstva``.

        Raises ValueError if any page touched is not user-writable.
        """
        dstva &= _MASK64
        view = memoryview(bytes(data))
        need = PTE_V | PTE_U | PTE_W
        while view:
            va0 = pg_round_down(dstva)
            if va0 >= MAXVA:
                raise ValueError(f"copyout: bad address {dstva:#x}")
            slot = self.walk(va0, False)
            pte = self._get(slot) if slot is not None else 0
            if pte & need != need:
                raise ValueError(f"copyout: bad address {dstva:#x}")
            off = dstva - va0
            n = min(PGSIZE - off, len(view))
            self.memory.write(pte2pa(pte) + off, view[:n])
            view = view[n:]
            dstva = va0 + PGSIZE

    def copy_in(self, srcva: int, n: int) -> bytes:
        """Read ``n`` bytes of user memory from ``srcva``.

        Raises ValueError if any page touched is not mapped for the user.
        """
        srcva &= _MASK64
        out = bytearray()
        while n > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise ValueError(f"copyin: bad address {srcva:#x}")
            off = srcva - va0
            chunk = min(PGSIZE - off, n)
            out += self.memory.read(pa0 + off, chunk)
            n -= chunk
            srcva = va0 + PGSIZE
        return bytes(out)

    def copy_in_str(self, srcva: int, maxlen: int) -> bytes:
        """Read a NUL-terminated string of at most ``maxlen`` bytes, NUL included.

        Returns the bytes before the NUL. Raises ValueError on a bad
        address or when no NUL appears within ``maxlen`` bytes.
        """
        srcva &= _MASK64
        out = bytearray()
        while maxlen > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise ValueError(f"copyinstr: bad address {srcva:#x}")
            off = srcva - va0
            n = min(PGSIZE - off, maxlen)
            chunk = self.memory.read(pa0 + off, n)
            nul = chunk.find(0)
            if nul >= 0:
                out += chunk[:nul]
                return bytes(out)
            out += chunk
            maxlen -= n
            srcva = va0 + PGSIZE
        raise ValueError("copyinstr: string not terminated within limit")