"""A first-fit free-list allocator over a simulated growing heap."""

from __future__ import annotations

from typing import Optional

HEADER_SIZE = 16  # bytes in one block header; also the allocation unit
MIN_CORE = 4096  # fewest units requested from the break at once


class Heap:
    """A circular free list of blocks carved from a break of ``limit`` bytes.

    Addresses are byte offsets; the list anchor sits at unit 0 and the
    break starts just above it.
    """

    def __init__(self, limit: int) -> None:
        self._limit_units = limit // HEADER_SIZE
        self._brk = 1
        self._size: dict[int, int] = {}
        self._next: dict[int, int] = {}
        self._allocated: set[int] = set()
        self._freep: Optional[int] = None

    def _morecore(self, nunits: int) -> Optional[int]:
        nunits = max(nunits, MIN_CORE)
        if self._brk - 1 + nunits > self._limit_units:
            return None
        hp = self._brk
        self._brk += nunits
        self._size[hp] = nunits
        self._allocated.add(hp)
        self.free((hp + 1) * HEADER_SIZE)
        return self._freep

    def malloc(self, nbytes: int) -> Optional[int]:
        """Allocate ``nbytes``; return the block's address or None if out of memory."""
        if nbytes < 0:
            raise ValueError("cannot allocate a negative size")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._next[0] = 0
            self._size[0] = 0
            self._freep = 0
        prevp = self._freep
        p = self._next[prevp]
        while True:
            if self._size[p] >= nunits:
                if self._size[p] == nunits:
                    self._next[prevp] = self._next[p]
                else:
                    self._size[p] -= nunits
                    p += self._size[p]
                    self._size[p] = nunits
                self._freep = prevp
                self._allocated.add(p)
                return (p + 1) * HEADER_SIZE
            if p == self._freep:
                found = self._morecore(nunits)
                if found is None:
                    return None
                p = found
            prevp, p = p, self._next[p]

    def free(self, ap: int) -> None:
        """Return a block from ``malloc`` to the free list, merging neighbours."""
        bp, rem = divmod(ap, HEADER_SIZE)
        bp -= 1
        if rem or bp not in self._allocated:
            raise ValueError(f"address {ap:#x} is not an allocated block")
        self._allocated.remove(bp)

        size, nxt = self._size, self._next
        p = self._freep
        while not (p < bp < nxt[p]):
            if p >= nxt[p] and (bp > p or bp < nxt[p]):
                break
            p = nxt[p]

        after = nxt[p]
        if bp + size[bp] == after:
            size[bp] += size[after]
            nxt[bp] = nxt[after]
            del size[after]
            nxt.pop(after, None)
        else:
            nxt[bp] = after

        if p + size[p] == bp:
            size[p] += size[bp]
            nxt[p] = nxt[bp]
            del size[bp]
            del nxt[bp]
        else:
            nxt[p] = bp
        self._freep = p

    def free_units(self) -> int:
        """Total units on the free list."""
        if self._freep is None:
            return 0
        total = 0
        p = self._freep
        while True:
            total += self._size[p]
            p = self._next[p]
            if p == self._freep:
                return total