"""Sv39 paging arithmetic, control-register bit masks and kernel-wide limits."""

# Kernel-wide limits.
NPROC = 64
NCPU = 8
NOFILE = 16
NFILE = 100
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
MAXOPBLOCKS = 10
LOGSIZE = MAXOPBLOCKS * 3
NBUF = MAXOPBLOCKS * 3
FSSIZE = 2000
MAXPATH = 128
USERSTACK = 1
NTHREAD = 4

# Machine status register.
MSTATUS_MPP_MASK = 3 << 11
MSTATUS_MPP_M = 3 << 11
MSTATUS_MPP_S = 1 << 11
MSTATUS_MPP_U = 0 << 11
MSTATUS_MIE = 1 << 3

# Supervisor status register.
SSTATUS_SPP = 1 << 8
SSTATUS_SPIE = 1 << 5
SSTATUS_UPIE = 1 << 4
SSTATUS_SIE = 1 << 1
SSTATUS_UIE = 1 << 0

# Supervisor interrupt enable.
SIE_SEIE = 1 << 9
SIE_STIE = 1 << 5
SIE_SSIE = 1 << 1

# Machine-mode interrupt enable.
MIE_STIE = 1 << 5

SATP_SV39 = 8 << 60

PGSIZE = 4096
PGSHIFT = 12

PTE_V = 1 << 0
PTE_R = 1 << 1
PTE_W = 1 << 2
PTE_X = 1 << 3
PTE_U = 1 << 4

PXMASK = 0x1FF

# One beyond the highest usable virtual address (one bit short of Sv39).
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)

_MASK64 = (1 << 64) - 1


def _pxshift(level: int) -> int:
    return PGSHIFT + 9 * level


def pg_round_up(sz: int) -> int:
    """Round a size up to the next page boundary (64-bit wrap-around)."""
    return ((sz + PGSIZE - 1) & ~(PGSIZE - 1)) & _MASK64


def pg_round_down(a: int) -> int:
    """Round an address down to its page boundary."""
    return (a & ~(PGSIZE - 1)) & _MASK64


def pa2pte(pa: int) -> int:
    """Shift a physical address into the position it takes in a PTE."""
    return ((pa & _MASK64) >> 12) << 10


def pte2pa(pte: int) -> int:
    """Extract the physical address held by a PTE."""
    return ((pte & _MASK64) >> 10) << 12


def pte_flags(pte: int) -> int:
    """Return the low ten flag bits of a PTE."""
    return pte & 0x3FF


def px(level: int, va: int) -> int:
    """Return the 9-bit page-table index of ``va`` at the given level."""
    return ((va & _MASK64) >> _pxshift(level)) & PXMASK


def make_satp(pagetable: int) -> int:
    """Build the satp value selecting Sv39 with the given root table."""
    return SATP_SV39 | ((pagetable & _MASK64) >> 12)