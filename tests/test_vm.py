import pytest

from xvkit.riscv import MAXVA, PGSIZE, PTE_R, PTE_U, PTE_V, PTE_W, PTE_X, pa2pte
from xvkit.vm import AddressSpace, PhysicalMemory, VMPanic


@pytest.fixture
def memory():
    return PhysicalMemory(64)


@pytest.fixture
def space(memory):
    return AddressSpace(memory)


def test_alloc_until_exhausted():
    mem = PhysicalMemory(2)
    a = mem.alloc()
    b = mem.alloc()
    assert a != b
    assert a % PGSIZE == 0 and b % PGSIZE == 0
    assert mem.alloc() is None
    assert mem.free_count() == 0
    mem.free(a)
    assert mem.free_count() == 1
    assert mem.alloc() == a


def test_free_rejects_bad_addresses():
    mem = PhysicalMemory(2)
    pa = mem.alloc()
    with pytest.raises(ValueError):
        mem.free(pa + 1)
    mem.free(pa)
    with pytest.raises(ValueError):
        mem.free(pa)


def test_pte_round_trip():
    mem = PhysicalMemory(1)
    table = mem.alloc()
    mem.write_pte(table, 511, 0x1234_5678_9ABC)
    assert mem.read_pte(table, 511) == 0x1234_5678_9ABC
    with pytest.raises(ValueError):
        mem.read_pte(table, 512)


def test_read_write_round_trip():
    mem = PhysicalMemory(1)
    pa = mem.alloc()
    mem.write(pa + 10, b"abc")
    assert mem.read(pa + 10, 3) == b"abc"
    with pytest.raises(ValueError):
        mem.read(pa + PGSIZE - 1, 2)


def test_walk_without_alloc_on_empty_table(space):
    assert space.walk(0x1000, False) is None
    assert space.walkaddr(0x1000) is None


def test_map_pages_sets_leaf_pte(space, memory):
    pa = memory.alloc()
    space.map_pages(0x3000, PGSIZE, pa, PTE_R | PTE_U)
    slot = space.walk(0x3000, False)
    assert memory.read_pte(*slot) == pa2pte(pa) | PTE_R | PTE_U | PTE_V
    assert space.walkaddr(0x3000) == pa


def test_walkaddr_requires_user_bit(space, memory):
    pa = memory.alloc()
    space.map_pages(0, PGSIZE, pa, PTE_R)
    assert space.walkaddr(0) is None


def test_remap_panics(space, memory):
    pa = memory.alloc()
    space.map_pages(0, PGSIZE, pa, PTE_R | PTE_U)
    with pytest.raises(VMPanic, match="remap"):
        space.map_pages(0, PGSIZE, pa, PTE_R | PTE_U)


@pytest.mark.parametrize(
    "va, size, message",
    [
        (1, PGSIZE, "va not aligned"),
        (0, PGSIZE + 1, "size not aligned"),
        (0, 0, "mappages: size"),
    ],
)
def test_map_pages_argument_panics(space, memory, va, size, message):
    with pytest.raises(VMPanic, match=message):
        space.map_pages(va, size, memory.alloc(), PTE_R)


def test_walk_beyond_maxva(space):
    with pytest.raises(VMPanic, match="walk"):
        space.walk(MAXVA, True)
    assert space.walkaddr(MAXVA) is None


def test_copy_out_copy_in_across_pages(space):
    assert space.grow(0, 3 * PGSIZE, PTE_W) == 3 * PGSIZE
    data = bytes(range(256)) * 20
    start = PGSIZE - 100
    space.copy_out(start, data)
    assert space.copy_in(start, len(data)) == data


def test_grown_memory_is_zeroed(space):
    space.grow(0, PGSIZE, PTE_W)
    assert space.copy_in(0, PGSIZE) == bytes(PGSIZE)


def test_copy_in_unmapped_fails(space):
    with pytest.raises(ValueError):
        space.copy_in(0x5000, 4)


def test_copy_out_to_read_only_fails(space):
    space.grow(0, PGSIZE, 0)
    with pytest.raises(ValueError):
        space.copy_out(0, b"x")
    with pytest.raises(ValueError):
        space.copy_out(0xFFFFFFFFFFFFFFFF, b"x")


def test_copy_in_str(space):
    space.grow(0, 2 * PGSIZE, PTE_W)
    start = PGSIZE - 3
    space.copy_out(start, b"hello\0world")
    assert space.copy_in_str(start, 64) == b"hello"
    with pytest.raises(ValueError):
        space.copy_in_str(start, 5)
    with pytest.raises(ValueError):
        space.copy_in_str(0x100000, 10)


def test_grow_smaller_returns_old_size(space):
    assert space.grow(2 * PGSIZE, PGSIZE, PTE_W) == 2 * PGSIZE


def test_shrink_frees_pages(space, memory):
    space.grow(0, 3 * PGSIZE, PTE_W)
    before = memory.free_count()
    assert space.shrink(3 * PGSIZE, PGSIZE) == PGSIZE
    assert memory.free_count() == before + 2
    assert space.walkaddr(PGSIZE) is None
    assert space.walkaddr(0) is not None
    assert space.shrink(PGSIZE, 2 * PGSIZE) == PGSIZE


def test_destroy_returns_every_page(memory):
    total = memory.free_count()
    space = AddressSpace(memory)
    space.grow(0, 5 * PGSIZE + 17, PTE_W)
    assert memory.free_count() < total
    space.destroy(5 * PGSIZE + 17)
    assert memory.free_count() == total


def test_destroy_with_leftover_mapping_panics(space):
    space.grow(0, PGSIZE, PTE_W)
    with pytest.raises(VMPanic, match="freewalk: leaf"):
        space.destroy(0)


def test_grow_out_of_memory_rolls_back():
    mem = PhysicalMemory(8)
    space = AddressSpace(mem)
    with pytest.raises(MemoryError):
        space.grow(0, 20 * PGSIZE, PTE_W)
    assert space.walkaddr(0) is None
    space.destroy(0)
    assert mem.free_count() == 8


def test_copy_to_duplicates_memory(memory):
    parent = AddressSpace(memory)
    parent.grow(0, 2 * PGSIZE, PTE_W)
    parent.copy_out(10, b"shared")
    child = AddressSpace(memory)
    parent.copy_to(child, 2 * PGSIZE)
    assert child.copy_in(10, 6) == b"shared"
    assert child.walkaddr(0) != parent.walkaddr(0)
    parent.copy_out(10, b"parent")
    assert child.copy_in(10, 6) == b"shared"


def test_copy_to_out_of_memory_cleans_up():
    mem = PhysicalMemory(12)
    parent = AddressSpace(mem)
    parent.grow(0, 4 * PGSIZE, PTE_W)
    child = AddressSpace(mem)
    with pytest.raises(MemoryError):
        parent.copy_to(child, 4 * PGSIZE)
    assert child.walkaddr(0) is None
    child.destroy(0)
    parent.destroy(4 * PGSIZE)
    assert mem.free_count() == 12


def test_clear_user_blocks_access(space):
    space.grow(0, 2 * PGSIZE, PTE_W)
    space.clear_user(0)
    with pytest.raises(ValueError):
        space.copy_in(0, 1)
    assert space.copy_in(PGSIZE, 1) == b"\0"
    with pytest.raises(VMPanic, match="uvmclear"):
        space.clear_user(0x40000000)


def test_load_first(space, memory):
    space.load_first(b"\x13\x00\x00\x00")
    assert space.copy_in(0, 4) == b"\x13\x00\x00\x00"
    slot = space.walk(0, False)
    perm = memory.read_pte(*slot) & (PTE_R | PTE_W | PTE_X | PTE_U)
    assert perm == PTE_R | PTE_W | PTE_X | PTE_U


def test_load_first_too_big(space):
    with pytest.raises(VMPanic, match="more than a page"):
        space.load_first(bytes(PGSIZE))


def test_unmap_errors(space):
    with pytest.raises(VMPanic, match="not aligned"):
        space.unmap(1, 1, True)
    with pytest.raises(VMPanic, match="uvmunmap: walk"):
        space.unmap(0, 1, True)
    space.grow(0, PGSIZE, PTE_W)
    with pytest.raises(VMPanic, match="not mapped"):
        space.unmap(PGSIZE, 1, True)


def test_unmap_without_free_keeps_page(space, memory):
    space.grow(0, PGSIZE, PTE_W)
    pa = space.walkaddr(0)
    before = memory.free_count()
    space.unmap(0, 1, False)
    assert memory.free_count() == before
    assert space.walkaddr(0) is None
    memory.free(pa)
    assert memory.free_count() == before + 1