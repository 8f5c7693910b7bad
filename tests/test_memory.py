import pytest

from novalang.memory import HASH_TABLE_SIZE, MemoryManager, NovaMemoryError


@pytest.fixture
def manager():
    return MemoryManager()


def test_alloc_starts_unreferenced(manager):
    block = manager.alloc(16)
    assert block.ref_count == 0
    assert block.size == 16
    assert len(manager.get_data(block)) == 16
    assert manager.is_unreferenced(block) is True


def test_alloc_zero_rejected(manager):
    with pytest.raises(ValueError):
        manager.alloc(0)


def test_retain_removes_from_table(manager):
    block = manager.alloc(8)
    assert manager.retain(block) == 1
    assert manager.is_unreferenced(block) is False
    assert manager.retain(block) == 2


def test_retain_and_release_none(manager):
    assert manager.retain(None) == 0
    assert manager.release(None) == 0
    assert manager.get_data(None) is None


def test_release_to_zero_frees(manager):
    block = manager.alloc(8)
    manager.retain(block)
    manager.retain(block)
    assert manager.release(block) == 1
    assert block.freed is False
    assert manager.release(block) == 0
    assert block.freed is True
    with pytest.raises(NovaMemoryError):
        manager.get_data(block)


def test_release_unretained_block_is_error(manager):
    block = manager.alloc(4)
    with pytest.raises(NovaMemoryError):
        manager.release(block)


def test_release_sweeps_unreferenced(manager):
    kept = manager.alloc(4)
    manager.retain(kept)
    stray = manager.alloc(4)
    manager.release(kept)
    assert stray.freed is True
    assert manager.is_unreferenced(stray) is False


def test_collect_garbage_counts(manager):
    blocks = [manager.alloc(2) for _ in range(3)]
    assert manager.collect_garbage() == len(blocks)
    assert all(b.freed for b in blocks)
    assert manager.collect_garbage() == 0


def test_copy(manager):
    src = manager.alloc(4)
    dst = manager.alloc(4)
    src.data[:] = b"abcd"
    assert manager.copy(dst, src, 3) is dst
    assert bytes(dst.data) == b"abc\x00"


def test_copy_missing_and_too_large(manager):
    block = manager.alloc(2)
    assert manager.copy(None, block, 1) is None
    with pytest.raises(ValueError):
        manager.copy(block, manager.alloc(1), 2)


def test_full_table_frees_immediately(manager):
    blocks = [manager.alloc(1) for _ in range(HASH_TABLE_SIZE)]
    assert not any(b.freed for b in blocks)
    overflow = manager.alloc(1)
    assert overflow.freed is True


def test_cleanup_then_alloc_again(manager):
    old = manager.alloc(1)
    manager.cleanup()
    assert old.freed is True
    fresh = manager.alloc(1)
    assert manager.is_unreferenced(fresh) is True


def test_retain_freed_block_raises(manager):
    block = manager.alloc(1)
    manager.collect_garbage()
    with pytest.raises(NovaMemoryError):
        manager.retain(block)