import pytest

from novalang.dicts import (
    BUCKET_ARRAY_SIZE,
    BUCKET_COUNT,
    KeyKind,
    NovaDict,
    ValueKind,
)
from novalang.memory import MemoryManager, NovaMemoryError
from novalang.strings import create_string_from_chars


@pytest.fixture
def manager():
    return MemoryManager()


@pytest.fixture
def nd(manager):
    return NovaDict(manager, 5, 2)


def key(manager, text):
    return create_string_from_chars(manager, text)


def test_new_dict_is_empty(manager, nd):
    assert len(nd) == 0
    assert list(nd.entries()) == []
    assert nd.key_type == 5 and nd.value_type == 2
    assert nd.bucket_count == BUCKET_COUNT
    assert manager.is_unreferenced(nd.block)
    assert nd.block.value is nd


@pytest.mark.parametrize("kt, vt", [(256, 0), (0, -1)])
def test_type_codes_must_fit_a_byte(manager, kt, vt):
    with pytest.raises(ValueError):
        NovaDict(manager, kt, vt)


def test_set_and_get_string_key(manager, nd):
    k = key(manager, "alpha")
    nd.set_str(k, 42)
    assert nd.get_str(k) == 42
    assert nd.get_str(k, ValueKind.INT) == 42
    assert len(nd) == 1
    assert k.ref_count == 1
    assert not manager.is_unreferenced(k)


def test_overwrite_keeps_size_and_changes_kind(manager, nd):
    k = key(manager, "alpha")
    nd.set_str(k, 1)
    nd.set_str(k, 2.5)
    assert len(nd) == 1
    assert nd.get_str(k, ValueKind.FLOAT) == 2.5
    assert k.ref_count == 1
    with pytest.raises(KeyError):
        nd.get_str(k, ValueKind.INT)


def test_equal_text_finds_same_entry(manager, nd):
    first = key(manager, "name")
    second = key(manager, "name")
    nd.set_str(first, 1)
    nd.set_str(second, 7)
    assert len(nd) == 1
    assert nd.get_str(first) == 7
    assert nd.get_str("name") == 7
    assert second.ref_count == 0
    (entry,) = nd.entries()
    assert entry.key is first
    assert entry.key_kind is KeyKind.STRING


def test_missing_string_key_raises(manager, nd):
    with pytest.raises(KeyError):
        nd.get_str("nothing")
    assert nd.contains_str("nothing") is False


def test_kind_inference_and_mismatch(manager, nd):
    k = key(manager, "flag")
    nd.set_str(k, True)
    assert nd.get_str(k, ValueKind.BOOL) is True
    with pytest.raises(KeyError):
        nd.get_str(k, ValueKind.INT)


def test_float_and_pointer_values(manager, nd):
    obj = object()
    nd.set_str(key(manager, "f"), 1.5)
    nd.set_str(key(manager, "p"), obj)
    assert nd.get_str("f", ValueKind.FLOAT) == 1.5
    assert nd.get_str("p", ValueKind.POINTER) is obj


def test_explicit_kind_coerces(manager, nd):
    nd.set_str(key(manager, "x"), 3, ValueKind.FLOAT)
    assert nd.get_str("x", ValueKind.FLOAT) == 3.0
    nd.set_int(9, 0, ValueKind.BOOL)
    assert nd.get_int(9, ValueKind.BOOL) is False


def test_int_value_bounds(manager, nd):
    with pytest.raises(OverflowError):
        nd.set_int(1, 2**63)
    with pytest.raises(TypeError):
        nd.set_int(1, 1.5, ValueKind.INT)
    assert len(nd) == 0


def test_string_key_must_be_block(nd):
    with pytest.raises(TypeError):
        nd.set_str("plain", 1)
    with pytest.raises(TypeError):
        nd.get_str(3)


def test_int_keys(nd):
    nd.set_int(-7, 70)
    nd.set_int(0, 1)
    assert nd.get_int(-7) == 70
    assert nd.get_int(0) == 1
    assert nd.contains_int(-7)
    assert not nd.contains_int(8)
    with pytest.raises(KeyError):
        nd.get_int(8)
    with pytest.raises(OverflowError):
        nd.set_int(2**63, 1)


def test_int_and_string_keys_coexist(manager, nd):
    nd.set_int(1, 10)
    nd.set_str(key(manager, "1"), 20)
    assert len(nd) == 2
    assert nd.get_int(1) == 10
    assert nd.get_str("1") == 20


def test_remove_int(nd):
    nd.set_int(4, 1)
    assert nd.remove_int(4) is True
    assert nd.remove_int(4) is False
    assert len(nd) == 0
    assert not nd.contains_int(4)


def test_remove_str_releases_key(manager, nd):
    k = key(manager, "kept")
    manager.retain(k)
    nd.set_str(k, 1)
    assert k.ref_count == 2
    assert nd.remove_str("kept") is True
    assert k.ref_count == 1
    assert nd.remove_str("kept") is False
    assert len(nd) == 0
    assert not nd.contains_str(k)


def test_overflow_chain_order(nd):
    keys = [5 + i * BUCKET_COUNT for i in range(BUCKET_ARRAY_SIZE + 1)]
    for i, k in enumerate(keys):
        nd.set_int(k, i)
    assert len(nd) == len(keys)
    assert all(nd.get_int(k) == i for i, k in enumerate(keys))
    order = [entry.key for entry in nd.entries()]
    assert order == [keys[0], keys[-1]] + keys[1:-1]


def test_freed_slot_is_reused(nd):
    keys = [5 + i * BUCKET_COUNT for i in range(BUCKET_ARRAY_SIZE)]
    for k in keys:
        nd.set_int(k, k)
    nd.remove_int(keys[1])
    newcomer = 5 + 40 * BUCKET_COUNT
    nd.set_int(newcomer, 0)
    order = [entry.key for entry in nd.entries()]
    assert order[1] == newcomer
    assert len(order) == BUCKET_ARRAY_SIZE


def test_entries_follow_bucket_order(nd):
    for k in (3, 1, 2):
        nd.set_int(k, k * 10)
    assert [(e.key, e.value) for e in nd.entries()] == [(1, 10), (2, 20), (3, 30)]
    assert all(e.value_kind is ValueKind.INT for e in nd.entries())


def test_free_releases_keys_and_block(manager, nd):
    k = key(manager, "gone")
    nd.set_str(k, 1)
    manager.retain(nd.block)
    nd.free()
    assert nd.block.freed
    assert k.freed
    with pytest.raises(NovaMemoryError):
        nd.get_int(1)


def test_free_unretained_dict_raises(manager, nd):
    k = key(manager, "stay")
    nd.set_str(k, 1)
    with pytest.raises(NovaMemoryError):
        nd.free()
    assert k.ref_count == 1
    assert nd.get_str("stay") == 1


def test_freed_key_block_rejected(manager, nd):
    k = key(manager, "temp")
    manager.retain(k)
    manager.release(k)
    with pytest.raises(NovaMemoryError):
        nd.get_str(k)