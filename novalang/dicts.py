"""Hash dictionaries with string or integer keys, stored in memory blocks."""

from __future__ import annotations

import enum
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from .memory import MemoryBlock, MemoryManager, NovaMemoryError
from .strings import UnicodeString

__all__ = [
    "ValueKind",
    "KeyKind",
    "DictEntry",
    "NovaDict",
    "BUCKET_COUNT",
    "BUCKET_ARRAY_SIZE",
]

BUCKET_COUNT = 1024
BUCKET_ARRAY_SIZE = 16

_HEADER_SIZE = 12
_ENTRY_SIZE = 32
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


class ValueKind(enum.IntEnum):
    """Kind of value held by an entry."""

    INT = 0
    FLOAT = 1
    BOOL = 2
    POINTER = 3


class KeyKind(enum.IntEnum):
    """Kind of key held by an entry."""

    STRING = 0
    INT = 1
    FLOAT = 2


@dataclass(eq=False)
class DictEntry:
    """One key/value slot of a dictionary."""

    key: Any = None
    value: Any = None
    key_kind: KeyKind | None = None
    value_kind: ValueKind | None = None
    occupied: bool = False


def _new_slots() -> list[DictEntry]:
    return [DictEntry() for _ in range(BUCKET_ARRAY_SIZE)]


@dataclass
class _Bucket:
    """A fixed array of slots plus an overflow chain hanging off the first slot."""

    slots: list[DictEntry] = field(default_factory=_new_slots)
    overflow: list[DictEntry] = field(default_factory=list)

    def chain(self) -> Iterator[DictEntry]:
        """Entries in storage order: first slot, its overflow chain, other slots."""
        yield self.slots[0]
        yield from self.overflow
        yield from self.slots[1:]


def _utf16_units(text: str) -> list[int]:
    raw = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(raw[i:i + 2], "little") for i in range(0, len(raw), 2)]


def _hash_string(text: str) -> int:
    value = 5381
    for unit in _utf16_units(text):
        value = ((value << 5) + value + unit) & 0xFFFFFFFF
    return value % BUCKET_COUNT


def _hash_int(key: int) -> int:
    return (key ^ (key >> 32)) % BUCKET_COUNT


def _check_int64(value: int) -> int:
    if not _INT_MIN <= value <= _INT_MAX:
        raise OverflowError(f"{value} does not fit in 64 bits")
    return value


def _int_key(key: Any) -> int:
    return _check_int64(operator.index(key))


def _text_of(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, MemoryBlock):
        if key.freed:
            raise NovaMemoryError("use of a freed memory block")
        if not isinstance(key.value, UnicodeString):
            raise TypeError("memory block does not hold a string")
        return key.value.text
    raise TypeError(f"string key expected, got {type(key).__name__}")


def _coerce(value: Any, kind: ValueKind | int | None) -> tuple[ValueKind, Any]:
    if kind is None:
        if isinstance(value, bool):
            kind = ValueKind.BOOL
        elif isinstance(value, int):
            kind = ValueKind.INT
        elif isinstance(value, float):
            kind = ValueKind.FLOAT
        else:
            kind = ValueKind.POINTER
    kind = ValueKind(kind)
    if kind is ValueKind.INT:
        return kind, _check_int64(operator.index(value))
    if kind is ValueKind.FLOAT:
        return kind, float(value)
    if kind is ValueKind.BOOL:
        return kind, bool(value)
    return kind, value


class NovaDict:
    """A dictionary of 1024 buckets, each with 16 slots and an overflow chain.

    String keys are memory blocks holding strings; the dictionary retains a
    key when it first stores it and releases it on removal or when freed.
    """

    def __init__(
        self, manager: MemoryManager, key_type: int = 0, value_type: int = 0
    ) -> None:
        for name, number in (("key_type", key_type), ("value_type", value_type)):
            if not 0 <= number <= 0xFF:
                raise ValueError(f"{name} must fit in one byte")
        self.manager = manager
        self.key_type = key_type
        self.value_type = value_type
        self.bucket_count = BUCKET_COUNT
        self.block = manager.alloc(
            _HEADER_SIZE + BUCKET_COUNT * BUCKET_ARRAY_SIZE * _ENTRY_SIZE
        )
        self.block.value = self
        self._buckets: dict[int, _Bucket] = {}
        self._size = 0

    def _check_live(self) -> None:
        if self.block.freed:
            raise NovaMemoryError("use of a freed dictionary")

    def _find(
        self, index: int, match: Callable[[DictEntry], bool]
    ) -> DictEntry | None:
        bucket = self._buckets.get(index)
        if bucket is None:
            return None
        for entry in bucket.chain():
            if entry.occupied and match(entry):
                return entry
        return None

    def _find_or_create(
        self, index: int, match: Callable[[DictEntry], bool]
    ) -> tuple[DictEntry, bool]:
        existing = self._find(index, match)
        if existing is not None:
            return existing, False
        bucket = self._buckets.setdefault(index, _Bucket())
        for slot in bucket.slots:
            if not slot.occupied:
                return slot, True
        entry = DictEntry()
        bucket.overflow.append(entry)
        return entry, True

    @staticmethod
    def _str_matcher(text: str) -> Callable[[DictEntry], bool]:
        def match(entry: DictEntry) -> bool:
            return entry.key_kind is KeyKind.STRING and entry.key.value.text == text

        return match

    @staticmethod
    def _int_matcher(key: int) -> Callable[[DictEntry], bool]:
        def match(entry: DictEntry) -> bool:
            return entry.key_kind is KeyKind.INT and entry.key == key

        return match

    def _find_str(self, key: Any) -> DictEntry | None:
        text = _text_of(key)
        return self._find(_hash_string(text), self._str_matcher(text))

    def _find_int(self, key: Any) -> DictEntry | None:
        number = _int_key(key)
        return self._find(_hash_int(number), self._int_matcher(number))

    @staticmethod
    def _read(entry: DictEntry | None, key: Any, kind: ValueKind | int | None) -> Any:
        if entry is None:
            raise KeyError(key)
        if kind is not None and entry.value_kind is not ValueKind(kind):
            raise KeyError(
                f"{key!r} holds a {entry.value_kind.name.lower()} value"
            )
        return entry.value

    def set_str(
        self, key: MemoryBlock, value: Any, kind: ValueKind | int | None = None
    ) -> None:
        """Store ``value`` under a string key; the kind is inferred if not given."""
        self._check_live()
        if not isinstance(key, MemoryBlock):
            raise TypeError("string keys must be memory blocks holding strings")
        text = _text_of(key)
        kind, value = _coerce(value, kind)
        entry, created = self._find_or_create(
            _hash_string(text), self._str_matcher(text)
        )
        if created:
            entry.key_kind = KeyKind.STRING
            entry.key = key
            self.manager.retain(key)
            self._size += 1
        entry.value_kind = kind
        entry.value = value
        entry.occupied = True

    def set_int(
        self, key: int, value: Any, kind: ValueKind | int | None = None
    ) -> None:
        """Store ``value`` under an integer key; the kind is inferred if not given."""
        self._check_live()
        number = _int_key(key)
        kind, value = _coerce(value, kind)
        entry, created = self._find_or_create(
            _hash_int(number), self._int_matcher(number)
        )
        if created:
            entry.key_kind = KeyKind.INT
            entry.key = number
            self._size += 1
        entry.value_kind = kind
        entry.value = value
        entry.occupied = True

    def get_str(self, key: MemoryBlock | str, kind: ValueKind | int | None = None) -> Any:
        """Value under a string key; ``KeyError`` if absent or of another kind."""
        self._check_live()
        return self._read(self._find_str(key), key, kind)

    def get_int(self, key: int, kind: ValueKind | int | None = None) -> Any:
        """Value under an integer key; ``KeyError`` if absent or of another kind."""
        self._check_live()
        return self._read(self._find_int(key), key, kind)

    def contains_str(self, key: MemoryBlock | str) -> bool:
        self._check_live()
        return self._find_str(key) is not None

    def contains_int(self, key: int) -> bool:
        self._check_live()
        return self._find_int(key) is not None

    def remove_str(self, key: MemoryBlock | str) -> bool:
        """Remove a string key, releasing it; ``False`` if it was absent."""
        self._check_live()
        entry = self._find_str(key)
        if entry is None:
            return False
        stored = entry.key
        entry.occupied = False
        entry.key = None
        self._size -= 1
        self.manager.release(stored)
        return True

    def remove_int(self, key: int) -> bool:
        """Remove an integer key; ``False`` if it was absent."""
        self._check_live()
        entry = self._find_int(key)
        if entry is None:
            return False
        entry.occupied = False
        self._size -= 1
        return True

    def free(self) -> None:
        """Release every string key and then the dictionary's own block."""
        self._check_live()
        if self.manager.is_unreferenced(self.block):
            raise NovaMemoryError("freed a dictionary that was never retained")
        for bucket in self._buckets.values():
            for entry in bucket.chain():
                if entry.occupied and entry.key_kind is KeyKind.STRING:
                    self.manager.release(entry.key)
        self.manager.release(self.block)

    def entries(self) -> Iterator[DictEntry]:
        """Occupied entries in storage order."""
        self._check_live()
        for index in sorted(self._buckets):
            for entry in self._buckets[index].chain():
                if entry.occupied:
                    yield entry

    def __len__(self) -> int:
        return self._size