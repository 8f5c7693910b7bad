"""Reference-counted memory blocks with a table of unreferenced blocks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

__all__ = ["MemoryBlock", "NovaMemoryError", "MemoryManager", "HASH_TABLE_SIZE"]

HASH_TABLE_SIZE = 1024

_log = logging.getLogger(__name__)


class NovaMemoryError(RuntimeError):
    """Raised on misuse of a memory block."""


@dataclass(eq=False)
class MemoryBlock:
    """A block of data carrying a reference count.

    ``data`` holds the raw bytes; ``value`` may hold a typed payload
    stored in the block by a higher-level runtime structure.
    """

    size: int
    data: bytearray = field(repr=False)
    ref_count: int = 0
    value: Any = None
    freed: bool = False


class MemoryManager:
    """Allocates blocks and frees them when no longer referenced.

    New blocks start with a reference count of zero and sit in the
    unreferenced table until retained; releasing any block to zero
    sweeps that table.
    """

    def __init__(self) -> None:
        self._unreferenced: set[MemoryBlock] | None = set()

    def _table(self) -> set[MemoryBlock]:
        if self._unreferenced is None:
            self._unreferenced = set()
            _log.debug("memory manager initialized")
        return self._unreferenced

    @staticmethod
    def _check_live(block: MemoryBlock) -> None:
        if block.freed:
            raise NovaMemoryError("use of a freed memory block")

    def alloc(self, size: int) -> MemoryBlock:
        """Allocate a block of ``size`` bytes with a reference count of zero.

        If the unreferenced table is full the block is freed at once.
        """
        if size <= 0:
            raise ValueError("allocation size must be positive")
        table = self._table()
        block = MemoryBlock(size=size, data=bytearray(size))
        if len(table) < HASH_TABLE_SIZE:
            table.add(block)
            _log.debug("allocated block %#x of size %d", id(block), size)
        else:
            _log.debug("unreferenced table full, freeing block %#x", id(block))
            block.freed = True
        return block

    def retain(self, block: MemoryBlock | None) -> int:
        """Increase the reference count and return the new value."""
        if block is None:
            _log.debug("attempt to retain a missing block")
            return 0
        self._check_live(block)
        block.ref_count += 1
        if block.ref_count == 1 and self._unreferenced is not None:
            self._unreferenced.discard(block)
        return block.ref_count

    def release(self, block: MemoryBlock | None) -> int:
        """Decrease the reference count, freeing the block when it reaches zero."""
        if block is None:
            _log.debug("attempt to release a missing block")
            return 0
        self._check_live(block)
        block.ref_count -= 1
        if block.ref_count > 0:
            return block.ref_count
        if self._unreferenced is not None and block in self._unreferenced:
            raise NovaMemoryError("released a block that was never retained")
        block.freed = True
        self.collect_garbage()
        return 0

    def get_data(self, block: MemoryBlock | None) -> bytearray | None:
        """Return the data area of a block."""
        if block is None:
            return None
        self._check_live(block)
        return block.data

    def copy(
        self, dst: MemoryBlock | None, src: MemoryBlock | None, size: int
    ) -> MemoryBlock | None:
        """Copy ``size`` bytes from ``src`` into ``dst`` and return ``dst``."""
        if dst is None or src is None:
            return None
        self._check_live(dst)
        self._check_live(src)
        if size < 0 or size > len(dst.data) or size > len(src.data):
            raise ValueError("copy size exceeds block size")
        dst.data[:size] = src.data[:size]
        return dst

    def collect_garbage(self) -> int:
        """Free every unreferenced block and return how many were freed."""
        if not self._unreferenced:
            return 0
        count = len(self._unreferenced)
        for block in self._unreferenced:
            block.freed = True
        self._unreferenced.clear()
        _log.debug("garbage collection freed %d blocks", count)
        return count

    def cleanup(self) -> None:
        """Free all unreferenced blocks and drop the table."""
        self.collect_garbage()
        self._unreferenced = None

    def is_unreferenced(self, block: MemoryBlock) -> bool:
        """Whether the block is waiting in the unreferenced table."""
        return self._unreferenced is not None and block in self._unreferenced