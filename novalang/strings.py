"""Unicode strings stored in reference-counted memory blocks."""

from __future__ import annotations

import codecs
import locale
import sys
from dataclasses import dataclass
from typing import Iterable, TextIO

from .memory import MemoryBlock, MemoryManager, NovaMemoryError

__all__ = [
    "UnicodeString",
    "create_string_from_system",
    "create_string_from_encoding",
    "create_string_from_chars",
    "string_to_system",
    "string_to_encoding",
    "print_string",
    "println_string",
    "concat_strings",
    "get_string_length",
]

_HEADER_SIZE = 4
_UNIT_SIZE = 2


@dataclass(frozen=True)
class UnicodeString:
    """Text held as UTF-16 code units."""

    text: str

    @property
    def length(self) -> int:
        """Number of UTF-16 code units."""
        return len(self.text.encode("utf-16-le", "surrogatepass")) // _UNIT_SIZE


def _system_encoding() -> str:
    return locale.getpreferredencoding(False)


def _store(manager: MemoryManager, text: str) -> MemoryBlock:
    ustr = UnicodeString(text)
    block = manager.alloc(_HEADER_SIZE + ustr.length * _UNIT_SIZE)
    block.value = ustr
    return block


def _unicode(block: MemoryBlock) -> UnicodeString:
    if block.freed:
        raise NovaMemoryError("use of a freed memory block")
    if not isinstance(block.value, UnicodeString):
        raise TypeError("memory block does not hold a string")
    return block.value


def _decode(raw: bytes, encoding: str) -> str:
    codecs.lookup(encoding)
    return bytes(raw).split(b"\0", 1)[0].decode(encoding, "replace")


def create_string_from_system(manager: MemoryManager, raw: bytes | None) -> MemoryBlock | None:
    """Create a string from bytes in the system's default encoding."""
    if raw is None:
        return None
    return _store(manager, _decode(raw, _system_encoding()))


def create_string_from_encoding(
    manager: MemoryManager, raw: bytes | None, encoding: str | None
) -> MemoryBlock | None:
    """Create a string from bytes in the given encoding."""
    if raw is None or encoding is None:
        return None
    return _store(manager, _decode(raw, encoding))


def create_string_from_chars(
    manager: MemoryManager, chars: str | Iterable[int]
) -> MemoryBlock:
    """Create a string from UTF-16 code units (or from text directly)."""
    if isinstance(chars, str):
        text = chars
    else:
        units = list(chars)
        if any(not 0 <= unit <= 0xFFFF for unit in units):
            raise ValueError("code units must be in the range 0..0xFFFF")
        raw = b"".join(unit.to_bytes(2, "little") for unit in units)
        text = raw.decode("utf-16-le", "surrogatepass")
    if not text:
        raise ValueError("cannot create a string from no characters")
    return _store(manager, text)


def string_to_system(block: MemoryBlock | None) -> bytes | None:
    """Encode a string in the system's default encoding."""
    if block is None:
        return None
    return _unicode(block).text.encode(_system_encoding(), "replace")


def string_to_encoding(block: MemoryBlock | None, encoding: str | None) -> bytes | None:
    """Encode a string in the given encoding."""
    if block is None or encoding is None:
        return None
    return _unicode(block).text.encode(encoding, "replace")


def print_string(block: MemoryBlock | None, stream: TextIO | None = None) -> None:
    """Write a string to ``stream`` (standard output by default)."""
    if block is None:
        return
    (stream or sys.stdout).write(_unicode(block).text)


def println_string(block: MemoryBlock | None, stream: TextIO | None = None) -> None:
    """Write a string followed by a newline."""
    out = stream or sys.stdout
    print_string(block, out)
    out.write("\n")


def concat_strings(
    manager: MemoryManager, first: MemoryBlock | None, second: MemoryBlock | None
) -> MemoryBlock | None:
    """Return a new string holding ``first`` followed by ``second``."""
    if first is None or second is None:
        return None
    return _store(manager, _unicode(first).text + _unicode(second).text)


def get_string_length(block: MemoryBlock | None) -> int:
    """Length in UTF-16 code units; zero for a missing string."""
    if block is None:
        return 0
    return _unicode(block).length