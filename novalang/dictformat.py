"""Printable representation of runtime dictionaries."""

from __future__ import annotations

import locale
from typing import Any

from .dicts import DictEntry, KeyKind, NovaDict, ValueKind
from .memory import MemoryBlock, NovaMemoryError
from .strings import string_to_system

__all__ = ["dict_to_string", "format_entry"]

_UNPRINTABLE_KEY = '"[无法显示]": '


def _format_key(entry: DictEntry) -> str:
    if entry.key_kind is KeyKind.STRING:
        raw = string_to_system(entry.key) if isinstance(entry.key, MemoryBlock) else None
        if raw is None:
            return _UNPRINTABLE_KEY
        text = raw.decode(locale.getpreferredencoding(False), "replace")
        return f'"{text}": '
    if entry.key_kind is KeyKind.INT:
        return "%d: " % entry.key
    if entry.key_kind is KeyKind.FLOAT:
        return "%g: " % entry.key
    return ""


def _format_pointer(value: Any) -> str:
    # The pointer conversion already prints its own "0x" prefix.
    address = "(nil)" if value is None else f"{id(value):#x}"
    return f"<对象:0x{address}>"


def _format_value(entry: DictEntry) -> str:
    if entry.value_kind is ValueKind.INT:
        return "%d" % entry.value
    if entry.value_kind is ValueKind.FLOAT:
        return "%g" % entry.value
    if entry.value_kind is ValueKind.BOOL:
        return "True" if entry.value else "False"
    if entry.value_kind is ValueKind.POINTER:
        return _format_pointer(entry.value)
    return ""


def format_entry(entry: DictEntry) -> str:
    """Render one entry as ``key: value``."""
    return _format_key(entry) + _format_value(entry)


def dict_to_string(nova_dict: NovaDict | MemoryBlock | None) -> str:
    """Render a dictionary as ``{k: v, ...}`` in storage order.

    A missing dictionary renders as ``{}``.
    """
    if nova_dict is None:
        return "{}"
    if isinstance(nova_dict, MemoryBlock):
        if nova_dict.freed:
            raise NovaMemoryError("use of a freed memory block")
        if not isinstance(nova_dict.value, NovaDict):
            raise TypeError("memory block does not hold a dictionary")
        nova_dict = nova_dict.value
    return "{" + ", ".join(format_entry(entry) for entry in nova_dict.entries()) + "}"