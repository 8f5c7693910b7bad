"""Printable representation of runtime lists."""

from __future__ import annotations

import enum
import locale
from typing import Any, Sequence

from .memory import MemoryBlock, NovaMemoryError
from .strings import string_to_system

__all__ = [
    "ElementType",
    "list_to_string",
    "MAX_DISPLAY_ITEMS",
    "TRUNCATION",
    "MAX_BUFFER_SIZE",
]

MAX_DISPLAY_ITEMS = 10
TRUNCATION = "..."
MAX_BUFFER_SIZE = 4096
_ELEMENT_BUFFER_SIZE = 128


class ElementType(enum.IntEnum):
    """Element types, numbered as the compiler's variable types."""

    NONE = 0
    VOID = 1
    INT = 2
    FLOAT = 3
    BOOL = 4
    STRING = 5
    STRUCT = 6
    DICT = 7
    LIST = 8
    FUNCTION = 9
    CLASS = 10
    INSTANCE = 11


def _clip(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` UTF-8 bytes."""
    raw = text.encode("utf-8")
    if len(raw) <= limit:
        return text
    return raw[:limit].decode("utf-8", "ignore")


def _format_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, MemoryBlock):
        raw = string_to_system(value)
        if raw is None:
            return '""'
        text = raw.decode(locale.getpreferredencoding(False), "replace")
    else:
        text = str(value)
    return f'"{text}"'


def _format_element(value: Any, elem_type: ElementType) -> str:
    if elem_type is ElementType.INT:
        text = "%d" % value
    elif elem_type is ElementType.FLOAT:
        text = "%g" % value
    elif elem_type is ElementType.BOOL:
        text = "True" if value else "False"
    elif elem_type is ElementType.STRING:
        text = _format_string(value)
    elif elem_type is ElementType.LIST:
        text = "[...]"
    elif elem_type is ElementType.DICT:
        text = "{...}"
    else:
        text = "<对象>"
    return _clip(text, _ELEMENT_BUFFER_SIZE - 1)


def list_to_string(
    elements: Sequence[Any] | MemoryBlock | None, elem_type: ElementType | int
) -> str:
    """Render a list as ``[a, b, ...]``.

    At most ten elements are shown; longer lists end in ``...``. The
    whole text is limited to the runtime's print buffer size.
    """
    if elements is None:
        return "null"
    if isinstance(elements, MemoryBlock):
        if elements.freed:
            raise NovaMemoryError("use of a freed memory block")
        if elements.value is None:
            return "[无效列表]"
        elements = elements.value
    elem_type = ElementType(elem_type)

    truncated = len(elements) > MAX_DISPLAY_ITEMS
    shown = elements[:MAX_DISPLAY_ITEMS]
    parts = [_format_element(value, elem_type) for value in shown]
    body = ", ".join(parts)
    if truncated:
        body += ", " + TRUNCATION
    return _clip("[" + body + "]", MAX_BUFFER_SIZE - 1)