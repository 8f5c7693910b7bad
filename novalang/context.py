"""Compilation state shared between the compiler's phases."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .errors import ErrorHandler, ErrorLevel

__all__ = ["Context", "ScopedNode", "LineInfo"]

_log = logging.getLogger(__name__)


class LineInfo(Protocol):
    """Anything recorded in a symbol table with the source line it was defined on."""

    line: int


class ScopedNode(Protocol):
    """A syntax-tree node that knows the scope it lives in."""

    scope_path: str
    scope_depth: int


class Context:
    """Symbol tables, the syntax tree and the diagnostics of one compilation."""

    def __init__(self) -> None:
        self.errors = ErrorHandler()
        self.source_filename = ""
        self.strict_mode = False
        self.ast: list[Any] = []
        self._global_vars: dict[str, LineInfo] = {}
        self._global_funcs: dict[str, Any] = {}
        self._global_structs: dict[str, Any] = {}

    # -- global variables -------------------------------------------------

    def add_global_var(self, name: str, info: LineInfo) -> bool:
        """Register a global variable.

        Fails (returns ``False``) when a variable of that name is already
        defined on the same or an earlier line.
        """
        if info is None:
            raise ValueError(f"add global var failed: {name}")
        existing = self._global_vars.get(name)
        if existing is not None and existing.line <= info.line:
            _log.debug("add global var failed: %s line:%d", name, info.line)
            return False
        self._global_vars[name] = info
        _log.debug("add global var: %s %d", name, info.line)
        return True

    def lookup_global_var(self, name: str, line: int | None = -1) -> LineInfo | None:
        """Find a global variable visible from ``line``.

        A ``line`` of -1 (or ``None``) ignores where the variable was defined.
        """
        info = self._global_vars.get(name)
        if info is None:
            _log.debug("get global var failed: %s line: %s", name, line)
            return None
        if line is None or line == -1 or info.line <= line:
            return info
        _log.debug("global var can't access: %s line: %s", name, line)
        return None

    # -- functions and structures ----------------------------------------

    def add_global_func(self, name: str, info: Any) -> bool:
        """Register a function; ``False`` if the name is already taken."""
        if name in self._global_funcs:
            return False
        self._global_funcs[name] = info
        return True

    def lookup_global_func(self, name: str) -> Any | None:
        if not name:
            return None
        info = self._global_funcs.get(name)
        _log.debug("lookup global func %s: %s", "ok" if info else "failed", name)
        return info

    def add_global_struct(self, name: str, info: Any) -> bool:
        """Register a structure or class; ``False`` if the name is already taken."""
        if name in self._global_structs:
            return False
        self._global_structs[name] = info
        _log.debug("add global struct: %s", name)
        return True

    def lookup_global_struct(self, name: str) -> Any | None:
        if not name:
            return None
        info = self._global_structs.get(name)
        _log.debug("lookup global struct %s: %s", "ok" if info else "failed", name)
        return info

    # -- syntax tree ------------------------------------------------------

    def add_ast_node(self, node: Any) -> None:
        self.ast.append(node)

    # -- diagnostics ------------------------------------------------------

    def add_error(
        self, level: ErrorLevel, message: str, line: int, file: str, call_line: int
    ) -> None:
        self.errors.add_error(level, message, line, file, call_line)

    def add_error_front(
        self, level: ErrorLevel, message: str, line: int, file: str, call_line: int
    ) -> None:
        self.errors.add_error_front(level, message, line, file, call_line)

    def print_error(
        self, level: ErrorLevel, message: str, line: int, file: str, call_line: int
    ) -> None:
        self.errors.print_error(level, message, line, file, call_line)

    def has_errors(self) -> bool:
        return self.errors.has_errors()

    def print_errors(self) -> None:
        self.errors.print_errors()

    # -- naming -----------------------------------------------------------

    def generate_local_var_name(
        self, original_name: str, node: ScopedNode | None
    ) -> str:
        """Make a local variable name unique to the scope the node lives in."""
        if node is None:
            return original_name
        return f"{original_name}_{node.scope_depth}_{node.scope_path}"