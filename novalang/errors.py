"""Diagnostics collected while compiling a program."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

__all__ = ["ErrorLevel", "CompileError", "ErrorHandler", "format_error"]


class ErrorLevel(enum.Enum):
    """Category of a diagnostic."""

    LEXICAL = enum.auto()
    SYNTAX = enum.auto()
    TYPE = enum.auto()
    SEMANTIC = enum.auto()
    INTERNAL = enum.auto()
    RUNTIME = enum.auto()
    OTHER = enum.auto()


_LABELS = {
    ErrorLevel.LEXICAL: "词法错误",
    ErrorLevel.SYNTAX: "语法错误",
    ErrorLevel.TYPE: "类型错误",
    ErrorLevel.RUNTIME: "运行时错误",
    ErrorLevel.INTERNAL: "内部错误",
}

_PATH_SEPARATORS = re.compile(r"[/\\]")


@dataclass(eq=False)
class CompileError(Exception):
    """One diagnostic with the program line it concerns and the place that reported it."""

    level: ErrorLevel
    message: str
    source_line: int
    file: str
    call_line: int

    def __str__(self) -> str:
        return format_error(self) or self.message


def format_error(error: CompileError) -> str:
    """Render one diagnostic as a single line (empty for levels without a label)."""
    filename = _PATH_SEPARATORS.split(error.file)[-1]
    if error.level is ErrorLevel.OTHER:
        return f"{error.message} [{filename}:{error.call_line}]"
    label = _LABELS.get(error.level)
    if label is None:
        return ""
    return (
        f"{label} [源码行 {error.source_line}] "
        f"[{filename}:{error.call_line}]: {error.message}"
    )


class ErrorHandler:
    """Ordered collection of diagnostics."""

    def __init__(self) -> None:
        self.errors: list[CompileError] = []

    def add_error(self, level, message, line, file, call_line) -> None:
        self.errors.append(CompileError(level, message, line, file, call_line))

    def add_error_front(self, level, message, line, file, call_line) -> None:
        self.errors.insert(0, CompileError(level, message, line, file, call_line))

    def print_error(self, level, message, line, file, call_line) -> None:
        """Record a diagnostic and print it immediately."""
        error = CompileError(level, message, line, file, call_line)
        self.errors.append(error)
        text = format_error(error)
        if text:
            print(text)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def get_error_string(self) -> str:
        lines = (format_error(error) for error in self.errors)
        return "[错误列表]\n" + "".join(f"{line}\n" for line in lines if line)

    def print_errors(self) -> None:
        print(self.get_error_string(), end="")