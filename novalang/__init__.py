"""Lexer, compile context, error reporting and runtime values for the Nova language."""

__version__ = "0.1.0"

__all__ = [
    "context",
    "dictformat",
    "dicts",
    "errors",
    "lexer",
    "lists",
    "memory",
    "strings",
]