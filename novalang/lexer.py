"""Tokenizer for indentation-structured NovaLang source text."""

from __future__ import annotations

import enum
import inspect
import math
import re
from dataclasses import dataclass

from .context import Context
from .errors import CompileError, ErrorLevel

__all__ = ["TokenType", "Token", "LexError", "Lexer", "token_type_name"]


class TokenType(enum.Enum):
    """Kinds of tokens produced by the lexer."""

    ID = enum.auto()
    INT = enum.auto()
    FLOAT = enum.auto()
    ASSIGN = enum.auto()
    PLUSPLUS = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    DSLASH = enum.auto()
    LT = enum.auto()
    EQEQ = enum.auto()
    GT = enum.auto()
    GTEQ = enum.auto()
    TRUE = enum.auto()
    FALSE = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    NOT = enum.auto()
    DEF = enum.auto()
    RETURN = enum.auto()
    WHILE = enum.auto()
    COLON = enum.auto()
    LPAREN = enum.auto()
    RPAREN = enum.auto()
    LBRACE = enum.auto()
    RBRACE = enum.auto()
    LBRACKET = enum.auto()
    RBRACKET = enum.auto()
    COMMA = enum.auto()
    NEWLINE = enum.auto()
    INDENT = enum.auto()
    DEDENT = enum.auto()
    DOT = enum.auto()
    EOF = enum.auto()
    PRINT = enum.auto()
    FOR = enum.auto()
    IN = enum.auto()
    RANGE = enum.auto()
    IF = enum.auto()
    ELSE = enum.auto()
    ELIF = enum.auto()
    GLOBAL = enum.auto()
    PLUSEQ = enum.auto()
    MINUSEQ = enum.auto()
    STAREQ = enum.auto()
    SLASHEQ = enum.auto()
    STRING = enum.auto()
    MODULO = enum.auto()
    EXPONENT = enum.auto()
    NEQ = enum.auto()
    LTEQ = enum.auto()
    DIVEQ = enum.auto()
    CLASS = enum.auto()
    INIT = enum.auto()
    INHERIT = enum.auto()
    SUPER = enum.auto()
    AT = enum.auto()
    PASS = enum.auto()


_UNNAMED = frozenset({TokenType.DIVEQ, TokenType.INHERIT, TokenType.SUPER})


def token_type_name(token_type: TokenType) -> str:
    """Display name of a token type, such as ``TOK_ID``."""
    if token_type in _UNNAMED:
        return "UNKNOWN"
    return f"TOK_{token_type.name}"


@dataclass(frozen=True)
class Token:
    """One token with its source line.

    Keywords, identifiers and operators carry their text in ``value``;
    numbers and strings carry theirs in the typed fields.
    """

    type: TokenType
    value: str = ""
    line: int = 0
    int_value: int = 0
    float_value: float = 0.0
    string_value: str = ""


class LexError(CompileError):
    """Raised when tokenizing cannot go on (an unterminated string)."""


_KEYWORDS = {
    "def": TokenType.DEF,
    "return": TokenType.RETURN,
    "while": TokenType.WHILE,
    "True": TokenType.TRUE,
    "False": TokenType.FALSE,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
    "print": TokenType.PRINT,
    "for": TokenType.FOR,
    "in": TokenType.IN,
    "range": TokenType.RANGE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "elif": TokenType.ELIF,
    "global": TokenType.GLOBAL,
    "class": TokenType.CLASS,
    "__init__": TokenType.INIT,
    "pass": TokenType.PASS,
}

# Longest operators first, so that "+=" wins over "+".
_OPERATORS = (
    ("++", TokenType.PLUSPLUS),
    ("+=", TokenType.PLUSEQ),
    ("-=", TokenType.MINUSEQ),
    ("*=", TokenType.STAREQ),
    ("**", TokenType.EXPONENT),
    ("/=", TokenType.SLASHEQ),
    ("//", TokenType.DSLASH),
    ("==", TokenType.EQEQ),
    ("<=", TokenType.LTEQ),
    (">=", TokenType.GTEQ),
    ("!=", TokenType.NEQ),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("*", TokenType.STAR),
    ("/", TokenType.SLASH),
    ("=", TokenType.ASSIGN),
    ("<", TokenType.LT),
    (">", TokenType.GT),
    ("%", TokenType.MODULO),
    (":", TokenType.COLON),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    (",", TokenType.COMMA),
    ("{", TokenType.LBRACE),
    ("}", TokenType.RBRACE),
    ("[", TokenType.LBRACKET),
    ("]", TokenType.RBRACKET),
    (".", TokenType.DOT),
    ("@", TokenType.AT),
)

# A '-' directly after one of these starts a negative number literal.
_NEGATIVE_NUMBER_AFTER = frozenset(
    {
        TokenType.PLUS,
        TokenType.MINUS,
        TokenType.STAR,
        TokenType.SLASH,
        TokenType.LT,
        TokenType.GTEQ,
        TokenType.GT,
        TokenType.EQEQ,
        TokenType.LPAREN,
    }
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}
_LINE_SPACE = " \t\r\v\f"
_INT_PREFIX = re.compile(r"-?[0-9]+")
_FLOAT_PREFIX = re.compile(r"-?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_ident_start(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalpha())


def _is_ident_char(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalnum())


def _parse_int(text: str) -> int | None:
    """Parse the longest integer prefix of ``text``, as a 64-bit value."""
    match = _INT_PREFIX.match(text)
    if match is None:
        return None
    value = int(match.group())
    if not _INT_MIN <= value <= _INT_MAX:
        return None
    return value


def _parse_float(text: str) -> float | None:
    """Parse the longest floating-point prefix of ``text``."""
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        return None
    value = float(match.group())
    if math.isinf(value):
        return None
    return value


class Lexer:
    """Turns source text into tokens, tracking indentation as INDENT/DEDENT."""

    def __init__(self, ctx: Context, source: str) -> None:
        self.ctx = ctx
        self.source = source
        self._reset()

    def _reset(self) -> None:
        self._pos = 0
        self._line = 1
        self._at_line_start = True
        self._indents = [0]
        self._tokens: list[Token] = []

    def _peek(self) -> str:
        return self.source[self._pos] if self._pos < len(self.source) else "\0"

    def _emit(self, type_: TokenType, value: str = "", **payload) -> None:
        self._tokens.append(Token(type_, value, self._line, **payload))

    def _error(self, message: str) -> None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        call_line = caller.f_lineno if caller is not None else 0
        self.ctx.add_error(ErrorLevel.LEXICAL, message, self._line, __file__, call_line)

    def tokenize(self) -> list[Token]:
        """Tokenize the whole source.

        Recoverable problems are recorded in the context and scanning goes
        on; an unterminated string raises :class:`LexError`.
        """
        self._reset()
        while self._pos < len(self.source):
            if self._at_line_start:
                self._handle_indent()
            c = self._peek()
            if c in " \t":
                self._pos += 1
            elif c == "\n":
                self._emit(TokenType.NEWLINE, "\n")
                self._pos += 1
                self._line += 1
                self._at_line_start = True
            elif c == "#":
                while self._pos < len(self.source) and self._peek() != "\n":
                    self._pos += 1
            elif c in "\"'":
                self._read_string(c)
            elif _is_ident_start(c):
                self._read_identifier()
            elif _is_digit(c) or (c == "-" and self._negative_number_allowed()):
                self._read_number()
            elif not self._read_operator():
                self._error(f"未知字符: {c}")
                self._pos += 1
        while len(self._indents) > 1:
            self._indents.pop()
            self._emit(TokenType.DEDENT)
        self._emit(TokenType.EOF)
        return list(self._tokens)

    def _handle_indent(self) -> None:
        indent = 0
        while self._pos < len(self.source) and self._peek() in _LINE_SPACE:
            if self._peek() == " ":
                indent += 1
            self._pos += 1
        if self._peek() not in ("\n", "#"):
            if indent > self._indents[-1]:
                self._indents.append(indent)
                self._emit(TokenType.INDENT)
            else:
                while indent < self._indents[-1]:
                    self._indents.pop()
                    self._emit(TokenType.DEDENT)
                if indent != self._indents[-1]:
                    self._error("缩进错误")
        self._at_line_start = False

    def _negative_number_allowed(self) -> bool:
        return bool(self._tokens) and self._tokens[-1].type in _NEGATIVE_NUMBER_AFTER

    def _read_string(self, quote: str) -> None:
        source = self.source
        self._pos += 1
        chars: list[str] = []
        while self._pos < len(source) and self._peek() != quote:
            c = self._peek()
            self._pos += 1
            if c == "\\":
                if self._pos < len(source):
                    escaped = self._peek()
                    chars.append(_ESCAPES.get(escaped, escaped))
                    self._pos += 1
            else:
                chars.append(c)
        if self._pos >= len(source):
            frame = inspect.currentframe()
            call_line = frame.f_lineno if frame is not None else 0
            error = LexError(ErrorLevel.LEXICAL, "未闭合的字符串", self._line, __file__, call_line)
            self.ctx.add_error(error.level, error.message, error.source_line, error.file, error.call_line)
            raise error
        self._pos += 1
        self._emit(TokenType.STRING, string_value="".join(chars))

    def _read_identifier(self) -> None:
        start = self._pos
        while self._pos < len(self.source) and _is_ident_char(self._peek()):
            self._pos += 1
        word = self.source[start:self._pos]
        self._emit(_KEYWORDS.get(word, TokenType.ID), word)

    def _read_number(self) -> None:
        start = self._pos
        while self._pos < len(self.source) and (
            _is_digit(self._peek()) or self._peek() in ".-"
        ):
            self._pos += 1
        text = self.source[start:self._pos]
        if "." in text:
            value = _parse_float(text)
            if value is None:
                self._error(f"无效的浮点数: {text}")
            else:
                self._emit(TokenType.FLOAT, float_value=value)
        else:
            number = _parse_int(text)
            if number is None:
                self._error(f"无效的整数: {text}")
            else:
                self._emit(TokenType.INT, int_value=number)

    def _read_operator(self) -> bool:
        for text, type_ in _OPERATORS:
            if self.source.startswith(text, self._pos):
                self._emit(type_, text)
                self._pos += len(text)
                return True
        if self._peek() == "!":
            self._pos += 1
            self._error("无效的字符序列: ! 后必须跟随 =")
            return True
        return False

    def format_tokens(self, tokens: list[Token]) -> str:
        """Render tokens one per line, as the debug listing shows them."""
        lines = ["[Token 序列]\n"]
        for token in tokens:
            text = f"{token_type_name(token.type)} [行 {token.line}]"
            if token.value:
                text += f', "{token.value}"'
            elif token.type is TokenType.INT:
                text += f", {token.int_value}"
            elif token.type is TokenType.FLOAT:
                text += ", %g" % token.float_value
            elif token.type is TokenType.STRING:
                text += f', "{token.string_value}"'
            lines.append(text + "\n")
        return "".join(lines)

    def print_tokens(self, tokens: list[Token]) -> None:
        print(self.format_tokens(tokens), end="")