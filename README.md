# novalang

Building blocks for the Nova language, a small indentation-based language
with Python-like syntax. The package has no dependencies beyond the
standard library.

## Modules

- `novalang.lexer`: `Lexer` turns source text into a list of `Token`s.
  Indentation becomes `INDENT` and `DEDENT` tokens. `token_type_name` gives
  the display name of a `TokenType`, such as `TOK_ID`.
- `novalang.context`: `Context` holds one compilation's state. That state
  is the global variable, function and struct tables, the list of syntax
  tree nodes (`ast`) and the collected diagnostics. It also has
  `generate_local_var_name` for names that are unique to a scope.
- `novalang.errors`: `ErrorLevel` names the category of a diagnostic.
  `CompileError` is one diagnostic. `ErrorHandler` collects diagnostics
  and formats them with `get_error_string` / `print_errors`.
- `novalang.memory`: `MemoryManager` hands out reference-counted
  `MemoryBlock`s. A new block starts with a count of zero and waits in an
  unreferenced table until it is retained. Releasing a block to zero frees
  it and sweeps the table. Using a freed block raises `NovaMemoryError`.
- `novalang.strings`: Unicode strings stored in memory blocks. This module
  covers creation from bytes or UTF-16 code units, encoding, concatenation,
  length in code units and printing.
- `novalang.lists`: `list_to_string` renders a list of a given
  `ElementType`. It shows at most ten elements; a longer list ends in `...`.
- `novalang.dicts`: `NovaDict` is a hashed dictionary with string or
  integer keys. Its values are ints, floats, bools or references, and
  `ValueKind` names them. String keys are memory blocks. The dictionary
  retains a key when it stores it and releases the key on removal or on
  `free()`. `get_str` / `get_int` raise `KeyError` when the key is missing
  or holds a value of another kind.
- `novalang.dictformat`: `dict_to_string` renders a dictionary as
  `{key: value, ...}` in storage order. `format_entry` renders one entry.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Tokenizing source

```python
from novalang.context import Context
from novalang.lexer import Lexer

ctx = Context()
lexer = Lexer(ctx, "x = 1\nif x:\n    print(x)\n")
tokens = lexer.tokenize()
lexer.print_tokens(tokens)
```

An unterminated string is recorded in the context and then raises
`LexError`. The lexer records other lexical problems in the context and
keeps scanning. Examples are an unknown character, a bad indentation, a
lone `!` or a number out of range.

```python
if ctx.has_errors():
    ctx.print_errors()
```

## Runtime values

```python
from novalang.memory import MemoryManager
from novalang.strings import create_string_from_system, concat_strings, string_to_encoding
from novalang.dicts import NovaDict, ValueKind
from novalang.dictformat import dict_to_string

manager = MemoryManager()
hello = create_string_from_system(manager, b"hello, ")
world = create_string_from_system(manager, b"world")
joined = concat_strings(manager, hello, world)
print(string_to_encoding(joined, "utf-8").decode("utf-8"))   # hello, world

d = NovaDict(manager, 0, 0)
d.set_str(hello, 42, ValueKind.INT)
print(dict_to_string(d), len(d))                              # {"hello, ": 42} 1
```

## What the package does not do

The package stops at tokens. It has no parser that builds a syntax tree,
no type checker and no code generation. It cannot compile or run a Nova
program, and it installs no command. `Context` accepts syntax tree nodes
but defines no node classes of its own.