[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "novalang"
version = "0.1.0"
description = "Lexer, compile context, error reporting and reference-counted runtime values for the Nova language."
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "lexer", "tokenizer", "runtime", "nova"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["novalang"]

[tool.pytest.ini_options]
addopts = "-ra"
