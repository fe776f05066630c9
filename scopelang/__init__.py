"""
ScopeLang Front End

Tokenizer and recursive descent parser for ScopeLang, a small experimental
language in which every brace-delimited scope can act as a function, loop,
structure or implement block depending on what introduces it.

Architecture:
    scopelang/
    ├── lexer/           # Tokenization
    ├── parser/          # Syntax analysis and AST generation
    ├── config.py        # Per-call options
    ├── diagnostics.py   # Leveled debug/error/fatal logging
    ├── api.py           # tokenize / parse / try_parse / check harness
    └── cli.py           # scopec command

Author: xwest
"""

import logging

__version__ = "0.1.0"
__license__ = "MIT"

from .config import ScopeConfig
from .lexer import Lexer, Token, TokenType, LexerError
from .parser import Parser, ParseError
from .api import tokenize, parse, try_parse, ParseResult, evaluate_scope

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "Token",
    "TokenType",
    "ScopeConfig",

    # Entry points
    "tokenize",
    "parse",
    "try_parse",
    "ParseResult",
    "evaluate_scope",

    # Errors
    "LexerError",
    "ParseError",

    # Version info
    "__version__",
    "__license__",
]
