"""
ScopeLang Lexer Package

Regex-driven tokenizer producing typed tokens with source locations.
Whitespace and comments are discarded.

Author: xwest
"""

from .tokens import Token, TokenType, SourceLocation
from .lexer import Lexer, tokenize_string, tokenize_file
from .errors import LexerError, Diagnostic

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "LexerError",
    "Diagnostic",
    "tokenize_string",
    "tokenize_file",
]
