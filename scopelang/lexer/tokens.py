"""
Token definitions for the ScopeLang lexer.

ScopeLang has very few token categories. Keywords are split by the role they
play in the grammar (scope, type, operator) rather than getting one token
type each, so the parser dispatches on category and checks the lexeme only
where a keyword needs special handling.

The order of TOKEN_PATTERNS is significant: the lexer builds a single
alternation from it and the first alternative that matches at a position
wins.

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, FrozenSet, List, Tuple


class TokenType(Enum):
    """Categories of ScopeLang tokens."""

    RESERVED_SCOPE_KEYWORD = auto()     # function, for, struct, implement
    RESERVED_TYPE_KEYWORD = auto()      # int
    RESERVED_OPERATOR_KEYWORD = auto()  # out, inc, dec, jump
    IDENTIFIER = auto()                 # foo, _tmp, x1
    LITERAL = auto()                    # 42
    SYMBOL = auto()                     # { } ( ) ; , : = < > + - * /
    EOF = auto()                        # end of stream


@dataclass(frozen=True)
class SourceLocation:
    """A position in the source text, used for error reporting."""
    filename: str
    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Token:
    """
    A lexical token.

    `lexeme` is the exact text matched. `value` holds the integer value of
    LITERAL tokens and is None for everything else.
    """
    type: TokenType
    lexeme: str
    value: Any
    location: SourceLocation

    def __str__(self) -> str:
        if self.type == TokenType.EOF:
            return "EOF"
        return f"{self.type.name}({self.lexeme!r})"

    def describe(self) -> str:
        """Short human readable form used in error messages."""
        if self.type == TokenType.EOF:
            return "end of input"
        return f"'{self.lexeme}'"

    def is_symbol(self, symbol: str) -> bool:
        return self.type == TokenType.SYMBOL and self.lexeme == symbol

    @property
    def is_keyword(self) -> bool:
        return self.type in KEYWORD_TYPES

    @property
    def is_identifier(self) -> bool:
        return self.type == TokenType.IDENTIFIER


# Scope keywords that take part in the matching pattern
SCOPE_KEYWORDS: Tuple[str, ...] = ("function", "for", "struct", "implement")

# Conceptually reserved by the grammar but only matched when
# ScopeConfig.extended_scope_keywords is set
EXTENDED_SCOPE_KEYWORDS: Tuple[str, ...] = ("while", "if", "elif", "else", "finally")

TYPE_KEYWORDS: Tuple[str, ...] = ("int",)

OPERATOR_KEYWORDS: Tuple[str, ...] = ("out", "inc", "dec", "jump")

BINARY_OPERATORS: FrozenSet[str] = frozenset("+-*/")

# `return` is lexically an identifier; the parser recognises it by lexeme
RETURN_KEYWORD = "return"

KEYWORD_TYPES = frozenset({
    TokenType.RESERVED_SCOPE_KEYWORD,
    TokenType.RESERVED_TYPE_KEYWORD,
    TokenType.RESERVED_OPERATOR_KEYWORD,
})


def _keyword_pattern(words) -> str:
    # Whole words only, so `format` does not lex as `for` + `mat`
    return r"(?:%s)(?![A-Za-z0-9_])" % "|".join(words)


def build_token_patterns(extended_scope_keywords: bool = False) -> List[Tuple[str, str]]:
    """
    Return the (group name, regex) pairs in precedence order.

    Group names are the TokenType names for emitted categories; comments and
    whitespace use their own names and are discarded by the lexer.
    """
    scope_words = SCOPE_KEYWORDS
    if extended_scope_keywords:
        scope_words = SCOPE_KEYWORDS + EXTENDED_SCOPE_KEYWORDS

    return [
        (TokenType.RESERVED_SCOPE_KEYWORD.name, _keyword_pattern(scope_words)),
        (TokenType.RESERVED_TYPE_KEYWORD.name, _keyword_pattern(TYPE_KEYWORDS)),
        (TokenType.RESERVED_OPERATOR_KEYWORD.name, _keyword_pattern(OPERATOR_KEYWORDS)),
        (TokenType.IDENTIFIER.name, r"[A-Za-z_][A-Za-z0-9_]*"),
        (TokenType.LITERAL.name, r"\d+"),
        ("SINGLE_LINE_COMMENT", r"//[^\n]*"),
        ("MULTI_LINE_COMMENT", r"/\*.*?\*/"),
        (TokenType.SYMBOL.name, r"[{}();,:=<>+\-*/]"),
        ("WHITESPACE", r"\s+"),
    ]


DISCARDED_GROUPS: FrozenSet[str] = frozenset({
    "SINGLE_LINE_COMMENT",
    "MULTI_LINE_COMMENT",
    "WHITESPACE",
})
