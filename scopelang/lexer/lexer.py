"""
ScopeLang Lexer - turns source text into tokens

All token categories are compiled into one alternation with a named group
per category. At each position the first alternative that matches wins, so
keywords shadow identifiers and comments shadow the `/` symbol.
"""

import re
from typing import List, Optional, Pattern

from ..config import ScopeConfig, DEFAULT_CONFIG
from ..diagnostics import Debugger
from .tokens import (
    Token, TokenType, SourceLocation, DISCARDED_GROUPS, build_token_patterns
)
from .errors import LexerError, create_invalid_character_error


_PATTERN_CACHE = {}


def compile_token_pattern(extended_scope_keywords: bool = False) -> Pattern:
    """Compile (once per keyword set) the combined token regex."""
    pattern = _PATTERN_CACHE.get(extended_scope_keywords)
    if pattern is None:
        alternatives = [
            f"(?P<{name}>{regex})"
            for name, regex in build_token_patterns(extended_scope_keywords)
        ]
        pattern = re.compile("|".join(alternatives), re.DOTALL)
        _PATTERN_CACHE[extended_scope_keywords] = pattern
    return pattern


class Lexer:
    """
    ScopeLang lexical analyzer.

    Scans strictly left to right. Whitespace and comments are matched and
    dropped; every other match becomes a Token. The returned list always
    ends with a single EOF token.
    """

    def __init__(self, source: str, filename: str = "<string>",
                 config: Optional[ScopeConfig] = None):
        """
        Args:
            source: Source code string
            filename: Name used in source locations
            config: Lexing options; DEFAULT_CONFIG when omitted
        """
        self.source = source
        self.filename = filename
        self.config = config or DEFAULT_CONFIG
        self.debugger = Debugger(self.config.debug_level, component="lexer")
        self.pattern = compile_token_pattern(self.config.extended_scope_keywords)
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.skipped: List[SourceLocation] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the whole source.

        Returns:
            List of tokens ending with EOF

        Raises:
            LexerError: On an unmatched character when strict_lexing is set
        """
        self.debugger.debug("Starting tokenization...", 1)
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []
        self.skipped = []

        while self.pos < len(self.source):
            match = self.pattern.match(self.source, self.pos)
            if match is None:
                self._unmatched_character()
                continue

            kind = match.lastgroup
            lexeme = match.group(kind)
            location = self._location()

            if kind in DISCARDED_GROUPS:
                self.debugger.debug(f"Ignored token: {kind}", 3)
            else:
                token_type = TokenType[kind]
                value = int(lexeme) if token_type == TokenType.LITERAL else None
                token = Token(token_type, lexeme, value, location)
                self.tokens.append(token)
                self.debugger.debug(f"Generated token: {token}", 2)

            self._advance_over(lexeme)

        self.tokens.append(Token(TokenType.EOF, "", None, self._location()))
        self.debugger.debug(f"Tokenization completed. Total tokens: {len(self.tokens) - 1}", 1)
        return self.tokens

    def _unmatched_character(self):
        char = self.source[self.pos]
        location = self._location()
        if self.config.strict_lexing:
            error = create_invalid_character_error(char, location)
            self.debugger.error(error.message, 1)
            raise error
        self.debugger.debug(f"Skipped unmatched character {char!r} at {location}", 2)
        self.skipped.append(location)
        self._advance_over(char)

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance_over(self, text: str):
        """Advance past `text`, updating line and column."""
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(text) - text.rfind("\n")
        else:
            self.column += len(text)
        self.pos += len(text)


def tokenize_string(source: str, filename: str = "<string>",
                    config: Optional[ScopeConfig] = None) -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Raises:
        LexerError: If lexing fails
    """
    return Lexer(source, filename, config).tokenize()


def tokenize_file(filepath: str, config: Optional[ScopeConfig] = None) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If lexing fails
        OSError: If the file cannot be read
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read()

    return tokenize_string(source, filepath, config)
