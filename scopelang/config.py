"""
Per-call configuration for the ScopeLang front end.

A ScopeConfig is handed to the lexer and parser explicitly, so two parses in
the same process can run with different verbosity or lexing rules.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class ScopeConfig:
    """
    Options shared by the lexer and the parser.

    Attributes:
        debug_level: Debugger verbosity. 0 is silent, 1 traces phase start
            and end, 2 traces every token and node, 3 also traces discarded
            whitespace and comments.
        strict_lexing: Raise LexerError on characters no token matches.
            When False they are skipped.
        extended_scope_keywords: Also reserve while/if/elif/else/finally as
            scope keywords.
    """
    debug_level: int = 0
    strict_lexing: bool = True
    extended_scope_keywords: bool = False

    def with_overrides(self, **changes) -> "ScopeConfig":
        return replace(self, **changes)


DEFAULT_CONFIG = ScopeConfig()
