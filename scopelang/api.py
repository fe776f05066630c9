"""
High level entry points: tokenize, parse, tagged parse results and the
boolean check harness used by `scopec check`.

Author: xwest
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import ScopeConfig, DEFAULT_CONFIG
from .diagnostics import Debugger
from .lexer import Lexer, Token, LexerError
from .parser import Parser, ParseError, ASTNode, ASTNodeType

# Node categories that may only appear nested inside a scope
NESTED_ONLY_TYPES = frozenset({ASTNodeType.PARAMETERS, ASTNodeType.PARAMETER})


def tokenize(source: str, config: Optional[ScopeConfig] = None,
             filename: str = "<string>") -> List[Token]:
    return Lexer(source, filename, config).tokenize()


def parse(source: str, config: Optional[ScopeConfig] = None,
          filename: str = "<string>") -> List[ASTNode]:
    """
    Tokenize and parse `source`.

    Returns:
        The forest of top-level nodes

    Raises:
        LexerError: On an unmatched character in strict mode
        ParseError: On the first grammar violation
    """
    tokens = tokenize(source, config, filename)
    nodes = Parser(tokens, config).parse()
    validate_forest(nodes)
    return nodes


@dataclass
class ParseResult:
    """Outcome of `try_parse`: either a forest or the first error."""
    nodes: List[ASTNode] = field(default_factory=list)
    error: Optional[Union[LexerError, ParseError]] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def has_errors(self) -> bool:
        return self.error is not None


def try_parse(source: str, config: Optional[ScopeConfig] = None,
              filename: str = "<string>") -> ParseResult:
    """Like `parse`, but returns the error in a ParseResult instead of raising."""
    try:
        nodes = parse(source, config, filename)
    except (LexerError, ParseError) as e:
        return ParseResult(error=e)
    return ParseResult(nodes=nodes)


def validate_forest(nodes: Iterable[ASTNode]) -> None:
    """
    Reject parameter lists at the top level of a forest.

    The parser cannot produce one itself; this guards forests assembled by
    other code.
    """
    for node in nodes:
        if node.node_type in NESTED_ONLY_TYPES:
            raise ParseError(
                "Parameter scopes can not be top level scopes",
                getattr(node, "location", None),
                expected="a scope or statement",
                code="P020",
            )


@dataclass(frozen=True)
class CaseResult:
    source: str
    expected: bool
    actual: bool
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.expected == self.actual


# (source, expected outcome)
DEFAULT_CASES: Tuple[Tuple[str, bool], ...] = (
    ("for(3){ out(1); }", True),                        # for loops
    ("foo{}", True),                                    # named scopes
    ("foo(int i){ int a = i; }", True),                 # named scopes with parameters
    ("function foo(int i){ int a = i; }", True),        # function scopes
    ("{}", True),                                       # bare scopes
    ("{{}}", True),                                     # nested scopes
    ("struct{ int a; }", True),                         # structs
    ("implement{ function get: int { return 1; } }", True),
    ("for(3){ out(1); ", False),                        # unclosed scope
    ("function (int i){}", False),                      # missing name
)


def evaluate_scope(source: str, config: Optional[ScopeConfig] = None) -> bool:
    """Return True when `source` tokenizes and parses cleanly."""
    config = config or DEFAULT_CONFIG
    result = try_parse(source, config)
    if result.has_errors():
        Debugger(config.debug_level, component="harness").error(
            f"{source!r}: {result.error.message}", 1
        )
        return False
    return True


def run_cases(cases: Sequence[Tuple[str, bool]] = DEFAULT_CASES,
              config: Optional[ScopeConfig] = None) -> List[CaseResult]:
    results = []
    for source, expected in cases:
        outcome = try_parse(source, config)
        results.append(CaseResult(
            source=source,
            expected=expected,
            actual=outcome.ok,
            error=outcome.error.message if outcome.error is not None else None,
        ))
    return results
