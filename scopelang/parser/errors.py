"""
Error handling for the ScopeLang parser.

Parsing stops at the first structural violation. The resulting ParseError
carries the offending token (the EOF token for premature end of input) and
a description of the construct that was expected there.

Author: xwest
"""

from typing import Optional, List

from ..lexer.tokens import Token, TokenType, SourceLocation
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Raised when the token stream violates the grammar.

    Attributes:
        token: Token found at the failure point (EOF at end of input)
        expected: Description of what the parser wanted instead
        diagnostic: Rendered diagnostic with code and location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        token: Optional[Token] = None,
        expected: Optional[str] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.token = token
        self.expected = expected
        self.diagnostic = Diagnostic(
            message=message,
            location=location if location is not None else SourceLocation("<unknown>", 0, 0, 0),
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    @property
    def location(self) -> SourceLocation:
        return self.diagnostic.location

    @property
    def title(self) -> Optional[str]:
        """Short name of the error code, e.g. "Unexpected token"."""
        return PARSER_ERROR_CODES.get(self.code)

    @property
    def at_end_of_input(self) -> bool:
        return self.token is not None and self.token.type == TokenType.EOF

    def __str__(self) -> str:
        return str(self.diagnostic)


PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Expected symbol not found",
    "P003": "Wrong token category",
    "P005": "Invalid expression",
    "P010": "Unexpected end of input",
    "P020": "Parameter list at top level",
    "P030": "Nesting too deep",
}


_CLOSING_HINTS = {
    ";": "Add a semicolon ';' to end the statement",
    ")": "Add a closing parenthesis ')'",
    "}": "Add a closing brace '}'",
    "{": "Add an opening brace '{' to start the scope body",
    ",": "Separate items with ','",
    "=": "Add an assignment operator '='",
}


def create_unexpected_eof_error(expected: str, found: Token) -> ParseError:
    """Create an error for input that ended while `expected` was pending."""
    return ParseError(
        message=f"Unexpected end of input, expected {expected}",
        location=found.location,
        token=found,
        expected=expected,
        code="P010",
        help_text=f"The parser reached the end of the input while expecting {expected}.",
    )


def create_missing_symbol_error(symbol: str, context: str, found: Token) -> ParseError:
    """Create an error for a required symbol that is not present."""
    expected = f"'{symbol}' {context}".strip()
    if found.type == TokenType.EOF:
        error = create_unexpected_eof_error(expected, found)
        if symbol in _CLOSING_HINTS:
            error.diagnostic.suggestions = [_CLOSING_HINTS[symbol]]
        return error

    return ParseError(
        message=f"Expected {expected}, but found {found.describe()}",
        location=found.location,
        token=found,
        expected=expected,
        code="P002",
        suggestions=[_CLOSING_HINTS[symbol]] if symbol in _CLOSING_HINTS else None,
    )


def create_wrong_category_error(expected: TokenType, context: str, found: Token) -> ParseError:
    """Create an error for a token of the wrong category (e.g. not a type keyword)."""
    readable = expected.name.lower().replace("_", " ")
    description = f"{readable} {context}".strip()
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error(description, found)

    return ParseError(
        message=f"Expected {description}, but found {found.describe()}",
        location=found.location,
        token=found,
        expected=description,
        code="P003",
    )


def create_unexpected_token_error(expected: str, found: Token) -> ParseError:
    """Create an error for a token no grammar rule accepts here."""
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error(expected, found)

    return ParseError(
        message=f"Unexpected token {found.describe()}, expected {expected}",
        location=found.location,
        token=found,
        expected=expected,
        code="P001",
        help_text=f"The parser expected {expected} at this position.",
    )


def create_invalid_expression_error(found: Token) -> ParseError:
    """Create an error for a token that cannot start an expression."""
    expected = "an identifier, integer literal or '('"
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error("an expression", found)

    return ParseError(
        message=f"Expected primary expression, but found {found.describe()}",
        location=found.location,
        token=found,
        expected=expected,
        code="P005",
        suggestions=["Ensure every operator has an operand on both sides"],
    )


def create_nesting_too_deep_error(found: Token) -> ParseError:
    """Create an error for scopes or parentheses nested past the recursion limit."""
    return ParseError(
        message=f"Nesting too deep near {found.describe()}",
        location=found.location,
        token=found,
        code="P030",
        help_text="Scopes and parenthesized expressions are nested deeper than the parser supports.",
        suggestions=["Split deeply nested blocks into separate named scopes"],
    )
