"""
ScopeLang Recursive Descent Parser

Consumes the token list with a single forward cursor. Top-level input is a
sequence of scopes and statements; the first grammar violation aborts the
whole parse through Debugger.fatal, so callers get either a complete forest
or a ParseError, never partial output.

Expressions have no operator precedence: `+ - * /` all bind at the same
level and fold left to right, so `1 + 2 * 3` is `(1 + 2) * 3`.

Author: xwest
"""

from typing import List, NoReturn, Optional

from ..config import ScopeConfig, DEFAULT_CONFIG
from ..diagnostics import Debugger
from ..lexer.tokens import (
    Token, TokenType, SourceLocation, BINARY_OPERATORS, RETURN_KEYWORD
)
from .ast_nodes import (
    ASTNode, Expression, Literal, Reference, BinaryOp, TypeRef, ReturnType,
    Identifier, Parameter, Parameters, Member, Condition, VariableDeclaration,
    Assignment, ReturnStatement, FunctionCall, OperatorStatement, KeywordScope,
    ForScope, StructScope, ImplementScope, NamedScope, UnnamedScope, Statement
)
from .errors import (
    ParseError, create_missing_symbol_error, create_wrong_category_error,
    create_unexpected_token_error, create_invalid_expression_error,
    create_nesting_too_deep_error
)


# Keyword scopes that must be followed by a name
NAME_REQUIRED_KEYWORDS = frozenset({"function"})


class Parser:
    """
    ScopeLang parser.

    Usage:
        nodes = Parser(tokens).parse()
    """

    def __init__(self, tokens: List[Token], config: Optional[ScopeConfig] = None):
        """
        Args:
            tokens: Tokens from the lexer. A trailing EOF token is optional.
            config: Parser options; DEFAULT_CONFIG when omitted
        """
        self.tokens = tokens
        self.current = 0
        self.config = config or DEFAULT_CONFIG
        self.debugger = Debugger(self.config.debug_level, component="parser")

    def parse(self) -> List[ASTNode]:
        """
        Parse the token stream into a forest of top-level nodes.

        Raises:
            ParseError: On the first grammar violation
        """
        self.current = 0
        self.debugger.debug("Starting parsing process...", 1)
        nodes: List[ASTNode] = []

        try:
            while not self._is_at_end():
                token = self._peek()
                if token.type == TokenType.RESERVED_SCOPE_KEYWORD or self._starts_named_scope():
                    node = self._parse_scope()
                    self.debugger.debug(f"Added node: {node}", 2)
                else:
                    node = self._parse_statement()
                    self.debugger.debug(f"Added top-level statement node: {node}", 2)
                nodes.append(node)
        except RecursionError:
            self._fail(create_nesting_too_deep_error(self._peek()))

        self.debugger.debug(f"Parsing process completed. Total nodes: {len(nodes)}", 1)
        return nodes

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _parse_scope(self) -> Statement:
        """Parse a scope introduced by a scope keyword or a bare identifier."""
        token = self._peek()
        self.debugger.debug(f"Parsing scope: {token.lexeme}", 2)

        if token.type == TokenType.IDENTIFIER:
            return self._parse_named_scope()

        if token.lexeme == "for":
            return self._parse_for_scope()
        if token.lexeme == "struct":
            return self._parse_struct_scope()
        if token.lexeme == "implement":
            return self._parse_implement_scope()
        return self._parse_keyword_scope()

    def _parse_keyword_scope(self) -> KeywordScope:
        """`<keyword> [name] [( params )] [: type] { body }`"""
        keyword_token = self._advance()
        keyword = keyword_token.lexeme

        name = None
        if self._check_type(TokenType.IDENTIFIER):
            name_token = self._advance()
            name = Identifier(name_token.lexeme, name_token.location)
            self.debugger.debug(f"Parsed identifier: {name.name}", 2)
        elif keyword in NAME_REQUIRED_KEYWORDS:
            self._fail(create_wrong_category_error(
                TokenType.IDENTIFIER, f"after scope keyword '{keyword}'", self._peek()
            ))

        parameters = None
        if self._check_symbol("("):
            parameters = self._parse_parameters()

        return_type = None
        if self._match_symbol(":"):
            type_token = self._expect_type(TokenType.RESERVED_TYPE_KEYWORD, "as return type")
            return_type = ReturnType(type_token.lexeme, type_token.location)
            self.debugger.debug(f"Parsed return type: {return_type.name}", 2)

        body = self._parse_body(f"'{keyword}' scope")

        return KeywordScope(
            keyword=keyword,
            name=name,
            parameters=parameters,
            return_type=return_type,
            body=body,
            location=keyword_token.location
        )

    def _parse_for_scope(self) -> ForScope:
        """`for ( <expression> ) { body }`"""
        start_token = self._advance()

        self._expect_symbol("(", "to start 'for' loop condition")
        expression = self._parse_expression()
        self._expect_symbol(")", "to close 'for' loop condition")
        condition = Condition(expression, expression.location)

        body = self._parse_body("'for' scope")
        return ForScope(condition=condition, body=body, location=start_token.location)

    def _parse_struct_scope(self) -> StructScope:
        """`struct { (<type> <name> ;)* }`"""
        start_token = self._advance()
        self._expect_symbol("{", "to start struct body")

        members: List[Member] = []
        while not self._check_symbol("}") and not self._is_at_end():
            type_token = self._expect_type(TokenType.RESERVED_TYPE_KEYWORD, "in struct")
            name_token = self._expect_type(TokenType.IDENTIFIER, "in struct")
            self._expect_symbol(";", "after struct member declaration")

            members.append(Member(
                name=name_token.lexeme,
                type=TypeRef(type_token.lexeme, type_token.location),
                location=name_token.location
            ))
            self.debugger.debug(
                f"Parsed struct member: {name_token.lexeme} with type: {type_token.lexeme}", 2
            )

        self._expect_symbol("}", "to close struct")
        return StructScope(members=members, location=start_token.location)

    def _parse_implement_scope(self) -> ImplementScope:
        """`implement { function-scope* }`"""
        start_token = self._advance()
        self._expect_symbol("{", "to start implement body")

        functions: List[KeywordScope] = []
        while not self._check_symbol("}") and not self._is_at_end():
            token = self._peek()
            if token.type == TokenType.RESERVED_SCOPE_KEYWORD and token.lexeme == "function":
                functions.append(self._parse_keyword_scope())
            else:
                self._fail(create_unexpected_token_error(
                    "'function' inside implement scope", token
                ))

        self._expect_symbol("}", "to close implement scope")
        return ImplementScope(functions=functions, location=start_token.location)

    def _parse_named_scope(self) -> NamedScope:
        """`<identifier> [( params )] [: type] { body }`"""
        name_token = self._advance()

        parameters = None
        if self._check_symbol("("):
            parameters = self._parse_parameters()

        return_type = None
        if self._match_symbol(":"):
            type_token = self._expect_type(TokenType.RESERVED_TYPE_KEYWORD, "as return type")
            return_type = ReturnType(type_token.lexeme, type_token.location)

        body = self._parse_body(f"named scope '{name_token.lexeme}'")
        self.debugger.debug(f"Parsed named scope: {name_token.lexeme}", 2)
        return NamedScope(
            name=name_token.lexeme,
            body=body,
            parameters=parameters,
            return_type=return_type,
            location=name_token.location
        )

    def _parse_unnamed_scope(self) -> UnnamedScope:
        start_token = self._peek()
        body = self._parse_body("unnamed scope")
        self.debugger.debug("Parsed unnamed scope.", 2)
        return UnnamedScope(body=body, location=start_token.location)

    def _parse_body(self, context: str) -> List[Statement]:
        """`{ statement* }`"""
        self._expect_symbol("{", f"to start {context} body")

        statements: List[Statement] = []
        while not self._check_symbol("}") and not self._is_at_end():
            statements.append(self._parse_statement())

        self._expect_symbol("}", f"to close {context}")
        return statements

    def _parse_parameters(self) -> Parameters:
        """`( [<type> <name> (, <type> <name>)*] )`"""
        open_token = self._advance()
        params: List[Parameter] = []

        if self._match_symbol(")"):
            return Parameters(params, open_token.location)

        while True:
            type_token = self._expect_type(TokenType.RESERVED_TYPE_KEYWORD, "in parameter list")
            name_token = self._expect_type(TokenType.IDENTIFIER, "after type keyword")

            params.append(Parameter(
                name=name_token.lexeme,
                type=TypeRef(type_token.lexeme, type_token.location),
                location=name_token.location
            ))
            self.debugger.debug(
                f"Parsed parameter: {name_token.lexeme} with type: {type_token.lexeme}", 2
            )

            if not self._match_symbol(","):
                break

        self._expect_symbol(")", "or ',' in parameter list")
        return Parameters(params, open_token.location)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Statement:
        """Parse one statement, dispatching on the leading token."""
        token = self._peek()
        self.debugger.debug(f"Parsing statement or scope: {token.describe()}", 2)

        if token.type == TokenType.IDENTIFIER:
            if token.lexeme == RETURN_KEYWORD:
                return self._parse_return_statement()

            if self._starts_named_scope():
                return self._parse_named_scope()

            following = self._peek_next()
            if following.is_symbol("="):
                return self._parse_assignment()
            if following.is_symbol("("):
                return self._parse_function_call()

            self._fail(create_unexpected_token_error(
                f"'=', '{{', ':' or '(' after identifier '{token.lexeme}'", following
            ))

        if token.is_symbol("{"):
            return self._parse_unnamed_scope()

        if token.type == TokenType.RESERVED_SCOPE_KEYWORD:
            return self._parse_scope()

        if token.type == TokenType.RESERVED_TYPE_KEYWORD:
            return self._parse_variable_declaration()

        if token.type == TokenType.RESERVED_OPERATOR_KEYWORD:
            return self._parse_operator_statement()

        self._fail(create_unexpected_token_error("a statement or scope", token))

    def _parse_return_statement(self) -> ReturnStatement:
        """`return [<expression>] ;`"""
        start_token = self._advance()

        expression = None
        if not self._check_symbol(";"):
            expression = self._parse_expression()

        self._expect_symbol(";", "after return statement")
        self.debugger.debug("Parsed return statement.", 2)
        return ReturnStatement(expression=expression, location=start_token.location)

    def _parse_assignment(self) -> Assignment:
        """`<name> = <expression> ;`"""
        name_token = self._advance()
        self._advance()  # '='

        expression = self._parse_expression()
        self._expect_symbol(";", "after variable assignment")
        self.debugger.debug(f"Parsed variable assignment: {name_token.lexeme}", 2)
        return Assignment(target=name_token.lexeme, expression=expression,
                          location=name_token.location)

    def _parse_function_call(self) -> FunctionCall:
        """`<name> ( args ) ;`"""
        name_token = self._advance()
        arguments = self._parse_arguments("function call")
        self._expect_symbol(";", "after function call")
        self.debugger.debug(f"Parsed function call: {name_token.lexeme}", 2)
        return FunctionCall(callee=name_token.lexeme, arguments=arguments,
                            location=name_token.location)

    def _parse_variable_declaration(self) -> VariableDeclaration:
        """`<type> <name> = <expression> ;`"""
        type_token = self._advance()
        name_token = self._expect_type(TokenType.IDENTIFIER, "after type keyword")
        self._expect_symbol("=", "after identifier in variable declaration")

        initializer = self._parse_expression()
        self._expect_symbol(";", "after variable declaration")
        self.debugger.debug(
            f"Parsed variable declaration: {name_token.lexeme} with type: {type_token.lexeme}", 2
        )
        return VariableDeclaration(
            name=name_token.lexeme,
            type=TypeRef(type_token.lexeme, type_token.location),
            initializer=initializer,
            location=type_token.location
        )

    def _parse_operator_statement(self) -> OperatorStatement:
        """`out|inc|dec|jump ( args ) ;`"""
        keyword_token = self._advance()
        arguments = self._parse_arguments("operator arguments")
        self._expect_symbol(";", "after operator statement")
        self.debugger.debug(f"Parsed operator statement: {keyword_token.lexeme}", 2)
        return OperatorStatement(keyword=keyword_token.lexeme, arguments=arguments,
                                 location=keyword_token.location)

    def _parse_arguments(self, context: str) -> List[Expression]:
        """`( [<expression> (, <expression>)*] )`"""
        self._expect_symbol("(", f"to start {context}")
        arguments: List[Expression] = []

        if self._match_symbol(")"):
            return arguments

        while True:
            arguments.append(self._parse_expression())
            if not self._match_symbol(","):
                break

        self._expect_symbol(")", f"or ',' after {context}")
        return arguments

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Expression:
        """Left-associative fold over + - * / with a single precedence level."""
        left = self._parse_primary()

        while self._peek().type == TokenType.SYMBOL and self._peek().lexeme in BINARY_OPERATORS:
            operator_token = self._advance()
            right = self._parse_primary()
            left = BinaryOp(operator_token.lexeme, left, right, operator_token.location)

        return left

    def _parse_primary(self) -> Expression:
        token = self._peek()

        if token.is_symbol("("):
            self._advance()
            expression = self._parse_expression()
            self._expect_symbol(")", "to close parenthesis")
            return expression

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            self.debugger.debug(f"Parsed primary expression: {token.lexeme}", 2)
            return Reference(token.lexeme, token.location)

        if token.type == TokenType.LITERAL:
            self._advance()
            self.debugger.debug(f"Parsed primary expression: {token.lexeme}", 2)
            return Literal(token.lexeme, token.location)

        self._fail(create_invalid_expression_error(token))

    # ------------------------------------------------------------------
    # Cursor utilities
    # ------------------------------------------------------------------

    def _fail(self, error: ParseError) -> NoReturn:
        self.debugger.fatal(error)

    def _starts_named_scope(self) -> bool:
        """
        True when the identifier under the cursor opens a scope rather than a
        call or assignment: `name {`, `name :`, `name ( <type> ...` or
        `name ( ) {` / `name ( ) :`.
        """
        token = self._peek()
        if token.type != TokenType.IDENTIFIER or token.lexeme == RETURN_KEYWORD:
            return False

        following = self._peek_next()
        if following.is_symbol("{") or following.is_symbol(":"):
            return True
        if not following.is_symbol("("):
            return False

        # A call argument never starts with a type keyword
        inside = self._token_at(self.current + 2)
        if inside.type == TokenType.RESERVED_TYPE_KEYWORD:
            return True
        after = self._token_at(self.current + 3)
        return inside.is_symbol(")") and (after.is_symbol("{") or after.is_symbol(":"))

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        """Return current token without consuming; EOF when exhausted."""
        return self._token_at(self.current)

    def _peek_next(self) -> Token:
        return self._token_at(self.current + 1)

    def _token_at(self, index: int) -> Token:
        if index < len(self.tokens):
            return self.tokens[index]
        return self._eof_token()

    def _eof_token(self) -> Token:
        if self.tokens:
            last = self.tokens[-1]
            if last.type == TokenType.EOF:
                return last
            location = SourceLocation(
                last.location.filename,
                last.location.line,
                last.location.column + len(last.lexeme),
                last.location.offset + len(last.lexeme)
            )
        else:
            location = SourceLocation("<eof>", 1, 1, 0)
        return Token(TokenType.EOF, "", None, location)

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._peek()
        if not self._is_at_end():
            self.current += 1
        return token

    def _check_symbol(self, symbol: str) -> bool:
        return self._peek().is_symbol(symbol)

    def _check_type(self, token_type: TokenType) -> bool:
        return self._peek().type == token_type

    def _match_symbol(self, symbol: str) -> bool:
        if self._check_symbol(symbol):
            self._advance()
            return True
        return False

    def _expect_symbol(self, symbol: str, context: str = "") -> Token:
        """Consume `symbol` or abort the parse."""
        if self._check_symbol(symbol):
            return self._advance()
        self._fail(create_missing_symbol_error(symbol, context, self._peek()))

    def _expect_type(self, token_type: TokenType, context: str = "") -> Token:
        """Consume a token of `token_type` or abort the parse."""
        if self._check_type(token_type):
            return self._advance()
        self._fail(create_wrong_category_error(token_type, context, self._peek()))


def parse_string(source: str, filename: str = "<string>",
                 config: Optional[ScopeConfig] = None) -> List[ASTNode]:
    """
    Convenience function to parse a source string.

    Raises:
        LexerError: If lexing fails
        ParseError: If parsing fails
    """
    from ..lexer import tokenize_string

    tokens = tokenize_string(source, filename, config)
    return Parser(tokens, config).parse()


def parse_file(filepath: str, config: Optional[ScopeConfig] = None) -> List[ASTNode]:
    """
    Convenience function to parse a source file.

    Raises:
        LexerError: If lexing fails
        ParseError: If parsing fails
        OSError: If the file cannot be read
    """
    from ..lexer import tokenize_file

    tokens = tokenize_file(filepath, config)
    return Parser(tokens, config).parse()
