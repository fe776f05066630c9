"""
ScopeLang Parser Package

Recursive descent parser producing a forest of typed AST nodes. Parsing
stops at the first grammar violation with a ParseError.

Author: xwest
"""

from .ast_nodes import *
from .parser import Parser, parse_string, parse_file
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser", "parse_string", "parse_file",

    # AST nodes
    "ASTNode", "ASTNodeType", "ASTVisitor",
    "KeywordScope", "ForScope", "StructScope", "ImplementScope",
    "NamedScope", "UnnamedScope",
    "Identifier", "Parameters", "Parameter", "TypeRef", "ReturnType",
    "Member", "Condition",
    "VariableDeclaration", "Assignment", "ReturnStatement", "FunctionCall",
    "OperatorStatement",
    "Expression", "BinaryOp", "Literal", "Reference",

    # Error handling
    "ParseError",
]
