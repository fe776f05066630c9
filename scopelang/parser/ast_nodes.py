"""
Abstract Syntax Tree node definitions for ScopeLang.

Every node is one of a closed set of variant classes that carries only its
legal payload (a Parameter owns a name and a TypeRef, a StructScope owns
Members, ...). The generic "category + value + children" view is still
available on every node through `node_type`, `value` and `children()`.

Nodes hold no parent references and never share children.

Author: xwest
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from ..lexer.tokens import SourceLocation


class ASTNodeType(Enum):
    """Syntactic categories of AST nodes."""

    SCOPE = "Scope"
    NAMED_SCOPE = "NamedScope"
    UNNAMED_SCOPE = "UnnamedScope"
    IDENTIFIER = "Identifier"
    PARAMETERS = "Parameters"
    PARAMETER = "Parameter"
    TYPE = "Type"
    RETURN_TYPE = "ReturnType"
    MEMBER = "Member"
    CONDITION = "Condition"
    VARIABLE_DECLARATION = "VariableDeclaration"
    ASSIGNMENT = "Assignment"
    RETURN_STATEMENT = "ReturnStatement"
    FUNCTION_CALL = "FunctionCall"
    OPERATOR = "Operator"
    EXPRESSION = "Expression"


class ASTVisitor(ABC):
    """Visitor interface. `visit` dispatches to `visit_<ClassName>`."""

    def visit(self, node: 'ASTNode') -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: 'ASTNode') -> Any:
        for child in node.children():
            self.visit(child)


class ASTNode(ABC):
    """Base class for all AST nodes."""

    node_type: ClassVar[ASTNodeType]

    @property
    @abstractmethod
    def value(self) -> str:
        """String payload: a name, literal text, keyword or operator."""

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Owned child nodes in positional order."""

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit(self)

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "value": self.value,
            "children": [child.to_dict() for child in self.children()],
        }

    def pretty(self, indent: int = 0) -> str:
        """Indented one-node-per-line rendering."""
        line = "  " * indent + self.node_type.value
        if self.value:
            line += f" {self.value!r}"
        lines = [line]
        for child in self.children():
            lines.append(child.pretty(indent + 1))
        return "\n".join(lines)

    def __str__(self) -> str:
        return f"{self.node_type.value}(value={self.value!r}, children={len(self.children())})"


# ============================================================================
# Expressions
# ============================================================================

class Expression(ASTNode):
    """Base class for expression nodes."""

    def to_source(self) -> str:
        """Render the expression back to ScopeLang text."""
        return self.value


@dataclass
class Literal(Expression):
    """Integer literal leaf."""
    text: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.EXPRESSION

    @property
    def value(self) -> str:
        return self.text

    @property
    def number(self) -> int:
        return int(self.text)

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class Reference(Expression):
    """Identifier used as a value."""
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.EXPRESSION

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class BinaryOp(Expression):
    """`left <op> right` for op in + - * /."""
    operator: str
    left: Expression
    right: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.OPERATOR

    @property
    def value(self) -> str:
        return self.operator

    def to_source(self) -> str:
        # Operators fold left to right, so only a nested right operand needs parentheses
        right = self.right.to_source()
        if isinstance(self.right, BinaryOp):
            right = f"({right})"
        return f"{self.left.to_source()} {self.operator} {right}"

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


# ============================================================================
# Declarations and annotations
# ============================================================================

@dataclass
class TypeRef(ASTNode):
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.TYPE

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class ReturnType(ASTNode):
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.RETURN_TYPE

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class Identifier(ASTNode):
    """Name of a keyword scope, e.g. `main` in `function main {}`."""
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.IDENTIFIER

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        return []


@dataclass
class Parameter(ASTNode):
    name: str
    type: TypeRef
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PARAMETER

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        return [self.type]


@dataclass
class Parameters(ASTNode):
    params: List[Parameter] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.PARAMETERS

    @property
    def value(self) -> str:
        return ""

    def children(self) -> List[ASTNode]:
        return list(self.params)


@dataclass
class Member(ASTNode):
    """Struct member `<type> <name>;`."""
    name: str
    type: TypeRef
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.MEMBER

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        return [self.type]


@dataclass
class Condition(ASTNode):
    """Loop condition of a `for` scope."""
    expression: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.CONDITION

    @property
    def value(self) -> str:
        return self.expression.to_source()

    def children(self) -> List[ASTNode]:
        return [self.expression]


# ============================================================================
# Statements
# ============================================================================

@dataclass
class VariableDeclaration(ASTNode):
    """`<type> <name> = <expression>;`"""
    name: str
    type: TypeRef
    initializer: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.VARIABLE_DECLARATION

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        return [self.type, self.initializer]


@dataclass
class Assignment(ASTNode):
    target: str
    expression: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.ASSIGNMENT

    @property
    def value(self) -> str:
        return self.target

    def children(self) -> List[ASTNode]:
        return [self.expression]


@dataclass
class ReturnStatement(ASTNode):
    expression: Optional[Expression] = None
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.RETURN_STATEMENT

    @property
    def value(self) -> str:
        return "return"

    def children(self) -> List[ASTNode]:
        return [self.expression] if self.expression is not None else []


@dataclass
class FunctionCall(ASTNode):
    callee: str
    arguments: List[Expression] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.FUNCTION_CALL

    @property
    def value(self) -> str:
        return self.callee

    def children(self) -> List[ASTNode]:
        return list(self.arguments)


@dataclass
class OperatorStatement(ASTNode):
    """Built-in operator call: out(...), inc(...), dec(...), jump(...)."""
    keyword: str
    arguments: List[Expression] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.OPERATOR

    @property
    def value(self) -> str:
        return self.keyword

    def children(self) -> List[ASTNode]:
        return list(self.arguments)


# ============================================================================
# Scopes
# ============================================================================

@dataclass
class KeywordScope(ASTNode):
    """
    Scope introduced by `function` (or another non-special scope keyword).

    Children are, in order: the optional Identifier, the optional
    Parameters, the optional ReturnType, then the body statements.
    """
    keyword: str
    name: Optional[Identifier] = None
    parameters: Optional[Parameters] = None
    return_type: Optional[ReturnType] = None
    body: List['Statement'] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.SCOPE

    @property
    def value(self) -> str:
        return self.keyword

    def children(self) -> List[ASTNode]:
        children: List[ASTNode] = []
        if self.name is not None:
            children.append(self.name)
        if self.parameters is not None:
            children.append(self.parameters)
        if self.return_type is not None:
            children.append(self.return_type)
        children.extend(self.body)
        return children


@dataclass
class ForScope(ASTNode):
    condition: Condition
    body: List['Statement'] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.SCOPE

    @property
    def value(self) -> str:
        return "for"

    def children(self) -> List[ASTNode]:
        return [self.condition] + list(self.body)


@dataclass
class StructScope(ASTNode):
    members: List[Member] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.SCOPE

    @property
    def value(self) -> str:
        return "struct"

    def children(self) -> List[ASTNode]:
        return list(self.members)


@dataclass
class ImplementScope(ASTNode):
    functions: List[KeywordScope] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.SCOPE

    @property
    def value(self) -> str:
        return "implement"

    def children(self) -> List[ASTNode]:
        return list(self.functions)


@dataclass
class NamedScope(ASTNode):
    """
    Scope introduced by a bare identifier: `name { ... }`, optionally with a
    parameter list and return type as in `name(int i): int { ... }`.
    """
    name: str
    body: List['Statement'] = field(default_factory=list)
    parameters: Optional[Parameters] = None
    return_type: Optional[ReturnType] = None
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.NAMED_SCOPE

    @property
    def value(self) -> str:
        return self.name

    def children(self) -> List[ASTNode]:
        nodes: List[ASTNode] = []
        if self.parameters is not None:
            nodes.append(self.parameters)
        if self.return_type is not None:
            nodes.append(self.return_type)
        return nodes + list(self.body)


@dataclass
class UnnamedScope(ASTNode):
    """Bare `{ ... }` block."""
    body: List['Statement'] = field(default_factory=list)
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type: ClassVar[ASTNodeType] = ASTNodeType.UNNAMED_SCOPE

    @property
    def value(self) -> str:
        return ""

    def children(self) -> List[ASTNode]:
        return list(self.body)


Statement = Union[
    KeywordScope, ForScope, StructScope, ImplementScope, NamedScope, UnnamedScope,
    VariableDeclaration, Assignment, ReturnStatement, FunctionCall, OperatorStatement,
]
