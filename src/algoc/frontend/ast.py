"""
Algo Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the AST node types produced by the parser and
rewritten by the semantic analyzer.

Node Hierarchy
--------------
ASTNode (base)
├── Program - root node holding the top-level statements
├── Parameter - function parameter (name and annotation)
├── Statements
│   ├── FunctionDefinition - function with a body
│   ├── FunctionHeader - 'declare function' forward header
│   ├── IfStatement - if / else / else if
│   ├── WhileStatement - while loop
│   └── ReturnStatement - return with optional value
└── Expressions
    ├── Assignment - target <- value
    ├── BinaryExpression - arithmetic and comparison operators
    ├── UnaryExpression - unary + and -
    ├── CallExpression - function call
    ├── ArrayAccess - name[integer literal]
    ├── VariableExpression - variable reference, optionally annotated
    ├── IntLiteral, FloatLiteral, BoolLiteral, StringLiteral
    └── ArrayLiteral - [a, b, c]

Design Notes
------------
- Statement lists hold Statement and Expression nodes side by side; an
  expression on its own line (an assignment or a call) is a statement.
- Locations are excluded from equality so trees can be compared by shape.
- Expression nodes carry resolved_type once the analyzer has seen them.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union

from algoc.errors import SourceLocation
from algoc.frontend.types import Type, TypeAnnotation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears
    """
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass
class Expression(ASTNode):
    """
    Base class for all expression nodes.

    Attributes:
        resolved_type: The type of this expression (set by the analyzer)
    """
    resolved_type: Optional[Type] = field(default=None, compare=False, repr=False)


@dataclass
class Statement(ASTNode):
    """Base class for statement nodes that never produce a value."""
    pass


# Anything that may appear in a statement list
Node = Union[Statement, Expression]


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass
class Program(ASTNode):
    """
    Root node of the AST.

    Attributes:
        statements: Top-level statements in source order
    """
    statements: list[Node] = field(default_factory=list)


# =============================================================================
# Function Nodes
# =============================================================================

@dataclass
class Parameter(ASTNode):
    """
    Function parameter.

    Attributes:
        name: Parameter name
        declared_type: Annotation, or None if the source omitted it
    """
    name: str = ""
    declared_type: Optional[TypeAnnotation] = None


@dataclass
class FunctionHeader(Statement):
    """
    Forward header: ``declare function name(params): type``.

    Attributes:
        name: Function name
        parameters: Parameters in order
        return_type: Return annotation, or None for no return value
    """
    name: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    return_type: Optional[TypeAnnotation] = None


@dataclass
class FunctionDefinition(Statement):
    """
    Function with a body: ``function name(params): type ... end``.

    Attributes:
        name: Function name
        parameters: Parameters in order
        return_type: Return annotation, or None for no return value
        body: Statements of the function body
    """
    name: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    return_type: Optional[TypeAnnotation] = None
    body: list[Node] = field(default_factory=list)


# =============================================================================
# Control Flow Statements
# =============================================================================

@dataclass
class IfStatement(Statement):
    """
    Conditional statement.

    An ``else if`` chain is an IfStatement whose else_branch holds exactly
    one nested IfStatement.
    """
    condition: Expression = None
    then_branch: list[Node] = field(default_factory=list)
    else_branch: list[Node] = field(default_factory=list)


@dataclass
class WhileStatement(Statement):
    condition: Expression = None
    body: list[Node] = field(default_factory=list)


@dataclass
class ReturnStatement(Statement):
    """Return statement; value is None for a bare ``return``."""
    value: Optional[Expression] = None


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator types."""
    # Arithmetic
    ADD = auto()        # +
    SUBTRACT = auto()   # -
    MULTIPLY = auto()   # *
    DIVIDE = auto()     # /
    MODULO = auto()     # %

    # Comparison
    EQUAL = auto()      # ==
    NOT_EQUAL = auto()  # !=
    LESS = auto()       # <
    GREATER = auto()    # >
    LESS_EQ = auto()    # <=
    GREATER_EQ = auto() # >=

    # Assignment
    ASSIGN = auto()     # <-

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS

    @property
    def is_arithmetic(self) -> bool:
        return self in _ARITHMETIC


class UnaryOperator(Enum):
    """Unary operator types."""
    POSITIVE = auto()   # +x
    NEGATE = auto()     # -x


_COMPARISONS = frozenset({
    BinaryOperator.EQUAL,
    BinaryOperator.NOT_EQUAL,
    BinaryOperator.LESS,
    BinaryOperator.GREATER,
    BinaryOperator.LESS_EQ,
    BinaryOperator.GREATER_EQ,
})

_ARITHMETIC = frozenset({
    BinaryOperator.ADD,
    BinaryOperator.SUBTRACT,
    BinaryOperator.MULTIPLY,
    BinaryOperator.DIVIDE,
    BinaryOperator.MODULO,
})

BINARY_OPERATOR_SYMBOLS: dict[str, BinaryOperator] = {
    "+": BinaryOperator.ADD,
    "-": BinaryOperator.SUBTRACT,
    "*": BinaryOperator.MULTIPLY,
    "/": BinaryOperator.DIVIDE,
    "%": BinaryOperator.MODULO,
    "==": BinaryOperator.EQUAL,
    "!=": BinaryOperator.NOT_EQUAL,
    "<": BinaryOperator.LESS,
    ">": BinaryOperator.GREATER,
    "<=": BinaryOperator.LESS_EQ,
    ">=": BinaryOperator.GREATER_EQ,
    "<-": BinaryOperator.ASSIGN,
}

UNARY_OPERATOR_SYMBOLS: dict[str, UnaryOperator] = {
    "+": UnaryOperator.POSITIVE,
    "-": UnaryOperator.NEGATE,
}


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class IntLiteral(Expression):
    value: int = 0


@dataclass
class FloatLiteral(Expression):
    value: float = 0.0


@dataclass
class BoolLiteral(Expression):
    value: bool = False


@dataclass
class StringLiteral(Expression):
    value: str = ""


@dataclass
class ArrayLiteral(Expression):
    """Bracketed list of element expressions: ``[1, 2, 3]``."""
    elements: list[Expression] = field(default_factory=list)


@dataclass
class VariableExpression(Expression):
    """
    Variable reference.

    Attributes:
        name: Variable name
        declared_type: Annotation when written as ``name: type``
    """
    name: str = ""
    declared_type: Optional[TypeAnnotation] = None


@dataclass
class ArrayAccess(Expression):
    """
    Indexed array element: ``name[offset]``.

    Only an integer literal is recognised as an index.
    """
    name: str = ""
    offset: int = 0


@dataclass
class CallExpression(Expression):
    """
    Function call.

    After analysis, name holds the mangled name of the resolved overload.
    """
    name: str = ""
    arguments: list[Expression] = field(default_factory=list)


@dataclass
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Attributes:
        operator: The binary operator (never ASSIGN)
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass
class UnaryExpression(Expression):
    operator: UnaryOperator = None
    operand: Expression = None


@dataclass
class Assignment(Expression):
    """
    Assignment (target <- value).

    Attributes:
        target: VariableExpression or ArrayAccess
        value: Assigned expression
    """
    target: Expression = None
    value: Expression = None


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; everything else falls through to generic_visit.

    Usage:
        class MyVisitor(ASTVisitor):
            def visit_FunctionDefinition(self, node):
                ...

        MyVisitor().visit(program)
    """

    def visit(self, node: ASTNode):
        """Visit a node by dispatching to the appropriate method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes of a node."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(program))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        """Emit a line with current indentation."""
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def _block(self, statements: list[Node]) -> None:
        self._indent()
        for stmt in statements:
            self.visit(stmt)
        self._dedent()

    def visit_Program(self, node: Program):
        self._emit("Program")
        self._block(node.statements)

    def visit_FunctionDefinition(self, node: FunctionDefinition):
        self._emit(f"Function: {self._header_str(node)}")
        self._block(node.body)

    def visit_FunctionHeader(self, node: FunctionHeader):
        self._emit(f"Declare: {self._header_str(node)}")

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If ({self._expr_str(node.condition)})")
        self._indent()
        self._emit("Then:")
        self._block(node.then_branch)
        if node.else_branch:
            self._emit("Else:")
            self._block(node.else_branch)
        self._dedent()

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit(f"While ({self._expr_str(node.condition)})")
        self._block(node.body)

    def visit_ReturnStatement(self, node: ReturnStatement):
        if node.value is not None:
            self._emit(f"Return {self._expr_str(node.value)}")
        else:
            self._emit("Return")

    def visit_Assignment(self, node: Assignment):
        self._emit(f"Assign: {self._expr_str(node.target)} <- {self._expr_str(node.value)}")

    def generic_visit(self, node: ASTNode):
        if isinstance(node, Expression):
            self._emit(f"Expr: {self._expr_str(node)}")
        else:
            super().generic_visit(node)

    def _header_str(self, node: Union[FunctionHeader, FunctionDefinition]) -> str:
        params = ", ".join(
            f"{p.name}: {p.declared_type}" if p.declared_type else p.name
            for p in node.parameters
        )
        returns = f": {node.return_type}" if node.return_type else ""
        return f"{node.name}({params}){returns}"

    def _expr_str(self, expr: Expression) -> str:
        """Convert expression to string representation."""
        if expr is None:
            return ""
        if isinstance(expr, (IntLiteral, FloatLiteral)):
            return str(expr.value)
        if isinstance(expr, BoolLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, StringLiteral):
            return f'"{expr.value}"'
        if isinstance(expr, ArrayLiteral):
            return "[" + ", ".join(self._expr_str(e) for e in expr.elements) + "]"
        if isinstance(expr, VariableExpression):
            if expr.declared_type:
                return f"{expr.name}: {expr.declared_type}"
            return expr.name
        if isinstance(expr, ArrayAccess):
            return f"{expr.name}[{expr.offset}]"
        if isinstance(expr, CallExpression):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{expr.name}({args})"
        if isinstance(expr, BinaryExpression):
            op_str = _BINARY_SPELLING.get(expr.operator, "?")
            return f"({self._expr_str(expr.left)} {op_str} {self._expr_str(expr.right)})"
        if isinstance(expr, UnaryExpression):
            op_str = "-" if expr.operator == UnaryOperator.NEGATE else "+"
            return f"({op_str}{self._expr_str(expr.operand)})"
        if isinstance(expr, Assignment):
            return f"({self._expr_str(expr.target)} <- {self._expr_str(expr.value)})"
        return f"<{type(expr).__name__}>"


_BINARY_SPELLING = {op: symbol for symbol, op in BINARY_OPERATOR_SYMBOLS.items()}
