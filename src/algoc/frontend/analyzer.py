"""
Semantic Analyzer
=================

The analyzer walks the AST once, resolving every name against a chain of
lexical scopes, computing the type of every expression, and flattening
nested function definitions into a single ordered list of functions.

Output
------
- functions: every function with a body, each with a unique mangled name,
  its parameters and locals, and its rewritten statement list. Nested
  functions come before the function that contains them. Top-level
  statements form an implicit entry function (``main`` by default) that
  is always last.
- externs: function headers (``declare function``) that never received
  a body.

Rewrites
--------
The returned statements are copies of the parsed ones in which every
expression carries ``resolved_type`` and every call names the mangled
name of the overload it resolved to. Function definitions and headers do
not appear in statement lists; they become entries in the function list
and the global symbol table instead.

Typing Rules
------------
- Literals have their built-in type; array literals are ``array`` with the
  element type of their elements when all agree.
- Comparisons yield ``bool``.
- Arithmetic operands must have the same type, except int with float
  which yields float.
- Unary ``+``/``-`` require int or float.
- A variable's type is fixed by its first assignment or annotation in a
  scope; later assignments in the same scope must match it.
- Calls match a signature exactly by argument types, searching from the
  innermost scope outward. Array arguments whose element types are both
  known must also agree on the element type.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from algoc.errors import SourceLocation
from algoc.frontend.ast import (
    ArrayAccess,
    ArrayLiteral,
    Assignment,
    BinaryExpression,
    BoolLiteral,
    CallExpression,
    Expression,
    FloatLiteral,
    FunctionDefinition,
    FunctionHeader,
    IfStatement,
    IntLiteral,
    Node,
    Parameter,
    Program,
    ReturnStatement,
    StringLiteral,
    UnaryExpression,
    UnaryOperator,
    VariableExpression,
    WhileStatement,
)
from algoc.frontend.errors import (
    NestedDeclarationError,
    RedeclarationError,
    SemanticError,
    SignatureConflictError,
    TypeMismatchError,
    UndefinedFunctionError,
    UndefinedTypeError,
    UndefinedVariableError,
    VoidValueError,
)
from algoc.frontend.scope import FunctionSignature, FunctionSymbol, Scope
from algoc.frontend.types import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    Type,
    TypeAnnotation,
    arithmetic_result,
    array_of,
    same_type,
)

logger = logging.getLogger(__name__)


_LITERAL_TYPES = {
    IntLiteral: INT,
    FloatLiteral: FLOAT,
    BoolLiteral: BOOL,
    StringLiteral: STRING,
}


# =============================================================================
# Analysis Results
# =============================================================================

@dataclass
class LocalVariable:
    """A variable stored in a function's frame."""
    name: str
    type: Type


@dataclass
class Function:
    """
    One flattened, independently emittable function.

    Attributes:
        name: Mangled name (the entry function keeps its plain name)
        signature: Overload key the function was registered under
        return_type: Declared return type, or None for no value
        parameters: Parameters in declaration order
        locals: Variables first assigned in the body, in declaration order
        statements: Analyzed statements of the body
        frame_size: Bytes reserved for parameters and locals as they were
                    bound
    """
    name: str
    signature: FunctionSignature
    return_type: Optional[Type] = None
    parameters: list[LocalVariable] = field(default_factory=list)
    locals: list[LocalVariable] = field(default_factory=list)
    statements: list[Node] = field(default_factory=list)
    frame_size: int = 0


@dataclass
class AnalysisResult:
    """Flattened functions plus the signatures that were never implemented."""
    functions: list[Function] = field(default_factory=list)
    externs: list[FunctionSymbol] = field(default_factory=list)

    def function(self, name: str) -> Optional[Function]:
        """Look up a flattened function by its mangled name."""
        for function in self.functions:
            if function.name == name:
                return function
        return None


@dataclass
class _Context:
    """The function being filled and the scope its statements bind into."""
    function: Function
    scope: Scope

    def declare(self, name: str, var_type: Type) -> None:
        self.scope.declare_variable(name, var_type)
        self.function.locals.append(LocalVariable(name, var_type))
        self.function.frame_size += var_type.size


# =============================================================================
# Analyzer
# =============================================================================

class Analyzer:
    """
    Scope resolver and type checker.

    Usage:
        result = Analyzer().analyze(program)
        for function in result.functions:
            print(function.name)

    Attributes:
        entry_function: Name of the implicit function for top-level code
        source_lines: Original source lines for error context
    """

    def __init__(
        self,
        entry_function: str = "main",
        source_lines: Optional[Sequence[str]] = None,
    ):
        self.entry_function = entry_function
        self.source_lines = list(source_lines or [])

        self._functions: list[Function] = []
        self._externs: list[FunctionSymbol] = []

    def analyze(self, program: Program) -> AnalysisResult:
        """
        Analyze a whole program.

        Returns:
            AnalysisResult with flattened functions and externs

        Raises:
            SemanticError: On the first scope or type error
        """
        self._functions = []
        self._externs = []

        scope = Scope.global_scope()
        entry = Function(
            name=self.entry_function,
            signature=FunctionSignature(self.entry_function),
        )
        context = _Context(entry, scope)

        entry.statements = self._analyze_block(program.statements, context)
        self._collect_externs(scope)
        self._functions.append(entry)

        logger.debug(
            f"Analysis produced {len(self._functions)} functions "
            f"and {len(self._externs)} externs"
        )
        return AnalysisResult(functions=self._functions, externs=self._externs)

    # =========================================================================
    # Statements
    # =========================================================================

    def _analyze_block(self, statements: list[Node], context: _Context) -> list[Node]:
        """Analyze statements in order, keeping those that stay in the body."""
        analyzed: list[Node] = []
        for statement in statements:
            result = self._analyze_statement(statement, context)
            if result is not None:
                analyzed.append(result)
        return analyzed

    def _analyze_statement(self, statement: Node, context: _Context) -> Optional[Node]:
        if isinstance(statement, FunctionDefinition):
            self._analyze_function(statement, context.scope)
            return None

        if isinstance(statement, FunctionHeader):
            self._analyze_header(statement, context.scope)
            return None

        if isinstance(statement, IfStatement):
            return dataclasses.replace(
                statement,
                condition=self._analyze_expression(statement.condition, context),
                then_branch=self._analyze_block(statement.then_branch, context),
                else_branch=self._analyze_block(statement.else_branch, context),
            )

        if isinstance(statement, WhileStatement):
            return dataclasses.replace(
                statement,
                condition=self._analyze_expression(statement.condition, context),
                body=self._analyze_block(statement.body, context),
            )

        if isinstance(statement, ReturnStatement):
            return self._analyze_return(statement, context)

        if isinstance(statement, VariableExpression) and statement.declared_type is not None:
            return self._analyze_declaration(statement, context)

        return self._analyze_expression(statement, context, value_required=False)

    def _analyze_function(self, node: FunctionDefinition, scope: Scope) -> None:
        """
        Register a function, then analyze its body in a child scope.

        The symbol is registered before the body is analyzed so recursive
        calls resolve. Sub-functions found in the body are emitted before
        this one.
        """
        parameter_types = [self._resolve_parameter(p, scope) for p in node.parameters]
        return_type = self._resolve_optional(node.return_type, scope, node.location)
        signature = FunctionSignature(node.name, tuple(parameter_types))

        existing = scope.functions.get(signature)
        if existing is not None:
            if existing.implemented:
                raise RedeclarationError(
                    str(signature),
                    location=node.location,
                    original_location=existing.location,
                    source_line=self._line(node.location),
                )
            if not _same_return(existing.return_type, return_type):
                raise SignatureConflictError(
                    str(signature),
                    header_return=_type_name(existing.return_type),
                    body_return=_type_name(return_type),
                    location=node.location,
                    source_line=self._line(node.location),
                )

        mangled_name = scope.mangle(signature)
        scope.register_function(FunctionSymbol(
            signature=signature,
            return_type=return_type,
            implemented=True,
            mangled_name=mangled_name,
            location=node.location,
        ))
        logger.debug(f"Registered function {signature} as {mangled_name}")

        function = Function(name=mangled_name, signature=signature, return_type=return_type)
        body_scope = scope.child(mangled_name)

        for parameter, parameter_type in zip(node.parameters, parameter_types):
            if parameter.name in body_scope.variables:
                raise SemanticError(
                    f"duplicate parameter '{parameter.name}' in '{signature}'",
                    location=parameter.location,
                    source_line=self._line(parameter.location),
                )
            body_scope.declare_variable(parameter.name, parameter_type)
            function.parameters.append(LocalVariable(parameter.name, parameter_type))
            function.frame_size += parameter_type.size

        function.statements = self._analyze_block(node.body, _Context(function, body_scope))
        self._collect_externs(body_scope)
        self._functions.append(function)

    def _analyze_header(self, node: FunctionHeader, scope: Scope) -> None:
        """Register a forward header; only allowed at global scope."""
        if not scope.is_global:
            raise NestedDeclarationError(
                node.name,
                location=node.location,
                source_line=self._line(node.location),
            )

        parameter_types = [self._resolve_parameter(p, scope) for p in node.parameters]
        return_type = self._resolve_optional(node.return_type, scope, node.location)
        signature = FunctionSignature(node.name, tuple(parameter_types))

        existing = scope.functions.get(signature)
        if existing is not None:
            raise RedeclarationError(
                str(signature),
                location=node.location,
                original_location=existing.location,
                source_line=self._line(node.location),
            )

        scope.register_function(FunctionSymbol(
            signature=signature,
            return_type=return_type,
            implemented=False,
            mangled_name=scope.mangle(signature),
            location=node.location,
        ))
        logger.debug(f"Declared function header {signature}")

    def _analyze_return(self, node: ReturnStatement, context: _Context) -> ReturnStatement:
        """Check a return against the enclosing function's return type."""
        expected = context.function.return_type
        name = str(context.function.signature)

        if node.value is None:
            if expected is not None:
                raise TypeMismatchError(
                    f"'{name}' must return a value",
                    expected_type=expected.display_name,
                    location=node.location,
                    source_line=self._line(node.location),
                )
            return node

        value = self._analyze_expression(node.value, context)
        if expected is None:
            raise TypeMismatchError(
                f"'{name}' has no return type but returns a value",
                location=node.location,
                source_line=self._line(node.location),
            )
        if not same_type(value.resolved_type, expected):
            raise TypeMismatchError(
                f"return value does not match the return type of '{name}'",
                expected_type=expected.display_name,
                actual_type=value.resolved_type.display_name,
                location=node.location,
                source_line=self._line(node.location),
            )
        return dataclasses.replace(node, value=value)

    def _analyze_declaration(self, node: VariableExpression, context: _Context) -> VariableExpression:
        """A standalone 'name: type' statement declares a local."""
        declared = self._resolve_annotation(node.declared_type, context.scope, node.location)
        self._bind(node.name, declared, context, node.location)
        return dataclasses.replace(node, resolved_type=declared)

    def _analyze_assignment(self, node: Assignment, context: _Context) -> Assignment:
        """
        Type-check an assignment and bind its target.

        A name not yet bound in the current scope becomes a new local of
        the value's (or the annotation's) type.
        """
        value = self._analyze_expression(node.value, context)
        value_type = value.resolved_type
        target = node.target

        if isinstance(target, ArrayAccess):
            array_type = self._lookup_variable(target.name, context.scope, target.location)
            self._require_array(target, array_type)
            element = array_type.element
            if element is not None and not same_type(value_type, element):
                raise TypeMismatchError(
                    f"cannot store a value in an element of '{target.name}'",
                    expected_type=element.display_name,
                    actual_type=value_type.display_name,
                    location=value.location or node.location,
                    source_line=self._line(node.location),
                )
            target = dataclasses.replace(target, resolved_type=element or value_type)
        else:
            var_type = value_type
            if target.declared_type is not None:
                var_type = self._resolve_annotation(
                    target.declared_type, context.scope, target.location
                )
                if not same_type(var_type, value_type):
                    raise TypeMismatchError(
                        f"cannot assign to '{target.name}' declared as '{var_type.display_name}'",
                        expected_type=var_type.display_name,
                        actual_type=value_type.display_name,
                        location=node.location,
                        source_line=self._line(node.location),
                    )
            bound = self._bind(target.name, var_type, context, node.location)
            target = dataclasses.replace(target, resolved_type=bound)

        return dataclasses.replace(node, target=target, value=value, resolved_type=value_type)

    def _bind(self, name: str, var_type: Type, context: _Context, location) -> Type:
        """Bind a name in the current scope, or check it against its binding."""
        existing = context.scope.variables.get(name)
        if existing is None:
            context.declare(name, var_type)
            return var_type

        if not same_type(existing, var_type):
            raise TypeMismatchError(
                f"cannot assign a '{var_type.display_name}' value to '{name}'",
                expected_type=existing.display_name,
                actual_type=var_type.display_name,
                location=location,
                source_line=self._line(location),
            )
        return existing

    # =========================================================================
    # Expressions
    # =========================================================================

    def _analyze_expression(
        self,
        expr: Expression,
        context: _Context,
        value_required: bool = True,
    ) -> Expression:
        """Return a copy of the expression with types resolved and calls mangled."""
        literal_type = _LITERAL_TYPES.get(type(expr))
        if literal_type is not None:
            return dataclasses.replace(expr, resolved_type=literal_type)

        if isinstance(expr, ArrayLiteral):
            elements = [self._analyze_expression(e, context) for e in expr.elements]
            element_type = None
            if elements and all(same_type(e.resolved_type, elements[0].resolved_type) for e in elements):
                element_type = elements[0].resolved_type
            return dataclasses.replace(
                expr, elements=elements, resolved_type=array_of(element_type)
            )

        if isinstance(expr, VariableExpression):
            var_type = self._lookup_variable(expr.name, context.scope, expr.location)
            return dataclasses.replace(expr, resolved_type=var_type)

        if isinstance(expr, ArrayAccess):
            array_type = self._lookup_variable(expr.name, context.scope, expr.location)
            self._require_array(expr, array_type)
            if array_type.element is None:
                raise TypeMismatchError(
                    f"element type of '{expr.name}' is unknown",
                    location=expr.location,
                    source_line=self._line(expr.location),
                )
            return dataclasses.replace(expr, resolved_type=array_type.element)

        if isinstance(expr, CallExpression):
            return self._analyze_call(expr, context, value_required)

        if isinstance(expr, UnaryExpression):
            operand = self._analyze_expression(expr.operand, context)
            if not operand.resolved_type.is_numeric:
                symbol = "-" if expr.operator == UnaryOperator.NEGATE else "+"
                raise TypeMismatchError(
                    f"unary '{symbol}' requires an int or float operand",
                    actual_type=operand.resolved_type.display_name,
                    location=expr.location,
                    source_line=self._line(expr.location),
                )
            return dataclasses.replace(expr, operand=operand, resolved_type=operand.resolved_type)

        if isinstance(expr, BinaryExpression):
            return self._analyze_binary(expr, context)

        if isinstance(expr, Assignment):
            return self._analyze_assignment(expr, context)

        raise SemanticError(
            f"unsupported expression {type(expr).__name__}",
            location=expr.location,
        )

    def _analyze_binary(self, expr: BinaryExpression, context: _Context) -> BinaryExpression:
        left = self._analyze_expression(expr.left, context)
        right = self._analyze_expression(expr.right, context)

        if expr.operator.is_comparison:
            result = BOOL
        else:
            result = arithmetic_result(left.resolved_type, right.resolved_type)
            if result is None:
                raise TypeMismatchError(
                    f"incompatible operand types '{left.resolved_type.display_name}' "
                    f"and '{right.resolved_type.display_name}'",
                    location=expr.location,
                    source_line=self._line(expr.location),
                )

        return dataclasses.replace(expr, left=left, right=right, resolved_type=result)

    def _analyze_call(
        self,
        expr: CallExpression,
        context: _Context,
        value_required: bool,
    ) -> CallExpression:
        """Resolve the overload by argument types and mangle the call."""
        arguments = [self._analyze_expression(a, context) for a in expr.arguments]
        signature = FunctionSignature(expr.name, tuple(a.resolved_type for a in arguments))

        symbol = context.scope.lookup_function(signature)
        if symbol is None:
            candidates = context.scope.function_candidates(expr.name)
            raise UndefinedFunctionError(
                str(signature),
                location=expr.location,
                source_line=self._line(expr.location),
                candidates=[str(c) for c in candidates],
            )

        for argument, parameter_type in zip(arguments, symbol.signature.parameter_types):
            if not same_type(argument.resolved_type, parameter_type):
                raise TypeMismatchError(
                    f"argument does not match parameter of '{symbol.signature}'",
                    expected_type=parameter_type.display_name,
                    actual_type=argument.resolved_type.display_name,
                    location=argument.location or expr.location,
                    source_line=self._line(expr.location),
                )

        if value_required and symbol.return_type is None:
            raise VoidValueError(
                str(signature),
                location=expr.location,
                source_line=self._line(expr.location),
            )

        return dataclasses.replace(
            expr,
            name=symbol.mangled_name,
            arguments=arguments,
            resolved_type=symbol.return_type,
        )

    # =========================================================================
    # Name and Type Resolution
    # =========================================================================

    def _lookup_variable(self, name: str, scope: Scope, location) -> Type:
        var_type = scope.lookup_variable(name)
        if var_type is None:
            raise UndefinedVariableError(
                name,
                location=location,
                source_line=self._line(location),
                similar_names=scope.similar_variables(name),
            )
        return var_type

    def _require_array(self, node: ArrayAccess, var_type: Type) -> None:
        if not var_type.is_array:
            raise TypeMismatchError(
                f"'{node.name}' is not an array",
                expected_type="array",
                actual_type=var_type.display_name,
                location=node.location,
                source_line=self._line(node.location),
            )

    def _resolve_annotation(
        self,
        annotation: TypeAnnotation,
        scope: Scope,
        location,
    ) -> Type:
        """Resolve 'T' or 'T[]' against the types visible in scope."""
        base = scope.lookup_type(annotation.name)
        if base is None:
            raise UndefinedTypeError(
                f"undefined type '{annotation.name}'",
                location=location,
                source_line=self._line(location),
            )
        if annotation.is_array:
            return array_of(base)
        return base

    def _resolve_optional(
        self,
        annotation: Optional[TypeAnnotation],
        scope: Scope,
        location,
    ) -> Optional[Type]:
        if annotation is None:
            return None
        return self._resolve_annotation(annotation, scope, location)

    def _resolve_parameter(self, parameter: Parameter, scope: Scope) -> Type:
        if parameter.declared_type is None:
            raise UndefinedTypeError(
                f"parameter '{parameter.name}' has no type",
                location=parameter.location,
                hint=f"write it as '{parameter.name}: int'",
                source_line=self._line(parameter.location),
            )
        return self._resolve_annotation(parameter.declared_type, scope, parameter.location)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _collect_externs(self, scope: Scope) -> None:
        """Report the symbols of a finished scope that never got a body."""
        for symbol in scope.unimplemented():
            logger.debug(f"Extern function {symbol.signature}")
            self._externs.append(symbol)

    def _line(self, location: Optional[SourceLocation]) -> Optional[str]:
        """Get source line for error reporting."""
        if location is not None and 0 < location.line <= len(self.source_lines):
            return self.source_lines[location.line - 1]
        return None


def _type_name(var_type: Optional[Type]) -> str:
    return var_type.display_name if var_type is not None else "no value"


def _same_return(header: Optional[Type], body: Optional[Type]) -> bool:
    if header is None or body is None:
        return header is body
    return same_type(header, body)


# =============================================================================
# Convenience Function
# =============================================================================

def analyze(
    program: Program,
    entry_function: str = "main",
    source_lines: Optional[Sequence[str]] = None,
) -> AnalysisResult:
    """Analyze a parsed program; see Analyzer.analyze."""
    return Analyzer(entry_function, source_lines).analyze(program)
