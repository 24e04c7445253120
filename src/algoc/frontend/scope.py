"""
Lexical Scopes
==============

A Scope holds the variables, types and function signatures visible at one
nesting level. The global scope is created with the built-in types; every
function body gets a child scope whose parent is the scope it was declared
in.

Scopes only ever point at their parent. Lookups walk outward through that
chain until a binding is found, so an inner binding shadows an outer one
and no scope can reach its children.

Function Symbols
----------------
Functions are keyed by FunctionSignature, the pair (name, parameter types).
Two functions with the same name but different parameter types are
distinct overloads. Each signature maps to a FunctionSymbol recording its
return type, whether a body has been seen, and its mangled name:

    <scope path>.<name>(<type>,<type>,...)

The global scope's path is empty, and a function body's path is the
function's own mangled name, so ``inner(float)`` declared inside
``outer(int)`` is mangled to ``outer(int).inner(float)``.
"""

import difflib
from dataclasses import dataclass
from typing import Iterator, Optional

from algoc.errors import SourceLocation
from algoc.frontend.types import BUILTIN_TYPES, Type


# =============================================================================
# Function Symbols
# =============================================================================

@dataclass(frozen=True)
class FunctionSignature:
    """
    Function identity used for overload resolution.

    Attributes:
        name: Function name as written in source
        parameter_types: Ordered parameter types
    """
    name: str
    parameter_types: tuple[Type, ...] = ()

    def __str__(self) -> str:
        params = ",".join(str(t) for t in self.parameter_types)
        return f"{self.name}({params})"


@dataclass
class FunctionSymbol:
    """
    A function registered in a scope.

    Attributes:
        signature: The overload key
        return_type: Declared return type, or None for no value
        implemented: False while only a forward header has been seen
        mangled_name: Unique flattened name
        location: Where the function was first declared
    """
    signature: FunctionSignature
    return_type: Optional[Type]
    implemented: bool
    mangled_name: str
    location: Optional[SourceLocation] = None


# =============================================================================
# Scope
# =============================================================================

class Scope:
    """
    One level of lexical bindings.

    Attributes:
        parent: Enclosing scope, None for the global scope
        path: Mangling prefix ("" for the global scope)
        variables: Variables bound at this level, in declaration order
        types: Types visible at this level
        functions: Function symbols registered at this level
    """

    def __init__(self, parent: Optional["Scope"] = None, path: str = ""):
        self.parent = parent
        self.path = path
        self.variables: dict[str, Type] = {}
        self.types: dict[str, Type] = {}
        self.functions: dict[FunctionSignature, FunctionSymbol] = {}

    @classmethod
    def global_scope(cls) -> "Scope":
        """Create the outermost scope with the built-in types registered."""
        scope = cls()
        scope.types.update(BUILTIN_TYPES)
        return scope

    @property
    def is_global(self) -> bool:
        return self.parent is None

    def child(self, path: str) -> "Scope":
        """Create a nested scope for a function body."""
        return Scope(parent=self, path=path)

    def chain(self) -> Iterator["Scope"]:
        """Yield this scope and then each enclosing scope outward."""
        scope = self
        while scope is not None:
            yield scope
            scope = scope.parent

    # =========================================================================
    # Variables
    # =========================================================================

    def declare_variable(self, name: str, var_type: Type) -> None:
        self.variables[name] = var_type

    def lookup_variable(self, name: str) -> Optional[Type]:
        """Find the nearest binding of a variable name."""
        for scope in self.chain():
            if name in scope.variables:
                return scope.variables[name]
        return None

    def similar_variables(self, name: str) -> list[str]:
        """Visible variable names that look like `name` (for hints)."""
        visible = {n for scope in self.chain() for n in scope.variables}
        return difflib.get_close_matches(name, sorted(visible), n=3)

    # =========================================================================
    # Types
    # =========================================================================

    def lookup_type(self, name: str) -> Optional[Type]:
        for scope in self.chain():
            if name in scope.types:
                return scope.types[name]
        return None

    # =========================================================================
    # Functions
    # =========================================================================

    def mangle(self, signature: FunctionSignature) -> str:
        """Mangled name of a signature registered in this scope."""
        if self.path:
            return f"{self.path}.{signature}"
        return str(signature)

    def register_function(self, symbol: FunctionSymbol) -> None:
        """Register or replace the symbol for a signature at this level."""
        self.functions[symbol.signature] = symbol

    def lookup_function(self, signature: FunctionSignature) -> Optional[FunctionSymbol]:
        """First symbol matching the signature exactly, innermost scope first."""
        for scope in self.chain():
            symbol = scope.functions.get(signature)
            if symbol is not None:
                return symbol
        return None

    def function_candidates(self, name: str) -> list[FunctionSignature]:
        """All visible signatures with the given name."""
        return [
            signature
            for scope in self.chain()
            for signature in scope.functions
            if signature.name == name
        ]

    def unimplemented(self) -> list[FunctionSymbol]:
        """Symbols at this level that never received a body."""
        return [symbol for symbol in self.functions.values() if not symbol.implemented]
