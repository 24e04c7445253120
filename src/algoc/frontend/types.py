"""
Algo Type System
================

Types come in two flavours:

- TypeAnnotation: a type as written in source (``x: int``, ``xs: float[]``),
  carried by the AST before anything is resolved.
- Type: a resolved, sized value category used by the analyzer and the
  stack layout.

Built-in Types
--------------
| Type   | Size (bytes) |
|--------|--------------|
| int    | 4            |
| float  | 8            |
| bool   | 1            |
| string | 8            |
| array  | 8            |

An annotation ``T[]`` resolves to the built-in ``array`` type carrying
``T`` as its element type. Equality ignores the element type, so
``int[]`` and ``float[]`` share one overload signature. Assignments,
returns and call arguments use same_type(), which rejects differing
element types when both are known.

Arithmetic Promotion
--------------------
Arithmetic operands must have the same type, except that ``int`` combined
with ``float`` yields ``float``. Nothing else converts implicitly, and the
promotion never applies to call arguments.
"""

from dataclasses import dataclass, field
from typing import Optional


# =============================================================================
# Syntactic Type Annotation
# =============================================================================

@dataclass(frozen=True)
class TypeAnnotation:
    """
    A type name as it appears after ':' in source.

    Attributes:
        name: The type name (built-in or user visible)
        is_array: True for the ``name[]`` form
    """
    name: str
    is_array: bool = False

    def __str__(self) -> str:
        return f"{self.name}[]" if self.is_array else self.name


# =============================================================================
# Resolved Type
# =============================================================================

@dataclass(frozen=True)
class Type:
    """
    A resolved value category.

    Attributes:
        name: Canonical type name (used in signatures and mangled names)
        size: Size in bytes of a value of this type on the stack
        is_array: True for array types
        element: Element type of an array, when known
    """
    name: str
    size: int
    is_array: bool = False
    element: Optional["Type"] = field(default=None, compare=False, hash=False)

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        """Name including the element type, for messages ("int[]")."""
        if self.is_array and self.element is not None:
            return f"{self.element.display_name}[]"
        return self.name

    @property
    def is_numeric(self) -> bool:
        return self in (INT, FLOAT)


# =============================================================================
# Predefined Types
# =============================================================================

INT = Type("int", 4)
FLOAT = Type("float", 8)
BOOL = Type("bool", 1)
STRING = Type("string", 8)
ARRAY = Type("array", 8, is_array=True)

BUILTIN_TYPES: dict[str, Type] = {
    t.name: t for t in (INT, FLOAT, BOOL, STRING, ARRAY)
}


# =============================================================================
# Type Utilities
# =============================================================================

def array_of(element: Optional[Type]) -> Type:
    """Return the array type with the given element type."""
    return Type(ARRAY.name, ARRAY.size, is_array=True, element=element)


def same_type(left: Type, right: Type) -> bool:
    """
    Type identity including array element types.

    Plain equality ignores the element type; this also compares the
    elements when both sides know theirs.
    """
    if left != right:
        return False
    if left.is_array and left.element is not None and right.element is not None:
        return same_type(left.element, right.element)
    return True


def arithmetic_result(left: Type, right: Type) -> Optional[Type]:
    """
    Result type of an arithmetic operator applied to two operands.

    Returns:
        The common type, FLOAT for an int/float mix, or None if the
        operands cannot be combined
    """
    if left == right:
        return left
    if {left, right} == {INT, FLOAT}:
        return FLOAT
    return None
