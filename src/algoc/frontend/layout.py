"""
Stack Frame Layout
==================

Assigns every variable of a flattened function a fixed byte offset in its
stack frame. Parameters come first, then locals, each in declaration
order, starting at offset 0. Each slot takes exactly its type's size and
no alignment padding is inserted, so the frame size is the sum of the
slot sizes.

Example
-------
For ``function area(w: int, h: float): float`` with a local ``a: float``:

| Slot | Type  | Offset | Size |
|------|-------|--------|------|
| w    | int   | 0      | 4    |
| h    | float | 4      | 8    |
| a    | float | 12     | 8    |

Frame size: 20 bytes.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from algoc.frontend.analyzer import Function
from algoc.frontend.errors import StackLayoutError
from algoc.frontend.types import Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackSlot:
    """One variable's place in a frame."""
    name: str
    type: Type
    offset: int

    @property
    def size(self) -> int:
        return self.type.size


@dataclass
class StackFrame:
    """
    Stack layout of one function.

    Attributes:
        function_name: Mangled name of the function
        slots: Slots in offset order
    """
    function_name: str
    slots: list[StackSlot] = field(default_factory=list)

    @property
    def size(self) -> int:
        """Total frame size in bytes."""
        return sum(slot.size for slot in self.slots)

    def slot(self, name: str) -> Optional[StackSlot]:
        for slot in self.slots:
            if slot.name == name:
                return slot
        return None

    def offset_of(self, name: str) -> int:
        """
        Byte offset of a variable in this frame.

        Raises:
            KeyError: If the function has no such variable
        """
        slot = self.slot(name)
        if slot is None:
            raise KeyError(f"'{name}' has no slot in frame of '{self.function_name}'")
        return slot.offset


def build_frame(function: Function) -> StackFrame:
    """Lay out a function's parameters and locals in declaration order."""
    frame = StackFrame(function.name)
    offset = 0
    for variable in [*function.parameters, *function.locals]:
        frame.slots.append(StackSlot(variable.name, variable.type, offset))
        offset += variable.type.size

    logger.debug(
        f"Frame of {function.name}: {len(frame.slots)} slots, {frame.size} bytes"
    )
    return frame


def verify_frame(frame: StackFrame, declared_size: int) -> None:
    """
    Check a declared frame size against the computed one.

    Raises:
        StackLayoutError: If the sizes differ
    """
    if declared_size != frame.size:
        raise StackLayoutError(frame.function_name, declared_size, frame.size)


def layout_functions(functions: list[Function]) -> dict[str, StackFrame]:
    """
    Build a frame for every function and check it against the size the
    analyzer reserved while binding the function's variables.

    Returns:
        Frames keyed by mangled function name

    Raises:
        StackLayoutError: If a frame disagrees with ``Function.frame_size``
    """
    frames = {}
    for function in functions:
        frame = build_frame(function)
        verify_frame(frame, function.frame_size)
        frames[function.name] = frame
    return frames
