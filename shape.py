# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Shape descriptors and the assign-and-check helper used by shape inference."""
from __future__ import annotations

from typing import Iterable, MutableSequence, Tuple

from .errors import ShapeInferenceError

# An ordered tuple of dimension sizes.  ``()`` is the unknown shape.
TShape = Tuple[int, ...]

UNKNOWN: TShape = ()


def to_shape(dims: Iterable[int] | None) -> TShape:
    if dims is None:
        return UNKNOWN
    return tuple(int(d) for d in dims)


def is_known(shape: TShape | None) -> bool:
    return shape is not None and len(shape) != 0


def shape_assign_check(shapes: MutableSequence[TShape], index: int,
                       expected: TShape, name: str = '') -> None:
    """Fill ``shapes[index]`` with *expected* if unknown, else require equality.

    Propagation goes both ways: a slot the caller left empty is filled in,
    a slot the caller already fixed must agree.
    """
    expected = to_shape(expected)
    current = shapes[index]
    if not is_known(current):
        shapes[index] = expected
        return
    current = to_shape(current)
    if current != expected:
        label = name or f"input {index}"
        raise ShapeInferenceError(
            f"Shape inconsistent for {label}: provided {current}, "
            f"inferred {expected}")
    shapes[index] = current


__all__ = ['TShape', 'UNKNOWN', 'to_shape', 'is_known', 'shape_assign_check']
