# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""TensorBackend — the array capabilities an operator kernel is written against.

Each backend wraps one array module (``xp``) and one device.  Kernels call
only the methods below, so the same forward/backward code runs on any
backend that implements them.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from ..base import OpReqType
from ..device import Context
from ..errors import ContractViolation


class TensorBackend:
    """Base class for device backends."""

    name: str = 'abstract'
    xp: Any = None

    def __init__(self, ctx: Context):
        self.ctx = ctx

    # ── Dense math ──

    def dot(self, a: Any, b: Any, trans_a: bool = False,
            trans_b: bool = False) -> Any:
        """``op(a) @ op(b)`` where ``op`` optionally transposes a 2-D operand."""
        if trans_a:
            a = a.T
        if trans_b:
            b = b.T
        return self.xp.dot(a, b)

    def sum_rows(self, x: Any) -> Any:
        """Column-wise sum of a 2-D array over its rows: ``(N, M) -> (M,)``."""
        return self.xp.sum(x, axis=0)

    def add_row_vector(self, out: Any, v: Any) -> None:
        """Add the 1-D *v* to every row of the 2-D *out* in place."""
        out += v[None, :]

    # ── Result storage ──

    def assign(self, dst: Any, req: OpReqType, value: Any) -> None:
        """Store *value* into *dst* according to *req*.

        *value* is always a freshly computed array, never a view of an
        input, so ``WRITE_INPLACE`` behaves exactly like ``WRITE_TO``.
        """
        if req is OpReqType.NULL_OP:
            return
        if req is OpReqType.WRITE_TO or req is OpReqType.WRITE_INPLACE:
            dst[...] = value
        elif req is OpReqType.ADD_TO:
            dst += value
        else:
            raise ContractViolation(f"Unknown request type {req!r}")

    # ── Execution resources ──

    @contextmanager
    def stream(self, stream: Any = None) -> Iterator[None]:
        """Issue work on *stream* for the duration of the block."""
        yield

    def owns(self, arr: Any) -> bool:
        """True when *arr* lives on this backend's device."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} ctx={self.ctx}>"
