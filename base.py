# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Operator and symbol base classes.

A :class:`StaticOperator` is the device-bound numerical half of a layer:
the executor hands it shaped, allocated :class:`~staticop.blob.TensorBlob`
lists and one :class:`OpReqType` per output slot.

An :class:`AtomicSymbol` is the graph-level half.  It describes arguments,
infers shapes, tells the executor which forward values backward reads and
which buffers may be shared, and finally binds to a device.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .blob import TensorBlob
    from .device import Context, RunContext
    from .shape import TShape


class OpReqType(enum.Enum):
    """How an operator must store a result into its destination buffer."""
    NULL_OP = 'null'              # skip, the value is not needed
    WRITE_TO = 'write'            # overwrite
    WRITE_INPLACE = 'inplace'     # overwrite, destination aliases an input
    ADD_TO = 'add'                # accumulate into existing contents

    def __repr__(self) -> str:
        return f"OpReqType.{self.name}"


@dataclass(frozen=True)
class Option:
    """Per-call flags for ``forward``."""
    is_train: bool = False


# ──────────────────────── Operator ────────────────────────────────────

class StaticOperator:
    """Base class for device-bound operators."""

    def forward(self, opt: Option, ctx: 'RunContext',
                in_data: Sequence['TensorBlob'],
                req: Sequence[OpReqType],
                out_data: Sequence['TensorBlob']) -> None:
        raise NotImplementedError

    def backward(self, ctx: 'RunContext',
                 out_grad: Sequence['TensorBlob'],
                 in_data: Sequence['TensorBlob'],
                 out_data: Sequence['TensorBlob'],
                 req: Sequence[OpReqType],
                 in_grad: Sequence['TensorBlob']) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


# ──────────────────────── Symbol ──────────────────────────────────────

class AtomicSymbol:
    """Base class for single-operator graph nodes."""

    def list_arguments(self) -> list[str]:
        return ['data']

    def list_returns(self) -> list[str]:
        return ['output']

    def set_param(self, name: str, value: str) -> None:
        raise NotImplementedError

    def infer_shape(self, in_shape: list['TShape'],
                    out_shape: list['TShape']) -> bool:
        raise NotImplementedError

    def copy(self) -> 'AtomicSymbol':
        raise NotImplementedError

    def type_string(self) -> str:
        raise NotImplementedError

    def declare_backward_dependency(self, out_grad: Sequence[int],
                                    in_data: Sequence[int],
                                    out_data: Sequence[int]) -> list[int]:
        """Ids of the values backward reads.  Default: all of them."""
        return [*out_grad, *in_data, *out_data]

    def forward_inplace_option(self, in_data: Sequence[int],
                               out_data: Sequence[int]) -> list[tuple[int, int]]:
        return []

    def backward_inplace_option(self, out_grad: Sequence[int],
                                in_data: Sequence[int],
                                out_data: Sequence[int],
                                in_grad: Sequence[int]) -> list[tuple[int, int]]:
        return []

    def bind(self, ctx: 'Context | str | None' = None) -> StaticOperator:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


__all__ = ['OpReqType', 'Option', 'StaticOperator', 'AtomicSymbol']
