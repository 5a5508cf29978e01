# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""TensorBlob — a non-owning handle over a dense device array.

Operators receive blobs per call and only ever work on views of the
wrapped array, so every write lands in the caller's buffer.
"""
from __future__ import annotations

import math
from typing import Any

import numpy as np

from .device import Context
from .errors import ContractViolation
from .shape import TShape

# Default element type of layer buffers.
real_t = np.float32


def _is_cupy_array(arr: Any) -> bool:
    return type(arr).__module__.split('.', 1)[0] == 'cupy'


def _infer_context(arr: Any) -> Context:
    if _is_cupy_array(arr):
        return Context('gpu', int(arr.device.id))
    return Context('cpu')


class TensorBlob:
    """Shape + device view of an array owned by the executor."""

    __slots__ = ('_data', '_ctx')

    def __init__(self, data: Any, ctx: Context | str | None = None):
        if not (isinstance(data, np.ndarray) or _is_cupy_array(data)):
            data = np.asarray(data, dtype=real_t)
        if not data.flags.c_contiguous:
            raise ContractViolation(
                "TensorBlob requires a C-contiguous buffer so that views "
                "alias the caller's memory")
        self._data = data
        actual = _infer_context(data)
        if ctx is not None and Context(ctx) != actual:
            raise ContractViolation(
                f"Buffer lives on {actual} but was labelled {Context(ctx)}")
        self._ctx = actual

    # ------------------------------------------------------------------ #
    #  Properties                                                        #
    # ------------------------------------------------------------------ #

    @property
    def data(self) -> Any:
        return self._data

    @property
    def shape(self) -> TShape:
        return tuple(int(d) for d in self._data.shape)

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def dtype(self):
        return self._data.dtype

    @property
    def ctx(self) -> Context:
        return self._ctx

    # ------------------------------------------------------------------ #
    #  Views                                                             #
    # ------------------------------------------------------------------ #

    def flat_to_2d(self) -> Any:
        """2-D view ``(prod(shape[:-1]), shape[-1])``.

        All leading dimensions collapse into rows; the last dimension is
        kept as columns.  A ``(B, 1, 1, F)`` buffer becomes ``(B, F)``.
        """
        shape = self.shape
        if not shape:
            raise ContractViolation("Cannot flatten a zero-rank blob")
        rows = math.prod(shape[:-1]) if len(shape) > 1 else 1
        # C-contiguous storage makes this reshape a view, never a copy
        return self._data.reshape(rows, shape[-1])

    def get(self, ndim: int) -> Any:
        """The wrapped array, checked to be exactly rank *ndim*."""
        if self._data.ndim != ndim:
            raise ContractViolation(
                f"Expected a {ndim}-D blob, got shape {self.shape}")
        return self._data

    def __repr__(self) -> str:
        return f"TensorBlob(shape={self.shape}, dtype={self.dtype}, ctx={self._ctx})"


__all__ = ['TensorBlob', 'real_t']
