# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Fully connected layer: y = x·Wᵀ + b.

:class:`FullyConnectedOp` is the numerical kernel, written once against
:class:`~staticop.backends.TensorBackend`.  :class:`FullyConnectedSymbol`
is the graph node that infers shapes, declares what backward reads and
which buffers may alias, and binds an operator to a device.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Sequence

from ..backends import TensorBackend, get_backend
from ..base import AtomicSymbol, OpReqType, Option, StaticOperator
from ..blob import TensorBlob
from ..device import Context, RunContext, current_context
from ..errors import ShapeInferenceError, check
from ..param import FullyConnectedParam
from ..shape import TShape, is_known, shape_assign_check, to_shape

logger = logging.getLogger(__name__)

# Positional layout of inputs and outputs.  Every index into in_data,
# in_grad, req and in_shape goes through these.
DATA, WEIGHT, BIAS = 0, 1, 2
OUT = 0

_ARG_NAMES = ('data', 'weight', 'bias')


# ──────────────────────── Operator ────────────────────────────────────

class FullyConnectedOp(StaticOperator):
    """Forward/backward kernel bound to one backend."""

    def __init__(self, param: FullyConnectedParam, backend: TensorBackend):
        self.param = param
        self.backend = backend

    def _check_inputs(self, in_data: Sequence[TensorBlob]) -> tuple[Any, Any, Any]:
        """Validate inputs and return their (data, weight, bias) 2-D/1-D views."""
        expected = self.param.num_inputs
        check(len(in_data) == expected,
              f"FullyConnected expects {expected} inputs, got {len(in_data)}")
        data = in_data[DATA].flat_to_2d()
        wmat = in_data[WEIGHT].get(2)
        check(wmat.shape[1] == data.shape[1],
              f"weight shape {tuple(wmat.shape)} does not match data "
              f"feature size {data.shape[1]}")
        bias = None
        if self.param.has_bias:
            bias = in_data[BIAS].get(1)
            check(bias.shape[0] == wmat.shape[0],
                  f"bias shape {tuple(bias.shape)} does not match "
                  f"num_hidden {wmat.shape[0]}")
        for blob in in_data:
            self._check_device(blob)
        return data, wmat, bias

    def _check_device(self, blob: TensorBlob) -> None:
        check(self.backend.owns(blob.data),
              f"{blob!r} is not resident on {self.backend.ctx}")

    def forward(self, opt: Option, ctx: RunContext,
                in_data: Sequence[TensorBlob],
                req: Sequence[OpReqType],
                out_data: Sequence[TensorBlob]) -> None:
        check(len(out_data) == 1,
              f"FullyConnected has 1 output, got {len(out_data)}")
        check(len(req) == 1, f"Expected 1 request, got {len(req)}")
        check(req[OUT] is OpReqType.WRITE_TO,
              f"FullyConnected output must be written with WRITE_TO, got {req[OUT]!r}")
        data, wmat, bias = self._check_inputs(in_data)
        self._check_device(out_data[OUT])
        out = out_data[OUT].flat_to_2d()
        check(tuple(out.shape) == (data.shape[0], wmat.shape[0]),
              f"output shape {out_data[OUT].shape} does not match "
              f"({data.shape[0]}, {wmat.shape[0]})")

        b = self.backend
        with b.stream(ctx.stream):
            b.assign(out, OpReqType.WRITE_TO, b.dot(data, wmat, trans_b=True))
            if bias is not None:
                b.add_row_vector(out, bias)

    def backward(self, ctx: RunContext,
                 out_grad: Sequence[TensorBlob],
                 in_data: Sequence[TensorBlob],
                 out_data: Sequence[TensorBlob],
                 req: Sequence[OpReqType],
                 in_grad: Sequence[TensorBlob]) -> None:
        expected = self.param.num_inputs
        check(len(out_grad) == 1,
              f"FullyConnected has 1 output gradient, got {len(out_grad)}")
        check(len(in_data) == expected and len(in_grad) == expected,
              f"FullyConnected expects {expected} inputs and input gradients, "
              f"got {len(in_data)} and {len(in_grad)}")
        check(len(req) == expected,
              f"Expected {expected} requests, got {len(req)}")
        check(all(isinstance(r, OpReqType) for r in req),
              f"Requests must be OpReqType values, got {list(req)!r}")
        check(req[WEIGHT] is not OpReqType.WRITE_INPLACE,
              "cannot write weight gradient in place")

        data, wmat, _ = self._check_inputs(in_data)
        self._check_device(out_grad[OUT])
        grad = out_grad[OUT].flat_to_2d()
        check(tuple(grad.shape) == (data.shape[0], wmat.shape[0]),
              f"output gradient shape {out_grad[OUT].shape} does not match "
              f"({data.shape[0]}, {wmat.shape[0]})")
        for blob in in_grad:
            self._check_device(blob)
        gwmat = in_grad[WEIGHT].get(2)
        check(tuple(gwmat.shape) == tuple(wmat.shape),
              f"weight gradient shape {tuple(gwmat.shape)} != {tuple(wmat.shape)}")
        gbias = None
        if self.param.has_bias:
            gbias = in_grad[BIAS].get(1)
            check(gbias.shape[0] == wmat.shape[0],
                  f"bias gradient shape {tuple(gbias.shape)} != ({wmat.shape[0]},)")
        gdata = in_grad[DATA].flat_to_2d()
        check(tuple(gdata.shape) == tuple(data.shape),
              f"data gradient shape {in_grad[DATA].shape} != {in_data[DATA].shape}")

        b = self.backend
        with b.stream(ctx.stream):
            # gdata may alias data: it must be written after the last read of data
            if req[WEIGHT] is not OpReqType.NULL_OP:
                b.assign(gwmat, req[WEIGHT], b.dot(grad, data, trans_a=True))
            if gbias is not None and req[BIAS] is not OpReqType.NULL_OP:
                b.assign(gbias, req[BIAS], b.sum_rows(grad))
            if req[DATA] is not OpReqType.NULL_OP:
                b.assign(gdata, req[DATA], b.dot(grad, wmat))

    def __repr__(self) -> str:
        return (f"FullyConnectedOp(num_hidden={self.param.num_hidden}, "
                f"no_bias={self.param.no_bias}, backend={self.backend.name})")


def create_fully_connected_op(param: FullyConnectedParam,
                              ctx: Context | str) -> FullyConnectedOp:
    """Instantiate the operator on the backend serving *ctx*."""
    backend = get_backend(ctx)
    return FullyConnectedOp(dataclasses.replace(param), backend)


# ──────────────────────── Symbol ──────────────────────────────────────

class FullyConnectedSymbol(AtomicSymbol):
    """Graph node for a fully connected layer.

    Usage::

        sym = FullyConnectedSymbol(num_hidden=4)
        in_shape = [(2, 1, 1, 3), (), ()]
        out_shape = []
        sym.infer_shape(in_shape, out_shape)
        # in_shape  == [(2, 1, 1, 3), (4, 3), (4,)]
        # out_shape == [(2, 1, 1, 4)]
        op = sym.bind('cpu')
    """

    def __init__(self, param: FullyConnectedParam | None = None, **kwargs: Any):
        if param is None:
            param = FullyConnectedParam.from_kwargs(**kwargs)
        elif kwargs:
            for name, value in kwargs.items():
                param = param.with_option(name, value)
        self.param = param

    def list_arguments(self) -> list[str]:
        return list(_ARG_NAMES[:self.param.num_inputs])

    def set_param(self, name: str, value: str) -> None:
        self.param = self.param.with_option(name, value)

    def infer_shape(self, in_shape: list[TShape], out_shape: list[TShape]) -> bool:
        expected = self.param.num_inputs
        if len(in_shape) != expected:
            raise ShapeInferenceError(
                f"FullyConnected expects {expected} input shapes "
                f"{self.list_arguments()}, got {len(in_shape)}")
        if self.param.num_hidden <= 0:
            raise ShapeInferenceError(
                f"num_hidden must be positive, got {self.param.num_hidden}")
        dshape = to_shape(in_shape[DATA])
        if not is_known(dshape):
            raise ShapeInferenceError("Require data shape to be known")
        if len(dshape) != 4:
            raise ShapeInferenceError(
                f"Input data should be 4D in batch-1-1-hidden, got {dshape}")

        # work on a copy so a failed check leaves the caller's slots untouched
        shapes = list(in_shape)
        shapes[DATA] = dshape
        num_hidden = self.param.num_hidden
        shape_assign_check(shapes, WEIGHT, (num_hidden, dshape[3]), 'weight')
        if self.param.has_bias:
            shape_assign_check(shapes, BIAS, (num_hidden,), 'bias')

        in_shape[:] = shapes
        out_shape[:] = [dshape[:3] + (num_hidden,)]
        logger.debug("FullyConnected inferred in=%s out=%s", in_shape, out_shape)
        return True

    def copy(self) -> 'FullyConnectedSymbol':
        return FullyConnectedSymbol(dataclasses.replace(self.param))

    def type_string(self) -> str:
        return 'FullyConnected'

    def declare_backward_dependency(self, out_grad: Sequence[int],
                                    in_data: Sequence[int],
                                    out_data: Sequence[int]) -> list[int]:
        # neither the forward output nor the bias is read by backward
        return [out_grad[OUT], in_data[DATA], in_data[WEIGHT]]

    def backward_inplace_option(self, out_grad: Sequence[int],
                                in_data: Sequence[int],
                                out_data: Sequence[int],
                                in_grad: Sequence[int]) -> list[tuple[int, int]]:
        return [(in_grad[DATA], in_data[DATA])]

    def bind(self, ctx: Context | str | None = None) -> FullyConnectedOp:
        ctx = Context(ctx) if ctx is not None else current_context()
        logger.debug("binding %s(num_hidden=%d, no_bias=%s) to %s",
                     self.type_string(), self.param.num_hidden,
                     self.param.no_bias, ctx)
        return create_fully_connected_op(self.param, ctx)

    def __repr__(self) -> str:
        return (f"FullyConnectedSymbol(num_hidden={self.param.num_hidden}, "
                f"no_bias={self.param.no_bias})")


__all__ = [
    'DATA', 'WEIGHT', 'BIAS', 'OUT',
    'FullyConnectedOp', 'FullyConnectedSymbol', 'create_fully_connected_op',
]
