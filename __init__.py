# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""
Staticop — static graph operators with explicit buffer contracts.

Each layer comes as a symbol (shape inference, argument list, backward
dependencies, in-place options) and an operator (forward/backward kernel
bound to a device backend).  NumPy serves the CPU; CuPy, when installed,
serves CUDA devices.

Usage::

    import numpy as np
    import staticop as so

    sym = so.FullyConnectedSymbol(num_hidden=4)
    in_shape, out_shape = [(2, 1, 1, 3), (), ()], []
    sym.infer_shape(in_shape, out_shape)

    op = sym.bind(so.cpu())
    data, weight, bias, out = (so.TensorBlob(np.zeros(s, so.real_t))
                               for s in in_shape + out_shape)
    op.forward(so.Option(), so.RunContext(so.cpu()),
               [data, weight, bias], [so.OpReqType.WRITE_TO], [out])
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Pictofeed, LLC"

# ── Contracts ──
from .base import OpReqType, Option, StaticOperator, AtomicSymbol
from .errors import (
    StaticOpError,
    ContractViolation,
    ShapeInferenceError,
    ConfigError,
    BackendUnavailable,
)

# ── Buffers, shapes, devices ──
from .blob import TensorBlob, real_t
from .shape import TShape, shape_assign_check
from .device import (
    Context, RunContext,
    cpu, gpu,
    set_default_context, current_context,
)

# ── Layers ──
from .param import FullyConnectedParam
from .ops import FullyConnectedOp, FullyConnectedSymbol, create_fully_connected_op

# ── Sub-packages ──
from . import backends
from . import ops

__all__ = [
    "__version__",
    "__author__",

    # Contracts
    'OpReqType', 'Option', 'StaticOperator', 'AtomicSymbol',
    # Errors
    'StaticOpError', 'ContractViolation', 'ShapeInferenceError',
    'ConfigError', 'BackendUnavailable',
    # Buffers / shapes / devices
    'TensorBlob', 'real_t', 'TShape', 'shape_assign_check',
    'Context', 'RunContext', 'cpu', 'gpu',
    'set_default_context', 'current_context',
    # Layers
    'FullyConnectedParam', 'FullyConnectedOp', 'FullyConnectedSymbol',
    'create_fully_connected_op',
    # Sub-packages
    'backends', 'ops',
]
