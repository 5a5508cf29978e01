# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""staticop.backends — per-device array backends and their lookup."""
from __future__ import annotations

import functools
import logging

from . import cpu
from . import gpu
from .base import TensorBackend
from .cpu import CPUBackend
from .gpu import GPUBackend
from ..device import Context
from ..errors import BackendUnavailable

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=None)
def _backend_for(ctx: Context) -> TensorBackend:
    if ctx.dev_type == 'cpu':
        backend: TensorBackend = CPUBackend(ctx)
    elif ctx.dev_type == 'gpu':
        if not gpu.is_available():
            raise BackendUnavailable(
                f"Cannot use {ctx}: CuPy is not installed or no CUDA device "
                f"is visible (install staticop[cuda])")
        if ctx.dev_id >= gpu.device_count():
            raise BackendUnavailable(
                f"Cannot use {ctx}: only {gpu.device_count()} CUDA device(s)")
        backend = GPUBackend(ctx)
    else:
        raise BackendUnavailable(f"No backend for device type {ctx.dev_type!r}")
    logger.debug("created %r", backend)
    return backend


def get_backend(ctx: Context | str) -> TensorBackend:
    """Return the (cached) backend serving *ctx*."""
    return _backend_for(Context(ctx))


__all__ = ['TensorBackend', 'CPUBackend', 'GPUBackend', 'get_backend',
           'cpu', 'gpu']
