# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""
staticop.backends.gpu — CUDA backend on top of CuPy.

CuPy is an optional dependency (``pip install staticop[cuda]``).  When it
is missing, or no CUDA device is visible, :func:`is_available` returns
``False`` and binding to a ``gpu`` context raises
:class:`~staticop.errors.BackendUnavailable`.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from .base import TensorBackend
from ..device import Context

logger = logging.getLogger(__name__)

# ── Try importing CuPy ──
try:
    import cupy as cp
    _CUPY_AVAILABLE = True
except ImportError:
    cp = None  # type: ignore[assignment]
    _CUPY_AVAILABLE = False

_device_count_cache: int | None = None


def device_count() -> int:
    """Number of visible CUDA devices (0 without CuPy or a driver)."""
    global _device_count_cache
    if _device_count_cache is None:
        if not _CUPY_AVAILABLE:
            _device_count_cache = 0
        else:
            try:
                _device_count_cache = cp.cuda.runtime.getDeviceCount()
            except cp.cuda.runtime.CUDARuntimeError as e:
                logger.debug("CUDA runtime unavailable: %s", e)
                _device_count_cache = 0
    return _device_count_cache


def is_available() -> bool:
    return _CUPY_AVAILABLE and device_count() > 0


class GPUBackend(TensorBackend):
    """Device backend; every call runs on ``ctx.dev_id``."""

    name = 'gpu'

    def __init__(self, ctx: Context):
        super().__init__(ctx)
        self.xp = cp

    @contextmanager
    def stream(self, stream: Any = None) -> Iterator[None]:
        with cp.cuda.Device(self.ctx.dev_id):
            if stream is None:
                yield
            else:
                with stream:
                    yield

    def owns(self, arr: Any) -> bool:
        return isinstance(arr, cp.ndarray) and arr.device.id == self.ctx.dev_id
