# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""staticop.backends.cpu — NumPy backend."""
from __future__ import annotations

from typing import Any

import numpy as np

from .base import TensorBackend


class CPUBackend(TensorBackend):
    """Host backend; BLAS work goes through ``numpy.dot``."""

    name = 'cpu'
    xp = np

    def owns(self, arr: Any) -> bool:
        return isinstance(arr, np.ndarray)
