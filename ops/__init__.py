# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""staticop.ops — layer operators and their graph symbols."""
from __future__ import annotations

from .fully_connected import (
    FullyConnectedOp,
    FullyConnectedSymbol,
    create_fully_connected_op,
)

__all__ = ['FullyConnectedOp', 'FullyConnectedSymbol', 'create_fully_connected_op']
