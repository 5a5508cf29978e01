# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Exception hierarchy shared by operators, symbols and backends."""
from __future__ import annotations


class StaticOpError(RuntimeError):
    """Base class for every error raised by staticop."""


class ContractViolation(StaticOpError):
    """A caller broke an operator precondition (counts, requirements, shapes)."""


class ShapeInferenceError(ContractViolation):
    """Shapes could not be inferred or are inconsistent."""


class ConfigError(StaticOpError, ValueError):
    """Unknown configuration option or invalid value."""


class BackendUnavailable(StaticOpError):
    """No usable backend for the requested device."""


def check(cond: bool, msg: str, exc: type[StaticOpError] = ContractViolation) -> None:
    """Raise *exc* with *msg* unless *cond* holds."""
    if not cond:
        raise exc(msg)


__all__ = [
    'StaticOpError', 'ContractViolation', 'ShapeInferenceError',
    'ConfigError', 'BackendUnavailable', 'check',
]
