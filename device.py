# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Device contexts handed to ``bind`` and per-call run contexts."""
from __future__ import annotations

import logging
import os
from typing import Any

from .errors import ConfigError

logger = logging.getLogger(__name__)

_DEV_TYPES = ('cpu', 'gpu')
_ALIASES = {'cuda': 'gpu'}


class Context:
    """Identifies the device an operator is bound to (``cpu`` or ``gpu:N``)."""

    __slots__ = ('_dev_type', '_dev_id')

    def __init__(self, dev_type: 'str | Context' = 'cpu', dev_id: int | None = None):
        if isinstance(dev_type, Context):
            self._dev_type = dev_type._dev_type
            self._dev_id = dev_type._dev_id
            return
        s = str(dev_type).strip().lower()
        if ':' in s:
            s, idx = s.split(':', 1)
            try:
                dev_id = int(idx)
            except ValueError:
                raise ConfigError(f"Invalid device index in {dev_type!r}") from None
        s = _ALIASES.get(s, s)
        if s not in _DEV_TYPES:
            raise ConfigError(
                f"Unknown device type {dev_type!r}; expected one of {_DEV_TYPES}")
        if dev_id is None:
            dev_id = 0
        try:
            dev_id = int(dev_id)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid device index {dev_id!r}") from None
        if dev_id < 0:
            raise ConfigError(f"Device index must be >= 0, got {dev_id}")
        self._dev_type = s
        self._dev_id = int(dev_id)

    @property
    def dev_type(self) -> str:
        return self._dev_type

    @property
    def dev_id(self) -> int:
        return self._dev_id

    def __eq__(self, other) -> bool:
        if isinstance(other, str):
            other = Context(other)
        if not isinstance(other, Context):
            return NotImplemented
        return self._dev_type == other._dev_type and self._dev_id == other._dev_id

    def __hash__(self) -> int:
        return hash((self._dev_type, self._dev_id))

    def __repr__(self) -> str:
        return f"Context(dev_type='{self._dev_type}', dev_id={self._dev_id})"

    def __str__(self) -> str:
        return f"{self._dev_type}:{self._dev_id}"


def cpu(dev_id: int = 0) -> Context:
    return Context('cpu', dev_id)


def gpu(dev_id: int = 0) -> Context:
    return Context('gpu', dev_id)


class RunContext:
    """Per-call execution context: the bound device plus an optional stream.

    The stream is opaque here.  The GPU backend expects a CuPy stream and
    issues its kernels on it; the CPU backend ignores it.
    """

    __slots__ = ('ctx', 'stream')

    def __init__(self, ctx: Context | str | None = None, stream: Any = None):
        self.ctx = Context(ctx) if ctx is not None else current_context()
        self.stream = stream

    def __repr__(self) -> str:
        return f"RunContext(ctx={self.ctx!r}, stream={self.stream!r})"


# ── Process-wide default context ──

def _context_from_env() -> Context:
    raw = os.environ.get('STATICOP_DEFAULT_CONTEXT', '')
    if not raw:
        return Context('cpu')
    try:
        return Context(raw)
    except ValueError:
        logger.warning("Ignoring STATICOP_DEFAULT_CONTEXT=%r; falling back to cpu", raw)
        return Context('cpu')


_default_context: Context = _context_from_env()


def set_default_context(ctx: Context | str | None) -> None:
    """Set the context used by ``bind()`` when none is given.

    Usage::

        staticop.set_default_context('gpu:0')
        op = sym.bind()                 # bound to gpu:0
        staticop.set_default_context(None)  # back to cpu
    """
    global _default_context
    _default_context = Context(ctx) if ctx is not None else Context('cpu')
    logger.debug("default context set to %s", _default_context)


def current_context() -> Context:
    return _default_context


__all__ = [
    'Context', 'RunContext', 'cpu', 'gpu',
    'set_default_context', 'current_context',
]
