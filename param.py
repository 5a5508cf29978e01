# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Layer parameter records and string option parsing."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from .errors import ConfigError

_TRUE = frozenset({'1', 'true', 'yes', 'on'})
_FALSE = frozenset({'0', 'false', 'no', 'off'})


def parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ConfigError(f"Invalid value for {name}: {value!r} is not a boolean")


def parse_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid value for {name}: {value!r} is not an integer")
    try:
        n = int(str(value).strip()) if not isinstance(value, int) else value
    except ValueError:
        raise ConfigError(
            f"Invalid value for {name}: {value!r} is not an integer") from None
    if n <= 0:
        raise ConfigError(f"Invalid value for {name}: must be positive, got {n}")
    return n


@dataclass(frozen=True)
class FullyConnectedParam:
    """Configuration of a fully connected layer.

    ``num_hidden == 0`` means the layer is not configured yet; shape
    inference rejects it.  Records are immutable: :meth:`with_option`
    returns an updated copy.
    """
    num_hidden: int = 0
    no_bias: bool = False

    _PARSERS = {
        'num_hidden': parse_positive_int,
        'no_bias': parse_bool,
    }

    def __post_init__(self):
        if isinstance(self.num_hidden, bool) or not isinstance(self.num_hidden, int):
            raise ConfigError(
                f"num_hidden must be an int, got {type(self.num_hidden).__name__}")
        if self.num_hidden < 0:
            raise ConfigError(f"num_hidden must be non-negative, got {self.num_hidden}")
        if not isinstance(self.no_bias, bool):
            raise ConfigError(
                f"no_bias must be a bool, got {type(self.no_bias).__name__}")

    @classmethod
    def option_names(cls) -> tuple[str, ...]:
        return tuple(cls._PARSERS)

    def with_option(self, name: str, value: Any) -> 'FullyConnectedParam':
        """Return a copy with option *name* parsed from *value*."""
        parser = self._PARSERS.get(name)
        if parser is None:
            raise ConfigError(
                f"Unknown option {name!r} for FullyConnected; "
                f"expected one of {self.option_names()}")
        return dataclasses.replace(self, **{name: parser(name, value)})

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> 'FullyConnectedParam':
        param = cls()
        for name, value in kwargs.items():
            param = param.with_option(name, value)
        return param

    @property
    def has_bias(self) -> bool:
        return not self.no_bias

    @property
    def num_inputs(self) -> int:
        return 2 if self.no_bias else 3


__all__ = ['FullyConnectedParam', 'parse_bool', 'parse_positive_int']
