from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .naming import upper_case_transformer

DEFAULT_SEPARATOR = "_"
DEFAULT_ARRAY_SEPARATOR = ","

KeyTransformer = Callable[[str], str]


@dataclass(frozen=True)
class LoaderConfig:
    prefix: str = ""
    separator: str = DEFAULT_SEPARATOR
    array_separator: str = DEFAULT_ARRAY_SEPARATOR
    key_transformer: Optional[KeyTransformer] = upper_case_transformer
    environ: Optional[Mapping[str, str]] = None   # None => live os.environ

    @property
    def store(self) -> Mapping[str, str]:
        return os.environ if self.environ is None else self.environ

    @classmethod
    def from_payload(cls, payload: Any) -> "LoaderConfig":
        """
        Accepts:
          - None
          - {"prefix": "APP", "separator": ".", "array_separator": ";"}
        Unknown keys and non-string values are ignored.
        """
        if not isinstance(payload, dict):
            return cls()

        kwargs = {}
        for name in ("prefix", "separator", "array_separator"):
            v = payload.get(name)
            if isinstance(v, str):
                kwargs[name] = v

        return cls(**kwargs)


Option = Callable[[LoaderConfig], LoaderConfig]


def with_prefix(prefix: str) -> Option:
    """
    Prepend ``prefix`` to every derived key: prefix ``APP`` and field
    ``host`` give ``APP_HOST``. Exact env names are not prefixed.
    """
    return lambda cfg: dataclasses.replace(cfg, prefix=prefix)


def with_separator(sep: str) -> Option:
    """Join prefix and nested segments with ``sep`` (``"."`` gives ``APP.DB.HOST``)."""
    return lambda cfg: dataclasses.replace(cfg, separator=sep)


def with_array_separator(sep: str) -> Option:
    return lambda cfg: dataclasses.replace(cfg, array_separator=sep)


def with_key_transformer(transformer: Optional[KeyTransformer]) -> Option:
    return lambda cfg: dataclasses.replace(cfg, key_transformer=transformer)


def with_environ(environ: Mapping[str, str]) -> Option:
    """Read variables from ``environ`` instead of the process environment."""
    return lambda cfg: dataclasses.replace(cfg, environ=environ)


def build_config(*options: Option, base: Optional[LoaderConfig] = None) -> LoaderConfig:
    cfg = base or LoaderConfig()
    for opt in options:
        cfg = opt(cfg)
    return cfg
