"""
Recursive binder: environment variables -> fields of a dataclass / pydantic model.

    @dataclass
    class Config:
        host: str = env_field(env="HOST", default="")
        port: int = 0
        timeout: Duration = timedelta(0)
        numbers: list[int] = field(default_factory=list)
        db: Optional[DB] = None

    cfg = Config()
    envbind.load(cfg, with_prefix("APP"))   # APP_PORT, APP_DB_HOST, ... (HOST stays exact)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .coerce import coerce_value
from .configtype.expand import use_environ
from .errors import BindFaultError, ConversionError, EnvBindError, FieldBindError
from .fields import FieldDescriptor, check_target, describe_record, new_record
from .naming import derive_key
from .options import LoaderConfig, Option, build_config

_log = logging.getLogger("envbind.loader")


@dataclass
class _BindRun:
    # lookup key -> attribute path (Root.child.field) that first derived it, for one load() call
    keys: Dict[str, str] = field(default_factory=dict)

    def claim(self, key: str, owner: str) -> None:
        first = self.keys.setdefault(key, owner)
        if first != owner:
            _log.warning("lookup key %s is derived by both %s and %s", key, first, owner)


class Loader:
    def __init__(self, *options: Option, config: Optional[LoaderConfig] = None):
        self._config = build_config(*options, base=config)

    @property
    def config(self) -> LoaderConfig:
        return self._config

    def load(self, target: Any) -> bool:
        """
        Bind environment variables into ``target`` in place.

        Returns True when at least one field (at any depth) was set. Raises
        ``UsageError`` when ``target`` is not a mutable record instance and
        ``FieldBindError`` naming the lookup key on the first bad value.
        """
        check_target(target)
        with use_environ(self._config.store):
            found = self._bind_record(target, (), _BindRun(), (type(target).__name__,))
        _log.debug("load %s found=%s", type(target).__name__, found)
        return found

    def _bind_record(
        self,
        record: Any,
        segments: Tuple[str, ...],
        run: _BindRun,
        path: Tuple[str, ...],
    ) -> bool:
        cfg = self._config
        found = False
        try:
            for fd in describe_record(type(record)):
                if not fd.settable:
                    continue
                if self._bind_field(record, fd, segments, run, path):
                    found = True
        except EnvBindError:
            raise
        except Exception as exc:
            raise BindFaultError(type(record).__name__, cfg.separator.join(segments), exc) from exc
        return found

    def _bind_field(
        self,
        record: Any,
        fd: FieldDescriptor,
        segments: Tuple[str, ...],
        run: _BindRun,
        path: Tuple[str, ...],
    ) -> bool:
        cfg = self._config
        key, child_segments = derive_key(cfg, fd, segments)

        raw = cfg.store.get(key) if key else None
        if raw is not None:
            run.claim(key, ".".join((*path, fd.name)))
            try:
                value, handled = coerce_value(fd.annotation, raw, cfg.array_separator)
            except ConversionError as exc:
                raise FieldBindError(key, exc) from exc
            if handled:
                setattr(record, fd.name, value)
                _log.debug("bound %s -> %s.%s", key, type(record).__name__, fd.name)
                return True

        if not fd.is_record:
            return False

        current = getattr(record, fd.name, None)
        fresh = current is None
        sub = new_record(fd.target_type) if fresh else current

        found = self._bind_record(sub, child_segments, run, (*path, fd.name))
        # an untouched nested record stays None
        if found and fresh:
            setattr(record, fd.name, sub)
        return found


def new(*options: Option) -> Loader:
    return Loader(*options)


def load(target: Any, *options: Option) -> bool:
    """Build a default ``Loader``, apply ``options`` and bind into ``target``."""
    return Loader(*options).load(target)
