from __future__ import annotations

import contextlib
import contextvars
import os
import re
from typing import Iterator, Mapping, Optional

_VAR_RE = re.compile(r"\$\{([^}]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")

# store of the load() call currently running, if any
_active_environ: contextvars.ContextVar[Optional[Mapping[str, str]]] = contextvars.ContextVar(
    "envbind_active_environ", default=None
)


@contextlib.contextmanager
def use_environ(environ: Mapping[str, str]) -> Iterator[None]:
    """Make ``environ`` the store ``expand_env`` reads from inside the block."""
    token = _active_environ.set(environ)
    try:
        yield
    finally:
        _active_environ.reset(token)


def current_environ() -> Mapping[str, str]:
    active = _active_environ.get()
    return os.environ if active is None else active


def expand_env(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Replace ``$VAR`` and ``${VAR}`` references; unset variables become "".

    Without an explicit ``environ`` the store of the running ``load()`` is
    used, falling back to the process environment.
    """
    env = current_environ() if environ is None else environ
    return _VAR_RE.sub(lambda m: env.get(m.group(1) or m.group(2), ""), text)
