from __future__ import annotations

from typing import TYPE_CHECKING, Sequence, Tuple

if TYPE_CHECKING:
    from .fields import FieldDescriptor
    from .options import LoaderConfig


def void_transformer(key: str) -> str:
    return key


def upper_case_transformer(key: str) -> str:
    """
    Field identifier -> MACRO_CASE variable name.

        DBConnection -> DB_CONNECTION
        AKey         -> A_KEY
        KeyA         -> KEY_A
        ThisISMyKey  -> THIS_IS_MY_KEY
        db_host      -> DB_HOST
    """
    out = []
    n = len(key)

    def is_lower(c: str) -> bool:
        return c.upper() != c

    for i, c in enumerate(key):
        if (
            i > 0
            and c.isupper()
            and key[i - 1] != "_"
            and ((i < n - 1 and is_lower(key[i + 1])) or is_lower(key[i - 1]))
        ):
            out.append("_")
            out.append(c)
        else:
            out.append(c.upper())

    return "".join(out)


def join_key(cfg: "LoaderConfig", segments: Sequence[str]) -> str:
    parts = [cfg.prefix] if cfg.prefix else []
    # empty segments (e.g. alias="") contribute nothing
    parts.extend(s for s in segments if s)
    return cfg.separator.join(parts)


def base_name(cfg: "LoaderConfig", fd: "FieldDescriptor") -> str:
    if fd.alias is not None:
        return fd.alias
    if cfg.key_transformer is None:
        return fd.name
    return cfg.key_transformer(fd.name)


def derive_key(
    cfg: "LoaderConfig",
    fd: "FieldDescriptor",
    parent: Tuple[str, ...],
) -> Tuple[str, Tuple[str, ...]]:
    """
    Return ``(lookup_key, segments_for_descendants)`` for one field.

    Precedence: exact env name > embedded > alias / transformed identifier.
    An exact env name is used verbatim; prefix and separator never touch it.
    """
    if fd.env is not None:
        return fd.env, parent

    if fd.embedded:
        return join_key(cfg, parent), parent

    segments = parent + (base_name(cfg, fd),)
    return join_key(cfg, segments), segments
