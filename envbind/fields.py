"""
Record introspection.

A record is an instance of a dataclass or a pydantic model. Its shape is read
from the class at call time; nothing has to be registered beforehand.

Per-field naming metadata:

    @dataclass
    class DB:
        password: str = env_field(env="DB_PASSWORD")      # exact name
        host: str = env_field(alias="HOSTNAME", default="")  # alias
        common: Common = env_field(embed=True, default_factory=Common)

    class DB(BaseModel):
        password: str = Field("", json_schema_extra={"env": "DB_PASSWORD"})
"""
from __future__ import annotations

import collections.abc
import dataclasses
import functools
import typing
from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple, get_args, get_origin

from pydantic import BaseModel

from .errors import UsageError
from .types import is_text_decodable, unwrap_annotated, unwrap_optional

ENV_KEY = "env"
ALIAS_KEY = "alias"
EMBED_KEY = "embed"


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    annotation: Any
    env: Optional[str] = None
    alias: Optional[str] = None
    embedded: bool = False

    @property
    def target_type(self) -> Any:
        """Annotation with one level of ``Optional`` removed."""
        return unwrap_optional(self.annotation)[0]

    @property
    def is_optional(self) -> bool:
        return unwrap_optional(self.annotation)[1]

    @property
    def is_record(self) -> bool:
        return is_record_type(self.target_type)

    @property
    def settable(self) -> bool:
        return not self.name.startswith("_")


def env_field(
    *,
    env: Optional[str] = None,
    alias: Optional[str] = None,
    embed: bool = False,
    metadata: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> Any:
    """``dataclasses.field`` carrying env naming metadata."""
    md: Dict[str, Any] = dict(metadata or {})
    if env is not None:
        md[ENV_KEY] = env
    if alias is not None:
        md[ALIAS_KEY] = alias
    if embed:
        md[EMBED_KEY] = True
    return dataclasses.field(metadata=md, **kwargs)


def _is_pydantic_model(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, BaseModel)


def is_record_type(tp: Any) -> bool:
    tp, _ = unwrap_annotated(tp)
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or _is_pydantic_model(tp)


def is_frozen(tp: type) -> bool:
    if dataclasses.is_dataclass(tp):
        return bool(tp.__dataclass_params__.frozen)
    if _is_pydantic_model(tp):
        return bool(tp.model_config.get("frozen"))
    return False


def check_target(target: Any) -> None:
    """Raise ``UsageError`` unless ``target`` is a mutable record instance."""
    if isinstance(target, type):
        raise UsageError(f"should be an instance of a record, got class {target.__name__}")
    tp = type(target)
    if not is_record_type(tp):
        raise UsageError(f"should be a dataclass or pydantic model instance, got {tp.__name__}")
    if is_frozen(tp):
        raise UsageError(f"{tp.__name__} is frozen and cannot be loaded into")


def _from_metadata(name: str, annotation: Any, md: Mapping[str, Any]) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        annotation=annotation,
        env=md.get(ENV_KEY),
        alias=md.get(ALIAS_KEY),
        embedded=bool(md.get(EMBED_KEY, False)),
    )


@functools.lru_cache(maxsize=512)
def describe_record(tp: type) -> Tuple[FieldDescriptor, ...]:
    """Field descriptors of a record class, in declaration order."""
    if _is_pydantic_model(tp):
        out: List[FieldDescriptor] = []
        for name, info in tp.model_fields.items():
            annotation = info.annotation
            # pydantic moves top-level Annotated extras into .metadata
            if info.metadata:
                annotation = Annotated[(annotation, *info.metadata)]
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            out.append(_from_metadata(name, annotation, extra))
        return tuple(out)

    if dataclasses.is_dataclass(tp):
        try:
            hints = typing.get_type_hints(tp, include_extras=True)
        except NameError as exc:
            raise UsageError(f"cannot resolve field annotations of {tp.__name__}: {exc}") from exc
        return tuple(
            _from_metadata(f.name, hints.get(f.name, f.type), f.metadata)
            for f in dataclasses.fields(tp)
        )

    raise UsageError(f"{tp!r} is not a record type")


def zero_value(tp: Any) -> Any:
    base, _ = unwrap_annotated(tp)
    inner, optional = unwrap_optional(base)
    if optional:
        return None
    if is_text_decodable(inner):
        return inner()
    if is_record_type(inner):
        return new_record(inner)

    origin = get_origin(inner) or inner
    if origin in (list, collections.abc.Sequence, collections.abc.MutableSequence):
        return []
    if origin is tuple:
        return ()
    if origin in (dict, collections.abc.Mapping, collections.abc.MutableMapping):
        return {}
    if isinstance(inner, type):
        if issubclass(inner, bool):
            return False
        if issubclass(inner, timedelta):
            return timedelta(0)
        if issubclass(inner, (str, int, float)):
            return inner()
    return None


def new_record(tp: type) -> Any:
    """
    Construct ``tp`` with every required field at its zero value, so that a
    nested record can be allocated the way a nil pointer would be.
    """
    tp, _ = unwrap_annotated(tp)
    if _is_pydantic_model(tp):
        kwargs = {
            name: zero_value(fd.annotation)
            for name, fd in zip(tp.model_fields, describe_record(tp))
            if tp.model_fields[name].is_required()
        }
        return tp.model_construct(**kwargs)

    kwargs = {}
    descriptors = {fd.name: fd for fd in describe_record(tp)}
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            kwargs[f.name] = zero_value(descriptors[f.name].annotation)
    return tp(**kwargs)


def sequence_element_type(tp: Any) -> Optional[Any]:
    """Element type of a list/tuple annotation, or None when ``tp`` is no sequence."""
    origin = get_origin(tp)
    if tp in (list, tuple):
        return str
    if origin in (list, collections.abc.Sequence, collections.abc.MutableSequence):
        args = get_args(tp)
        return args[0] if args else str
    if origin is tuple:
        args = get_args(tp)
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
    return None


def is_mapping_type(tp: Any) -> bool:
    return tp is dict or get_origin(tp) in (dict, collections.abc.Mapping, collections.abc.MutableMapping)
