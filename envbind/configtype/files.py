"""
Configuration-file wrappers.

The environment variable holds a *path*; the wrapper reads that file,
expands ``$VAR`` references in its contents and parses it into ``data``:

    class DBConfig(BaseModel):
        host: str
        port: int

    @dataclass
    class AppConfig:
        db: YAMLFile[DBConfig] = env_field(env="DB_CONFIG", default_factory=YAMLFile)

    # DB_CONFIG=/etc/app/db.yaml
    cfg = AppConfig()
    envbind.load(cfg)
    cfg.db.data.host

``reload()`` re-reads the same file.
"""
from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Generic, Mapping, Optional, TypeVar, get_args

import yaml
from pydantic import TypeAdapter, ValidationError

from ..errors import ConfigFileError
from .expand import current_environ, expand_env

_log = logging.getLogger("envbind.configtype")

T = TypeVar("T")


class ConfigFile(Generic[T]):
    format_name = "config"

    def __init__(self, file_path: str = "", data: Optional[T] = None):
        self.file_path = file_path
        self.data = data
        # variables seen when the path was decoded; reload() expands against them again
        self._environ: Optional[Mapping[str, str]] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(file_path={self.file_path!r})"

    @property
    def payload_type(self) -> Any:
        # set by typing when instantiated as JSONFile[Model]()
        orig = getattr(self, "__orig_class__", None)
        args = get_args(orig) if orig is not None else ()
        return args[0] if args else Any

    def decode_text(self, text: str) -> None:
        if not text:
            return
        self._environ = current_environ()
        self.file_path = expand_env(text, self._environ)
        self._load()

    def reload(self) -> None:
        """Re-read ``file_path``; no-op when no path was ever set."""
        if not self.file_path:
            return
        self._load()
        _log.info("reloaded %s file %s", self.format_name, self.file_path)

    def _parse(self, content: str) -> Any:
        raise NotImplementedError

    def _load(self) -> None:
        path = self.file_path
        try:
            raw_text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigFileError(f"cannot load {self.format_name} file: {path}: {exc}", path=path) from exc

        content = expand_env(raw_text, self._environ)
        try:
            parsed = self._parse(content)
        except (ValueError, yaml.YAMLError) as exc:
            raise ConfigFileError(
                f"failed to unmarshal {self.format_name} config: {path}: {exc}", path=path
            ) from exc

        tp = self.payload_type
        if tp is Any:
            self.data = parsed
        else:
            try:
                self.data = TypeAdapter(tp).validate_python(parsed)
            except ValidationError as exc:
                raise ConfigFileError(
                    f"{self.format_name} config {path} does not match {getattr(tp, '__name__', tp)}: {exc}",
                    path=path,
                ) from exc

        _log.info("loaded %s file %s", self.format_name, path)


class JSONFile(ConfigFile[T]):
    format_name = "json"

    def _parse(self, content: str) -> Any:
        return json.loads(content)


class YAMLFile(ConfigFile[T]):
    format_name = "yaml"

    def _parse(self, content: str) -> Any:
        return yaml.safe_load(content)


class TOMLFile(ConfigFile[T]):
    format_name = "toml"

    def _parse(self, content: str) -> Any:
        return tomllib.loads(content)
