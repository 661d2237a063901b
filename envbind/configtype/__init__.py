"""
Field types that parse their own environment value.

- ``JSONFile[T]`` / ``YAMLFile[T]`` / ``TOMLFile[T]``: the value is a path to a
  config file whose contents (after ``$VAR`` expansion) are parsed into ``T``.
- ``Base64``: the value is base64 text, decoded into bytes.
"""
from .base64 import Base64
from .expand import expand_env
from .files import ConfigFile, JSONFile, TOMLFile, YAMLFile

__all__ = [
    "Base64",
    "ConfigFile",
    "JSONFile",
    "TOMLFile",
    "YAMLFile",
    "expand_env",
]
