"""
envbind — load environment variables into dataclasses and pydantic models.

    @dataclass
    class Config:
        host: str = env_field(env="HOST", default="")
        port: int = 0
        timeout: Duration = timedelta(0)
        debug: bool = False
        numbers: list[int] = field(default_factory=list)
        settings: dict[str, str] = field(default_factory=dict)

    cfg = Config()
    envbind.load(cfg)
"""
from .errors import (
    BindFaultError,
    ConfigFileError,
    ConversionError,
    DecodeError,
    EnvBindError,
    FieldBindError,
    SequenceElementError,
    UnsupportedTypeError,
    UsageError,
)
from .fields import FieldDescriptor, describe_record, env_field
from .loader import Loader, load, new
from .naming import derive_key, upper_case_transformer, void_transformer
from .options import (
    DEFAULT_ARRAY_SEPARATOR,
    DEFAULT_SEPARATOR,
    LoaderConfig,
    Option,
    with_array_separator,
    with_environ,
    with_key_transformer,
    with_prefix,
    with_separator,
)
from .types import (
    Duration,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    TextDecodable,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__version__ = "0.1.0"

__all__ = [
    "BindFaultError",
    "ConfigFileError",
    "ConversionError",
    "DEFAULT_ARRAY_SEPARATOR",
    "DEFAULT_SEPARATOR",
    "DecodeError",
    "Duration",
    "EnvBindError",
    "FieldBindError",
    "FieldDescriptor",
    "Float32",
    "Float64",
    "Int16",
    "Int32",
    "Int64",
    "Int8",
    "Loader",
    "LoaderConfig",
    "Option",
    "SequenceElementError",
    "TextDecodable",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt8",
    "UnsupportedTypeError",
    "UsageError",
    "derive_key",
    "describe_record",
    "env_field",
    "load",
    "new",
    "upper_case_transformer",
    "void_transformer",
    "with_array_separator",
    "with_environ",
    "with_key_transformer",
    "with_prefix",
    "with_separator",
]
