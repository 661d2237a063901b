from __future__ import annotations

from typing import Optional


class EnvBindError(RuntimeError):
    pass


class UsageError(EnvBindError, TypeError):
    """Bind target is not a mutable record instance."""


class ConversionError(EnvBindError, ValueError):
    """Raw text could not be turned into the field's type."""


class UnsupportedTypeError(ConversionError):
    pass


class SequenceElementError(ConversionError):
    def __init__(self, index: int, cause: BaseException):
        super().__init__(f"cannot set sequence element {index}: {cause}")
        self.index = index


class DecodeError(ConversionError):
    pass


class FieldBindError(EnvBindError):
    def __init__(self, key: str, cause: BaseException):
        super().__init__(f"cannot set field {key} value: {cause}")
        self.key = key


class BindFaultError(EnvBindError):
    def __init__(self, record_type: str, prefix: str, cause: BaseException):
        super().__init__(f"cannot load to record {record_type} (prefix={prefix}): {cause!r}")
        self.record_type = record_type
        self.prefix = prefix


class ConfigFileError(EnvBindError):
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
