from __future__ import annotations

import base64
import binascii

from ..errors import ConversionError


class Base64:
    """
    Base64-encoded secret, e.g. ``API_SECRET=dGVzdC1zZWNyZXQ=``.

        @dataclass
        class AppConfig:
            secret: Base64 = env_field(env="API_SECRET", default_factory=Base64)

    ``raw`` holds the decoded bytes, ``str()`` the UTF-8 text.
    """

    def __init__(self, raw: bytes = b""):
        self.raw = raw

    def __repr__(self) -> str:
        return f"Base64(<{len(self.raw)} bytes>)"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Base64) and other.raw == self.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __str__(self) -> str:
        return self.raw.decode("utf-8", errors="replace")

    def decode_text(self, text: str) -> None:
        if not text:
            self.raw = b""
            return
        # standard alphabet, padding required
        if len(text) % 4:
            raise ConversionError("failed to decode base64 string: incorrect padding")
        try:
            self.raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ConversionError(f"failed to decode base64 string: {exc}") from exc
