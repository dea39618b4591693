"""
Payload codecs.

The queue stores payloads as opaque bytes; a codec turns producer values
into bytes and back. Codec failures surface as SerializationError.
"""

import json
import pickle
from typing import Any, Protocol

from src.constants import CodecName
from src.exceptions import SerializationError


class Codec(Protocol):
    """Encodes payloads to bytes and decodes them back to equal values."""

    name: str

    def encode(self, payload: Any) -> bytes: ...

    def decode(self, data: bytes) -> Any: ...


class PickleCodec:
    """
    Codec accepting any picklable Python value.

    Only decode data written by trusted producers: unpickling can run
    arbitrary code.
    """

    name = CodecName.PICKLE

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self._protocol = protocol

    def encode(self, payload: Any) -> bytes:
        try:
            return pickle.dumps(payload, protocol=self._protocol)
        except Exception as e:
            # __reduce__ and friends may raise anything
            raise SerializationError(f"Cannot pickle payload: {e}") from e

    def decode(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except Exception as e:
            raise SerializationError(f"Cannot unpickle payload: {e}") from e


class JSONCodec:
    """Codec for JSON-compatible payloads, stored as UTF-8."""

    name = CodecName.JSON

    def encode(self, payload: Any) -> bytes:
        try:
            return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(f"Payload is not JSON serializable: {e}") from e

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise SerializationError(f"Stored data is not valid JSON: {e}") from e


_CODECS: dict[CodecName, type] = {
    CodecName.PICKLE: PickleCodec,
    CodecName.JSON: JSONCodec,
}


def get_codec(name: CodecName | str) -> Codec:
    """
    Build a codec by name.

    Args:
        name: Codec name ("pickle" or "json").

    Returns:
        A codec instance.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        codec_cls = _CODECS[CodecName(name)]
    except ValueError:
        raise ValueError(f"Unknown codec: {name!r}") from None
    return codec_cls()
