"""
Fixed-length byte types.

Header hashes, function identifiers and EVM addresses all travel as
fixed-size byte strings. Each is a `bytes` subclass with strict length
checking, so a 31-byte hash can never reach the encoder.
"""

from __future__ import annotations

from typing import Any, ClassVar, Iterable, SupportsIndex

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self


def _raw(value: Any) -> bytes:
    """Turn bytes, hex text (optionally 0x-prefixed) or an int iterable into bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        text = value.strip()
        if text[:2] in ("0x", "0X"):
            text = text[2:]
        return bytes.fromhex(text)
    if isinstance(value, Iterable):
        return bytes(bytearray(value))
    return bytes(value)


class BaseBytes(bytes):
    """Byte string of exactly `LENGTH` bytes."""

    LENGTH: ClassVar[int]

    def __new__(cls, value: Any = b"") -> Self:
        """
        Parse `value` and enforce the length.

        Raises:
            ValueError: Wrong length or malformed hex.
        """
        data = _raw(value)
        if len(data) != cls.LENGTH:
            raise ValueError(
                f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(data)}"
            )
        return super().__new__(cls, data)

    @classmethod
    def zero(cls) -> Self:
        return cls(bytes(cls.LENGTH))

    def to_0x_hex(self) -> str:
        """Hex form used in JSON-RPC and proof network payloads."""
        return f"0x{self.hex()}"

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        raw = bytes(self)
        return raw.hex() if sep is None else raw.hex(sep, bytes_per_sep)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Pass instances through, parse anything else, and dump as 0x hex."""
        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                core_schema.no_info_plain_validator_function(cls),
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(BaseBytes.to_0x_hex),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()})"

    def __hash__(self) -> int:
        return hash((type(self), bytes(self)))


class Bytes4(BaseBytes):
    """ABI function selector."""

    LENGTH = 4


class Bytes20(BaseBytes):
    """EVM address."""

    LENGTH = 20


class Bytes32(BaseBytes):
    """Header hash or proof function id."""

    LENGTH = 32


ZERO_HASH = Bytes32.zero()
