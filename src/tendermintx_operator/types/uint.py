"""Unsigned Integer Types for block heights and chain parameters."""

from __future__ import annotations

from typing import Any, ClassVar, Literal, SupportsIndex, SupportsInt

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from typing_extensions import Self


class BaseUint(int):
    """Fixed-width unsigned integer that refuses to mix with other integer types."""

    BITS: ClassVar[int]
    """Width in bits, set by each concrete type."""

    def __new__(cls, value: SupportsInt) -> Self:
        """Build a value, raising OverflowError outside [0, 2**BITS)."""
        number = int(value)
        if number < 0 or number >> cls.BITS:
            raise OverflowError(f"{cls.__name__} cannot hold {number}")
        return super().__new__(cls, number)

    @classmethod
    def max_value(cls) -> Self:
        """Largest value representable by this type."""
        return cls(2**cls.BITS - 1)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Validate through the constructor, accepting decimal or 0x strings."""

        def validate(value: Any) -> BaseUint:
            # Booleans are ints in Python but never a valid height or chain id.
            if isinstance(value, bool):
                raise ValueError(f"{cls.__name__} does not accept booleans")
            if isinstance(value, str):
                try:
                    value = int(value, 0)
                except ValueError as e:
                    raise ValueError(f"invalid {cls.__name__} literal: {value!r}") from e
            try:
                return cls(value)
            except (OverflowError, TypeError) as e:
                raise ValueError(str(e)) from e

        return core_schema.json_or_python_schema(
            json_schema=core_schema.no_info_plain_validator_function(validate),
            python_schema=core_schema.no_info_plain_validator_function(validate),
            serialization=core_schema.plain_serializer_function_ser_schema(
                int
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Describe the value as a bounded non-negative integer."""
        return {"type": "integer", "minimum": 0, "format": f"uint{cls.BITS}"}

    def to_bytes(
        self,
        length: SupportsIndex | None = None,
        byteorder: Literal["little", "big"] = "big",
        *,
        signed: bool = False,
    ) -> bytes:
        """Big-endian (EVM order), `BITS // 8` bytes unless overridden."""
        size = self.BITS // 8 if length is None else int(length)
        return int.to_bytes(self, size, byteorder=byteorder, signed=signed)

    def _require_same_type(self, other: Any, op: str) -> None:
        """Refuse operands of any other type, plain `int` included."""
        if not isinstance(other, type(self)):
            raise TypeError(
                f"'{op}' between {type(self).__name__} and {type(other).__name__} "
                "is not supported"
            )

    # Results go back through the constructor, so underflow and overflow raise.

    def __add__(self, other: Any) -> Self:
        """Add two values of the same width."""
        self._require_same_type(other, "+")
        return type(self)(int(self) + int(other))

    def __sub__(self, other: Any) -> Self:
        """Subtract two values of the same width."""
        self._require_same_type(other, "-")
        return type(self)(int(self) - int(other))

    def __eq__(self, other: object) -> bool:
        self._require_same_type(other, "==")
        return int.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        self._require_same_type(other, "!=")
        return int.__ne__(self, other)

    def __lt__(self, other: Any) -> bool:
        self._require_same_type(other, "<")
        return int.__lt__(self, other)

    def __le__(self, other: Any) -> bool:
        self._require_same_type(other, "<=")
        return int.__le__(self, other)

    def __gt__(self, other: Any) -> bool:
        self._require_same_type(other, ">")
        return int.__gt__(self, other)

    def __ge__(self, other: Any) -> bool:
        self._require_same_type(other, ">=")
        return int.__ge__(self, other)

    def __repr__(self) -> str:
        """Show the type, e.g. `Uint64(100)`."""
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        return str(int(self))

    def __hash__(self) -> int:
        """Hash on (type, value) so widths never collide."""
        return hash((type(self), int(self)))


class Uint32(BaseUint):
    """EVM chain id."""

    BITS = 32


class Uint64(BaseUint):
    """Block height and skip distance."""

    BITS = 64


class Uint256(BaseUint):
    """Full ABI word."""

    BITS = 256
