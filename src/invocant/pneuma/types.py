"""
ABI type descriptors and typed values.

A TypeDescriptor says what shape a slot has (uint8, string, address[3],
bytes[][] ...). A TypedValue carries one concrete value of that shape.
Descriptors drive validation, coercion from plain Python values and the
mapping to and from the eth-abi codec; values are frozen and compare by
value so decoded results can be checked with ``==``.

Supported descriptors:
- ``uint<N>`` (N in 8..256, multiple of 8; bare ``uint`` means uint256)
- ``address``, ``bool``, ``string``, ``bytes``
- fixed arrays ``T[k]`` and dynamic arrays ``T[]``, nested to any depth
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator, Optional, Sequence, Union

from ..errors import ArgumentMismatch, InvalidAddress, UnsupportedType, ValueOutOfRange
from ..utils import hex_to_bytes, strip_0x, to_checksum_address

SLOT_SIZE = 32

_TYPE_RE = re.compile(r"^([a-z]+)(\d*)((?:\[\d*\])*)$")
_DIM_RE = re.compile(r"\[(\d*)\]")


# ============ Typed values ============


class TypedValue:
    """Base class of all typed values."""

    def to_abi(self) -> Any:
        raise NotImplementedError

    def to_python(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class UInt(TypedValue):
    value: int

    def to_abi(self) -> int:
        return self.value

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True)
class Address(TypedValue):
    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray)) or len(self.value) != 20:
            raise InvalidAddress(self.value, "expected 20 bytes")
        object.__setattr__(self, "value", bytes(self.value))

    @classmethod
    def from_hex(cls, text: str) -> "Address":
        if not isinstance(text, str):
            raise InvalidAddress(text, "expected a hex string")
        body = strip_0x(text.strip())
        if len(body) != 40:
            raise InvalidAddress(text, "expected 40 hex characters")
        try:
            raw = bytes.fromhex(body)
        except ValueError as exc:
            raise InvalidAddress(text, "not hexadecimal") from exc
        return cls(raw)

    @property
    def checksum(self) -> str:
        return to_checksum_address(self.value)

    def __str__(self) -> str:
        return self.checksum

    def to_abi(self) -> str:
        return self.checksum

    def to_python(self) -> str:
        return self.checksum


@dataclass(frozen=True)
class Bool(TypedValue):
    value: bool

    def to_abi(self) -> bool:
        return self.value

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class String(TypedValue):
    value: str

    def to_abi(self) -> str:
        return self.value

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class Bytes(TypedValue):
    value: bytes

    def __post_init__(self) -> None:
        if isinstance(self.value, bytearray):
            object.__setattr__(self, "value", bytes(self.value))

    def to_abi(self) -> bytes:
        return self.value

    def to_python(self) -> str:
        return "0x" + self.value.hex()


@dataclass(frozen=True)
class Array(TypedValue):
    """Ordered sequence of nested values, used for fixed and dynamic arrays."""

    items: tuple[TypedValue, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[TypedValue]:
        return iter(self.items)

    def __getitem__(self, index: int) -> TypedValue:
        return self.items[index]

    def to_abi(self) -> list[Any]:
        return [item.to_abi() for item in self.items]

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]


# ============ Type descriptors ============


def _where(path: str) -> str:
    return f" at {path}" if path else ""


class TypeDescriptor:
    """Base class of all type descriptors."""

    is_dynamic: bool = False

    @property
    def canonical(self) -> str:
        raise NotImplementedError

    @property
    def head_size(self) -> int:
        """Bytes this type occupies in the head region of an enclosing tuple."""
        return SLOT_SIZE

    @property
    def min_size(self) -> int:
        """Fewest bytes any encoding takes, head slot included."""
        if self.is_dynamic:
            # offset slot in the head, length slot in the tail
            return SLOT_SIZE * 2
        return self.head_size

    def check(
        self,
        value: Any,
        method: Optional[str] = None,
        index: Optional[int] = None,
        path: str = "",
    ) -> None:
        raise NotImplementedError

    def coerce(self, value: Any) -> TypedValue:
        raise NotImplementedError

    def from_abi(self, raw: Any) -> TypedValue:
        raise NotImplementedError

    def _mismatch(self, value: Any, method: Optional[str], index: Optional[int], path: str) -> ArgumentMismatch:
        return ArgumentMismatch(
            f"expected {self.canonical}{_where(path)}, got {type(value).__name__}",
            method=method,
            index=index,
        )

    def __str__(self) -> str:
        return self.canonical


@dataclass(frozen=True)
class UIntType(TypeDescriptor):
    bits: int = 256

    def __post_init__(self) -> None:
        if self.bits < 8 or self.bits > 256 or self.bits % 8:
            raise UnsupportedType(f"uint{self.bits}")

    @property
    def canonical(self) -> str:
        return f"uint{self.bits}"

    @property
    def max_value(self) -> int:
        return (1 << self.bits) - 1

    def check(self, value, method=None, index=None, path=""):
        if not isinstance(value, UInt) or not isinstance(value.value, int) or isinstance(value.value, bool):
            raise self._mismatch(value, method, index, path)
        if value.value < 0 or value.value > self.max_value:
            raise ValueOutOfRange(
                f"{value.value} does not fit in {self.canonical}{_where(path)}",
                method=method,
                index=index,
            )

    def coerce(self, value):
        if isinstance(value, TypedValue):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                return UInt(int(text, 16) if text[:2] in ("0x", "0X") else int(text))
            except ValueError as exc:
                raise ArgumentMismatch(f"cannot read {value!r} as {self.canonical}") from exc
        if isinstance(value, int) and not isinstance(value, bool):
            return UInt(value)
        raise ArgumentMismatch(f"cannot read {value!r} as {self.canonical}")

    def from_abi(self, raw):
        return UInt(int(raw))


@dataclass(frozen=True)
class AddressType(TypeDescriptor):
    @property
    def canonical(self) -> str:
        return "address"

    def check(self, value, method=None, index=None, path=""):
        if not isinstance(value, Address):
            raise self._mismatch(value, method, index, path)

    def coerce(self, value):
        if isinstance(value, TypedValue):
            return value
        try:
            if isinstance(value, (bytes, bytearray)):
                return Address(bytes(value))
            return Address.from_hex(value)
        except InvalidAddress as exc:
            raise ArgumentMismatch(str(exc)) from exc

    def from_abi(self, raw):
        if isinstance(raw, (bytes, bytearray)):
            return Address(bytes(raw))
        return Address.from_hex(raw)


@dataclass(frozen=True)
class BoolType(TypeDescriptor):
    @property
    def canonical(self) -> str:
        return "bool"

    def check(self, value, method=None, index=None, path=""):
        if not isinstance(value, Bool) or not isinstance(value.value, bool):
            raise self._mismatch(value, method, index, path)

    def coerce(self, value):
        if isinstance(value, TypedValue):
            return value
        if isinstance(value, bool):
            return Bool(value)
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return Bool(value.lower() == "true")
        raise ArgumentMismatch(f"cannot read {value!r} as bool")

    def from_abi(self, raw):
        return Bool(bool(raw))


@dataclass(frozen=True)
class StringType(TypeDescriptor):
    is_dynamic = True

    @property
    def canonical(self) -> str:
        return "string"

    def check(self, value, method=None, index=None, path=""):
        if not isinstance(value, String) or not isinstance(value.value, str):
            raise self._mismatch(value, method, index, path)

    def coerce(self, value):
        if isinstance(value, TypedValue):
            return value
        if isinstance(value, str):
            return String(value)
        raise ArgumentMismatch(f"cannot read {value!r} as string")

    def from_abi(self, raw):
        return String(raw)


@dataclass(frozen=True)
class BytesType(TypeDescriptor):
    is_dynamic = True

    @property
    def canonical(self) -> str:
        return "bytes"

    def check(self, value, method=None, index=None, path=""):
        if not isinstance(value, Bytes) or not isinstance(value.value, bytes):
            raise self._mismatch(value, method, index, path)

    def coerce(self, value):
        if isinstance(value, TypedValue):
            return value
        if isinstance(value, (bytes, bytearray)):
            return Bytes(bytes(value))
        if isinstance(value, str):
            try:
                return Bytes(hex_to_bytes(value))
            except ValueError as exc:
                raise ArgumentMismatch(f"cannot read {value!r} as bytes") from exc
        raise ArgumentMismatch(f"cannot read {value!r} as bytes")

    def from_abi(self, raw):
        return Bytes(bytes(raw))


class _ArrayType(TypeDescriptor):
    element: TypeDescriptor

    def _check_items(self, value, method, index, path):
        for i, item in enumerate(value.items):
            self.element.check(item, method=method, index=index, path=f"{path}[{i}]")

    def coerce(self, value):
        if isinstance(value, TypedValue):
            return value
        if not isinstance(value, (list, tuple)):
            raise ArgumentMismatch(f"cannot read {value!r} as {self.canonical}")
        return Array(tuple(self.element.coerce(item) for item in value))

    def from_abi(self, raw):
        return Array(tuple(self.element.from_abi(item) for item in raw))


@dataclass(frozen=True)
class FixedArrayType(_ArrayType):
    element: TypeDescriptor
    length: int

    def __post_init__(self) -> None:
        if self.length < 1:
            raise UnsupportedType(f"{self.element.canonical}[{self.length}]")

    @property
    def is_dynamic(self) -> bool:  # type: ignore[override]
        return self.element.is_dynamic

    @property
    def canonical(self) -> str:
        return f"{self.element.canonical}[{self.length}]"

    @property
    def head_size(self) -> int:
        if self.is_dynamic:
            return SLOT_SIZE
        return self.element.head_size * self.length

    @property
    def min_size(self) -> int:
        if self.is_dynamic:
            return SLOT_SIZE + self.element.min_size * self.length
        return self.head_size

    def check(self, value, method=None, index=None, path=""):
        if not isinstance(value, Array):
            raise self._mismatch(value, method, index, path)
        if len(value) != self.length:
            raise ArgumentMismatch(
                f"expected {self.length} elements for {self.canonical}{_where(path)}, got {len(value)}",
                method=method,
                index=index,
            )
        self._check_items(value, method, index, path)


@dataclass(frozen=True)
class DynamicArrayType(_ArrayType):
    element: TypeDescriptor
    is_dynamic = True

    @property
    def canonical(self) -> str:
        return f"{self.element.canonical}[]"

    def check(self, value, method=None, index=None, path=""):
        if not isinstance(value, Array):
            raise self._mismatch(value, method, index, path)
        self._check_items(value, method, index, path)


# ============ Parsing ============

_ELEMENTARY = {
    "address": AddressType(),
    "bool": BoolType(),
    "string": StringType(),
    "bytes": BytesType(),
}


@lru_cache(maxsize=256)
def parse_type(type_str: str) -> TypeDescriptor:
    """
    Parse a Solidity type string into a descriptor.

    Raises:
        UnsupportedType: For types outside the supported set.
    """
    match = _TYPE_RE.match(type_str.strip())
    if not match:
        raise UnsupportedType(type_str)
    base, size, dims = match.groups()

    descriptor: TypeDescriptor
    if base == "uint":
        descriptor = UIntType(int(size) if size else 256)
    elif base in _ELEMENTARY and not size:
        descriptor = _ELEMENTARY[base]
    else:
        raise UnsupportedType(type_str)

    for dim in _DIM_RE.findall(dims):
        if dim:
            descriptor = FixedArrayType(descriptor, int(dim))
        else:
            descriptor = DynamicArrayType(descriptor)
    return descriptor


TypeLike = Union[str, TypeDescriptor]


def as_descriptor(value: TypeLike) -> TypeDescriptor:
    if isinstance(value, TypeDescriptor):
        return value
    return parse_type(value)


def min_encoded_size(types: Sequence[TypeDescriptor]) -> int:
    """Smallest byte length any encoding of a tuple of ``types`` can have."""
    return sum(t.min_size for t in types)
