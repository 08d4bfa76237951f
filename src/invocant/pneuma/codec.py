"""
Encoding Engine - Call-data encoding and return-data decoding.

Call-data = 4-byte selector (Keccak-256 of the canonical signature string)
followed by the ABI-encoded argument tuple. The byte layout itself (32-byte
head slots, offsets into a tail region for dynamic types, nested to any
depth) is produced by eth-abi; this module owns everything around it:
validating TypedValues against their descriptors before anything is
encoded, mapping decoded values back to TypedValues and translating codec
failures into the client's error taxonomy.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, InsufficientDataBytes
from eth_abi.exceptions import EncodingError as AbiEncodingError

from ..errors import ArgumentMismatch, DecodeTruncated, MalformedData
from ..utils import keccak256
from .types import TypeDescriptor, TypedValue, min_encoded_size

if TYPE_CHECKING:
    from .abi import MethodSignature

logger = logging.getLogger(__name__)

SELECTOR_LENGTH = 4

# Error(string) and Panic(uint256), the two revert payloads solc emits.
ERROR_SELECTOR = bytes.fromhex("08c379a0")
PANIC_SELECTOR = bytes.fromhex("4e487b71")


class CallData(bytes):
    """Selector plus encoded arguments, ready to hand to the transport."""

    @property
    def selector(self) -> bytes:
        return bytes(self[:SELECTOR_LENGTH])

    @property
    def arguments(self) -> bytes:
        return bytes(self[SELECTOR_LENGTH:])

    def to_hex(self) -> str:
        return "0x" + self.hex()


def function_selector(name: str, arg_types: Sequence[TypeDescriptor]) -> bytes:
    """First 4 bytes of keccak256("name(type1,type2,...)")."""
    text = f"{name}({','.join(t.canonical for t in arg_types)})"
    return keccak256(text.encode("utf-8"))[:SELECTOR_LENGTH]


class EncodingEngine:
    """Stateless codec between TypedValues and ABI bytes."""

    def encode(self, signature: "MethodSignature", arguments: Sequence[TypedValue]) -> CallData:
        """
        Build call-data for one invocation.

        Raises:
            ArgumentMismatch: Wrong argument count or shape.
            ValueOutOfRange: An unsigned integer exceeds its bit width.
        """
        if len(arguments) != len(signature.inputs):
            raise ArgumentMismatch(
                f"expected {len(signature.inputs)} arguments, got {len(arguments)}",
                method=signature.signature,
            )
        body = self.encode_values(signature.inputs, arguments, method=signature.signature)
        calldata = CallData(signature.selector + body)
        logger.debug("Encoded %s -> %d bytes", signature.signature, len(calldata))
        return calldata

    def encode_values(
        self,
        types: Sequence[TypeDescriptor],
        values: Sequence[TypedValue],
        method: Optional[str] = None,
    ) -> bytes:
        """ABI-encode a tuple of values without a selector."""
        for index, (descriptor, value) in enumerate(zip(types, values)):
            descriptor.check(value, method=method, index=index)
        if not types:
            return b""
        try:
            return abi_encode(
                [t.canonical for t in types],
                [v.to_abi() for v in values],
            )
        except AbiEncodingError as exc:
            raise ArgumentMismatch(str(exc), method=method) from exc
        except UnicodeEncodeError as exc:
            raise ArgumentMismatch(f"string is not valid UTF-8: {exc.reason}", method=method) from exc

    def decode(
        self,
        types: Sequence[TypeDescriptor],
        raw: bytes,
        method: Optional[str] = None,
    ) -> list[TypedValue]:
        """
        Decode return data into TypedValues.

        Raises:
            DecodeTruncated: Data shorter than the tuple's minimum size.
            MalformedData: Offsets, lengths or padding are inconsistent.
        """
        if not types:
            return []

        minimum = min_encoded_size(types)
        if len(raw) < minimum:
            raise DecodeTruncated(minimum, len(raw), method=method)

        try:
            decoded = abi_decode([t.canonical for t in types], bytes(raw))
        except InsufficientDataBytes as exc:
            raise DecodeTruncated(minimum, len(raw), method=method) from exc
        except (DecodingError, UnicodeDecodeError) as exc:
            where = f"{method}: " if method else ""
            raise MalformedData(f"{where}cannot decode return data: {exc}") from exc

        return [t.from_abi(value) for t, value in zip(types, decoded)]

    def decode_revert_reason(self, data: bytes) -> Optional[str]:
        """Human-readable reason from revert data, or None if not recognised."""
        if data[:SELECTOR_LENGTH] == ERROR_SELECTOR:
            try:
                (reason,) = abi_decode(["string"], bytes(data[SELECTOR_LENGTH:]))
            except (DecodingError, UnicodeDecodeError):
                return None
            return reason
        if data[:SELECTOR_LENGTH] == PANIC_SELECTOR:
            try:
                (code,) = abi_decode(["uint256"], bytes(data[SELECTOR_LENGTH:]))
            except DecodingError:
                return None
            return f"panic code {code:#x}"
        return None
