"""
Error taxonomy for the Invocant contract client.

Four families, each with a different caller contract:

- ConfigurationError: bad credential, endpoint or address. Raised at
  construction time, never worth retrying.
- EncodingError: arguments or return data that do not fit the declared
  types. A caller bug, never worth retrying.
- TransportError: the remote endpoint failed or refused. Carries enough
  structure (code, message, revert reason) for the caller to decide on a
  retry; the client itself never retries.
- StateError: misuse of the client (unknown method, no signer, chain id
  not fetched yet).
"""

from __future__ import annotations

from typing import Any, Optional


class InvocantError(RuntimeError):
    pass


# ============ Configuration ============


class ConfigurationError(InvocantError):
    pass


class InvalidAddress(ConfigurationError):
    def __init__(self, value: Any, detail: str = "") -> None:
        self.value = value
        message = f"Invalid address: {value!r}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class InvalidCredential(ConfigurationError):
    pass


# ============ Encoding ============


class EncodingError(InvocantError):
    pass


class _ArgumentError(EncodingError):
    """Error tied to one argument of one method call."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        self.method = method
        self.index = index
        prefix = ""
        if method:
            prefix += f"{method}: "
        if index is not None:
            prefix += f"argument {index}: "
        super().__init__(prefix + message)


class ArgumentMismatch(_ArgumentError):
    pass


class ValueOutOfRange(_ArgumentError):
    pass


class UnsupportedType(EncodingError):
    def __init__(self, type_str: str) -> None:
        self.type_str = type_str
        super().__init__(f"Unsupported ABI type: {type_str!r}")


class DecodeTruncated(EncodingError):
    def __init__(self, expected: int, actual: int, method: Optional[str] = None) -> None:
        self.expected = expected
        self.actual = actual
        self.method = method
        where = f"{method}: " if method else ""
        super().__init__(
            f"{where}return data truncated: need at least {expected} bytes, got {actual}"
        )


class MalformedData(EncodingError):
    pass


# ============ Transport ============


class TransportError(InvocantError):
    pass


class RpcError(TransportError):
    def __init__(self, code: Optional[int], message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        label = f"RPC error {code}" if code is not None else "RPC error"
        super().__init__(f"{label}: {message}")


class Underpriced(RpcError):
    pass


class NonceTooLow(RpcError):
    pass


class RemoteRevert(TransportError):
    def __init__(self, reason: Optional[str], data: Optional[bytes] = None) -> None:
        self.reason = reason
        self.data = data
        super().__init__(f"Execution reverted: {reason}" if reason else "Execution reverted")


# ============ State ============


class StateError(InvocantError):
    pass


class UnknownMethod(StateError):
    def __init__(self, name: str, arg_types: Optional[tuple[str, ...]] = None) -> None:
        self.name = name
        self.arg_types = arg_types
        if arg_types is None:
            super().__init__(f"Unknown method: {name}")
        else:
            super().__init__(f"Unknown method: {name}({','.join(arg_types)})")


class AmbiguousMethod(StateError):
    pass


class DuplicateSignature(StateError):
    pass


class RegistryFrozen(StateError):
    pass


class NoSigningContext(StateError):
    pass


class ChainIdentityUnset(StateError):
    pass


__all__ = [
    "InvocantError",
    "ConfigurationError",
    "InvalidAddress",
    "InvalidCredential",
    "EncodingError",
    "ArgumentMismatch",
    "ValueOutOfRange",
    "UnsupportedType",
    "DecodeTruncated",
    "MalformedData",
    "TransportError",
    "RpcError",
    "Underpriced",
    "NonceTooLow",
    "RemoteRevert",
    "StateError",
    "UnknownMethod",
    "AmbiguousMethod",
    "DuplicateSignature",
    "RegistryFrozen",
    "NoSigningContext",
    "ChainIdentityUnset",
]
