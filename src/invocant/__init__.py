__all__ = [
    # Contract handle
    "ContractHandle",
    "BoundMethod",
    "Invocation",
    "InvocationState",
    # Configuration
    "ClientConfig",
    # Interface registry
    "InterfaceRegistry",
    "MethodSignature",
    "Mutability",
    "bundled_registry",
    # Encoding
    "CallData",
    "EncodingEngine",
    "parse_type",
    "TypeDescriptor",
    "UIntType",
    "AddressType",
    "BoolType",
    "StringType",
    "BytesType",
    "FixedArrayType",
    "DynamicArrayType",
    "TypedValue",
    "UInt",
    "Address",
    "Bool",
    "String",
    "Bytes",
    "Array",
    # Transport
    "TransportClient",
    "TransactionId",
    # Signing
    "SigningContext",
    "SignedTransaction",
    "read_private_key",
    # Errors
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
    "RemoteRevert",
    "Underpriced",
    "NonceTooLow",
    "StateError",
    "UnknownMethod",
    "AmbiguousMethod",
    "DuplicateSignature",
    "RegistryFrozen",
    "NoSigningContext",
    "ChainIdentityUnset",
]

from .errors import (
    AmbiguousMethod,
    ArgumentMismatch,
    ChainIdentityUnset,
    ConfigurationError,
    DecodeTruncated,
    DuplicateSignature,
    EncodingError,
    InvalidAddress,
    InvalidCredential,
    InvocantError,
    MalformedData,
    NoSigningContext,
    NonceTooLow,
    RegistryFrozen,
    RemoteRevert,
    RpcError,
    StateError,
    TransportError,
    Underpriced,
    UnknownMethod,
    UnsupportedType,
    ValueOutOfRange,
)
from .pneuma.types import (
    Address,
    AddressType,
    Array,
    Bool,
    BoolType,
    Bytes,
    BytesType,
    DynamicArrayType,
    FixedArrayType,
    String,
    StringType,
    TypeDescriptor,
    TypedValue,
    UInt,
    UIntType,
    parse_type,
)
from .pneuma.codec import CallData, EncodingEngine
from .pneuma.abi import InterfaceRegistry, MethodSignature, Mutability
from .pneuma.interfaces import bundled_registry
from .pneuma.rpc import TransportClient
from .sigil.eth import SignedTransaction, SigningContext, read_private_key
from .utils import TransactionId
from .config import ClientConfig
from .contract import BoundMethod, ContractHandle, Invocation, InvocationState
