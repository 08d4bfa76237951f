"""
Contract Handle - Typed method calls against one deployed contract.

A handle binds a contract address to an interface registry, a transport
and (optionally) a signing context, and exposes every registered method:

    handle = ContractHandle(address, registry, transport, signer)
    values = await handle.sum([16])            # pure/view -> list[TypedValue]
    tx_id = await handle.withdraw(10 ** 18)     # nonpayable -> TransactionId

Read-only methods (pure, view) always go through eth_call and are decoded.
State-changing methods (payable, nonpayable) are always signed and
submitted; their return data is not decoded because nothing has executed
yet at submission time. A state-changing method can be dry-run only by
asking for it explicitly with ``simulate``.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from .errors import AmbiguousMethod, ArgumentMismatch, InvocantError, NoSigningContext, UnknownMethod
from .pneuma.abi import InterfaceRegistry, MethodSignature
from .pneuma.codec import CallData, EncodingEngine
from .pneuma.rpc import TransportClient
from .pneuma.types import Address, TypedValue, TypeLike
from .sigil.eth import SigningContext
from .utils import TransactionId

if TYPE_CHECKING:
    from .config import ClientConfig

logger = logging.getLogger(__name__)

InvocationResult = Union[list[TypedValue], TransactionId]


class InvocationState(enum.Enum):
    BUILT = "built"
    ENCODED = "encoded"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"


class Invocation:
    """
    One call of one method, from validated arguments to a result.

    Built -> Encoded -> Dispatched -> Completed, or Failed from any step.
    Invocations are single-use and never shared between calls.
    """

    def __init__(
        self,
        handle: "ContractHandle",
        signature: MethodSignature,
        arguments: Sequence[Any],
        *,
        value: int = 0,
        gas: Optional[int] = None,
        simulate: bool = False,
    ) -> None:
        method = signature.signature
        if len(arguments) != len(signature.inputs):
            raise ArgumentMismatch(
                f"expected {len(signature.inputs)} arguments, got {len(arguments)}",
                method=method,
            )
        if value < 0:
            raise ArgumentMismatch("value must not be negative", method=method)
        if value and not signature.mutability.is_payable:
            raise ArgumentMismatch(f"method is {signature.mutability.value} and cannot receive value", method=method)

        typed = []
        for index, (descriptor, arg) in enumerate(zip(signature.inputs, arguments)):
            try:
                typed_arg = descriptor.coerce(arg)
            except ArgumentMismatch as exc:
                raise ArgumentMismatch(str(exc), method=method, index=index) from exc
            descriptor.check(typed_arg, method=method, index=index)
            typed.append(typed_arg)

        self.handle = handle
        self.signature = signature
        self.arguments: tuple[TypedValue, ...] = tuple(typed)
        self.value = value
        self.gas = gas
        self.simulate = simulate
        self.calldata: Optional[CallData] = None
        self.result: Optional[InvocationResult] = None
        self.error: Optional[InvocantError] = None
        self.state = InvocationState.BUILT

    @property
    def is_query(self) -> bool:
        return self.signature.is_read_only or self.simulate

    def encode(self) -> CallData:
        if self.calldata is None:
            try:
                self.calldata = self.handle.codec.encode(self.signature, self.arguments)
            except InvocantError as exc:
                self._fail(exc)
                raise
            self.state = InvocationState.ENCODED
        return self.calldata

    async def run(self) -> InvocationResult:
        if self.state is not InvocationState.BUILT and self.state is not InvocationState.ENCODED:
            raise RuntimeError(f"Invocation already {self.state.value}")
        calldata = self.encode()
        handle = self.handle
        try:
            if self.is_query:
                self.state = InvocationState.DISPATCHED
                result: InvocationResult = await handle._query(self.signature, calldata)
            else:
                signer = handle._require_signer(self.signature)
                self.state = InvocationState.DISPATCHED
                result = await handle._transact(signer, calldata, value=self.value, gas=self.gas)
        except InvocantError as exc:
            self._fail(exc)
            raise
        self.result = result
        self.state = InvocationState.COMPLETED
        return result

    def _fail(self, exc: InvocantError) -> None:
        self.error = exc
        self.state = InvocationState.FAILED


class BoundMethod:
    """All overloads of one method name, bound to a handle."""

    def __init__(self, handle: "ContractHandle", name: str, candidates: Sequence[MethodSignature]) -> None:
        self._handle = handle
        self.name = name
        self.candidates = tuple(candidates)

    def select(self, arg_count: int) -> MethodSignature:
        if len(self.candidates) == 1:
            return self.candidates[0]
        matching = [s for s in self.candidates if len(s.inputs) == arg_count]
        if len(matching) == 1:
            return matching[0]
        if not matching:
            raise ArgumentMismatch(f"no overload takes {arg_count} arguments", method=self.name)
        raise AmbiguousMethod(
            f"{self.name} is overloaded ({', '.join(s.signature for s in matching)}); "
            f"pass arg_types to pick one"
        )

    def prepare(self, *args: Any, value: int = 0, gas: Optional[int] = None, simulate: bool = False) -> Invocation:
        signature = self.select(len(args))
        return Invocation(self._handle, signature, args, value=value, gas=gas, simulate=simulate)

    def encode(self, *args: Any) -> CallData:
        return self.prepare(*args).encode()

    async def __call__(self, *args: Any, value: int = 0, gas: Optional[int] = None) -> InvocationResult:
        return await self.prepare(*args, value=value, gas=gas).run()

    async def simulate(self, *args: Any) -> list[TypedValue]:
        """Dry-run any method through eth_call and decode what it would return."""
        return await self.prepare(*args, simulate=True).run()  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"<BoundMethod {' | '.join(str(s) for s in self.candidates)}>"


class ContractHandle:
    """
    Facade over one deployed contract.

    Args:
        address: Contract address (Address or 0x-prefixed hex string)
        registry: Declared methods
        transport: JSON-RPC transport
        signer: Signing context for state-changing methods
        gas_limit: Fixed gas limit; estimated per call when unset

    Raises:
        InvalidAddress: If the address cannot be parsed
    """

    def __init__(
        self,
        address: Union[Address, str],
        registry: InterfaceRegistry,
        transport: TransportClient,
        signer: Optional[SigningContext] = None,
        *,
        codec: Optional[EncodingEngine] = None,
        gas_limit: Optional[int] = None,
    ) -> None:
        self.address = address if isinstance(address, Address) else Address.from_hex(address)
        self.registry = registry
        self.transport = transport
        self.signer = signer
        self.codec = codec or EncodingEngine()
        self.gas_limit = gas_limit

    @classmethod
    def from_config(
        cls,
        config: "ClientConfig",
        registry: InterfaceRegistry,
        transport: Optional[TransportClient] = None,
    ) -> "ContractHandle":
        transport = transport or TransportClient(config.rpc_url, timeout=config.timeout)
        signer = SigningContext(config.private_key) if config.private_key else None
        return cls(
            config.contract_address,
            registry,
            transport,
            signer,
            gas_limit=config.gas_limit,
        )

    # ============ Method lookup ============

    def method(self, name: str, arg_types: Optional[Sequence[TypeLike]] = None) -> BoundMethod:
        """
        Look up a method by name, optionally pinning one overload.

        Raises:
            UnknownMethod: If no such method is registered
        """
        if arg_types is not None:
            return BoundMethod(self, name, [self.registry.resolve(name, arg_types)])
        candidates = self.registry.overloads(name)
        if not candidates:
            raise UnknownMethod(name)
        return BoundMethod(self, name, candidates)

    def __getattr__(self, name: str) -> BoundMethod:
        if name.startswith("_") or "registry" not in self.__dict__:
            raise AttributeError(name)
        try:
            return self.method(name)
        except UnknownMethod as exc:
            raise AttributeError(str(exc)) from exc

    async def invoke(
        self,
        name: str,
        *args: Any,
        arg_types: Optional[Sequence[TypeLike]] = None,
        value: int = 0,
        gas: Optional[int] = None,
    ) -> InvocationResult:
        return await self.method(name, arg_types)(*args, value=value, gas=gas)

    # ============ Dispatch ============

    def _require_signer(self, signature: MethodSignature) -> SigningContext:
        if self.signer is None:
            raise NoSigningContext(
                f"{signature.signature} is {signature.mutability.value}; "
                f"a signing context is required to send it"
            )
        return self.signer

    async def _query(self, signature: MethodSignature, calldata: CallData) -> list[TypedValue]:
        sender = self.signer.address if self.signer is not None else None
        raw = await self.transport.query(self.address, calldata, sender=sender)
        return self.codec.decode(signature.outputs, raw, method=signature.signature)

    async def _transact(
        self,
        signer: SigningContext,
        calldata: CallData,
        *,
        value: int,
        gas: Optional[int],
    ) -> TransactionId:
        await signer.ensure_chain_id(self.transport)
        gas_price = await self.transport.gas_price()
        if gas is None:
            gas = self.gas_limit
        if gas is None:
            gas = await self.transport.estimate_gas(
                self.address, calldata, sender=signer.address, value=value
            )

        async with signer.allocate_nonce(self.transport) as nonce:
            signed = signer.sign(self.address, calldata, nonce, value=value, gas=gas, gas_price=gas_price)
            tx_id = await self.transport.submit(signed)

        logger.debug("Submitted %s (nonce=%s)", tx_id, nonce)
        return tx_id

    def __repr__(self) -> str:
        return f"<ContractHandle {self.address} ({len(self.registry)} methods)>"
