"""Shared fixtures: a well-known dev key and an in-memory transport."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from invocant.pneuma.abi import InterfaceRegistry
from invocant.pneuma.interfaces import WETH_INTERFACE
from invocant.sigil.eth import SigningContext
from invocant.utils import TransactionId

# Hardhat / Anvil development account #0
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

CONTRACT_ADDRESS = "0xC4CA13280b8EafD7A033670E620B1AF74950E147"
CHAIN_ID = 23011913


class FakeTransport:
    """Records every call; answers from preset values."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.query_result = b""
        self.chain_id_value = CHAIN_ID
        self.remote_nonce = 7
        self.gas_price_value = 100_000_000
        self.gas_estimate = 60_000
        self.submit_delay = 0.0
        self.submit_error: Optional[Exception] = None
        self.submitted: list[Any] = []

    async def query(self, address: Any, calldata: bytes, *, sender: Any = None, block: str = "latest") -> bytes:
        self.calls.append(("query", bytes(calldata)))
        return self.query_result

    async def chain_id(self) -> int:
        self.calls.append(("chain_id", None))
        return self.chain_id_value

    async def nonce(self, address: Any, block: str = "pending") -> int:
        self.calls.append(("nonce", str(address)))
        return self.remote_nonce

    async def gas_price(self) -> int:
        self.calls.append(("gas_price", None))
        return self.gas_price_value

    async def estimate_gas(self, address: Any, calldata: bytes, *, sender: Any = None, value: int = 0) -> int:
        self.calls.append(("estimate_gas", bytes(calldata)))
        return self.gas_estimate

    async def submit(self, signed: Any) -> TransactionId:
        self.calls.append(("submit", signed.nonce))
        if self.submit_delay:
            await asyncio.sleep(self.submit_delay)
        if self.submit_error is not None:
            error, self.submit_error = self.submit_error, None
            raise error
        self.submitted.append(signed)
        return signed.transaction_id

    def methods_called(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def signer() -> SigningContext:
    return SigningContext(DEV_PRIVATE_KEY)


@pytest.fixture()
def weth_registry() -> InterfaceRegistry:
    return InterfaceRegistry.from_human_readable(WETH_INTERFACE)
