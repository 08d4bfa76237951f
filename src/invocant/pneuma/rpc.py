"""
JSON-RPC Transport Client.

Thin adapter over an Ethereum-style JSON-RPC endpoint: read-only queries
(eth_call), raw transaction submission, chain id lookup and the handful of
account/gas lookups the signing path needs. Uses httpx for HTTP.

No retries happen here. Every failure is raised to the caller as a
TransportError subclass with the endpoint's code, message and data.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Optional, Union

import httpx

from ..errors import (
    ConfigurationError,
    NonceTooLow,
    RemoteRevert,
    RpcError,
    TransportError,
    Underpriced,
)
from ..utils import TransactionId, bytes_to_hex, hex_to_bytes, hex_to_int
from .codec import EncodingEngine
from .types import Address

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

AddressLike = Union[Address, str]


def _address_param(address: AddressLike) -> str:
    return str(address)


def _revert_bytes(data: Any) -> Optional[bytes]:
    """Dig the revert payload out of an error's ``data`` field."""
    if isinstance(data, dict):
        return _revert_bytes(data.get("data"))
    if isinstance(data, str) and data.startswith("0x"):
        try:
            return hex_to_bytes(data)
        except ValueError:
            return None
    return None


def _int_result(method: str, result: Any) -> int:
    try:
        return hex_to_int(result)
    except (TypeError, ValueError) as exc:
        raise RpcError(None, f"Invalid {method} result: {result!r}") from exc


class TransportClient:
    """
    Async JSON-RPC client bound to one endpoint.

    Args:
        rpc_url: Endpoint URL. Passed to httpx as is.
        timeout: Per-request timeout in seconds.
        client: Pre-built httpx.AsyncClient (the transport then does not
                close it).
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not rpc_url:
            raise ConfigurationError("RPC endpoint URL is required.")
        self.rpc_url = rpc_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._ids = itertools.count(1)
        self._codec = EncodingEngine()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "TransportClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---------------------------------------------------------------------------
    # JSON-RPC plumbing
    # ---------------------------------------------------------------------------

    async def request(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: On HTTP failure or a JSON-RPC error object
            RemoteRevert: If the endpoint reports an execution revert
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("RPC -> %s (id=%s)", method, payload["id"])

        try:
            response = await self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise RpcError(status, f"HTTP {status} from {self.rpc_url}") from exc
        except httpx.HTTPError as exc:
            raise RpcError(None, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise RpcError(None, f"Invalid JSON-RPC response: {exc}") from exc

        if not isinstance(data, dict):
            raise RpcError(None, "Invalid JSON-RPC response: not an object")
        if data.get("error") is not None:
            raise self._classify(data["error"])

        return data.get("result")

    def _classify(self, error: Any) -> TransportError:
        if not isinstance(error, dict):
            return RpcError(None, str(error))

        code = error.get("code")
        message = str(error.get("message", ""))
        data = error.get("data")
        lowered = message.lower()

        revert_data = _revert_bytes(data)
        # Geth reports reverts with code 3 and the payload in data
        if "revert" in lowered or (code == 3 and revert_data is not None):
            reason = self._codec.decode_revert_reason(revert_data) if revert_data else None
            if reason is None and ":" in message:
                reason = message.split(":", 1)[1].strip() or None
            return RemoteRevert(reason, revert_data)
        if "underpriced" in lowered:
            return Underpriced(code, message, data)
        if "nonce too low" in lowered:
            return NonceTooLow(code, message, data)
        return RpcError(code, message, data)

    # ---------------------------------------------------------------------------
    # Core primitives
    # ---------------------------------------------------------------------------

    async def query(
        self,
        address: AddressLike,
        calldata: bytes,
        *,
        sender: Optional[AddressLike] = None,
        block: str = "latest",
    ) -> bytes:
        """Execute a read-only call (eth_call) and return the raw result bytes."""
        call: dict[str, Any] = {"to": _address_param(address), "data": bytes_to_hex(calldata)}
        if sender is not None:
            call["from"] = _address_param(sender)
        result = await self.request("eth_call", [call, block])
        if not result:
            return b""
        try:
            return hex_to_bytes(result)
        except (TypeError, ValueError) as exc:
            raise RpcError(None, f"Invalid eth_call result: {result!r}") from exc

    async def submit(self, signed: Any) -> TransactionId:
        """
        Send a signed raw transaction.

        Returns:
            Transaction hash assigned by the endpoint
        """
        result = await self.request("eth_sendRawTransaction", [signed.raw_hex])
        return TransactionId(result)

    async def chain_id(self) -> int:
        result = await self.request("eth_chainId", [])
        return _int_result("eth_chainId", result)

    # ---------------------------------------------------------------------------
    # Account and gas lookups
    # ---------------------------------------------------------------------------

    async def nonce(self, address: AddressLike, block: str = "pending") -> int:
        result = await self.request("eth_getTransactionCount", [_address_param(address), block])
        return _int_result("eth_getTransactionCount", result)

    async def gas_price(self) -> int:
        result = await self.request("eth_gasPrice", [])
        return _int_result("eth_gasPrice", result)

    async def estimate_gas(
        self,
        address: AddressLike,
        calldata: bytes,
        *,
        sender: Optional[AddressLike] = None,
        value: int = 0,
    ) -> int:
        call: dict[str, Any] = {
            "to": _address_param(address),
            "data": bytes_to_hex(calldata),
            "value": hex(value),
        }
        if sender is not None:
            call["from"] = _address_param(sender)
        result = await self.request("eth_estimateGas", [call])
        return _int_result("eth_estimateGas", result)

    async def balance(self, address: AddressLike, block: str = "latest") -> int:
        result = await self.request("eth_getBalance", [_address_param(address), block])
        return _int_result("eth_getBalance", result)

    async def receipt(self, tx_id: Union[TransactionId, str]) -> Optional[dict]:
        return await self.request("eth_getTransactionReceipt", [str(tx_id)])

    async def wait_for_receipt(
        self,
        tx_id: Union[TransactionId, str],
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict:
        """
        Poll until the transaction receipt is available.

        Raises:
            TimeoutError: If receipt not found within timeout
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            receipt = await self.receipt(tx_id)
            if receipt is not None:
                return receipt
            if loop.time() >= deadline:
                raise TimeoutError(f"Transaction {tx_id} not confirmed within {timeout}s")
            await asyncio.sleep(poll_interval)
