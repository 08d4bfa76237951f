"""
ECDSA / secp256k1 transaction signing.

A SigningContext holds one in-memory private key and the chain id of the
endpoint it signs for. It produces legacy EIP-155 transactions signed with
eth-account (deterministic RFC 6979 signatures), and hands out nonces one
at a time so that concurrent submissions from the same sender never share
a nonce.

Nonce policy: the first allocation reads the sender's pending transaction
count from the endpoint, later allocations count locally. The counter only
moves forward once a submission has been accepted. A "nonce too low"
rejection, or a failure that leaves the outcome unknown (no response from
the endpoint), drops the local counter so the next allocation re-reads it.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, AsyncIterator, Optional, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import ChainIdentityUnset, InvalidCredential, NonceTooLow, RpcError
from ..pneuma.types import Address
from ..utils import TransactionId, bytes_to_hex

if TYPE_CHECKING:
    from ..pneuma.rpc import TransportClient

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 500_000


def read_private_key(path: Path) -> str:
    """
    Read a private key from the first line of a file.

    Returns:
        0x-prefixed hex private key

    Raises:
        InvalidCredential: If the file is missing or empty
    """
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            secret = f.readline().strip()
    except OSError as exc:
        raise InvalidCredential(f"Cannot read private key file {path}: {exc}") from exc

    if not secret:
        raise InvalidCredential(f"Private key file {path} is empty.")

    # Ensure 0x prefix
    if not secret.startswith("0x"):
        secret = "0x" + secret
    return secret


@dataclass(frozen=True)
class SignedTransaction:
    to: Address
    data: bytes
    nonce: int
    chain_id: int
    value: int
    gas: int
    gas_price: int
    raw: bytes
    tx_hash: bytes

    @property
    def raw_hex(self) -> str:
        return bytes_to_hex(self.raw)

    @property
    def transaction_id(self) -> TransactionId:
        return TransactionId(bytes_to_hex(self.tx_hash))


class SigningContext:
    """
    In-memory credential plus chain identity.

    Args:
        private_key: 0x-prefixed hex private key
        chain_id: Known chain id; normally left unset and fetched with
                  ``ensure_chain_id``.
    """

    def __init__(self, private_key: str, chain_id: Optional[int] = None) -> None:
        if not private_key:
            raise InvalidCredential("Private key is required for signing.")
        try:
            self._account: LocalAccount = Account.from_key(private_key)
        except Exception as exc:
            raise InvalidCredential("Invalid private key.") from exc
        self._chain_id = chain_id
        self._nonce: Optional[int] = None
        self._nonce_lock = asyncio.Lock()

    @property
    def address(self) -> Address:
        return Address.from_hex(self._account.address)

    # ============ Chain identity ============

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            raise ChainIdentityUnset("Chain id has not been fetched; call ensure_chain_id() first.")
        return self._chain_id

    @property
    def has_chain_id(self) -> bool:
        return self._chain_id is not None

    async def ensure_chain_id(self, transport: "TransportClient") -> int:
        """Fetch the chain id once and reuse it for the context's lifetime."""
        if self._chain_id is None:
            self._chain_id = await transport.chain_id()
            logger.debug("Chain id resolved: %s", self._chain_id)
        return self._chain_id

    def reset(self) -> None:
        """Forget chain id and nonce, e.g. before pointing at another endpoint."""
        self._chain_id = None
        self._nonce = None

    # ============ Nonces ============

    @asynccontextmanager
    async def allocate_nonce(self, transport: "TransportClient") -> AsyncIterator[int]:
        """
        Reserve the next nonce for the duration of the ``async with`` block.

        Only one block runs at a time per context. The nonce is consumed when
        the block exits normally and handed out again if it raises.
        """
        async with self._nonce_lock:
            if self._nonce is None:
                self._nonce = await transport.nonce(self.address, "pending")
                logger.debug("Nonce seeded from endpoint: %s", self._nonce)
            nonce = self._nonce
            try:
                yield nonce
            except RpcError as exc:
                # rejected as stale, or lost in transit and possibly accepted
                if isinstance(exc, NonceTooLow) or exc.code is None:
                    self._nonce = None
                raise
            self._nonce = nonce + 1

    # ============ Signing ============

    def sign(
        self,
        target: Union[Address, str],
        calldata: bytes,
        nonce: int,
        *,
        value: int = 0,
        gas: int = DEFAULT_GAS_LIMIT,
        gas_price: int = 0,
    ) -> SignedTransaction:
        """
        Sign a contract call transaction.

        Raises:
            ChainIdentityUnset: If the chain id was never fetched
        """
        chain_id = self.chain_id
        if not isinstance(target, Address):
            target = Address.from_hex(target)

        tx = {
            "to": target.checksum,
            "data": bytes_to_hex(calldata),
            "value": value,
            "nonce": nonce,
            "gas": gas,
            "gasPrice": gas_price,
            "chainId": chain_id,
        }
        signed = self._account.sign_transaction(tx)
        return SignedTransaction(
            to=target,
            data=bytes(calldata),
            nonce=nonce,
            chain_id=chain_id,
            value=value,
            gas=gas,
            gas_price=gas_price,
            raw=bytes(signed.raw_transaction),
            tx_hash=bytes(signed.hash),
        )
