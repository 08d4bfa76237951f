from __future__ import annotations

from dataclasses import dataclass

from eth_hash.auto import keccak


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def strip_0x(value: str) -> str:
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def hex_to_bytes(value: str) -> bytes:
    return bytes.fromhex(strip_0x(value))


def bytes_to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def hex_to_int(value: str) -> int:
    return int(value, 16)


def to_checksum_address(address: bytes | str) -> str:
    """Convert an address to EIP-55 checksummed format."""
    if isinstance(address, bytes):
        addr = address.hex()
    else:
        addr = strip_0x(address).lower()
    addr_hash = keccak256(addr.encode("ascii")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


@dataclass(frozen=True)
class TransactionId:
    value: str

    def __str__(self) -> str:
        return self.value
