"""
Client configuration.

Everything the client needs to reach a contract, gathered into one explicit
struct that is handed to ``ContractHandle.from_config``. Nothing in the
client reads the environment on its own; ``ClientConfig.from_env`` is the
single place that does, for the CLI and for scripts.

Environment variables (a .env file is loaded first when present):
    RPC_URL                 JSON-RPC endpoint
    STYLUS_PROGRAM_ADDRESS  Deployed contract address
    PRIV_KEY_PATH           File whose first line is the private key
    PRIVATE_KEY             Private key (used when PRIV_KEY_PATH is unset)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .pneuma.rpc import DEFAULT_TIMEOUT
from .pneuma.types import Address
from .sigil.eth import read_private_key

ENV_RPC_URL = "RPC_URL"
ENV_PROGRAM_ADDRESS = "STYLUS_PROGRAM_ADDRESS"
ENV_PRIV_KEY_PATH = "PRIV_KEY_PATH"
ENV_PRIVATE_KEY = "PRIVATE_KEY"

DEFAULT_ENV_FILE = Path(".env")


@dataclass(frozen=True)
class ClientConfig:
    rpc_url: str
    contract_address: str
    private_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    gas_limit: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ConfigurationError(f"No RPC endpoint configured (set {ENV_RPC_URL}).")
        if not self.contract_address:
            raise ConfigurationError(f"No contract address configured (set {ENV_PROGRAM_ADDRESS}).")
        # Parse once so a malformed address fails here, not on first call
        Address.from_hex(self.contract_address)

    def __repr__(self) -> str:
        key = "<set>" if self.private_key else None
        return (
            f"ClientConfig(rpc_url={self.rpc_url!r}, contract_address={self.contract_address!r}, "
            f"private_key={key}, timeout={self.timeout}, gas_limit={self.gas_limit})"
        )

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Path] = None,
        *,
        require_key: bool = False,
    ) -> "ClientConfig":
        """
        Build a config from the process environment.

        Args:
            env_path: .env file to load first (default: ./.env if present)
            require_key: Fail when no private key is configured

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        env_path = env_path or DEFAULT_ENV_FILE
        if env_path.exists():
            load_dotenv(env_path, override=False)

        private_key: Optional[str] = None
        key_path = os.environ.get(ENV_PRIV_KEY_PATH)
        if key_path:
            private_key = read_private_key(Path(key_path))
        elif os.environ.get(ENV_PRIVATE_KEY):
            private_key = os.environ[ENV_PRIVATE_KEY].strip()
            if not private_key.startswith("0x"):
                private_key = "0x" + private_key

        if require_key and not private_key:
            raise ConfigurationError(
                f"No private key configured (set {ENV_PRIV_KEY_PATH} or {ENV_PRIVATE_KEY})."
            )

        return cls(
            rpc_url=os.environ.get(ENV_RPC_URL, ""),
            contract_address=os.environ.get(ENV_PROGRAM_ADDRESS, ""),
            private_key=private_key,
        )
