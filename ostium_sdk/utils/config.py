"""
Configuration loader for the Ostium SDK.

Network settings are an immutable ``NetworkConfig`` built once at startup and
passed to constructors. Credentials come from the environment, optionally
loaded from a ``.env`` file.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from ostium_sdk.utils.exceptions import MissingEnvironmentVariableError
from ostium_sdk.utils.logger import setup_logger

logger = setup_logger("ostium.config")

ARBITRUM_CHAIN_ID = 42161
ALCHEMY_ARBITRUM_URL = "https://arb-mainnet.g.alchemy.com/v2/{api_key}"
SUBGRAPH_URL = "https://subgraph.satsuma-prod.com/391a61815d32/ostium/ost-prod/api"

USDC_ADDRESS = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"
TRADING_ADDRESS = "0x6D0bA1f9996DBD8885827e1b2e8f6593e7702411"
TRADING_STORAGE_ADDRESS = "0xcCd5891083A8acD2074690F65d3024E7D13d66E7"
VAULT_ADDRESS = "0x20d419a8e12c45f88fda7c5760bb6923cee27f98"

FORDEFI_API_BASE_URL = "https://api.fordefi.com"


@dataclass(frozen=True)
class NetworkConfig:
    """RPC URLs and contract addresses (Arbitrum One mainnet)."""

    chain_id: int
    rpc_url: str
    subgraph_url: str
    usdc: str
    trading: str
    trading_storage: str
    vault: Optional[str] = None

    @classmethod
    def mainnet(cls, rpc_url: Optional[str] = None) -> 'NetworkConfig':
        """
        Arbitrum One configuration.

        Args:
            rpc_url: Explicit RPC URL. Defaults to ``OSTIUM_RPC_URL`` or an
                Alchemy URL built from ``ALCHEMY_API_KEY``.

        Raises:
            MissingEnvironmentVariableError: No RPC URL could be determined
        """
        if rpc_url is None:
            rpc_url = os.getenv("OSTIUM_RPC_URL")
        if not rpc_url:
            alchemy_key = os.getenv("ALCHEMY_API_KEY")
            if not alchemy_key:
                raise MissingEnvironmentVariableError(
                    "ALCHEMY_API_KEY (or OSTIUM_RPC_URL) environment variable must be set"
                )
            rpc_url = ALCHEMY_ARBITRUM_URL.format(api_key=alchemy_key)

        return cls(
            chain_id=ARBITRUM_CHAIN_ID,
            rpc_url=rpc_url,
            subgraph_url=SUBGRAPH_URL,
            usdc=USDC_ADDRESS,
            trading=TRADING_ADDRESS,
            trading_storage=TRADING_STORAGE_ADDRESS,
            vault=VAULT_ADDRESS,
        )

    def with_rpc_url(self, rpc_url: str) -> 'NetworkConfig':
        return replace(self, rpc_url=rpc_url)

    def with_vault(self, vault: Optional[str]) -> 'NetworkConfig':
        return replace(self, vault=vault)

    def __repr__(self) -> str:
        # Alchemy URLs embed the API key
        return (
            f"NetworkConfig(chain_id={self.chain_id}, trading={self.trading}, "
            f"trading_storage={self.trading_storage}, vault={self.vault})"
        )


@dataclass(frozen=True)
class FordefiConfig:
    """Fordefi API credentials and vault selection."""

    access_token: str
    private_key_pem: str
    vault_id: Optional[str] = None
    address: Optional[str] = None
    api_base_url: str = FORDEFI_API_BASE_URL

    def __repr__(self) -> str:
        return f"FordefiConfig(api_base_url={self.api_base_url!r}, vault_id={self.vault_id!r}, address={self.address!r})"


def load_environment(env_path: Optional[str] = None) -> bool:
    """
    Load a ``.env`` file into the process environment.

    Args:
        env_path: Explicit path; defaults to ``.env`` in the working directory

    Returns:
        True if a file was found and loaded
    """
    path = Path(env_path) if env_path else Path.cwd() / ".env"
    if path.exists():
        load_dotenv(path)
        logger.info(f"Loaded environment variables from {path}")
        return True

    logger.debug(f".env file not found at {path}")
    return False


def _require(names) -> Dict[str, str]:
    values = {}
    missing = []
    for name in names:
        value = os.getenv(name)
        if not value:
            missing.append(name)
        else:
            values[name] = value

    if missing:
        raise MissingEnvironmentVariableError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
    return values


def get_local_credentials() -> Dict[str, str]:
    """
    Get the local signer private key from ``PRIVATE_KEY``.

    Raises:
        MissingEnvironmentVariableError: If the variable is not set
    """
    values = _require(["PRIVATE_KEY"])
    return {"private_key": values["PRIVATE_KEY"]}


def get_fordefi_config() -> FordefiConfig:
    """
    Build a ``FordefiConfig`` from the environment.

    Reads ``FORDEFI_ACCESS_TOKEN``, the request-signing key from
    ``FORDEFI_PRIVATE_KEY_PEM`` or the file named by
    ``FORDEFI_PRIVATE_KEY_PATH``, and optionally ``FORDEFI_VAULT_ID``,
    ``FORDEFI_ADDRESS`` and ``FORDEFI_API_BASE_URL``.

    Raises:
        MissingEnvironmentVariableError: If the token or key is missing
    """
    access_token = _require(["FORDEFI_ACCESS_TOKEN"])["FORDEFI_ACCESS_TOKEN"]

    private_key_pem = os.getenv("FORDEFI_PRIVATE_KEY_PEM")
    if not private_key_pem:
        key_path = os.getenv("FORDEFI_PRIVATE_KEY_PATH")
        if not key_path:
            raise MissingEnvironmentVariableError(
                "Missing required environment variables: FORDEFI_PRIVATE_KEY_PEM or FORDEFI_PRIVATE_KEY_PATH"
            )
        private_key_pem = Path(key_path).read_text()

    return FordefiConfig(
        access_token=access_token,
        private_key_pem=private_key_pem,
        vault_id=os.getenv("FORDEFI_VAULT_ID") or None,
        address=os.getenv("FORDEFI_ADDRESS") or None,
        api_base_url=os.getenv("FORDEFI_API_BASE_URL", FORDEFI_API_BASE_URL),
    )
