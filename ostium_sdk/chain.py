"""
Read-only chain access for the Ostium SDK.

``ChainReader`` wraps a synchronous web3 instance and exposes the handful of
JSON-RPC reads the SDK needs as coroutines. Blocking calls run in a worker
thread so polling loops stay cooperative.
"""

import asyncio
from typing import Any, Dict, Optional, Union

import requests
from hexbytes import HexBytes
from web3 import HTTPProvider, Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from ostium_sdk.contracts import ContractFunction
from ostium_sdk.utils.exceptions import InvalidAddressError, ProtocolError, TransportError, ValidationError

DEFAULT_RPC_TIMEOUT = 30.0

HashLike = Union[bytes, str]


def build_web3(rpc_url: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> Web3:
    """Plain HTTP web3 instance (no account middleware)."""
    provider = HTTPProvider(rpc_url, request_kwargs={"timeout": timeout})
    return Web3(provider)


def to_checksum(address: str) -> str:
    """Checksum an address, raising ``InvalidAddressError`` if it is not one."""
    try:
        return Web3.to_checksum_address(address)
    except (TypeError, ValueError) as e:
        raise InvalidAddressError(f"Invalid address: {address!r}") from e


def normalize_hash(tx_hash: HashLike) -> HexBytes:
    """Accept ``0x`` hex or raw bytes and return a 32-byte HexBytes."""
    try:
        value = HexBytes(tx_hash)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid transaction hash: {tx_hash!r}") from e
    if len(value) != 32:
        raise ValidationError(f"Transaction hash must be 32 bytes, got {len(value)}")
    return value


class ChainReader:
    """
    Async facade over read-only web3 calls.

    Args:
        web3: Connected ``Web3`` instance
    """

    def __init__(self, web3: Web3):
        self.web3 = web3

    @classmethod
    def from_rpc_url(cls, rpc_url: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> 'ChainReader':
        return cls(build_web3(rpc_url, timeout))

    async def _run(self, operation: str, func, *args) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except (requests.exceptions.RequestException, ConnectionError, OSError) as e:
            raise TransportError(f"RPC request failed: {e}", operation=operation) from e
        except Web3Exception as e:
            raise ProtocolError(f"RPC call rejected: {e}", operation=operation) from e

    async def call(self, to: str, data: bytes, operation: str = "eth_call") -> bytes:
        """Execute an ``eth_call`` and return the raw result bytes."""
        tx = {"to": to_checksum(to), "data": HexBytes(data)}
        result = await self._run(operation, self.web3.eth.call, tx)
        return bytes(result)

    async def call_function(self, to: str, function: ContractFunction, *args: Any) -> Any:
        """Encode ``function(*args)``, call ``to`` and decode the result."""
        data = function.encode(*args)
        raw = await self.call(to, data, operation=function.name)
        return function.decode(raw)

    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        balance = await self._run("eth_getBalance", self.web3.eth.get_balance, to_checksum(address))
        return int(balance)

    async def get_receipt(self, tx_hash: HashLike) -> Optional[Dict[str, Any]]:
        """Return the receipt mapping, or None while the transaction is not mined."""
        tx_hash = normalize_hash(tx_hash)

        def _fetch():
            try:
                return self.web3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return None

        receipt = await self._run("eth_getTransactionReceipt", _fetch)
        if receipt is None:
            return None
        return dict(receipt)
