"""
Abstract base class for transaction signers.

This module defines the interface that both the local private-key signer and
the Fordefi MPC signer implement, so the client can submit transactions
without knowing which backend holds the key.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Union

from hexbytes import HexBytes

from ostium_sdk.chain import ChainReader, normalize_hash, to_checksum
from ostium_sdk.utils.exceptions import TimeoutError, ValidationError
from ostium_sdk.utils.logger import get_signer_logger
from ostium_sdk.utils.scaling import MAX_UINT64, MAX_UINT256

# Receipt polling: 60 attempts * 2 seconds = 2 minutes
RECEIPT_POLL_INTERVAL = 2.0
RECEIPT_MAX_ATTEMPTS = 60


@dataclass(frozen=True)
class TxRequest:
    """
    Backend-agnostic outbound transaction.

    Attributes:
        to: Target contract address
        data: Encoded calldata
        value: Native value in wei
        gas_limit: Optional gas ceiling override
    """

    to: str
    data: bytes = b""
    value: int = 0
    gas_limit: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "to", to_checksum(self.to))
        object.__setattr__(self, "data", bytes(self.data))
        if not isinstance(self.value, int) or not 0 <= self.value <= MAX_UINT256:
            raise ValidationError(f"Transaction value out of uint256 range: {self.value!r}")
        if self.gas_limit is not None:
            if not isinstance(self.gas_limit, int) or not 0 < self.gas_limit <= MAX_UINT64:
                raise ValidationError(f"Gas limit must be a positive uint64: {self.gas_limit!r}")

    def with_value(self, value: int) -> 'TxRequest':
        return replace(self, value=value)

    def with_gas_limit(self, gas_limit: int) -> 'TxRequest':
        return replace(self, gas_limit=gas_limit)


@dataclass(frozen=True)
class TransactionOutcome:
    """Chain transaction hash returned by a successful submission."""

    tx_hash: HexBytes

    def __post_init__(self):
        object.__setattr__(self, "tx_hash", normalize_hash(self.tx_hash))

    @property
    def hex(self) -> str:
        return "0x" + bytes(self.tx_hash).hex()

    def __str__(self) -> str:
        return self.hex


@dataclass(frozen=True)
class Receipt:
    """Mined transaction receipt."""

    tx_hash: HexBytes
    success: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_web3(cls, receipt: Dict[str, Any]) -> 'Receipt':
        return cls(
            tx_hash=HexBytes(receipt.get("transactionHash", b"")),
            success=receipt.get("status") == 1,
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
            raw=dict(receipt),
        )


TxHashLike = Union[TransactionOutcome, bytes, str]


class TransactionSigner(ABC):
    """
    Abstract base class that every signing backend implements.

    Each instance is used by one logical caller at a time and keeps no
    cross-call mutable state.
    """

    def __init__(
        self,
        signer_name: str,
        receipt_poll_interval: float = RECEIPT_POLL_INTERVAL,
        receipt_max_attempts: int = RECEIPT_MAX_ATTEMPTS
    ):
        """
        Initialize base signer.

        Args:
            signer_name: Name of the backend ("local" or "fordefi")
            receipt_poll_interval: Seconds between receipt lookups
            receipt_max_attempts: Receipt lookups before giving up
        """
        self.signer_name = signer_name
        self.receipt_poll_interval = receipt_poll_interval
        self.receipt_max_attempts = receipt_max_attempts
        self.logger = get_signer_logger(signer_name)

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed EVM address that transactions are sent from."""
        pass

    @property
    @abstractmethod
    def chain_reader(self) -> ChainReader:
        """Direct chain connection used for receipts and balances."""
        pass

    @abstractmethod
    async def submit(self, tx: TxRequest) -> TransactionOutcome:
        """
        Sign and send a transaction.

        Args:
            tx: Transaction to submit

        Returns:
            TransactionOutcome with the chain transaction hash

        Raises:
            TransportError: Network failure reaching the backend
            ValidationError: Backend rejected the request
            SigningError: Local signing failed
        """
        pass

    async def await_receipt(self, tx_hash: TxHashLike) -> Receipt:
        """
        Poll the chain until the transaction has a receipt.

        Args:
            tx_hash: Outcome from ``submit`` or a raw hash

        Returns:
            Receipt of the mined transaction (``success`` may be False)

        Raises:
            TimeoutError: No receipt after ``receipt_max_attempts`` lookups
        """
        if isinstance(tx_hash, TransactionOutcome):
            tx_hash = tx_hash.tx_hash
        tx_hash = normalize_hash(tx_hash)
        hash_hex = "0x" + bytes(tx_hash).hex()

        for attempt in range(self.receipt_max_attempts):
            receipt = await self.chain_reader.get_receipt(tx_hash)
            if receipt is not None:
                result = Receipt.from_web3(receipt)
                self.logger.info(
                    f"Receipt for {hash_hex}: success={result.success} block={result.block_number}"
                )
                return result

            self.logger.debug(
                f"No receipt yet for {hash_hex} (attempt {attempt + 1}/{self.receipt_max_attempts})"
            )
            if attempt + 1 < self.receipt_max_attempts:
                await asyncio.sleep(self.receipt_poll_interval)

        raise TimeoutError(
            f"Transaction receipt not found after {self.receipt_max_attempts} attempts: {hash_hex}",
            operation="await_receipt",
        )

    async def native_balance(self) -> int:
        """Native token (ETH) balance of ``address`` in wei."""
        return await self.chain_reader.get_balance(self.address)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address})"
