"""
Local private-key signer implementing TransactionSigner.

The key is loaded with eth_account and attached to a web3 provider through
the sign-and-send middleware, which fills nonce, gas price and chain id and
signs before broadcasting.
"""

import asyncio
from typing import Any, Dict, Optional, cast

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError as EthValidationError
from web3 import Web3
from web3.exceptions import Web3Exception
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ostium_sdk.chain import ChainReader, DEFAULT_RPC_TIMEOUT, build_web3
from ostium_sdk.signers.base_signer import TransactionOutcome, TransactionSigner, TxRequest
from ostium_sdk.utils.exceptions import InvalidPrivateKeyError, SigningError, TransportError, ValidationError


class LocalSigner(TransactionSigner):
    """
    Signer holding a raw EVM private key.

    The key never leaves the eth_account ``LocalAccount`` object and is not
    kept on this instance in any other form.
    """

    def __init__(
        self,
        private_key: str,
        rpc_url: Optional[str] = None,
        *,
        web3: Optional[Web3] = None,
        rpc_timeout: float = DEFAULT_RPC_TIMEOUT,
        **kwargs
    ):
        """
        Initialize local signer.

        Args:
            private_key: Hex private key (with or without 0x prefix)
            rpc_url: RPC endpoint URL (ignored if ``web3`` is given)
            web3: Pre-built web3 instance
            rpc_timeout: HTTP timeout for RPC requests
            **kwargs: Receipt polling overrides passed to TransactionSigner
        """
        super().__init__("local", **kwargs)

        self._account = self._load_account(private_key)

        if web3 is None:
            if not rpc_url:
                raise ValidationError("Either rpc_url or web3 must be provided")
            web3 = build_web3(rpc_url, rpc_timeout)

        self._apply_account_middleware(web3, self._account)
        self.web3 = web3
        self._chain_reader = ChainReader(web3)

        self.logger.info(f"Local signer initialized for {self.address}")

    @staticmethod
    def _load_account(private_key: str) -> LocalAccount:
        key = (private_key or "").strip()
        if key.startswith(("0x", "0X")):
            key = key[2:]
        try:
            return cast(LocalAccount, Account.from_key(key))
        except (ValueError, TypeError, EthValidationError) as e:
            # Never include the key material in the message
            raise InvalidPrivateKeyError(f"Failed to parse private key: {type(e).__name__}") from None

    @staticmethod
    def _apply_account_middleware(web3: Web3, account: LocalAccount) -> None:
        web3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))
        web3.eth.default_account = account.address

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_reader(self) -> ChainReader:
        return self._chain_reader

    def _build_transaction(self, tx: TxRequest) -> Dict[str, Any]:
        transaction: Dict[str, Any] = {
            "from": self.address,
            "to": tx.to,
            "value": tx.value,
            "data": tx.data,
        }
        if tx.gas_limit is not None:
            transaction["gas"] = tx.gas_limit
        return transaction

    def _send(self, transaction: Dict[str, Any]) -> bytes:
        return bytes(self.web3.eth.send_transaction(transaction))

    async def submit(self, tx: TxRequest) -> TransactionOutcome:
        transaction = self._build_transaction(tx)
        self.logger.debug(f"Sending transaction to {tx.to} value={tx.value} data_len={len(tx.data)}")

        try:
            tx_hash = await asyncio.to_thread(self._send, transaction)
        except (requests.exceptions.RequestException, OSError) as e:
            raise TransportError(f"Failed to send transaction: {e}", operation="submit") from e
        except Web3Exception as e:
            raise ValidationError(f"Transaction rejected: {e}", operation="submit") from e
        except (TypeError, ValueError) as e:
            raise SigningError(f"Failed to sign transaction: {e}", operation="submit") from e

        outcome = TransactionOutcome(tx_hash)
        self.logger.info(f"Sent transaction {outcome}")
        return outcome
