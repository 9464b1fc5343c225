"""
OstiumClient - main entry point for the SDK.

Combines one TransactionSigner (local key or Fordefi vault) with a
read-only chain connection. Writes go through the signer; reads are plain
``eth_call`` requests against the configured RPC URL.
"""

import asyncio
from typing import Dict, Iterable, List, Optional

from ostium_sdk.chain import ChainReader, to_checksum
from ostium_sdk.contracts import IERC20, IOstiumVault, ITrading
from ostium_sdk.models import (
    BuilderFeeParams,
    CloseTradeParams,
    DepositParams,
    PlaceOrderParams,
    Position,
    RedeemParams,
    VaultEpoch,
    VaultPosition,
    WithdrawParams,
)
from ostium_sdk.positions import PositionScanner
from ostium_sdk.signers.base_signer import Receipt, TransactionOutcome, TransactionSigner, TxHashLike, TxRequest
from ostium_sdk.utils.config import NetworkConfig
from ostium_sdk.utils.exceptions import VaultNotConfiguredError
from ostium_sdk.utils.logger import get_client_logger
from ostium_sdk.utils.scaling import MAX_UINT256, scale_price, scale_usdc, to_uint192, unscale_usdc


class OstiumClient:
    """
    Trading and OLP vault operations for one wallet.

    Args:
        signer: Backend that signs and sends transactions
        config: Network configuration (RPC URL and contract addresses)
        reader: Chain reader for ``eth_call``; built from ``config.rpc_url``
            when omitted
    """

    def __init__(
        self,
        signer: TransactionSigner,
        config: NetworkConfig,
        reader: Optional[ChainReader] = None
    ):
        self.signer = signer
        self.config = config
        self.reader = reader or ChainReader.from_rpc_url(config.rpc_url)
        self.scanner = PositionScanner(self.reader, config.trading_storage)
        self.logger = get_client_logger()

    @property
    def address(self) -> str:
        return self.signer.address

    def _require_vault(self) -> str:
        if not self.config.vault:
            raise VaultNotConfiguredError("Vault address not configured")
        return self.config.vault

    async def _send(self, to: str, data: bytes, description: str) -> TransactionOutcome:
        self.logger.info(f"Submitting {description}")
        outcome = await self.signer.submit(TxRequest(to=to, data=data))
        self.logger.info(f"{description} submitted: {outcome}")
        return outcome

    # ==================== TOKEN OPERATIONS ====================

    async def get_usdc_balance(self) -> float:
        balance = await self.reader.call_function(self.config.usdc, IERC20.balanceOf, self.address)
        return unscale_usdc(balance)

    async def approve_usdc(self, spender: str, amount: float) -> TransactionOutcome:
        return await self._approve(spender, scale_usdc(amount))

    async def _approve(self, spender: str, raw_amount: int) -> TransactionOutcome:
        data = IERC20.approve.encode(to_checksum(spender), raw_amount)
        return await self._send(self.config.usdc, data, f"USDC approval for {spender}")

    async def ensure_usdc_allowance(self, spender: str, raw_amount: int) -> Optional[TransactionOutcome]:
        """
        Approve ``spender`` for the max amount when the current allowance is
        below ``raw_amount``.

        Returns:
            Approval outcome, or None when the allowance already suffices
        """
        spender = to_checksum(spender)
        allowance = await self.reader.call_function(self.config.usdc, IERC20.allowance, self.address, spender)
        if allowance >= raw_amount:
            return None

        self.logger.info(f"USDC allowance {allowance} < {raw_amount}, approving {spender}")
        return await self._approve(spender, MAX_UINT256)

    # ==================== TRADING OPERATIONS ====================

    async def place_order(
        self,
        params: PlaceOrderParams,
        builder_fee: Optional[BuilderFeeParams] = None
    ) -> TransactionOutcome:
        """
        Open a trade.

        Args:
            params: Order parameters
            builder_fee: Optional builder/referral fee

        Returns:
            TransactionOutcome of the ``openTrade`` transaction

        Raises:
            InvalidOrderError: Parameters failed validation (nothing is sent)
        """
        params.validate()

        await self.ensure_usdc_allowance(self.config.trading_storage, scale_usdc(params.collateral))

        trade_index = params.trade_index if params.trade_index is not None else 0
        trade = params.to_trade(self.address, trade_index)
        fee = (builder_fee or BuilderFeeParams.none()).to_builder_fee()

        data = ITrading.openTrade.encode(
            trade.as_tuple(),
            fee,
            int(params.order_type),
            params.scaled_slippage(),
        )
        direction = "LONG" if params.is_long else "SHORT"
        return await self._send(
            self.config.trading,
            data,
            f"{params.order_type} {direction} order on pair {params.pair_index} "
            f"({params.collateral} USDC x{params.leverage})",
        )

    async def close_trade(self, params: CloseTradeParams) -> TransactionOutcome:
        data = ITrading.closeTradeMarket.encode(
            params.pair_index,
            params.trade_index,
            params.scaled_close_percentage(),
            params.scaled_market_price(),
            params.scaled_slippage(),
        )
        return await self._send(
            self.config.trading,
            data,
            f"close {params.close_percentage}% of pair {params.pair_index} slot {params.trade_index}",
        )

    async def cancel_order(self, pair_index: int, trade_index: int) -> TransactionOutcome:
        data = ITrading.cancelOpenLimitOrder.encode(pair_index, trade_index)
        return await self._send(self.config.trading, data, f"cancel order pair {pair_index} slot {trade_index}")

    async def update_take_profit(self, pair_index: int, trade_index: int, new_tp: float) -> TransactionOutcome:
        data = ITrading.updateTp.encode(pair_index, trade_index, to_uint192(scale_price(new_tp)))
        return await self._send(self.config.trading, data, f"take profit update to {new_tp}")

    async def update_stop_loss(self, pair_index: int, trade_index: int, new_sl: float) -> TransactionOutcome:
        data = ITrading.updateSl.encode(pair_index, trade_index, to_uint192(scale_price(new_sl)))
        return await self._send(self.config.trading, data, f"stop loss update to {new_sl}")

    # ==================== POSITION QUERIES ====================

    async def get_positions(self, trader: Optional[str] = None) -> List[Position]:
        """Open positions read directly from TradingStorage (defaults to own address)."""
        return await self.scanner.scan(trader or self.address)

    # ==================== VAULT OPERATIONS ====================

    async def deposit_olp(self, params: DepositParams) -> TransactionOutcome:
        vault = self._require_vault()
        amount = params.scaled_amount()
        receiver = to_checksum(params.receiver or self.address)

        await self.ensure_usdc_allowance(vault, amount)

        data = IOstiumVault.deposit.encode(amount, receiver)
        return await self._send(vault, data, f"OLP deposit of {params.amount} USDC")

    async def withdraw_olp(self, params: WithdrawParams) -> TransactionOutcome:
        vault = self._require_vault()
        receiver = to_checksum(params.receiver or self.address)
        data = IOstiumVault.withdraw.encode(params.scaled_amount(), receiver, self.address)
        return await self._send(vault, data, f"OLP withdrawal of {params.amount} USDC")

    async def redeem_olp(self, params: RedeemParams) -> TransactionOutcome:
        vault = self._require_vault()
        receiver = to_checksum(params.receiver or self.address)
        data = IOstiumVault.redeem.encode(params.shares, receiver, self.address)
        return await self._send(vault, data, f"OLP redeem of {params.shares} shares")

    async def get_olp_balance(self) -> VaultPosition:
        vault = self._require_vault()
        shares = await self.reader.call_function(vault, IOstiumVault.balanceOf, self.address)
        assets = await self.reader.call_function(vault, IOstiumVault.convertToAssets, shares)
        return VaultPosition.from_raw(shares, assets)

    async def request_olp_withdrawal(self, shares: int) -> TransactionOutcome:
        """
        Start a withdrawal of raw OLP ``shares`` (6 decimals).

        The shares stay locked until the withdrawal epoch opens.
        """
        vault = self._require_vault()
        data = IOstiumVault.makeWithdrawRequest.encode(shares, self.address)
        return await self._send(vault, data, f"OLP withdrawal request for {shares} shares")

    async def get_vault_epoch(self) -> VaultEpoch:
        vault = self._require_vault()
        current_epoch, epoch_start, epoch_end, withdrawals_open = await asyncio.gather(
            self.reader.call_function(vault, IOstiumVault.currentEpoch),
            self.reader.call_function(vault, IOstiumVault.currentEpochStart),
            self.reader.call_function(vault, IOstiumVault.currentEpochEnd),
            self.reader.call_function(vault, IOstiumVault.withdrawalsOpen),
        )
        return VaultEpoch(
            current_epoch=int(current_epoch),
            epoch_start_timestamp=int(epoch_start),
            epoch_end_timestamp=int(epoch_end),
            withdrawals_open=bool(withdrawals_open),
        )

    async def get_pending_withdrawal(self, epoch: int) -> int:
        """Raw shares pending withdrawal in ``epoch``."""
        vault = self._require_vault()
        shares = await self.reader.call_function(vault, IOstiumVault.withdrawRequests, self.address, epoch)
        return int(shares)

    async def get_pending_withdrawals(self, epochs: Iterable[int]) -> Dict[int, int]:
        """Pending shares for several epochs, read concurrently."""
        epochs = list(epochs)
        amounts = await asyncio.gather(*(self.get_pending_withdrawal(epoch) for epoch in epochs))
        return dict(zip(epochs, amounts))

    # ==================== UTILITY ====================

    async def wait_for_receipt(self, tx_hash: TxHashLike) -> Receipt:
        return await self.signer.await_receipt(tx_hash)

    async def get_eth_balance(self) -> int:
        return await self.signer.native_balance()

    def __repr__(self) -> str:
        return f"OstiumClient(address={self.address}, signer={self.signer.signer_name})"
