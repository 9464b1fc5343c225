"""
User-facing trading and vault types.

Amounts are plain floats (USDC, prices, leverage as "10.0" for 10x); the
``scaled_*`` / ``to_*`` helpers produce the fixed-point integers the
contracts expect.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ostium_sdk.contracts import StoredTrade
from ostium_sdk.utils.enums import OrderType, TradeDirection
from ostium_sdk.utils.exceptions import InvalidOrderError
from ostium_sdk.utils.scaling import (
    DEFAULT_SLIPPAGE,
    MAX_LEVERAGE,
    MAX_SLIPPAGE,
    MAX_UINT16,
    MIN_LEVERAGE,
    SLIPPAGE_DECIMALS,
    scale_leverage,
    scale_price,
    scale_slippage,
    scale_to_decimals,
    scale_usdc,
    to_uint192,
    unscale_leverage,
    unscale_price,
    unscale_usdc,
)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Ostium allows up to 3 trades per pair
MAX_TRADES_PER_PAIR = 3


# ==================== TRADING ====================

@dataclass(frozen=True)
class PlaceOrderParams:
    """
    Parameters for opening a trade.

    Attributes:
        pair_index: Trading pair index (0 = BTC/USD)
        collateral: Collateral in USDC
        leverage: Leverage multiplier (10.0 for 10x)
        is_long: True for long, False for short
        order_type: MARKET, LIMIT_OPEN or STOP_OPEN
        open_price: Expected price (required for limit/stop orders)
        take_profit: Take profit price
        stop_loss: Stop loss price
        slippage: Slippage tolerance in percent
        trade_index: Slot index (0-2), defaults to 0
    """

    pair_index: int
    collateral: float
    leverage: float = 10.0
    is_long: bool = True
    order_type: OrderType = OrderType.MARKET
    open_price: Optional[float] = None
    take_profit: Optional[float] = None
    stop_loss: Optional[float] = None
    slippage: Optional[float] = DEFAULT_SLIPPAGE
    trade_index: Optional[int] = None

    @classmethod
    def market(cls, pair_index: int, collateral: float, leverage: float, is_long: bool) -> 'PlaceOrderParams':
        return cls(pair_index=pair_index, collateral=collateral, leverage=leverage, is_long=is_long)

    def with_slippage(self, slippage_percent: float) -> 'PlaceOrderParams':
        return replace(self, slippage=slippage_percent)

    def with_open_price(self, price: float) -> 'PlaceOrderParams':
        return replace(self, open_price=price)

    def with_take_profit(self, price: float) -> 'PlaceOrderParams':
        return replace(self, take_profit=price)

    def with_stop_loss(self, price: float) -> 'PlaceOrderParams':
        return replace(self, stop_loss=price)

    def validate(self) -> None:
        """
        Raises:
            InvalidOrderError: Collateral, leverage, slippage or price invalid
        """
        if not self.collateral > 0:
            raise InvalidOrderError("Collateral must be positive")
        if not MIN_LEVERAGE <= self.leverage <= MAX_LEVERAGE:
            raise InvalidOrderError(f"Leverage must be between {MIN_LEVERAGE} and {MAX_LEVERAGE}")
        if self.slippage is not None and not 0 <= self.slippage <= MAX_SLIPPAGE:
            raise InvalidOrderError(f"Slippage must be between 0 and {MAX_SLIPPAGE}%")
        if self.order_type != OrderType.MARKET and self.open_price is None:
            raise InvalidOrderError("Open price required for limit/stop orders")
        if self.trade_index is not None and not 0 <= self.trade_index < MAX_TRADES_PER_PAIR:
            raise InvalidOrderError(f"Trade index must be between 0 and {MAX_TRADES_PER_PAIR - 1}")

    def to_trade(self, trader: str, trade_index: int) -> StoredTrade:
        """Contract ``Trade`` struct for this order."""
        return StoredTrade(
            collateral=scale_usdc(self.collateral),
            open_price=_scaled_price_or_zero(self.open_price),
            tp=_scaled_price_or_zero(self.take_profit),
            sl=_scaled_price_or_zero(self.stop_loss),
            trader=trader,
            leverage=scale_leverage(self.leverage),
            pair_index=self.pair_index,
            index=trade_index,
            buy=self.is_long,
        )

    def scaled_slippage(self) -> int:
        # 2% = 200
        slippage = DEFAULT_SLIPPAGE if self.slippage is None else self.slippage
        return scale_to_decimals(slippage, SLIPPAGE_DECIMALS)


def _scaled_price_or_zero(price: Optional[float]) -> int:
    if price is None:
        return 0
    return to_uint192(scale_price(price))


@dataclass(frozen=True)
class CloseTradeParams:
    """Parameters for closing (part of) a trade at market."""

    pair_index: int
    trade_index: int
    close_percentage: float
    market_price: float
    slippage: Optional[float] = DEFAULT_SLIPPAGE

    @classmethod
    def close_all(cls, pair_index: int, trade_index: int, market_price: float) -> 'CloseTradeParams':
        return cls(pair_index, trade_index, 100.0, market_price)

    def scaled_close_percentage(self) -> int:
        # 10000 = 100%
        return scale_to_decimals(self.close_percentage, 2, MAX_UINT16)

    def scaled_market_price(self) -> int:
        return to_uint192(scale_price(self.market_price))

    def scaled_slippage(self) -> int:
        slippage = DEFAULT_SLIPPAGE if self.slippage is None else self.slippage
        return scale_slippage(slippage)


@dataclass(frozen=True)
class BuilderFeeParams:
    """Builder/referral fee. ``fee_bps`` is in basis points (100 = 1%)."""

    builder: Optional[str] = None
    fee_bps: int = 0

    @classmethod
    def none(cls) -> 'BuilderFeeParams':
        return cls()

    def to_builder_fee(self) -> Tuple[str, int]:
        return (self.builder or ZERO_ADDRESS, self.fee_bps)


@dataclass(frozen=True)
class Position:
    """Open trade read from TradingStorage."""

    trader: str
    pair_index: int
    trade_index: int
    collateral: float
    leverage: float
    is_long: bool
    open_price: float
    take_profit: Optional[float] = None
    stop_loss: Optional[float] = None
    # Needs a live price; never filled from contract reads
    unrealized_pnl: Optional[float] = None

    @property
    def direction(self) -> TradeDirection:
        return TradeDirection.from_is_long(self.is_long)

    @property
    def position_size(self) -> float:
        return self.collateral * self.leverage


def decode_position(trade: StoredTrade) -> Optional[Position]:
    """Convert a stored trade to a ``Position``; None when the slot is empty."""
    if trade.collateral == 0:
        return None

    return Position(
        trader=trade.trader,
        pair_index=trade.pair_index,
        trade_index=trade.index,
        collateral=unscale_usdc(trade.collateral),
        leverage=unscale_leverage(trade.leverage),
        is_long=trade.buy,
        open_price=unscale_price(trade.open_price),
        take_profit=unscale_price(trade.tp) if trade.tp else None,
        stop_loss=unscale_price(trade.sl) if trade.sl else None,
    )


# ==================== VAULT ====================

@dataclass(frozen=True)
class DepositParams:
    """Deposit ``amount`` USDC; shares go to ``receiver`` (defaults to sender)."""

    amount: float
    receiver: Optional[str] = None

    def scaled_amount(self) -> int:
        return scale_usdc(self.amount)


@dataclass(frozen=True)
class WithdrawParams:
    """Withdraw ``amount`` USDC of assets to ``receiver`` (defaults to sender)."""

    amount: float
    receiver: Optional[str] = None

    def scaled_amount(self) -> int:
        return scale_usdc(self.amount)


@dataclass(frozen=True)
class RedeemParams:
    """Redeem raw OLP ``shares`` (6 decimals)."""

    shares: int
    receiver: Optional[str] = None


@dataclass(frozen=True)
class VaultPosition:
    """OLP share balance and its USDC value."""

    shares: int
    value: float

    @classmethod
    def from_raw(cls, shares: int, assets: int) -> 'VaultPosition':
        return cls(shares=int(shares), value=unscale_usdc(assets))

    @property
    def shares_value(self) -> float:
        """Shares as a float (6 decimals)."""
        return unscale_usdc(self.shares)


@dataclass(frozen=True)
class VaultEpoch:
    """
    Vault epoch information.

    Withdrawals are open during the first 48h of an epoch.
    """

    current_epoch: int
    epoch_start_timestamp: int
    epoch_end_timestamp: int
    withdrawals_open: bool
