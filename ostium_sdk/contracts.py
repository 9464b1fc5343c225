"""
Contract call encoding/decoding for the Ostium contracts.

Each contract function is described by its name and ABI input/output types.
Calldata is the 4-byte keccak selector followed by the ``eth_abi`` encoding
of the arguments; return data is decoded with ``eth_abi`` as well.
"""

from dataclasses import dataclass
from typing import Any, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError
from web3 import Web3

from ostium_sdk.utils.exceptions import ProtocolError, ValidationError

# Trade(collateral, openPrice, tp, sl, trader, leverage, pairIndex, index, buy)
TRADE_TUPLE = "(uint256,uint192,uint192,uint192,address,uint32,uint16,uint8,bool)"
# BuilderFee(builder, builderFee)
BUILDER_FEE_TUPLE = "(address,uint32)"


@dataclass(frozen=True)
class ContractFunction:
    """One ABI function: name plus input/output type strings."""

    name: str
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature)[:4])

    def encode(self, *args: Any) -> bytes:
        """Return calldata for a call with ``args``."""
        if len(args) != len(self.inputs):
            raise ValidationError(
                f"{self.name} expects {len(self.inputs)} arguments, got {len(args)}"
            )
        try:
            return self.selector + abi_encode(list(self.inputs), list(args))
        except (EncodingError, TypeError, ValueError) as e:
            raise ValidationError(f"Failed to encode {self.name} call: {e}", operation=self.name) from e

    def decode(self, data: bytes) -> Any:
        """
        Decode return data. A single output is returned unwrapped; several
        outputs come back as a tuple.
        """
        try:
            values = abi_decode(list(self.outputs), bytes(data))
        except (DecodingError, TypeError, ValueError) as e:
            raise ProtocolError(f"Failed to decode {self.name} result: {e}", operation=self.name) from e
        if len(values) == 1:
            return values[0]
        return tuple(values)


class IERC20:
    balanceOf = ContractFunction("balanceOf", ("address",), ("uint256",))
    allowance = ContractFunction("allowance", ("address", "address"), ("uint256",))
    approve = ContractFunction("approve", ("address", "uint256"), ("bool",))
    decimals = ContractFunction("decimals", (), ("uint8",))


class ITrading:
    openTrade = ContractFunction("openTrade", (TRADE_TUPLE, BUILDER_FEE_TUPLE, "uint8", "uint256"))
    closeTradeMarket = ContractFunction("closeTradeMarket", ("uint16", "uint8", "uint16", "uint192", "uint32"))
    cancelOpenLimitOrder = ContractFunction("cancelOpenLimitOrder", ("uint16", "uint8"))
    updateTp = ContractFunction("updateTp", ("uint16", "uint8", "uint192"))
    updateSl = ContractFunction("updateSl", ("uint16", "uint8", "uint192"))
    isPaused = ContractFunction("isPaused", (), ("bool",))


class ITradingStorage:
    openTradesCount = ContractFunction("openTradesCount", ("address", "uint16"), ("uint32",))
    getOpenTrade = ContractFunction("getOpenTrade", ("address", "uint16", "uint8"), (TRADE_TUPLE,))


class IOstiumVault:
    balanceOf = ContractFunction("balanceOf", ("address",), ("uint256",))
    convertToAssets = ContractFunction("convertToAssets", ("uint256",), ("uint256",))
    deposit = ContractFunction("deposit", ("uint256", "address"), ("uint256",))
    withdraw = ContractFunction("withdraw", ("uint256", "address", "address"), ("uint256",))
    redeem = ContractFunction("redeem", ("uint256", "address", "address"), ("uint256",))
    makeWithdrawRequest = ContractFunction("makeWithdrawRequest", ("uint256", "address"))
    withdrawRequests = ContractFunction("withdrawRequests", ("address", "uint16"), ("uint256",))
    currentEpoch = ContractFunction("currentEpoch", (), ("uint256",))
    currentEpochStart = ContractFunction("currentEpochStart", (), ("uint256",))
    currentEpochEnd = ContractFunction("currentEpochEnd", (), ("uint256",))
    withdrawalsOpen = ContractFunction("withdrawalsOpen", (), ("bool",))


@dataclass(frozen=True)
class StoredTrade:
    """Raw ``Trade`` struct as returned by TradingStorage."""

    collateral: int
    open_price: int
    tp: int
    sl: int
    trader: str
    leverage: int
    pair_index: int
    index: int
    buy: bool

    @classmethod
    def from_tuple(cls, raw: Tuple) -> 'StoredTrade':
        collateral, open_price, tp, sl, trader, leverage, pair_index, index, buy = raw
        return cls(
            collateral=int(collateral),
            open_price=int(open_price),
            tp=int(tp),
            sl=int(sl),
            trader=Web3.to_checksum_address(trader),
            leverage=int(leverage),
            pair_index=int(pair_index),
            index=int(index),
            buy=bool(buy),
        )

    def as_tuple(self) -> Tuple:
        return (
            self.collateral,
            self.open_price,
            self.tp,
            self.sl,
            self.trader,
            self.leverage,
            self.pair_index,
            self.index,
            self.buy,
        )
