"""
Ostium SDK: trading and OLP vault operations on Ostium (Arbitrum One) with a
local private-key signer or a Fordefi MPC vault.
"""

from ostium_sdk.client import OstiumClient
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
from ostium_sdk.price import get_btc_price, get_eth_price, get_price
from ostium_sdk.signers import FordefiSigner, LocalSigner, TransactionOutcome, TransactionSigner, TxRequest
from ostium_sdk.subgraph import OpenTrade, SubgraphClient
from ostium_sdk.utils.config import NetworkConfig

__version__ = "0.1.0"

__all__ = [
    "OstiumClient",
    "NetworkConfig",
    "TransactionSigner",
    "LocalSigner",
    "FordefiSigner",
    "TxRequest",
    "TransactionOutcome",
    "PositionScanner",
    "Position",
    "PlaceOrderParams",
    "CloseTradeParams",
    "BuilderFeeParams",
    "DepositParams",
    "WithdrawParams",
    "RedeemParams",
    "VaultPosition",
    "VaultEpoch",
    "SubgraphClient",
    "OpenTrade",
    "get_price",
    "get_btc_price",
    "get_eth_price",
]
