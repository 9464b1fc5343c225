"""
Subgraph client for querying open Ostium trades.

Only the fixed open-trades query is supported.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ostium_sdk.utils.enums import TradeDirection
from ostium_sdk.utils.exceptions import ProtocolError, TransportError
from ostium_sdk.utils.logger import setup_logger
from ostium_sdk.utils.scaling import unscale_leverage, unscale_price, unscale_usdc

SUBGRAPH_TIMEOUT = 30
USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

OPEN_TRADES_QUERY = """
    query trades($trader: Bytes!) {
        trades(where: { isOpen: true, trader: $trader }) {
            tradeID
            collateral
            leverage
            openPrice
            stopLossPrice
            takeProfitPrice
            isOpen
            timestamp
            isBuy
            index
            pair {
                id
                from
                to
            }
        }
    }
"""

logger = setup_logger("ostium.subgraph")


def _to_int(value: Any) -> int:
    # Subgraph returns BigInts as strings
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class OpenTrade:
    """Open trade row from the subgraph (raw scaled strings kept as-is)."""

    trade_id: Optional[str]
    collateral: str
    leverage: str
    open_price: str
    stop_loss_price: str
    take_profit_price: str
    is_open: bool
    timestamp: str
    is_buy: bool
    index: str
    pair_id: str
    pair_from: str
    pair_to: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'OpenTrade':
        pair = data["pair"]
        return cls(
            trade_id=data.get("tradeID"),
            collateral=data["collateral"],
            leverage=data["leverage"],
            open_price=data["openPrice"],
            stop_loss_price=data.get("stopLossPrice", "0"),
            take_profit_price=data.get("takeProfitPrice", "0"),
            is_open=bool(data.get("isOpen", True)),
            timestamp=data.get("timestamp", "0"),
            is_buy=bool(data["isBuy"]),
            index=data["index"],
            pair_id=pair["id"],
            pair_from=pair["from"],
            pair_to=pair["to"],
        )

    @property
    def collateral_value(self) -> float:
        return unscale_usdc(_to_int(self.collateral))

    @property
    def leverage_value(self) -> float:
        return unscale_leverage(_to_int(self.leverage))

    @property
    def open_price_value(self) -> float:
        return unscale_price(_to_int(self.open_price))

    @property
    def position_size(self) -> float:
        return self.collateral_value * self.leverage_value

    @property
    def pair_index(self) -> int:
        return _to_int(self.pair_id)

    @property
    def trade_index(self) -> int:
        return _to_int(self.index)

    @property
    def direction(self) -> TradeDirection:
        return TradeDirection.from_is_long(self.is_buy)

    @property
    def pair_name(self) -> str:
        return f"{self.pair_from}/{self.pair_to}"


class SubgraphClient:
    """
    Client for the Ostium subgraph.

    Args:
        url: GraphQL endpoint
        session: HTTP session (a new one by default)
    """

    def __init__(self, url: str, session: Optional[requests.Session] = None):
        self.url = url
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })

    async def get_open_trades(self, address: str) -> List[OpenTrade]:
        """
        Get all open trades for an address.

        Raises:
            TransportError: HTTP request failed
            ProtocolError: GraphQL errors or malformed response
        """
        payload = {
            "query": OPEN_TRADES_QUERY,
            "variables": {"trader": address.lower()},
        }

        try:
            response = await asyncio.to_thread(
                self.session.post, self.url, json=payload, timeout=SUBGRAPH_TIMEOUT
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to query subgraph: {e}", operation="subgraph trades") from e

        if not response.ok:
            raise TransportError(
                "Failed to query subgraph",
                operation="subgraph trades",
                status=response.status_code,
                body=response.text,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ProtocolError(
                "Failed to parse subgraph response",
                operation="subgraph trades",
                body=response.text,
            ) from e

        errors = result.get("errors")
        if errors:
            messages = [error.get("message", str(error)) for error in errors]
            raise ProtocolError(f"Subgraph errors: {messages}", operation="subgraph trades")

        trades = (result.get("data") or {}).get("trades") or []
        try:
            open_trades = [OpenTrade.from_json(trade) for trade in trades]
        except (KeyError, TypeError) as e:
            raise ProtocolError(f"Malformed trade in subgraph response: {e}", operation="subgraph trades") from e

        logger.debug(f"Subgraph returned {len(open_trades)} open trades for {address}")
        return open_trades
