"""
Price fetching from the Ostium metadata backend.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ostium_sdk.utils.exceptions import ProtocolError, TransportError
from ostium_sdk.utils.logger import setup_logger

PRICE_API_URL = "https://metadata-backend.ostium.io/PricePublish/latest-prices"
USER_AGENT = "OstiumPythonSDK/0.1.0"
PRICE_TIMEOUT = 10

logger = setup_logger("ostium.price")


@dataclass(frozen=True)
class PriceData:
    """One entry of the ``latest-prices`` feed."""

    base: str
    quote: str
    bid: float
    mid: float
    ask: float
    is_market_open: bool
    is_day_trading_closed: bool

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'PriceData':
        return cls(
            base=data["from"],
            quote=data["to"],
            bid=float(data["bid"]),
            mid=float(data["mid"]),
            ask=float(data["ask"]),
            is_market_open=bool(data.get("isMarketOpen", False)),
            is_day_trading_closed=bool(data.get("isDayTradingClosed", False)),
        )

    @property
    def pair(self) -> str:
        return f"{self.base}/{self.quote}"


async def fetch_prices(session: Optional[requests.Session] = None) -> List[PriceData]:
    """
    Fetch every price in the feed.

    Raises:
        TransportError: HTTP request failed
        ProtocolError: Response body is not a list of price entries
    """
    http = session or requests
    try:
        response = await asyncio.to_thread(
            http.get,
            PRICE_API_URL,
            headers={"User-Agent": USER_AGENT},
            timeout=PRICE_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Failed to fetch prices: {e}", operation="fetch prices") from e

    if not response.ok:
        raise TransportError(
            "Failed to fetch prices",
            operation="fetch prices",
            status=response.status_code,
            body=response.text,
        )

    try:
        return [PriceData.from_json(entry) for entry in response.json()]
    except (ValueError, TypeError, KeyError) as e:
        raise ProtocolError(
            f"Failed to parse price response: {e}",
            operation="fetch prices",
            body=response.text,
        ) from e


async def get_price(base: str, quote: str, session: Optional[requests.Session] = None) -> float:
    """
    Mid price for ``base/quote``.

    Raises:
        ProtocolError: Pair not present in the feed
    """
    for price in await fetch_prices(session):
        if price.base == base and price.quote == quote:
            logger.debug(f"{price.pair} mid price: {price.mid}")
            return price.mid

    raise ProtocolError(f"No price found for {base}/{quote}", operation="get price")


async def get_btc_price(session: Optional[requests.Session] = None) -> float:
    return await get_price("BTC", "USD", session)


async def get_eth_price(session: Optional[requests.Session] = None) -> float:
    return await get_price("ETH", "USD", session)
