import pytest
import requests

from ostium_sdk.price import PRICE_API_URL, get_btc_price, get_eth_price, get_price
from ostium_sdk.subgraph import SubgraphClient
from ostium_sdk.utils.enums import TradeDirection
from ostium_sdk.utils.exceptions import ProtocolError, TransportError

from conftest import TRADER, FakeResponse, FakeSession

PRICES = [
    {"from": "BTC", "to": "USD", "bid": 64990.0, "mid": 65000.0, "ask": 65010.0,
     "isMarketOpen": True, "isDayTradingClosed": False},
    {"from": "ETH", "to": "USD", "bid": 3199.5, "mid": 3200.0, "ask": 3200.5,
     "isMarketOpen": True, "isDayTradingClosed": False},
]

SUBGRAPH_TRADE = {
    "tradeID": "42",
    "collateral": "2000000",
    "leverage": "1000",
    "openPrice": "65000000000000000000000",
    "stopLossPrice": "0",
    "takeProfitPrice": "0",
    "isOpen": True,
    "timestamp": "1700000000",
    "isBuy": False,
    "index": "1",
    "pair": {"id": "0", "from": "BTC", "to": "USD"},
}


# ------------------------- Price feed ------------------------- #

@pytest.mark.asyncio
async def test_get_price_returns_mid():
    session = FakeSession(default=FakeResponse(PRICES))

    assert await get_btc_price(session) == 65000.0
    assert await get_eth_price(session) == 3200.0
    assert session.requests[0]["url"] == PRICE_API_URL


@pytest.mark.asyncio
async def test_get_price_missing_pair():
    session = FakeSession([FakeResponse(PRICES)])

    with pytest.raises(ProtocolError):
        await get_price("DOGE", "USD", session)


@pytest.mark.asyncio
async def test_get_price_unparsable_body():
    session = FakeSession([FakeResponse(text="<html>maintenance</html>")])

    with pytest.raises(ProtocolError):
        await get_btc_price(session)


@pytest.mark.asyncio
async def test_get_price_http_failure():
    session = FakeSession([FakeResponse(text="bad gateway", status_code=502)])

    with pytest.raises(TransportError) as exc_info:
        await get_btc_price(session)
    assert exc_info.value.status == 502


@pytest.mark.asyncio
async def test_get_price_network_failure():
    session = FakeSession([requests.exceptions.Timeout("timed out")])

    with pytest.raises(TransportError):
        await get_btc_price(session)


# ------------------------- Subgraph ------------------------- #

@pytest.mark.asyncio
async def test_open_trades_query():
    session = FakeSession([FakeResponse({"data": {"trades": [SUBGRAPH_TRADE]}})])
    client = SubgraphClient("https://subgraph.test", session=session)

    trades = await client.get_open_trades(TRADER)

    assert len(trades) == 1
    trade = trades[0]
    assert trade.collateral_value == 2.0
    assert trade.leverage_value == 10.0
    assert trade.open_price_value == 65000.0
    assert trade.position_size == 20.0
    assert trade.direction == TradeDirection.SHORT
    assert trade.pair_name == "BTC/USD"
    assert trade.pair_index == 0
    assert trade.trade_index == 1

    sent = session.requests[0]
    assert sent["method"] == "POST"
    assert sent["json"]["variables"] == {"trader": TRADER.lower()}
    assert "trades(where: { isOpen: true, trader: $trader })" in sent["json"]["query"]


@pytest.mark.asyncio
async def test_open_trades_empty_data():
    session = FakeSession([FakeResponse({"data": {"trades": []}})])

    assert await SubgraphClient("https://subgraph.test", session=session).get_open_trades(TRADER) == []


@pytest.mark.asyncio
async def test_open_trades_graphql_errors():
    session = FakeSession([FakeResponse({"errors": [{"message": "indexer unavailable"}]})])

    with pytest.raises(ProtocolError) as exc_info:
        await SubgraphClient("https://subgraph.test", session=session).get_open_trades(TRADER)
    assert "indexer unavailable" in str(exc_info.value)


@pytest.mark.asyncio
async def test_open_trades_http_failure():
    session = FakeSession([FakeResponse(text="down", status_code=500)])

    with pytest.raises(TransportError):
        await SubgraphClient("https://subgraph.test", session=session).get_open_trades(TRADER)
