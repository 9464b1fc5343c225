from unittest.mock import MagicMock

import pytest
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from web3 import Web3

from ostium_sdk.chain import ChainReader, normalize_hash, to_checksum
from ostium_sdk.contracts import IERC20, ITrading, ITradingStorage, StoredTrade, TRADE_TUPLE
from ostium_sdk.utils.exceptions import InvalidAddressError, ProtocolError, TransportError, ValidationError

from conftest import TRADER


def test_known_selectors():
    assert IERC20.balanceOf.selector.hex() == "70a08231"
    assert IERC20.approve.selector.hex() == "095ea7b3"
    assert IERC20.allowance.selector.hex() == "dd62ed3e"


def test_encode_prefixes_selector_and_abi_encodes_arguments():
    data = IERC20.approve.encode(TRADER, 5)
    assert data[:4] == IERC20.approve.selector
    assert abi_decode(["address", "uint256"], data[4:]) == (TRADER.lower(), 5)


def test_encode_rejects_wrong_argument_count():
    with pytest.raises(ValidationError):
        IERC20.approve.encode(TRADER)


def test_encode_rejects_out_of_range_value():
    with pytest.raises(ValidationError):
        ITrading.cancelOpenLimitOrder.encode(70_000, 0)


def test_decode_single_output_is_unwrapped():
    assert IERC20.balanceOf.decode(abi_encode(["uint256"], [42])) == 42


def test_decode_garbage_raises_protocol_error():
    with pytest.raises(ProtocolError):
        IERC20.balanceOf.decode(b"\x01\x02")


def test_stored_trade_roundtrips_through_abi():
    trade = StoredTrade(100_000_000, 50000 * 10 ** 18, 0, 0, TRADER, 1000, 0, 1, True)
    raw = abi_encode([TRADE_TUPLE], [trade.as_tuple()])
    decoded = ITradingStorage.getOpenTrade.decode(raw)
    assert StoredTrade.from_tuple(decoded) == trade


def test_to_checksum():
    assert to_checksum(TRADER.lower()) == TRADER
    with pytest.raises(InvalidAddressError):
        to_checksum("0x1234")


def test_normalize_hash():
    assert normalize_hash("0x" + "00" * 32) == bytes(32)
    with pytest.raises(ValidationError):
        normalize_hash("0x1234")


@pytest.mark.asyncio
async def test_chain_reader_call_function_decodes_result():
    web3 = MagicMock()
    web3.eth.call.return_value = abi_encode(["uint256"], [7_000_000])
    reader = ChainReader(web3)

    result = await reader.call_function(TRADER, IERC20.balanceOf, TRADER)

    assert result == 7_000_000
    tx = web3.eth.call.call_args[0][0]
    assert tx["to"] == TRADER
    assert bytes(tx["data"]) == IERC20.balanceOf.encode(TRADER)


@pytest.mark.asyncio
async def test_chain_reader_maps_connection_errors():
    import requests

    web3 = MagicMock()
    web3.eth.get_balance.side_effect = requests.exceptions.ConnectionError("refused")
    reader = ChainReader(web3)

    with pytest.raises(TransportError):
        await reader.get_balance(TRADER)


@pytest.mark.asyncio
async def test_chain_reader_receipt_none_while_pending():
    from web3.exceptions import TransactionNotFound

    web3 = MagicMock()
    web3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not found")
    reader = ChainReader(web3)

    assert await reader.get_receipt("0x" + "11" * 32) is None


def test_checksum_helper_matches_web3():
    assert to_checksum("0x" + "ab" * 20) == Web3.to_checksum_address("0x" + "ab" * 20)
