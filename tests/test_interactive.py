import pytest

from ostium_sdk.interactive import select_position
from ostium_sdk.models import Position

from conftest import TRADER


def make_position(pair_index, trade_index):
    return Position(TRADER, pair_index, trade_index, 2.0, 10.0, True, 50000.0)


POSITIONS = [make_position(0, 0), make_position(1, 0), make_position(1, 2)]


def test_select_position_distinguishes_same_slot_on_different_pairs():
    btc = select_position(POSITIONS, "1")
    eth = select_position(POSITIONS, "2")

    assert (btc.pair_index, btc.trade_index) == (0, 0)
    assert (eth.pair_index, eth.trade_index) == (1, 0)


@pytest.mark.parametrize("choice", ["0", "4", "-1", "abc", ""])
def test_select_position_rejects_out_of_range(choice):
    assert select_position(POSITIONS, choice) is None
