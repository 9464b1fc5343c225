"""
On-chain position enumeration from the TradingStorage contract.

Used instead of the subgraph when it is unavailable: every pair index is
queried for an open-trade count, then each slot of the non-empty pairs is
read.
"""

import asyncio
from typing import List, Optional

from ostium_sdk.chain import ChainReader, to_checksum
from ostium_sdk.contracts import ITradingStorage, StoredTrade
from ostium_sdk.models import MAX_TRADES_PER_PAIR, Position, decode_position
from ostium_sdk.utils.logger import get_client_logger

MAX_PAIRS = 50


class PositionScanner:
    """
    Enumerate a trader's open trades.

    Args:
        reader: Chain reader used for ``eth_call``
        trading_storage: TradingStorage contract address
        max_pairs: Pair indices queried (0..max_pairs-1)
        max_slots: Slots read per non-empty pair
    """

    def __init__(
        self,
        reader: ChainReader,
        trading_storage: str,
        max_pairs: int = MAX_PAIRS,
        max_slots: int = MAX_TRADES_PER_PAIR
    ):
        self.reader = reader
        self.trading_storage = to_checksum(trading_storage)
        self.max_pairs = max_pairs
        self.max_slots = max_slots
        self.logger = get_client_logger()

    async def open_trades_count(self, trader: str, pair_index: int) -> int:
        count = await self.reader.call_function(
            self.trading_storage, ITradingStorage.openTradesCount, trader, pair_index
        )
        return int(count)

    async def get_position(self, trader: str, pair_index: int, slot: int) -> Optional[Position]:
        """Read one slot; None when it holds no trade."""
        raw = await self.reader.call_function(
            self.trading_storage, ITradingStorage.getOpenTrade, trader, pair_index, slot
        )
        return decode_position(StoredTrade.from_tuple(raw))

    async def scan(self, trader: str) -> List[Position]:
        """
        Return the trader's open positions ordered by (pair, slot).

        Reads within a stage run concurrently; the first failed read aborts
        the scan.
        """
        trader = to_checksum(trader)

        counts = await asyncio.gather(
            *(self.open_trades_count(trader, pair_index) for pair_index in range(self.max_pairs))
        )
        active_pairs = [pair_index for pair_index, count in enumerate(counts) if count > 0]
        if not active_pairs:
            self.logger.debug(f"No open trades for {trader}")
            return []

        slots = [(pair_index, slot) for pair_index in active_pairs for slot in range(self.max_slots)]
        results = await asyncio.gather(
            *(self.get_position(trader, pair_index, slot) for pair_index, slot in slots)
        )

        positions = [position for position in results if position is not None]
        self.logger.debug(f"Found {len(positions)} open positions for {trader} across {len(active_pairs)} pairs")
        return positions
