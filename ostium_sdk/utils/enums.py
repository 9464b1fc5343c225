"""
Shared enums for the Ostium SDK.
"""

from enum import Enum, IntEnum
from typing import Optional


class OrderType(IntEnum):
    """Order type passed to ``openTrade`` (uint8 on-chain)"""
    MARKET = 0          # Execute immediately at current price
    LIMIT_OPEN = 1      # Execute when price reaches target
    STOP_OPEN = 2       # Execute when price moves past threshold

    def __str__(self) -> str:
        return self.name.lower()


class TradeDirection(Enum):
    """Position direction"""
    LONG = "long"
    SHORT = "short"

    @classmethod
    def from_is_long(cls, is_long: bool) -> 'TradeDirection':
        return cls.LONG if is_long else cls.SHORT

    def __str__(self) -> str:
        return self.value.upper()


class JobState(Enum):
    """Fordefi transaction (signing job) state"""
    QUEUED = "queued"
    WAITING_FOR_APPROVAL = "waiting_for_approval"
    APPROVED = "approved"
    SIGNED = "signed"
    PUSHED = "pushed"
    PUSHED_TO_BLOCKCHAIN = "pushed_to_blockchain"
    MINED = "mined"
    COMPLETED = "completed"
    STUCK = "stuck"
    ERROR_SIGNING = "error_signing"
    ERROR_PUSHING = "error_pushing"
    ERROR_PUSHING_TO_BLOCKCHAIN = "error_pushing_to_blockchain"
    ABORTED = "aborted"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, raw: str) -> Optional['JobState']:
        """Return the matching state, or None for states this SDK does not know."""
        try:
            return cls(raw)
        except ValueError:
            return None

    @property
    def is_failure(self) -> bool:
        return self in FAILED_JOB_STATES

    def __str__(self) -> str:
        return self.value


FAILED_JOB_STATES = frozenset({
    JobState.ERROR_SIGNING,
    JobState.ERROR_PUSHING,
    JobState.ERROR_PUSHING_TO_BLOCKCHAIN,
    JobState.ABORTED,
    JobState.CANCELLED,
})
