"""
Direction and confidence.

Direction comes from the sign of the base-asset delta only. Action metadata
can raise or lower confidence but never flips a direction.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional

from .deltas import AssetDelta
from .models import SwapAction
from .swapper import SwapperMethod


class Direction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Confidence(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    MAX = 4

    def cap(self, ceiling: "Confidence") -> "Confidence":
        return min(self, ceiling)

    @property
    def label(self) -> str:
        return self.name


def direction_from_base(base: AssetDelta) -> Direction:
    """SELL when the base asset left the wallet, else BUY."""
    return Direction.SELL if base.raw_delta < 0 else Direction.BUY


def action_agreement(
    swap_actions: list[SwapAction], swapper: str, spent: AssetDelta, acquired: AssetDelta
) -> Optional[bool]:
    """
    None when no SWAP action speaks for the swapper, otherwise whether its
    in/out mints match the balance-derived spent/acquired legs.
    """
    relevant = [a for a in swap_actions if a.swapper in (None, swapper)]
    if not relevant:
        return None
    for action in relevant:
        if action.token_in == spent.mint and action.token_out == acquired.mint:
            return True
    return False


def score_confidence(
    method: SwapperMethod,
    swapper: str,
    fee_payer: Optional[str],
    agreement: Optional[bool],
    route_collapsed: bool = False,
    split: bool = False,
) -> Confidence:
    if agreement is True:
        confidence = Confidence.MAX
    elif agreement is False:
        confidence = Confidence.LOW
    elif swapper == fee_payer and not method.is_fallback:
        confidence = Confidence.HIGH
    else:
        confidence = Confidence.MEDIUM

    if method.is_fallback:
        confidence = confidence.cap(Confidence.MEDIUM)
    if split:
        confidence = confidence.cap(Confidence.MEDIUM)
    if route_collapsed:
        confidence = confidence.cap(Confidence.LOW)
    return confidence
