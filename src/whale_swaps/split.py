"""
Split-swap synthesis for non-core to non-core swaps.

A TOKEN_A -> TOKEN_B swap with no observed core leg becomes a SELL of A and
a BUY of B. Each leg is quoted in the counter asset; no implicit core price is
invented, and base amounts are the observed deltas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .confidence import Direction
from .deltas import AssetDelta
from .errors import AmountConsistencyError
from .results import SOURCE_SPLIT_BUY, SOURCE_SPLIT_SELL, ClassifiedSwap, SplitSwapPair


@dataclass(frozen=True)
class SplitLeg:
    direction: Direction
    quote: AssetDelta
    base: AssetDelta
    classification_source: str


def split_legs(spent: AssetDelta, acquired: AssetDelta) -> tuple[SplitLeg, SplitLeg]:
    """(sell leg, buy leg)"""
    sell = SplitLeg(
        direction=Direction.SELL,
        quote=acquired,
        base=spent,
        classification_source=SOURCE_SPLIT_SELL,
    )
    buy = SplitLeg(
        direction=Direction.BUY,
        quote=spent,
        base=acquired,
        classification_source=SOURCE_SPLIT_BUY,
    )
    return sell, buy


def synthesize_split(
    spent: AssetDelta,
    acquired: AssetDelta,
    build_record: Callable[[SplitLeg], ClassifiedSwap],
) -> SplitSwapPair:
    """
    Build both legs with ``build_record`` and pair them.

    Raises:
        AmountConsistencyError: a leg's base amount differs from its observed delta.
    """
    sell_leg, buy_leg = split_legs(spent, acquired)
    pair = SplitSwapPair(sell_record=build_record(sell_leg), buy_record=build_record(buy_leg))

    for leg, record in ((sell_leg, pair.sell_record), (buy_leg, pair.buy_record)):
        observed = abs(leg.base.normalized_delta)
        if record.amounts.base_amount != observed:
            raise AmountConsistencyError(
                f"split {leg.direction.value} base_amount {record.amounts.base_amount} != observed {observed}",
                {"signature": record.signature, "mint": leg.base.mint},
            )
    return pair
