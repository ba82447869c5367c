"""Unit tests for split-swap synthesis"""
from decimal import Decimal

import pytest

from factories import BONK, JUP, SIGNATURE, WHALE
from whale_swaps.amounts import QUOTE_COUNTER_ASSET, calculate_amounts
from whale_swaps.confidence import Confidence, Direction
from whale_swaps.deltas import AssetDelta
from whale_swaps.errors import AmountConsistencyError
from whale_swaps.results import (
    SOURCE_SPLIT_BUY,
    SOURCE_SPLIT_SELL,
    AssetRef,
    ClassifiedSwap,
)
from whale_swaps.split import split_legs, synthesize_split
from whale_swaps.swapper import SwapperMethod

BONK_OUT = AssetDelta(mint=BONK, decimals=5, raw_delta=-50_000_000)
JUP_IN = AssetDelta(mint=JUP, decimals=6, raw_delta=1_000_000_000_000)


def _build(leg):
    return ClassifiedSwap(
        signature=SIGNATURE,
        timestamp=None,
        swapper=WHALE,
        direction=leg.direction,
        quote_asset=AssetRef.from_delta(leg.quote),
        base_asset=AssetRef.from_delta(leg.base),
        amounts=calculate_amounts(leg.quote, leg.base, leg.direction, quote_source=QUOTE_COUNTER_ASSET),
        confidence=Confidence.MEDIUM,
        protocol="unknown",
        swapper_identification_method=SwapperMethod.FEE_PAYER,
        classification_source=leg.classification_source,
    )


def test_split_legs():
    sell, buy = split_legs(BONK_OUT, JUP_IN)
    assert (sell.direction, sell.base, sell.quote) == (Direction.SELL, BONK_OUT, JUP_IN)
    assert (buy.direction, buy.base, buy.quote) == (Direction.BUY, JUP_IN, BONK_OUT)
    assert sell.classification_source == SOURCE_SPLIT_SELL
    assert buy.classification_source == SOURCE_SPLIT_BUY


class TestSynthesizeSplit:
    def test_pair(self):
        pair = synthesize_split(BONK_OUT, JUP_IN, _build)
        assert pair.kind == "split"
        assert pair.signature == SIGNATURE
        assert pair.sell_record.base_asset.mint == BONK
        assert pair.sell_record.amounts.base_amount == Decimal("500")
        assert pair.buy_record.base_asset.mint == JUP
        assert pair.buy_record.amounts.base_amount == Decimal("1000000")
        assert pair.sell_record.is_split_leg and pair.buy_record.is_split_leg

    def test_quote_is_counter_asset(self):
        pair = synthesize_split(BONK_OUT, JUP_IN, _build)
        assert pair.sell_record.quote_asset.mint == JUP
        assert pair.buy_record.quote_asset.mint == BONK
        assert pair.sell_record.amounts.quote_source == "counter_asset"
        assert pair.sell_record.amounts.net_wallet_received == Decimal("1000000")
        assert pair.buy_record.amounts.total_wallet_cost == Decimal("500")

    def test_base_amount_mismatch_raises(self):
        def bad_build(leg):
            record = _build(leg)
            wrong = calculate_amounts(leg.quote, AssetDelta(mint=leg.base.mint, decimals=0, raw_delta=1), leg.direction)
            return ClassifiedSwap(**{**record.__dict__, "amounts": wrong})

        with pytest.raises(AmountConsistencyError):
            synthesize_split(BONK_OUT, JUP_IN, bad_build)

    def test_to_dict(self):
        data = synthesize_split(BONK_OUT, JUP_IN, _build).to_dict()
        assert data["kind"] == "split"
        assert data["sellRecord"]["classificationSource"] == "balance_delta_split_sell"
        assert data["buyRecord"]["direction"] == "BUY"
