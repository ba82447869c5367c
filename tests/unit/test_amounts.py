"""Unit tests for the fee / net-amount calculator"""
import logging
from decimal import Decimal

import pytest

from factories import BONK, SOL, USDC, WIF
from whale_swaps.amounts import Fee, calculate_amounts, fee_breakdown
from whale_swaps.confidence import Direction
from whale_swaps.deltas import AssetDelta
from whale_swaps.errors import AmountConsistencyError

SOL_OUT = AssetDelta(mint=SOL, decimals=9, raw_delta=-1_000_000_000)
SOL_IN = AssetDelta(mint=SOL, decimals=9, raw_delta=1_000_000_000)
USDC_OUT = AssetDelta(mint=USDC, decimals=6, raw_delta=-100_000_000)
WIF_IN = AssetDelta(mint=WIF, decimals=6, raw_delta=50_000_000)
WIF_OUT = AssetDelta(mint=WIF, decimals=6, raw_delta=-50_000_000)


class TestFeeBreakdown:
    def test_network_fee_counts_for_sol_quote(self):
        fees = fee_breakdown(SOL, 5000)
        assert fees.transaction_fee_sol == Decimal("0.000005")
        assert fees.transaction_fee_quote == Decimal("0.000005")
        assert fees.total_fee_quote == Decimal("0.000005")

    def test_network_fee_ignored_for_other_quote(self):
        fees = fee_breakdown(USDC, 5000)
        assert fees.transaction_fee_sol == Decimal("0.000005")
        assert fees.transaction_fee_quote == 0
        assert fees.total_fee_quote == 0

    def test_extra_fees_split_by_mint(self):
        fees = fee_breakdown(SOL, 5000, [
            Fee(Decimal("0.01"), SOL, "platform"),
            Fee(Decimal("0.002"), SOL, "priority"),
            Fee(Decimal("1.5"), USDC, "platform"),
        ])
        assert fees.platform_fee == Decimal("0.01")
        assert fees.priority_fee == Decimal("0.002")
        assert fees.total_fee_quote == Decimal("0.012005")
        assert fees.unconverted_fees == (Fee(Decimal("1.5"), USDC, "platform"),)

    def test_to_dict(self):
        data = fee_breakdown(SOL, 5000).to_dict()
        assert data["transactionFeeLamports"] == 5000
        assert data["totalFeeQuote"] == "0.000005000"
        assert data["unconvertedFees"] == []
        assert data["netFloored"] is False


class TestBuy:
    def test_sol_buy(self):
        amounts = calculate_amounts(SOL_OUT, WIF_IN, Direction.BUY, network_fee_lamports=5000)
        assert amounts.base_amount == Decimal("50")
        assert amounts.swap_input_amount == Decimal("1")
        assert amounts.total_wallet_cost == Decimal("1.000005")
        assert amounts.swap_output_amount is None
        assert amounts.net_wallet_received is None
        assert amounts.quote_amount == Decimal("1")

    def test_usdc_buy_excludes_network_fee(self):
        amounts = calculate_amounts(USDC_OUT, WIF_IN, Direction.BUY, network_fee_lamports=5000)
        assert amounts.total_wallet_cost == Decimal("100")

    def test_platform_fee_in_quote_added(self):
        amounts = calculate_amounts(
            USDC_OUT, WIF_IN, Direction.BUY,
            extra_fees=[Fee(Decimal("0.25"), USDC)],
        )
        assert amounts.total_wallet_cost == Decimal("100.25")


class TestSell:
    def test_sol_sell(self):
        amounts = calculate_amounts(SOL_IN, WIF_OUT, Direction.SELL, network_fee_lamports=5000)
        assert amounts.base_amount == Decimal("50")
        assert amounts.swap_output_amount == Decimal("1")
        assert amounts.net_wallet_received == Decimal("0.999995")
        assert amounts.total_wallet_cost is None
        assert not amounts.fee_breakdown.net_floored

    def test_negative_net_floored_and_logged(self, caplog):
        dust_out = AssetDelta(mint=SOL, decimals=9, raw_delta=1_000)
        bonk_out = AssetDelta(mint=BONK, decimals=5, raw_delta=-100_000)
        with caplog.at_level(logging.ERROR):
            amounts = calculate_amounts(
                dust_out, bonk_out, Direction.SELL,
                network_fee_lamports=5000, context={"signature": "abc"},
            )
        assert amounts.net_wallet_received == 0
        assert amounts.fee_breakdown.net_floored
        assert "NEGATIVE_NET_RECEIVED" in caplog.text
        assert "abc" in caplog.text

    def test_negative_net_strict_raises(self):
        dust_out = AssetDelta(mint=SOL, decimals=9, raw_delta=1_000)
        bonk_out = AssetDelta(mint=BONK, decimals=5, raw_delta=-100_000)
        with pytest.raises(AmountConsistencyError) as exc_info:
            calculate_amounts(dust_out, bonk_out, Direction.SELL, network_fee_lamports=5000, strict=True)
        assert exc_info.value.context["preFloorNet"] == "-0.000004000"


def test_to_dict_omits_other_side():
    data = calculate_amounts(SOL_OUT, WIF_IN, Direction.BUY, network_fee_lamports=5000).to_dict()
    assert data["baseAmount"] == "50.000000"
    assert data["swapInputAmount"] == "1.000000000"
    assert data["totalWalletCost"] == "1.000005000"
    assert "netWalletReceived" not in data
    assert data["quoteSource"] == "observed"
