"""Unit tests for storage record mapping"""
from decimal import Decimal

from factories import BONK, JUP, SIGNATURE, SOL, WHALE, WIF
from whale_swaps.classifier import classify
from whale_swaps.confidence import Direction
from whale_swaps.records import to_storage_records


class TestStorageRecords:
    def test_buy_row(self, sol_buy_tx):
        (row,) = to_storage_records(classify(sol_buy_tx))
        assert row.key == (SIGNATURE, "BUY")
        assert row.wallet_address == WHALE
        assert row.base_mint == WIF
        assert row.quote_mint == SOL
        assert row.buy_amount == Decimal("50")
        assert row.sell_amount == Decimal("1.000005")
        assert row.sol_amount == Decimal("1.000005")
        assert row.confidence == "HIGH"
        assert row.classification_source == "balance_delta"

    def test_sell_row(self, sol_sell_tx):
        (row,) = to_storage_records(classify(sol_sell_tx))
        assert row.direction == Direction.SELL
        assert row.buy_amount == Decimal("0.999995")
        assert row.sell_amount == Decimal("50")
        assert row.sol_amount == Decimal("0.999995")
        assert row.protocol == "RAYDIUM_AMM"

    def test_split_rows(self, token_to_token_tx):
        sell, buy = to_storage_records(classify(token_to_token_tx))
        assert sell.key == (SIGNATURE, "SELL")
        assert buy.key == (SIGNATURE, "BUY")
        assert sell.base_mint == BONK
        assert sell.sell_amount == Decimal("500")
        assert buy.base_mint == JUP
        assert buy.buy_amount == Decimal("1000000")
        assert sell.sol_amount is None and buy.sol_amount is None
        assert sell.classification_source == "balance_delta_split_sell"

    def test_erasure_has_no_rows(self, stable_arb_tx):
        assert to_storage_records(classify(stable_arb_tx)) == []

    def test_to_dict(self, token_to_token_tx):
        data = to_storage_records(classify(token_to_token_tx))[0].to_dict()
        assert data["direction"] == "SELL"
        assert data["sol_amount"] is None
        assert data["sell_amount"] == "500.00000"
        assert data["swapper_identification_method"] == "fee_payer"
