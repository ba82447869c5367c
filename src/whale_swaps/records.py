"""
Flat storage rows for classification results.

One row per (signature, direction): a ClassifiedSwap gives one row, a
SplitSwapPair two, an ErasureResult none.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .confidence import Direction
from .erasure import ErasureResult
from .results import ClassificationResult, ClassifiedSwap, SplitSwapPair
from .tokens import is_sol


@dataclass(frozen=True)
class StorageRecord:
    signature: str
    timestamp: Optional[int]
    wallet_address: str
    direction: Direction
    base_mint: str
    base_symbol: str
    quote_mint: str
    quote_symbol: str
    buy_amount: Decimal     # what the wallet received
    sell_amount: Decimal    # what the wallet gave up
    sol_amount: Optional[Decimal]
    confidence: str
    protocol: str
    classification_source: str
    swapper_identification_method: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.signature, self.direction.value)

    def to_dict(self) -> dict:
        return {
            "signature": self.signature,
            "timestamp": self.timestamp,
            "wallet_address": self.wallet_address,
            "direction": self.direction.value,
            "base_mint": self.base_mint,
            "base_symbol": self.base_symbol,
            "quote_mint": self.quote_mint,
            "quote_symbol": self.quote_symbol,
            "buy_amount": str(self.buy_amount),
            "sell_amount": str(self.sell_amount),
            "sol_amount": str(self.sol_amount) if self.sol_amount is not None else None,
            "confidence": self.confidence,
            "protocol": self.protocol,
            "classification_source": self.classification_source,
            "swapper_identification_method": self.swapper_identification_method,
        }


def storage_record(swap: ClassifiedSwap) -> StorageRecord:
    """
    BUY:  buy_amount = base_amount,          sell_amount = total_wallet_cost
    SELL: buy_amount = net_wallet_received,  sell_amount = base_amount
    """
    amounts = swap.amounts
    if swap.direction == Direction.BUY:
        buy_amount = amounts.base_amount
        sell_amount = amounts.total_wallet_cost
        quote_side = sell_amount
    else:
        buy_amount = amounts.net_wallet_received
        sell_amount = amounts.base_amount
        quote_side = buy_amount

    return StorageRecord(
        signature=swap.signature,
        timestamp=swap.timestamp,
        wallet_address=swap.swapper,
        direction=swap.direction,
        base_mint=swap.base_asset.mint,
        base_symbol=swap.base_asset.symbol,
        quote_mint=swap.quote_asset.mint,
        quote_symbol=swap.quote_asset.symbol,
        buy_amount=buy_amount,
        sell_amount=sell_amount,
        sol_amount=quote_side if is_sol(swap.quote_asset.mint) else None,
        confidence=swap.confidence.label,
        protocol=swap.protocol,
        classification_source=swap.classification_source,
        swapper_identification_method=swap.swapper_identification_method.value,
    )


def to_storage_records(result: ClassificationResult) -> list[StorageRecord]:
    if isinstance(result, ErasureResult):
        return []
    if isinstance(result, SplitSwapPair):
        return [storage_record(r) for r in result.records]
    return [storage_record(result)]
