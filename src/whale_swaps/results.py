"""
Classification results.

``ClassificationResult`` is one of ClassifiedSwap, SplitSwapPair or
ErasureResult; the ``kind`` field tells them apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .amounts import SwapAmounts
from .confidence import Confidence, Direction
from .deltas import AssetDelta
from .erasure import ErasureResult
from .swapper import SwapperMethod

SOURCE_BALANCE_DELTA = "balance_delta"
SOURCE_SPLIT_SELL = "balance_delta_split_sell"
SOURCE_SPLIT_BUY = "balance_delta_split_buy"


@dataclass(frozen=True)
class AssetRef:
    mint: str
    symbol: str
    decimals: int

    @classmethod
    def from_delta(cls, delta: AssetDelta) -> "AssetRef":
        return cls(mint=delta.mint, symbol=delta.display_symbol, decimals=delta.decimals)

    def to_dict(self) -> dict:
        return {"mint": self.mint, "symbol": self.symbol, "decimals": self.decimals}


@dataclass(frozen=True)
class ClassifiedSwap:
    signature: str
    timestamp: Optional[int]
    swapper: str
    direction: Direction
    quote_asset: AssetRef
    base_asset: AssetRef
    amounts: SwapAmounts
    confidence: Confidence
    protocol: str
    swapper_identification_method: SwapperMethod
    classification_source: str = SOURCE_BALANCE_DELTA
    intermediate_assets_collapsed: tuple[str, ...] = ()
    rent_refunds_filtered: int = 0
    kind: str = "swap"

    @property
    def is_split_leg(self) -> bool:
        return self.classification_source in (SOURCE_SPLIT_SELL, SOURCE_SPLIT_BUY)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "signature": self.signature,
            "timestamp": self.timestamp,
            "swapper": self.swapper,
            "direction": self.direction.value,
            "quoteAsset": self.quote_asset.to_dict(),
            "baseAsset": self.base_asset.to_dict(),
            "amounts": self.amounts.to_dict(),
            "confidence": self.confidence.label,
            "protocol": self.protocol,
            "swapperIdentificationMethod": self.swapper_identification_method.value,
            "classificationSource": self.classification_source,
            "intermediateAssetsCollapsed": list(self.intermediate_assets_collapsed),
            "rentRefundsFiltered": self.rent_refunds_filtered,
        }


@dataclass(frozen=True)
class SplitSwapPair:
    """Two legs of a non-core to non-core swap sharing one signature."""
    sell_record: ClassifiedSwap
    buy_record: ClassifiedSwap
    kind: str = "split"

    @property
    def signature(self) -> str:
        return self.sell_record.signature

    @property
    def timestamp(self) -> Optional[int]:
        return self.sell_record.timestamp

    @property
    def records(self) -> tuple[ClassifiedSwap, ClassifiedSwap]:
        return (self.sell_record, self.buy_record)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "signature": self.signature,
            "sellRecord": self.sell_record.to_dict(),
            "buyRecord": self.buy_record.to_dict(),
        }


ClassificationResult = Union[ClassifiedSwap, SplitSwapPair, ErasureResult]
