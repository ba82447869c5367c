"""
Swap classifier - turns one provider transaction into a ClassifiedSwap,
a SplitSwapPair or an ErasureResult.

Pipeline:
1. status / input gates
2. swapper identification (per-owner reconciled deltas)
3. route collapse + quote/base roles
4. split synthesis for non-core pairs, else a single record
5. confidence and fee-adjusted amounts

classify() is pure: no I/O, no shared mutable state. A SwapClassifier can be
shared by any number of threads or tasks.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from .amounts import QUOTE_COUNTER_ASSET, QUOTE_OBSERVED, calculate_amounts
from .config import ClassifierConfig
from .confidence import Confidence, Direction, action_agreement, score_confidence
from .deltas import AssetDelta, DeltaReport, collect_deltas, economic_owners
from .erasure import (
    EraseReason,
    ErasureResult,
    check_status,
    erase,
    input_problems,
)
from .errors import InvalidTransactionError
from .models import RawTransaction
from .results import (
    SOURCE_BALANCE_DELTA,
    AssetRef,
    ClassificationResult,
    ClassifiedSwap,
    SplitSwapPair,
)
from .roles import RouteCollapse, assign_roles, collapse_route
from .split import synthesize_split
from .swapper import SwapperResolution, identify_swapper
from .utils.logger import log_classification_event

logger = logging.getLogger(__name__)

TransactionInput = Union[RawTransaction, dict]

UNKNOWN_PROTOCOL = "unknown"


class SwapClassifier:
    """Stateless classifier bound to one immutable ClassifierConfig."""

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or ClassifierConfig()

    def classify(self, raw: TransactionInput) -> ClassificationResult:
        """
        Classify one transaction.

        Every rejection is returned as an ErasureResult. Only programmer
        errors (AmountConsistencyError with strict_amounts) are raised.
        """
        if isinstance(raw, RawTransaction):
            tx = raw
        else:
            try:
                tx = RawTransaction.from_dict(raw)
            except InvalidTransactionError as e:
                signature = _signature_of(raw)
                return self._erased(
                    erase(None, EraseReason.INVALID_INPUT, signature=signature, problems=[str(e)])
                )

        reason = check_status(tx)
        if reason is not None:
            return self._erased(erase(tx, reason, status=tx.status))

        problems = input_problems(tx)
        if problems:
            return self._erased(erase(tx, EraseReason.INVALID_INPUT, problems=problems))

        resolution = identify_swapper(tx, self._collector(tx), self.config.dust_threshold)
        if resolution is None:
            owners = economic_owners(tx.token_balance_changes, self.config.dust_threshold)
            if not owners:
                return self._erased(
                    erase(tx, EraseReason.INVALID_ASSET_COUNT, assetCount=0, note="all deltas are dust")
                )
            return self._erased(
                erase(tx, EraseReason.SWAPPER_IDENTIFICATION_FAILED, economicOwners=owners)
            )

        report = resolution.report
        route = collapse_route(report, self.config.route_tolerance)
        roles = assign_roles(
            route.legs, self.config.core_assets, self.config.suppress_core_to_core
        )
        if isinstance(roles, EraseReason):
            return self._erased(
                erase(
                    tx,
                    roles,
                    swapper=resolution.swapper,
                    swapperIdentificationMethod=resolution.method.value,
                    assetCount=len(route.legs),
                    intermediateAssetsCollapsed=list(route.collapsed),
                    **report.debug_info(),
                )
            )

        agreement = action_agreement(
            tx.swap_actions, resolution.swapper, roles.spent, roles.acquired
        )
        if agreement is False:
            logger.info(
                f"[CLASSIFIER] SWAP action disagrees with balances for {tx.signature[:16]}..., "
                f"using balance deltas"
            )
        confidence = score_confidence(
            resolution.method,
            resolution.swapper,
            tx.fee_payer,
            agreement,
            route_collapsed=route.was_collapsed,
            split=roles.split,
        )

        if roles.split:
            pair = synthesize_split(
                roles.spent,
                roles.acquired,
                lambda leg: self._record(
                    tx, resolution, route, leg.quote, leg.base, leg.direction,
                    confidence, leg.classification_source, QUOTE_COUNTER_ASSET,
                ),
            )
            self._log_success(pair.sell_record)
            self._log_success(pair.buy_record)
            return pair

        record = self._record(
            tx, resolution, route, roles.quote, roles.base, roles.direction,
            confidence, SOURCE_BALANCE_DELTA, QUOTE_OBSERVED,
        )
        self._log_success(record)
        return record

    def _collector(self, tx: RawTransaction):
        config = self.config

        def collect(owner: str) -> DeltaReport:
            return collect_deltas(
                tx,
                owner,
                dust_threshold=config.dust_threshold,
                filter_rent_refunds=config.filter_rent_refunds,
                rent_noise_threshold_sol=config.rent_noise_threshold_sol,
            )

        return collect

    def _record(
        self,
        tx: RawTransaction,
        resolution: SwapperResolution,
        route: RouteCollapse,
        quote: AssetDelta,
        base: AssetDelta,
        direction: Direction,
        confidence: Confidence,
        source: str,
        quote_source: str,
    ) -> ClassifiedSwap:
        amounts = calculate_amounts(
            quote,
            base,
            direction,
            network_fee_lamports=tx.fee,
            strict=self.config.strict_amounts,
            quote_source=quote_source,
            context={"signature": tx.signature, "swapper": resolution.swapper},
        )
        return ClassifiedSwap(
            signature=tx.signature,
            timestamp=tx.timestamp,
            swapper=resolution.swapper,
            direction=direction,
            quote_asset=AssetRef.from_delta(quote),
            base_asset=AssetRef.from_delta(base),
            amounts=amounts,
            confidence=confidence,
            protocol=protocol_name(tx),
            swapper_identification_method=resolution.method,
            classification_source=source,
            intermediate_assets_collapsed=route.collapsed,
            rent_refunds_filtered=len(resolution.report.rent_refunds),
        )

    @staticmethod
    def _erased(result: ErasureResult) -> ErasureResult:
        logger.debug(f"[CLASSIFIER] Erased {result.signature[:16]}...: {result.reason.value}")
        log_classification_event("erase", result.signature, reason=result.reason.value)
        return result

    @staticmethod
    def _log_success(record: ClassifiedSwap) -> None:
        logger.info(
            f"[CLASSIFIER] {record.direction.value} {record.amounts.base_amount} "
            f"{record.base_asset.symbol} for {record.amounts.quote_amount} {record.quote_asset.symbol} "
            f"by {record.swapper[:8]}... ({record.confidence.label}, {record.protocol})"
        )
        log_classification_event(
            record.kind,
            record.signature,
            direction=record.direction.value,
            confidence=record.confidence.label,
            swapper=record.swapper,
        )


def protocol_name(tx: RawTransaction) -> str:
    """Transaction protocol, else the SWAP action's protocol, else 'unknown'."""
    if tx.protocol:
        return tx.protocol
    for action in tx.swap_actions:
        if action.protocol:
            return action.protocol
    return UNKNOWN_PROTOCOL


_default_classifier: Optional[SwapClassifier] = None


def classify(raw: TransactionInput, config: Optional[ClassifierConfig] = None) -> ClassificationResult:
    """Classify one transaction with ``config`` (defaults when omitted)."""
    global _default_classifier
    if config is not None:
        return SwapClassifier(config).classify(raw)
    if _default_classifier is None:
        _default_classifier = SwapClassifier()
    return _default_classifier.classify(raw)


# =============================================================================
# Batch helpers
# =============================================================================

@dataclass
class ClassificationTally:
    """Outcome counts for one batch. Owned by the caller, never by the classifier."""
    total: int = 0
    duplicates: int = 0
    swaps: int = 0
    splits: int = 0
    buys: int = 0
    sells: int = 0
    erased: dict[str, int] = field(default_factory=dict)

    def record(self, result: ClassificationResult) -> None:
        if isinstance(result, ErasureResult):
            key = result.reason.value
            self.erased[key] = self.erased.get(key, 0) + 1
            return
        if isinstance(result, SplitSwapPair):
            self.splits += 1
            records = result.records
        else:
            self.swaps += 1
            records = (result,)
        for record in records:
            if record.direction == Direction.BUY:
                self.buys += 1
            else:
                self.sells += 1

    @property
    def erased_total(self) -> int:
        return sum(self.erased.values())

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "duplicates": self.duplicates,
            "swaps": self.swaps,
            "splits": self.splits,
            "buys": self.buys,
            "sells": self.sells,
            "erased": dict(self.erased),
            "erasedTotal": self.erased_total,
        }


def _signature_of(raw: TransactionInput) -> str:
    if isinstance(raw, RawTransaction):
        return raw.signature
    if isinstance(raw, dict) and isinstance(raw.get("signature"), str):
        return raw["signature"]
    return ""


def _unique(
    transactions: Iterable[TransactionInput], tally: ClassificationTally
) -> list[tuple[str, TransactionInput]]:
    """First occurrence of each signature wins."""
    seen: set[str] = set()
    unique: list[tuple[str, TransactionInput]] = []
    for raw in transactions:
        signature = _signature_of(raw)
        tally.total += 1
        if signature in seen:
            tally.duplicates += 1
            logger.debug(f"[CLASSIFIER] Duplicate TX {signature[:16]}... skipped")
            continue
        seen.add(signature)
        unique.append((signature, raw))
    return unique


def classify_batch(
    transactions: Iterable[TransactionInput],
    config: Optional[ClassifierConfig] = None,
) -> tuple[dict[str, ClassificationResult], ClassificationTally]:
    """Classify many transactions; results are keyed by signature."""
    classifier = SwapClassifier(config)
    tally = ClassificationTally()
    results: dict[str, ClassificationResult] = {}
    for signature, raw in _unique(transactions, tally):
        result = classifier.classify(raw)
        tally.record(result)
        results[signature] = result
    logger.info(f"[CLASSIFIER] Batch done: {tally.to_dict()}")
    return results, tally


async def classify_batch_async(
    transactions: Iterable[TransactionInput],
    config: Optional[ClassifierConfig] = None,
    concurrency: int = 8,
) -> tuple[dict[str, ClassificationResult], ClassificationTally]:
    """classify_batch fanned out to worker threads, at most ``concurrency`` at once."""
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    classifier = SwapClassifier(config)
    tally = ClassificationTally()
    semaphore = asyncio.Semaphore(concurrency)

    async def run(signature: str, raw: TransactionInput) -> tuple[str, ClassificationResult]:
        async with semaphore:
            return signature, await asyncio.to_thread(classifier.classify, raw)

    pairs = await asyncio.gather(
        *(run(signature, raw) for signature, raw in _unique(transactions, tally))
    )
    results: dict[str, ClassificationResult] = {}
    for signature, result in pairs:
        tally.record(result)
        results[signature] = result
    logger.info(f"[CLASSIFIER] Async batch done: {tally.to_dict()}")
    return results, tally
