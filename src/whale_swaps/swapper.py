"""
Swapper identification.

Candidates in priority order: explicit SWAP action swapper, fee payer, first
signer, then the only owner with an economic delta. A candidate counts only if
it actually moved a non-dust amount.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional

from .deltas import DeltaReport, economic_owners
from .models import RawTransaction

logger = logging.getLogger(__name__)


class SwapperMethod(str, Enum):
    SWAP_ACTION = "swap_action"
    FEE_PAYER = "fee_payer"
    SIGNER = "signer"
    OWNER_ANALYSIS = "owner_analysis"

    @property
    def is_fallback(self) -> bool:
        return self in (SwapperMethod.SIGNER, SwapperMethod.OWNER_ANALYSIS)


@dataclass(frozen=True)
class SwapperResolution:
    swapper: str
    method: SwapperMethod
    report: DeltaReport


def candidate_swappers(tx: RawTransaction) -> list[tuple[str, SwapperMethod]]:
    """Prioritized, de-duplicated candidates (before owner analysis)."""
    candidates: list[tuple[str, SwapperMethod]] = []
    seen: set[str] = set()

    def push(address: Optional[str], method: SwapperMethod) -> None:
        if address and address not in seen:
            seen.add(address)
            candidates.append((address, method))

    for action in tx.swap_actions:
        push(action.swapper, SwapperMethod.SWAP_ACTION)
    push(tx.fee_payer, SwapperMethod.FEE_PAYER)
    if tx.signers:
        push(tx.signers[0], SwapperMethod.SIGNER)
    return candidates


def identify_swapper(
    tx: RawTransaction,
    collect: Callable[[str], DeltaReport],
    dust_threshold: Decimal,
) -> Optional[SwapperResolution]:
    """
    Resolve the account that controls the swap.

    ``collect`` builds the reconciled DeltaReport for an owner. Returns None
    when no candidate holds a non-dust delta.
    """
    tried: set[str] = set()
    for address, method in candidate_swappers(tx):
        tried.add(address)
        report = collect(address)
        if report.has_economic_delta:
            return SwapperResolution(swapper=address, method=method, report=report)
        logger.debug(f"[SWAPPER] {method.value} {address[:8]}... has no economic delta")

    owners = economic_owners(tx.token_balance_changes, dust_threshold)
    if len(owners) == 1 and owners[0] not in tried:
        report = collect(owners[0])
        if report.has_economic_delta:
            logger.debug(f"[SWAPPER] Owner analysis picked {owners[0][:8]}...")
            return SwapperResolution(
                swapper=owners[0], method=SwapperMethod.OWNER_ANALYSIS, report=report
            )

    logger.debug(
        f"[SWAPPER] Identification failed for {tx.signature[:16]}... "
        f"({len(owners)} economic owners)"
    )
    return None
