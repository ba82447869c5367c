"""
Balance delta aggregation and action reconciliation.

Balance changes are the authoritative source. Transfer actions only fill
mints that have no balance-change entry for the owner, so a movement
reported both ways (the doubled WSOL case) is counted once.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, Optional

from .models import RawTransaction, TokenBalanceChange, TransferAction
from .tokens import SOL_DECIMALS, SOL_MINT, fallback_symbol

logger = logging.getLogger(__name__)

DEFAULT_DUST_THRESHOLD = Decimal("0.000001")
DEFAULT_RENT_NOISE_THRESHOLD_SOL = Decimal("0.01")

SOURCE_BALANCE_CHANGE = "balance_change"


def to_normalized(raw: int, decimals: int) -> Decimal:
    return Decimal(raw).scaleb(-decimals)


def to_raw(amount: Decimal, decimals: int) -> int:
    return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_HALF_EVEN))


def is_dust(raw: int, decimals: int, threshold: Decimal = DEFAULT_DUST_THRESHOLD) -> bool:
    return abs(to_normalized(raw, decimals)) < threshold


@dataclass(frozen=True)
class AssetDelta:
    """Net movement of one mint for one owner."""
    mint: str
    decimals: int
    raw_delta: int
    symbol: Optional[str] = None
    gross_raw: int = 0
    sources: tuple[str, ...] = ()

    @property
    def normalized_delta(self) -> Decimal:
        return to_normalized(self.raw_delta, self.decimals)

    @property
    def normalized_gross(self) -> Decimal:
        return to_normalized(self.gross_raw, self.decimals)

    @property
    def display_symbol(self) -> str:
        return self.symbol or fallback_symbol(self.mint)

    @property
    def is_positive(self) -> bool:
        return self.raw_delta > 0

    @property
    def is_negative(self) -> bool:
        return self.raw_delta < 0

    def to_dict(self) -> dict:
        return {
            "mint": self.mint,
            "symbol": self.display_symbol,
            "decimals": self.decimals,
            "rawDelta": str(self.raw_delta),
            "normalizedDelta": str(self.normalized_delta),
            "sources": list(self.sources),
        }


@dataclass(frozen=True)
class DeltaReport:
    """Everything the aggregator learned about one owner."""
    owner: str
    deltas: dict[str, AssetDelta]                  # non-dust only
    routed: tuple[AssetDelta, ...] = ()            # moved, but netted to dust
    dust: tuple[str, ...] = ()
    gap_filled: tuple[str, ...] = ()
    rent_refunds: tuple[AssetDelta, ...] = ()

    @property
    def has_economic_delta(self) -> bool:
        return bool(self.deltas)

    def legs(self) -> list[AssetDelta]:
        return list(self.deltas.values())

    def debug_info(self) -> dict:
        return {
            "owner": self.owner,
            "assetDeltas": {m: d.to_dict() for m, d in self.deltas.items()},
            "routed": [d.mint for d in self.routed],
            "dust": list(self.dust),
            "gapFilled": list(self.gap_filled),
            "rentRefunds": [d.mint for d in self.rent_refunds],
        }


@dataclass
class _MintTotals:
    mint: str
    decimals: Optional[int]
    symbol: Optional[str] = None
    raw: int = 0
    gross: int = 0
    sources: list[str] = field(default_factory=list)

    def add(self, amount: int, source: str) -> None:
        self.raw += amount
        self.gross += abs(amount)
        if source not in self.sources:
            self.sources.append(source)


def aggregate_balance_changes(
    changes: Iterable[TokenBalanceChange], owner: str
) -> "OrderedDict[str, _MintTotals]":
    """Sum every balance-change entry of ``owner`` per mint."""
    totals: OrderedDict[str, _MintTotals] = OrderedDict()
    for change in changes:
        if change.owner != owner:
            continue
        acc = totals.get(change.mint)
        if acc is None:
            acc = totals[change.mint] = _MintTotals(
                mint=change.mint, decimals=change.decimals, symbol=change.symbol
            )
        if acc.decimals is None:
            acc.decimals = change.decimals
        if acc.symbol is None:
            acc.symbol = change.symbol
        acc.add(change.change_amount, SOURCE_BALANCE_CHANGE)
    return totals


def _action_decimals(action: TransferAction, hints: dict[str, int]) -> Optional[int]:
    if action.mint == SOL_MINT:
        return SOL_DECIMALS
    if action.decimals is not None:
        return action.decimals
    return hints.get(action.mint)


def _action_raw(action: TransferAction, decimals: int) -> Optional[int]:
    if action.amount_raw is not None:
        return abs(action.amount_raw)
    if action.amount is None:
        return None
    return to_raw(abs(action.amount), decimals)


def reconcile_actions(
    totals: "OrderedDict[str, _MintTotals]",
    actions: Iterable[TransferAction],
    owner: str,
    decimals_hints: dict[str, int],
) -> list[str]:
    """
    Fill gaps in ``totals`` from transfer actions touching ``owner``.

    A mint that already has a balance-change entry for the owner is never
    touched, whatever the actions say. Returns the mints filled from actions.
    """
    covered = set(totals)
    filled: list[str] = []

    for action in actions:
        if not action.mint or not action.touches(owner):
            continue
        if action.mint in covered:
            logger.debug(
                f"[DELTAS] {action.type.value} for {action.mint[:8]}... already in "
                f"balance changes of {owner[:8]}..., ignoring action amount"
            )
            continue

        decimals = _action_decimals(action, decimals_hints)
        if decimals is None:
            logger.debug(f"[DELTAS] No decimals for {action.mint[:8]}..., skipping action")
            continue
        raw = _action_raw(action, decimals)
        if raw is None:
            logger.debug(f"[DELTAS] {action.type.value} without amount, skipping")
            continue

        signed = 0
        if action.receiver == owner:
            signed += raw
        if action.sender == owner:
            signed -= raw

        acc = totals.get(action.mint)
        if acc is None:
            acc = totals[action.mint] = _MintTotals(mint=action.mint, decimals=decimals)
        acc.raw += signed
        acc.gross += raw
        source = action.type.value.lower()
        if source not in acc.sources:
            acc.sources.append(source)
        if action.mint not in filled:
            filled.append(action.mint)

    return filled


def collect_deltas(
    tx: RawTransaction,
    owner: str,
    dust_threshold: Decimal = DEFAULT_DUST_THRESHOLD,
    filter_rent_refunds: bool = False,
    rent_noise_threshold_sol: Decimal = DEFAULT_RENT_NOISE_THRESHOLD_SOL,
) -> DeltaReport:
    """Aggregate, reconcile and dust-filter the deltas of one owner."""
    hints = {
        c.mint: c.decimals for c in tx.token_balance_changes if c.decimals is not None
    }
    totals = aggregate_balance_changes(tx.token_balance_changes, owner)
    gap_filled = reconcile_actions(totals, tx.transfer_actions, owner, hints)

    deltas: dict[str, AssetDelta] = {}
    routed: list[AssetDelta] = []
    dust: list[str] = []
    for acc in totals.values():
        if acc.decimals is None:
            # unreachable after input validation; keep it out of the deltas
            dust.append(acc.mint)
            continue
        delta = AssetDelta(
            mint=acc.mint,
            decimals=acc.decimals,
            raw_delta=acc.raw,
            symbol=acc.symbol,
            gross_raw=acc.gross,
            sources=tuple(acc.sources),
        )
        if not is_dust(acc.raw, acc.decimals, dust_threshold):
            deltas[acc.mint] = delta
        elif not is_dust(acc.gross, acc.decimals, dust_threshold):
            routed.append(delta)
        else:
            dust.append(acc.mint)

    rent_refunds: list[AssetDelta] = []
    if filter_rent_refunds:
        sol = deltas.get(SOL_MINT)
        if (
            sol is not None
            and sol.is_positive
            and sol.normalized_delta <= rent_noise_threshold_sol
            and len(deltas) - 1 >= 2
        ):
            rent_refunds.append(deltas.pop(SOL_MINT))
            logger.debug(
                f"[DELTAS] Rent refund filtered for {owner[:8]}...: {sol.normalized_delta} SOL"
            )

    return DeltaReport(
        owner=owner,
        deltas=deltas,
        routed=tuple(routed),
        dust=tuple(dust),
        gap_filled=tuple(gap_filled),
        rent_refunds=tuple(rent_refunds),
    )


def economic_owners(
    changes: Iterable[TokenBalanceChange],
    dust_threshold: Decimal = DEFAULT_DUST_THRESHOLD,
) -> list[str]:
    """Distinct owners holding at least one non-dust net delta, in first-seen order."""
    nets: OrderedDict[tuple[str, str], list] = OrderedDict()
    for change in changes:
        if not change.owner or change.decimals is None:
            continue
        key = (change.owner, change.mint)
        entry = nets.setdefault(key, [0, change.decimals])
        entry[0] += change.change_amount

    owners: list[str] = []
    for (owner, _mint), (raw, decimals) in nets.items():
        if owner not in owners and not is_dust(raw, decimals, dust_threshold):
            owners.append(owner)
    return owners
