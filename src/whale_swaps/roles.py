"""
Quote/base classification and multi-hop route collapse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from .confidence import Direction, direction_from_base
from .deltas import AssetDelta, DeltaReport
from .erasure import EraseReason, sign_reason
from .tokens import CoreAssetRegistry

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_TOLERANCE = Decimal("0.001")


@dataclass(frozen=True)
class RouteCollapse:
    legs: tuple[AssetDelta, ...]
    collapsed: tuple[str, ...] = ()

    @property
    def was_collapsed(self) -> bool:
        return bool(self.collapsed)


@dataclass(frozen=True)
class RoleAssignment:
    """
    Economic roles of the two legs.

    For a non-core pair ``quote``/``base``/``direction`` are None and the
    split synthesizer takes over from ``spent``/``acquired``.
    """
    spent: AssetDelta
    acquired: AssetDelta
    quote: Optional[AssetDelta] = None
    base: Optional[AssetDelta] = None
    direction: Optional[Direction] = None

    @property
    def split(self) -> bool:
        return self.quote is None


def collapse_route(
    report: DeltaReport, tolerance: Decimal = DEFAULT_ROUTE_TOLERANCE
) -> RouteCollapse:
    """
    Drop intermediate hops of a multi-hop route.

    Mints that already netted to dust are always dropped. When more than two
    legs remain, legs whose |net| is within ``tolerance`` of their gross
    movement are dropped too.
    """
    collapsed = [d.mint for d in report.routed]
    legs = report.legs()

    if len(legs) > 2:
        kept = []
        for delta in legs:
            if Decimal(abs(delta.raw_delta)) <= tolerance * delta.gross_raw:
                collapsed.append(delta.mint)
            else:
                kept.append(delta)
        legs = kept

    if collapsed:
        logger.debug(
            f"[ROLES] Collapsed {len(collapsed)} intermediate hop(s) for "
            f"{report.owner[:8]}..., {len(legs)} legs left"
        )
    return RouteCollapse(legs=tuple(legs), collapsed=tuple(collapsed))


def assign_roles(
    legs: tuple[AssetDelta, ...],
    registry: CoreAssetRegistry,
    suppress_core_to_core: bool = True,
) -> Union[RoleAssignment, EraseReason]:
    """Assign quote/base to exactly two opposite-sign legs, or return why not."""
    if len(legs) != 2:
        return EraseReason.INVALID_ASSET_COUNT

    first, second = legs
    reason = sign_reason(first.raw_delta, second.raw_delta)
    if reason is not None:
        return reason

    spent, acquired = (first, second) if first.is_negative else (second, first)
    spent_core = registry.is_core(spent.mint)
    acquired_core = registry.is_core(acquired.mint)

    if spent_core and acquired_core:
        if suppress_core_to_core:
            return EraseReason.CORE_TO_CORE_SUPPRESSED
        # min() keeps the first of equally preferred mints
        quote = min(legs, key=lambda d: registry.quote_preference(d.mint))
    elif spent_core:
        quote = spent
    elif acquired_core:
        quote = acquired
    else:
        return RoleAssignment(spent=spent, acquired=acquired)

    base = acquired if quote is spent else spent
    return RoleAssignment(
        spent=spent,
        acquired=acquired,
        quote=quote,
        base=base,
        direction=direction_from_base(base),
    )
