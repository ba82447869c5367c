"""
Fee and net-amount calculator.

Only fees denominated in the quote asset are folded into wallet cost / net
received; anything else is reported as unconverted. The network fee (lamports)
counts only when the quote asset is SOL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from .confidence import Direction
from .deltas import AssetDelta, to_normalized
from .errors import AmountConsistencyError
from .tokens import SOL_DECIMALS, SOL_MINT, canonical_mint
from .utils.logger import log_critical_error

logger = logging.getLogger(__name__)

ZERO = Decimal(0)

QUOTE_OBSERVED = "observed"
QUOTE_COUNTER_ASSET = "counter_asset"


@dataclass(frozen=True)
class Fee:
    """An extra fee, in normalized units of ``mint``."""
    amount: Decimal
    mint: str
    kind: str = "platform"   # platform | priority


@dataclass(frozen=True)
class FeeBreakdown:
    transaction_fee_lamports: int = 0
    transaction_fee_sol: Decimal = ZERO
    transaction_fee_quote: Decimal = ZERO
    platform_fee: Decimal = ZERO
    priority_fee: Decimal = ZERO
    unconverted_fees: tuple[Fee, ...] = ()
    net_floored: bool = False

    @property
    def total_fee_quote(self) -> Decimal:
        return self.transaction_fee_quote + self.platform_fee + self.priority_fee

    def to_dict(self) -> dict:
        return {
            "transactionFeeLamports": self.transaction_fee_lamports,
            "transactionFeeSOL": str(self.transaction_fee_sol),
            "transactionFeeQuote": str(self.transaction_fee_quote),
            "platformFee": str(self.platform_fee),
            "priorityFee": str(self.priority_fee),
            "totalFeeQuote": str(self.total_fee_quote),
            "unconvertedFees": [
                {"amount": str(f.amount), "mint": f.mint, "kind": f.kind}
                for f in self.unconverted_fees
            ],
            "netFloored": self.net_floored,
        }


@dataclass(frozen=True)
class SwapAmounts:
    base_amount: Decimal
    fee_breakdown: FeeBreakdown
    swap_input_amount: Optional[Decimal] = None     # BUY
    total_wallet_cost: Optional[Decimal] = None     # BUY
    swap_output_amount: Optional[Decimal] = None    # SELL
    net_wallet_received: Optional[Decimal] = None   # SELL
    quote_source: str = QUOTE_OBSERVED

    @property
    def quote_amount(self) -> Decimal:
        if self.swap_input_amount is not None:
            return self.swap_input_amount
        return self.swap_output_amount if self.swap_output_amount is not None else ZERO

    def to_dict(self) -> dict:
        data = {
            "baseAmount": str(self.base_amount),
            "feeBreakdown": self.fee_breakdown.to_dict(),
            "quoteSource": self.quote_source,
        }
        optional = {
            "swapInputAmount": self.swap_input_amount,
            "totalWalletCost": self.total_wallet_cost,
            "swapOutputAmount": self.swap_output_amount,
            "netWalletReceived": self.net_wallet_received,
        }
        for key, value in optional.items():
            if value is not None:
                data[key] = str(value)
        return data


def fee_breakdown(
    quote_mint: str,
    network_fee_lamports: int,
    extra_fees: Iterable[Fee] = (),
) -> FeeBreakdown:
    """Split fees into quote-denominated parts and unconverted leftovers."""
    quote_mint = canonical_mint(quote_mint)
    fee_sol = to_normalized(network_fee_lamports, SOL_DECIMALS)
    platform = ZERO
    priority = ZERO
    unconverted: list[Fee] = []

    for fee in extra_fees:
        if canonical_mint(fee.mint) != quote_mint:
            unconverted.append(fee)
            continue
        if fee.kind == "priority":
            priority += fee.amount
        else:
            platform += fee.amount

    return FeeBreakdown(
        transaction_fee_lamports=network_fee_lamports,
        transaction_fee_sol=fee_sol,
        transaction_fee_quote=fee_sol if quote_mint == SOL_MINT else ZERO,
        platform_fee=platform,
        priority_fee=priority,
        unconverted_fees=tuple(unconverted),
    )


def calculate_amounts(
    quote: AssetDelta,
    base: AssetDelta,
    direction: Direction,
    network_fee_lamports: int = 0,
    extra_fees: Iterable[Fee] = (),
    strict: bool = False,
    quote_source: str = QUOTE_OBSERVED,
    context: Optional[dict] = None,
) -> SwapAmounts:
    """
    BUY:  total_wallet_cost   = swap_input  + quote-denominated fees
    SELL: net_wallet_received = swap_output - quote-denominated fees, floored at 0

    A negative pre-floor SELL result is logged as a critical error and
    flagged on the breakdown; with ``strict`` it raises AmountConsistencyError.
    """
    fees = fee_breakdown(quote.mint, network_fee_lamports, extra_fees)
    base_amount = abs(base.normalized_delta)
    quote_amount = abs(quote.normalized_delta)

    if direction == Direction.BUY:
        return SwapAmounts(
            base_amount=base_amount,
            fee_breakdown=fees,
            swap_input_amount=quote_amount,
            total_wallet_cost=quote_amount + fees.total_fee_quote,
            quote_source=quote_source,
        )

    net = quote_amount - fees.total_fee_quote
    if net < 0:
        debug = {
            "quoteMint": quote.mint,
            "baseMint": base.mint,
            "swapOutputAmount": str(quote_amount),
            "totalFeeQuote": str(fees.total_fee_quote),
            "preFloorNet": str(net),
            **(context or {}),
        }
        if strict:
            raise AmountConsistencyError(
                f"net_wallet_received would be {net} (output {quote_amount}, fees {fees.total_fee_quote})",
                debug,
            )
        log_critical_error(
            error_code="NEGATIVE_NET_RECEIVED",
            message=f"[AMOUNTS] SELL fees exceed output: {quote_amount} - {fees.total_fee_quote} = {net}, flooring to 0",
            module=__name__,
            extra=debug,
        )
        fees = FeeBreakdown(
            transaction_fee_lamports=fees.transaction_fee_lamports,
            transaction_fee_sol=fees.transaction_fee_sol,
            transaction_fee_quote=fees.transaction_fee_quote,
            platform_fee=fees.platform_fee,
            priority_fee=fees.priority_fee,
            unconverted_fees=fees.unconverted_fees,
            net_floored=True,
        )
        net = ZERO

    return SwapAmounts(
        base_amount=base_amount,
        fee_breakdown=fees,
        swap_output_amount=quote_amount,
        net_wallet_received=net,
        quote_source=quote_source,
    )
