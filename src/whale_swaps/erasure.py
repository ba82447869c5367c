"""
Erasure policy - the ordered decision table of rejection reasons.

Gates are evaluated in ERASURE_ORDER and the first that fires wins, so every
erased transaction carries exactly one reason.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import base58

from .models import RawTransaction


class EraseReason(str, Enum):
    TRANSACTION_FAILED = "transaction_failed"
    INVALID_INPUT = "invalid_input"
    INVALID_ASSET_COUNT = "invalid_asset_count"
    SWAPPER_IDENTIFICATION_FAILED = "swapper_identification_failed"
    BOTH_POSITIVE_AIRDROP = "both_positive_airdrop"
    BOTH_NEGATIVE_BURN = "both_negative_burn"
    CORE_TO_CORE_SUPPRESSED = "core_to_core_suppressed"

    @property
    def precedence(self) -> int:
        return ERASURE_ORDER.index(self)


ERASURE_ORDER: tuple[EraseReason, ...] = (
    EraseReason.TRANSACTION_FAILED,
    EraseReason.INVALID_INPUT,
    EraseReason.INVALID_ASSET_COUNT,
    EraseReason.SWAPPER_IDENTIFICATION_FAILED,
    EraseReason.BOTH_POSITIVE_AIRDROP,
    EraseReason.BOTH_NEGATIVE_BURN,
    EraseReason.CORE_TO_CORE_SUPPRESSED,
)


@dataclass(frozen=True)
class ErasureResult:
    """Terminal decision: not a reportable swap."""
    reason: EraseReason
    signature: str = ""
    timestamp: Optional[int] = None
    debug_info: dict = field(default_factory=dict, compare=False, hash=False)
    kind: str = "erase"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "signature": self.signature,
            "timestamp": self.timestamp,
            "reason": self.reason.value,
            "debugInfo": _jsonable(self.debug_info),
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def is_valid_address(address: str) -> bool:
    """True for a base58 string decoding to a 32-byte public key."""
    if not address or not 32 <= len(address) <= 44:
        return False
    try:
        return len(base58.b58decode(address)) == 32
    except ValueError:
        return False


def check_status(tx: RawTransaction) -> Optional[EraseReason]:
    if not tx.succeeded:
        return EraseReason.TRANSACTION_FAILED
    return None


def input_problems(tx: RawTransaction) -> list[str]:
    """Structural problems that make the transaction unclassifiable."""
    problems: list[str] = []
    if not tx.signature:
        problems.append("missing signature")
    if not tx.fee_payer:
        problems.append("missing fee_payer")
    if not tx.signers:
        problems.append("missing signers")
    for i, change in enumerate(tx.token_balance_changes):
        if change.decimals is None:
            problems.append(f"token_balance_changes[{i}] missing decimals")
        if not is_valid_address(change.mint):
            problems.append(f"token_balance_changes[{i}] invalid mint {change.mint!r}")
    return problems


def sign_reason(first_raw: int, second_raw: int) -> Optional[EraseReason]:
    """Both legs must move in opposite directions."""
    if first_raw > 0 and second_raw > 0:
        return EraseReason.BOTH_POSITIVE_AIRDROP
    if first_raw < 0 and second_raw < 0:
        return EraseReason.BOTH_NEGATIVE_BURN
    return None


def erase(
    tx: Optional[RawTransaction],
    reason: EraseReason,
    signature: str = "",
    **debug: Any,
) -> ErasureResult:
    info: dict[str, Any] = {}
    if tx is not None:
        info["feePayer"] = tx.fee_payer or "unknown"
        info["signers"] = list(tx.signers)
        signature = signature or tx.signature
    info.update(debug)
    return ErasureResult(
        reason=reason,
        signature=signature,
        timestamp=tx.timestamp if tx is not None else None,
        debug_info=info,
    )
