"""
Raw transaction model - typed view of the indexing provider's parsed transaction.

Only parsing happens here. Nothing in this module decides whether a
transaction is a swap; missing fields are kept as None so the erasure policy
can report them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union

from .errors import InvalidTransactionError
from .tokens import SOL_MINT, canonical_mint

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "Success"
MAX_DECIMALS = 255
MAX_TOKEN_AMOUNT = Decimal(2 ** 64)


class ActionType(str, Enum):
    SWAP = "SWAP"
    TOKEN_TRANSFER = "TOKEN_TRANSFER"
    SOL_TRANSFER = "SOL_TRANSFER"
    OTHER = "OTHER"


def _to_int(value: Any, label: str) -> int:
    if value is None or value == "":
        return 0
    try:
        if isinstance(value, bool):
            raise InvalidTransactionError(f"{label}: boolean is not an amount")
        if isinstance(value, int):
            return value
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError, OverflowError) as e:
        raise InvalidTransactionError(f"{label}: cannot parse {value!r}") from e


def _to_decimal(value: Any, label: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidTransactionError(f"{label}: cannot parse {value!r}") from e
    if not amount.is_finite():
        raise InvalidTransactionError(f"{label}: non-finite amount {value!r}")
    if abs(amount) >= MAX_TOKEN_AMOUNT:
        raise InvalidTransactionError(f"{label}: amount out of range {value!r}")
    return amount


def _to_decimals(value: Any, label: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidTransactionError(f"{label}: bad decimals {value!r}")
    try:
        decimals = int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidTransactionError(f"{label}: bad decimals {value!r}") from e
    # SPL mints store decimals as a u8
    if not 0 <= decimals <= MAX_DECIMALS:
        raise InvalidTransactionError(f"{label}: decimals out of range {decimals}")
    return decimals


def _to_str(value: Any, label: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidTransactionError(f"{label}: expected string, got {type(value).__name__}")
    return value


def _to_dict(value: Any, label: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidTransactionError(f"{label}: expected object, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class TokenBalanceChange:
    """One balance-change entry. Several may exist per (owner, mint)."""
    owner: str
    mint: str
    decimals: Optional[int]
    change_amount: int          # signed raw units
    pre_balance: int = 0
    post_balance: int = 0
    symbol: Optional[str] = None
    address: Optional[str] = None   # token account

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "TokenBalanceChange":
        label = f"token_balance_changes[{index}]"
        if not isinstance(data, dict):
            raise InvalidTransactionError(f"{label}: expected object, got {type(data).__name__}")
        pre = _to_int(data.get("pre_balance"), f"{label}.pre_balance")
        post = _to_int(data.get("post_balance"), f"{label}.post_balance")
        raw_change = data.get("change_amount")
        if raw_change is None:
            change = post - pre
        else:
            change = _to_int(raw_change, f"{label}.change_amount")
        return cls(
            owner=_to_str(data.get("owner"), f"{label}.owner"),
            mint=canonical_mint(_to_str(data.get("mint"), f"{label}.mint")),
            decimals=_to_decimals(data.get("decimals"), f"{label}.decimals"),
            change_amount=change,
            pre_balance=pre,
            post_balance=post,
            symbol=_to_str(data.get("symbol"), f"{label}.symbol") or None,
            address=_to_str(data.get("address"), f"{label}.address") or None,
        )


@dataclass(frozen=True)
class SwapAction:
    """Explicit SWAP action. Only who and which mints; its quantities are ignored."""
    swapper: Optional[str]
    token_in: Optional[str]
    token_out: Optional[str]
    protocol: Optional[str] = None
    type: ActionType = ActionType.SWAP


@dataclass(frozen=True)
class TransferAction:
    """TOKEN_TRANSFER or SOL_TRANSFER."""
    type: ActionType
    sender: Optional[str]
    receiver: Optional[str]
    mint: str
    amount: Optional[Decimal] = None       # normalized units
    amount_raw: Optional[int] = None
    decimals: Optional[int] = None

    def touches(self, owner: str) -> bool:
        return owner in (self.sender, self.receiver)


@dataclass(frozen=True)
class OtherAction:
    type_name: str
    info: dict = field(default_factory=dict, compare=False, hash=False)
    type: ActionType = ActionType.OTHER


Action = Union[SwapAction, TransferAction, OtherAction]


def _swapped_mint(swapped: dict, side: str, label: str) -> Optional[str]:
    # Shyft sends tokens_swapped.in / .out either as objects or one-element lists
    entry = swapped.get(side)
    if isinstance(entry, list):
        entry = entry[0] if entry else None
    entry = _to_dict(entry, f"{label}.{side}")
    mint = _to_str(entry.get("token_address"), f"{label}.{side}.token_address")
    return canonical_mint(mint) if mint else None


def parse_action(data: dict, index: int = 0) -> Action:
    """Build the typed action for one provider action dict."""
    label = f"actions[{index}]"
    data = _to_dict(data, label)
    action_type = _to_str(data.get("type"), f"{label}.type").upper()
    info = _to_dict(data.get("info"), f"{label}.info")

    if action_type == ActionType.SWAP.value:
        swapped = _to_dict(info.get("tokens_swapped"), f"{label}.tokens_swapped")
        source = _to_dict(data.get("source_protocol"), f"{label}.source_protocol")
        return SwapAction(
            swapper=_to_str(info.get("swapper"), f"{label}.swapper") or None,
            token_in=_swapped_mint(swapped, "in", label),
            token_out=_swapped_mint(swapped, "out", label),
            protocol=_to_str(source.get("name"), f"{label}.source_protocol.name") or None,
        )

    if action_type in (ActionType.TOKEN_TRANSFER.value, ActionType.SOL_TRANSFER.value):
        is_sol = action_type == ActionType.SOL_TRANSFER.value
        mint = SOL_MINT if is_sol else canonical_mint(
            _to_str(info.get("token_address"), f"{label}.token_address")
        )
        amount_raw = info.get("amount_raw")
        return TransferAction(
            type=ActionType(action_type),
            sender=_to_str(info.get("sender"), f"{label}.sender") or None,
            receiver=_to_str(info.get("receiver"), f"{label}.receiver") or None,
            mint=mint,
            amount=_to_decimal(info.get("amount"), f"{label}.amount"),
            amount_raw=_to_int(amount_raw, f"{label}.amount_raw") if amount_raw is not None else None,
            decimals=_to_decimals(info.get("decimals"), f"{label}.decimals"),
        )

    return OtherAction(type_name=action_type, info=dict(info))


@dataclass(frozen=True)
class RawTransaction:
    """Immutable parsed provider transaction."""
    signature: str
    timestamp: Optional[int]
    status: str
    fee: int                       # lamports
    fee_payer: Optional[str]
    signers: tuple[str, ...]
    protocol: Optional[str]
    token_balance_changes: tuple[TokenBalanceChange, ...]
    actions: tuple[Action, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS

    @property
    def swap_actions(self) -> list[SwapAction]:
        return [a for a in self.actions if isinstance(a, SwapAction)]

    @property
    def transfer_actions(self) -> list[TransferAction]:
        return [a for a in self.actions if isinstance(a, TransferAction)]

    @classmethod
    def from_dict(cls, data: dict) -> "RawTransaction":
        """
        Parse a provider transaction dict.

        Raises:
            InvalidTransactionError: a field is present but malformed.
        """
        if not isinstance(data, dict):
            raise InvalidTransactionError(f"expected dict, got {type(data).__name__}")

        signers = data.get("signers")
        if signers is None:
            signers = ()
        elif not isinstance(signers, (list, tuple)):
            raise InvalidTransactionError("signers must be a list")

        changes = data.get("token_balance_changes") or []
        actions = data.get("actions") or []
        if not isinstance(changes, list) or not isinstance(actions, list):
            raise InvalidTransactionError("token_balance_changes/actions must be lists")

        protocol = data.get("protocol")
        if isinstance(protocol, str):
            protocol_name = protocol or None
        else:
            protocol = _to_dict(protocol, "protocol")
            protocol_name = _to_str(protocol.get("name"), "protocol.name") or None

        timestamp = data.get("timestamp")
        fee = _to_int(data.get("fee"), "fee")
        if fee < 0:
            raise InvalidTransactionError("fee must be non-negative")

        return cls(
            signature=_to_str(data.get("signature"), "signature"),
            timestamp=_to_int(timestamp, "timestamp") if timestamp is not None else None,
            status=_to_str(data.get("status"), "status"),
            fee=fee,
            fee_payer=_to_str(data.get("fee_payer"), "fee_payer") or None,
            signers=tuple(
                s for i, s in enumerate(signers) if _to_str(s, f"signers[{i}]")
            ),
            protocol=protocol_name,
            token_balance_changes=tuple(
                TokenBalanceChange.from_dict(c, i) for i, c in enumerate(changes)
            ),
            actions=tuple(parse_action(a, i) for i, a in enumerate(actions)),
        )
