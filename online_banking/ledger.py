"""
Ledger Entry Module

Immutable records of balance-affecting events. An account's balance is
always equal to the signed sum of its entries, so entries are the source of
truth for correctness checks.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional
from enum import Enum

from .currency import validate_amount, format_minor_units, DEFAULT_PRECISION, DEFAULT_SYMBOL


class EntryKind(Enum):
    """Kinds of balance-affecting events"""
    DEPOSIT = "deposit"            # Credit from outside the ledger
    WITHDRAWAL = "withdrawal"      # Debit to outside the ledger
    TRANSFER_OUT = "transfer_out"  # Debit towards another account
    TRANSFER_IN = "transfer_in"    # Credit from another account

    @property
    def sign(self) -> int:
        """+1 for credits, -1 for debits"""
        if self in (EntryKind.DEPOSIT, EntryKind.TRANSFER_IN):
            return 1
        return -1

    @property
    def is_transfer(self) -> bool:
        return self in (EntryKind.TRANSFER_OUT, EntryKind.TRANSFER_IN)


@dataclass(frozen=True)
class LedgerEntry:
    """
    One balance-affecting event on one account

    amount is always positive; the direction comes from kind.
    sequence_number counts entries on the owning account, starting at 1.
    """
    account_id: str
    amount: int
    kind: EntryKind
    sequence_number: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    counterparty_id: Optional[str] = None

    def __post_init__(self):
        validate_amount(self.amount)

        if self.sequence_number < 1:
            raise ValueError("Sequence number must start at 1")

        if self.kind.is_transfer and not self.counterparty_id:
            raise ValueError(f"{self.kind.value} entry requires a counterparty account")

        if not self.kind.is_transfer and self.counterparty_id is not None:
            raise ValueError(f"{self.kind.value} entry cannot have a counterparty account")

    @property
    def signed_amount(self) -> int:
        """Effect of this entry on the account balance"""
        return self.kind.sign * self.amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary"""
        return {
            "account_id": self.account_id,
            "counterparty_id": self.counterparty_id,
            "amount": self.amount,
            "kind": self.kind.value,
            "sequence_number": self.sequence_number,
            "timestamp": self.timestamp.isoformat(),
        }

    def describe(self, precision: int = DEFAULT_PRECISION, symbol: str = DEFAULT_SYMBOL) -> str:
        """Human-readable history line"""
        text = (f"{self.timestamp.isoformat()}: {self.kind.name} of "
                f"{format_minor_units(self.amount, precision, symbol)} on account {self.account_id}")
        if self.kind == EntryKind.TRANSFER_OUT:
            text += f" to {self.counterparty_id}"
        elif self.kind == EntryKind.TRANSFER_IN:
            text += f" from {self.counterparty_id}"
        return text

    def __str__(self) -> str:
        return self.describe()


def ledger_balance(entries: Iterable[LedgerEntry]) -> int:
    """Signed sum of entries: credits add, debits subtract"""
    return sum(entry.signed_amount for entry in entries)
