"""
Account Management Module

Accounts hold a non-negative integer balance and the ordered entries that
produced it. Each account guards its balance-and-entries pair with its own
lock, so operations on unrelated accounts never block each other. The
directory allocates account numbers and maps them to accounts.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
import threading

from .currency import validate_amount
from .errors import AccountNotFound, BankingError, InsufficientFunds
from .ledger import EntryKind, LedgerEntry, ledger_balance
from .logging_config import get_logger, log_action


class Account:
    """
    Bank account with an append-only entry log

    Invariant: balance == ledger_balance(entries) and balance >= 0.

    Members ending in ``_locked`` are the package-internal primitives used by
    multi-account operations; the caller must already hold ``lock``.
    """

    def __init__(self, account_id: str, created_at: Optional[datetime] = None):
        self.account_id = account_id
        self.created_at = created_at or datetime.now(timezone.utc)
        self.lock = threading.Lock()
        self._balance = 0
        self._entries: List[LedgerEntry] = []
        self.logger = get_logger("online_banking.accounts")

    def __repr__(self) -> str:
        return f"Account({self.account_id!r})"

    def deposit(self, amount: int) -> LedgerEntry:
        """
        Credit the account

        Args:
            amount: Positive amount in minor units

        Returns:
            The DEPOSIT entry appended to the history

        Raises:
            InvalidAmount: If amount is not a positive integer
        """
        try:
            validate_amount(amount)
            with self.lock:
                entry = self.credit_locked(amount, EntryKind.DEPOSIT)
        except BankingError as e:
            self._log_rejection("deposit", amount, e)
            raise

        log_action(
            self.logger, "info", f"Deposit posted to {self.account_id}",
            action="deposit", account_id=self.account_id,
            extra={"amount": amount, "sequence_number": entry.sequence_number}
        )
        return entry

    def withdraw(self, amount: int) -> LedgerEntry:
        """
        Debit the account if it holds enough funds

        The balance check and the debit happen under the account lock, so no
        concurrent operation can slip in between them.

        Args:
            amount: Positive amount in minor units

        Returns:
            The WITHDRAWAL entry appended to the history

        Raises:
            InvalidAmount: If amount is not a positive integer
            InsufficientFunds: If amount exceeds the balance
        """
        try:
            validate_amount(amount)
            with self.lock:
                entry = self.debit_locked(amount, EntryKind.WITHDRAWAL)
        except BankingError as e:
            self._log_rejection("withdraw", amount, e)
            raise

        log_action(
            self.logger, "info", f"Withdrawal posted to {self.account_id}",
            action="withdraw", account_id=self.account_id,
            extra={"amount": amount, "sequence_number": entry.sequence_number}
        )
        return entry

    def history(self) -> List[LedgerEntry]:
        """Snapshot of all entries in the order they were appended"""
        with self.lock:
            return list(self._entries)

    def balance_snapshot(self) -> int:
        """Balance as of call time"""
        with self.lock:
            return self._balance

    def verify_balance(self) -> bool:
        """Check the balance against the signed sum of the entry log"""
        with self.lock:
            return self._balance >= 0 and self._balance == ledger_balance(self._entries)

    # Package-internal primitives: the caller must hold self.lock

    @property
    def balance_locked(self) -> int:
        return self._balance

    def credit_locked(self, amount: int, kind: EntryKind,
                      counterparty_id: Optional[str] = None) -> LedgerEntry:
        entry = self._next_entry(amount, kind, counterparty_id)
        self._balance += amount
        self._entries.append(entry)
        return entry

    def debit_locked(self, amount: int, kind: EntryKind,
                     counterparty_id: Optional[str] = None) -> LedgerEntry:
        if amount > self._balance:
            raise InsufficientFunds(self.account_id, self._balance, amount)
        entry = self._next_entry(amount, kind, counterparty_id)
        self._balance -= amount
        self._entries.append(entry)
        return entry

    def _next_entry(self, amount: int, kind: EntryKind,
                    counterparty_id: Optional[str]) -> LedgerEntry:
        return LedgerEntry(
            account_id=self.account_id,
            amount=amount,
            kind=kind,
            sequence_number=len(self._entries) + 1,
            counterparty_id=counterparty_id
        )

    def _log_rejection(self, action: str, amount, error: BankingError) -> None:
        log_action(
            self.logger, "warning", f"{action.capitalize()} rejected: {error}",
            action=action, account_id=self.account_id,
            extra={"amount": amount, "error": type(error).__name__}
        )


class AccountDirectory:
    """
    Allocates account numbers and owns the account number -> Account mapping

    Numbers are "<prefix><n>" with n counting up from 1. They are never
    reused because accounts are never removed and the counter only grows.
    """

    def __init__(self, prefix: str = "ACC"):
        self.prefix = prefix
        self._next_id = 1
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()
        self.logger = get_logger("online_banking.accounts")

    def create_account(self) -> str:
        """
        Create a zero-balance account

        Returns:
            The new account number
        """
        with self._lock:
            account_id = f"{self.prefix}{self._next_id}"
            self._next_id += 1
            self._accounts[account_id] = Account(account_id)

        log_action(
            self.logger, "info", f"Account created: {account_id}",
            action="create_account", account_id=account_id
        )
        return account_id

    def lookup(self, account_id: str) -> Account:
        """
        Get account by number

        Raises:
            AccountNotFound: If no account has this number
        """
        with self._lock:
            account = self._accounts.get(account_id)
        if account is None:
            log_action(
                self.logger, "warning", f"Account {account_id} not found",
                action="lookup", account_id=account_id
            )
            raise AccountNotFound(account_id)
        return account

    def account_ids(self) -> List[str]:
        """All account numbers in creation order"""
        with self._lock:
            return list(self._accounts)

    def __contains__(self, account_id) -> bool:
        with self._lock:
            return account_id in self._accounts

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
