"""
Transfer Coordination Module

Moves money between two accounts atomically. Both account locks are taken
before either balance is read, always in ascending account number order, so
two transfers running in opposite directions between the same pair of
accounts cannot deadlock and nobody can observe a half-finished transfer.
"""

from contextlib import ExitStack, contextmanager
from typing import Iterator, Tuple

from .accounts import Account
from .currency import validate_amount
from .errors import BankingError, InvalidTransfer
from .ledger import EntryKind, LedgerEntry
from .logging_config import get_logger, log_action


class TransferCoordinator:
    """Orchestrates two-account transfers"""

    def __init__(self):
        self.logger = get_logger("online_banking.transactions")

    @staticmethod
    @contextmanager
    def locked(*accounts: Account) -> Iterator[None]:
        """
        Hold the locks of all given accounts

        Locks are acquired in ascending account number order and released in
        reverse. Duplicates are locked once.
        """
        unique = {account.account_id: account for account in accounts}
        with ExitStack() as stack:
            for account_id in sorted(unique):
                stack.enter_context(unique[account_id].lock)
            yield

    def transfer(self, source: Account, destination: Account,
                 amount: int) -> Tuple[LedgerEntry, LedgerEntry]:
        """
        Move amount from source to destination

        Either both the debit and the credit happen, with one TRANSFER_OUT
        entry on source and one TRANSFER_IN entry on destination, or nothing
        changes at all.

        Args:
            source: Account to debit
            destination: Account to credit
            amount: Positive amount in minor units

        Returns:
            (TRANSFER_OUT entry on source, TRANSFER_IN entry on destination)

        Raises:
            InvalidTransfer: If source and destination are the same account
            InvalidAmount: If amount is not a positive integer
            InsufficientFunds: If source holds less than amount
        """
        try:
            if source is destination or source.account_id == destination.account_id:
                raise InvalidTransfer(f"Cannot transfer from {source.account_id} to itself")
            validate_amount(amount)

            with self.locked(source, destination):
                # Debit checks funds and raises before anything is appended
                out_entry = source.debit_locked(amount, EntryKind.TRANSFER_OUT, destination.account_id)
                in_entry = destination.credit_locked(amount, EntryKind.TRANSFER_IN, source.account_id)
        except BankingError as e:
            log_action(
                self.logger, "warning", f"Transfer rejected: {e}",
                action="transfer", account_id=source.account_id,
                extra={
                    "destination": destination.account_id,
                    "amount": amount,
                    "error": type(e).__name__
                }
            )
            raise

        log_action(
            self.logger, "info",
            f"Transfer posted: {source.account_id} -> {destination.account_id}",
            action="transfer", account_id=source.account_id,
            extra={
                "destination": destination.account_id,
                "amount": amount,
                "source_sequence_number": out_entry.sequence_number,
                "destination_sequence_number": in_entry.sequence_number
            }
        )
        return out_entry, in_entry
