"""
Ledger Service

Facade over the account directory and the transfer coordinator. This is
the whole surface the interactive shell (or any future transport) talks to.
Account numbers form a flat keyspace: any caller that knows a number can
operate on it. The optional caller identity is recorded in logs only.
"""

from typing import Dict, List, Optional, Tuple

from .accounts import AccountDirectory
from .config import BankingConfig, get_config
from .credentials import CredentialStore
from .ledger import LedgerEntry
from .logging_config import get_logger, log_action, setup_logging
from .transactions import TransferCoordinator


class LedgerService:
    """Account creation, balance-affecting operations and queries by account number"""

    def __init__(
        self,
        directory: Optional[AccountDirectory] = None,
        coordinator: Optional[TransferCoordinator] = None
    ):
        self.directory = directory or AccountDirectory()
        self.coordinator = coordinator or TransferCoordinator()
        self.logger = get_logger("online_banking.service")

    def create_account(self, caller: Optional[str] = None) -> str:
        """Create a zero-balance account and return its number"""
        account_id = self.directory.create_account()
        if caller:
            log_action(self.logger, "info", f"Account {account_id} opened",
                       action="create_account", account_id=account_id, username=caller)
        return account_id

    def deposit(self, account_id: str, amount: int) -> LedgerEntry:
        """
        Deposit into an account

        Raises:
            AccountNotFound, InvalidAmount
        """
        return self.directory.lookup(account_id).deposit(amount)

    def withdraw(self, account_id: str, amount: int) -> LedgerEntry:
        """
        Withdraw from an account

        Raises:
            AccountNotFound, InvalidAmount, InsufficientFunds
        """
        return self.directory.lookup(account_id).withdraw(amount)

    def transfer(self, source_id: str, destination_id: str,
                 amount: int) -> Tuple[LedgerEntry, LedgerEntry]:
        """
        Transfer between two accounts atomically

        Raises:
            AccountNotFound, InvalidAmount, InvalidTransfer, InsufficientFunds
        """
        source = self.directory.lookup(source_id)
        destination = self.directory.lookup(destination_id)
        return self.coordinator.transfer(source, destination, amount)

    def balance(self, account_id: str) -> int:
        """Current balance in minor units"""
        return self.directory.lookup(account_id).balance_snapshot()

    def history(self, account_id: str) -> List[LedgerEntry]:
        """Snapshot of the account's entries, oldest first"""
        return self.directory.lookup(account_id).history()

    def balances(self, *account_ids: str) -> Dict[str, int]:
        """
        Balances of several accounts taken at one instant

        All involved account locks are held while reading, so no transfer
        between them can be seen half-applied.
        """
        accounts = [self.directory.lookup(account_id) for account_id in account_ids]
        with self.coordinator.locked(*accounts):
            return {account.account_id: account.balance_locked for account in accounts}

    def has_account(self, account_id: str) -> bool:
        return account_id in self.directory

    def account_ids(self) -> List[str]:
        """All account numbers in creation order"""
        return self.directory.account_ids()


class BankingSystem:
    """Credential store and ledger wired together from configuration"""

    def __init__(self, config: Optional[BankingConfig] = None, configure_logging: bool = False):
        self.config = config or get_config()
        if configure_logging:
            setup_logging(
                level=self.config.log_level,
                log_format=self.config.log_format,
                log_file=self.config.log_file
            )

        self.credentials = CredentialStore()
        self.ledger = LedgerService(AccountDirectory(prefix=self.config.account_number_prefix))
