"""
Banking Error Taxonomy

Every rejection the ledger can produce is one of these exceptions. None of
them is fatal: the ledger stays usable after any of them is raised, and the
rejected operation leaves balances and histories untouched.
"""


class BankingError(Exception):
    """Base class for all ledger and credential errors"""


class InvalidAmount(BankingError):
    """
    Raised when an amount is not a positive integer number of minor units
    (zero, negative, fractional, non-finite or not a number at all).
    """

    def __init__(self, amount, message=None):
        self.amount = amount
        super().__init__(message or f"Invalid amount: {amount!r}")


class InsufficientFunds(BankingError):
    """
    Raised when a withdrawal or transfer asks for more than the account holds.
    Recoverable: retry with a smaller amount or after a deposit.
    """

    def __init__(self, account_id: str, balance: int, requested: int):
        self.account_id = account_id
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient funds in {account_id}: balance={balance}, requested={requested}"
        )


class AccountNotFound(BankingError):
    """Raised when an account number is not known to the directory"""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class InvalidTransfer(BankingError):
    """Raised for malformed transfers, such as moving money to the same account"""


class UserAlreadyExists(BankingError):
    """Raised when registering a username that is already taken"""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username {username} already exists")
