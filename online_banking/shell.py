"""
Interactive Banking Shell

Line-based menus for registering, logging in and operating on accounts.
Amounts are typed in major units ("12.50") and handed to the ledger as
integer minor units. Every ledger error is reported and the menu continues.
"""

import sys
from typing import Optional, TextIO

from .currency import format_minor_units, to_minor_units
from .errors import AccountNotFound, InsufficientFunds, InvalidAmount, InvalidTransfer, UserAlreadyExists
from .service import BankingSystem


MAIN_MENU = "\n1. Register\n2. Login\n3. Exit"
ACCOUNT_MENU = ("\n1. Create Account\n2. Deposit\n3. Withdraw\n4. Transfer"
                "\n5. View Balance\n6. View Transaction History\n7. Logout")


class BankingShell:
    """Menu-driven front end over a BankingSystem"""

    def __init__(self, system: BankingSystem, stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None):
        self.system = system
        self.ledger = system.ledger
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.precision = system.config.currency_precision
        self.symbol = system.config.currency_symbol

    def run(self) -> None:
        """Run the main menu until the user exits or input ends"""
        self._say("Welcome to the Online Banking System!")
        try:
            while True:
                self._say(MAIN_MENU)
                choice = self._read_choice()
                if choice == 1:
                    self._register()
                elif choice == 2:
                    username = self._login()
                    if username:
                        self._account_session(username)
                elif choice == 3:
                    break
                else:
                    self._say("Invalid option!")
        except EOFError:
            pass
        self._say("Exiting the system.")

    # Main menu actions

    def _register(self) -> None:
        username = self._ask("Enter username: ")
        password = self._ask("Enter password: ")
        try:
            self.system.credentials.register(username, password)
        except UserAlreadyExists:
            self._say("Username already exists!")
        except ValueError:
            self._say("Username is required!")
        else:
            self._say("User registered successfully!")

    def _login(self) -> Optional[str]:
        username = self._ask("Enter username: ")
        password = self._ask("Enter password: ")
        if self.system.credentials.authenticate(username, password):
            self._say("Login successful!")
            return username
        self._say("Invalid username or password!")
        return None

    def _account_session(self, username: str) -> None:
        actions = {
            1: lambda: self._create_account(username),
            2: self._deposit,
            3: self._withdraw,
            4: self._transfer,
            5: self._show_balance,
            6: self._show_history,
        }
        while True:
            self._say(ACCOUNT_MENU)
            choice = self._read_choice()
            if choice == 7:
                self._say("Logged out!")
                return
            action = actions.get(choice)
            if action is None:
                self._say("Invalid option!")
            else:
                action()

    # Account menu actions

    def _create_account(self, username: str) -> None:
        account_id = self.ledger.create_account(caller=username)
        self._say(f"Account created: {account_id}")

    def _deposit(self) -> None:
        account_id = self._ask_account("Enter account number: ")
        if account_id is None:
            return
        amount = self._ask_amount("Enter amount to deposit: ")
        if amount is None:
            return
        try:
            self.ledger.deposit(account_id, amount)
        except AccountNotFound:
            self._say("Account not found!")
        else:
            self._say(f"Deposited: {self._format(amount)}")

    def _withdraw(self) -> None:
        account_id = self._ask_account("Enter account number: ")
        if account_id is None:
            return
        amount = self._ask_amount("Enter amount to withdraw: ")
        if amount is None:
            return
        try:
            self.ledger.withdraw(account_id, amount)
        except InsufficientFunds:
            self._say("Insufficient funds!")
        except AccountNotFound:
            self._say("Account not found!")
        else:
            self._say(f"Withdrew: {self._format(amount)}")

    def _transfer(self) -> None:
        source_id = self._ask_account("Enter source account number: ", "Source account not found!")
        if source_id is None:
            return
        destination_id = self._ask_account("Enter destination account number: ",
                                           "Destination account not found!")
        if destination_id is None:
            return
        amount = self._ask_amount("Enter amount to transfer: ")
        if amount is None:
            return
        try:
            self.ledger.transfer(source_id, destination_id, amount)
        except InvalidTransfer:
            self._say("Cannot transfer to the same account!")
        except InsufficientFunds:
            self._say("Transfer failed due to insufficient funds!")
        except AccountNotFound as e:
            self._say(f"Account {e.account_id} not found!")
        else:
            self._say(f"Transferred: {self._format(amount)}")

    def _show_balance(self) -> None:
        account_id = self._ask("Enter account number: ")
        try:
            balance = self.ledger.balance(account_id)
        except AccountNotFound:
            self._say("Account not found!")
        else:
            self._say(f"Balance: {self._format(balance)}")

    def _show_history(self) -> None:
        account_id = self._ask("Enter account number: ")
        try:
            entries = self.ledger.history(account_id)
        except AccountNotFound:
            self._say("Account not found!")
            return

        self._say("Transaction History:")
        if not entries:
            self._say("No transactions yet.")
        for entry in entries:
            self._say(entry.describe(self.precision, self.symbol))

    # Input/output helpers

    def _say(self, text: str) -> None:
        print(text, file=self.stdout)

    def _ask(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError
        return line.strip()

    def _read_choice(self) -> Optional[int]:
        try:
            return int(self._ask("> "))
        except ValueError:
            return None

    def _ask_account(self, prompt: str, missing: str = "Account not found!") -> Optional[str]:
        account_id = self._ask(prompt)
        if not self.ledger.has_account(account_id):
            self._say(missing)
            return None
        return account_id

    def _ask_amount(self, prompt: str) -> Optional[int]:
        try:
            return to_minor_units(self._ask(prompt), self.precision)
        except InvalidAmount:
            self._say("Invalid amount!")
            return None

    def _format(self, amount: int) -> str:
        return format_minor_units(amount, self.precision, self.symbol)


def main() -> None:
    """Console entry point"""
    system = BankingSystem(configure_logging=True)
    try:
        BankingShell(system).run()
    except KeyboardInterrupt:
        print("\nExiting the system.")
