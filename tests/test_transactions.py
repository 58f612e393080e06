"""
Test suite for transactions module

Tests atomic transfers: symmetric entry pairs, rejection without side
effects, and deadlock-free concurrent transfers in both directions.
"""

import pytest
import threading

from online_banking.accounts import Account
from online_banking.errors import InsufficientFunds, InvalidAmount, InvalidTransfer
from online_banking.ledger import EntryKind
from online_banking.transactions import TransferCoordinator


class TestTransferCoordinator:
    """Test transfer processing"""

    def setup_method(self):
        """Set up test fixtures"""
        self.coordinator = TransferCoordinator()
        self.source = Account("ACC1")
        self.destination = Account("ACC2")
        self.source.deposit(500)

    def test_transfer(self):
        """Test that a transfer moves money and records one entry per side"""
        out_entry, in_entry = self.coordinator.transfer(self.source, self.destination, 200)

        assert self.source.balance_snapshot() == 300
        assert self.destination.balance_snapshot() == 200

        assert out_entry.kind == EntryKind.TRANSFER_OUT
        assert out_entry.account_id == "ACC1"
        assert out_entry.counterparty_id == "ACC2"
        assert out_entry.amount == 200

        assert in_entry.kind == EntryKind.TRANSFER_IN
        assert in_entry.account_id == "ACC2"
        assert in_entry.counterparty_id == "ACC1"
        assert in_entry.amount == 200

        assert self.source.history()[-1] == out_entry
        assert self.destination.history() == [in_entry]
        assert len(self.source.history()) == 2

    def test_transfer_entire_balance(self):
        """Test that a transfer may empty the source"""
        self.coordinator.transfer(self.source, self.destination, 500)

        assert self.source.balance_snapshot() == 0
        assert self.destination.balance_snapshot() == 500

    def test_transfer_insufficient_funds(self):
        """Test that an overdrawing transfer changes nothing on either side"""
        with pytest.raises(InsufficientFunds):
            self.coordinator.transfer(self.source, self.destination, 501)

        assert self.source.balance_snapshot() == 500
        assert self.destination.balance_snapshot() == 0
        assert len(self.source.history()) == 1
        assert self.destination.history() == []

    def test_self_transfer_rejected(self):
        """Test that transferring to the same account is rejected"""
        with pytest.raises(InvalidTransfer):
            self.coordinator.transfer(self.source, self.source, 100)

        assert self.source.balance_snapshot() == 500
        assert len(self.source.history()) == 1

    def test_self_transfer_by_number_rejected(self):
        """Test that two objects with the same number count as one account"""
        with pytest.raises(InvalidTransfer):
            self.coordinator.transfer(self.source, Account("ACC1"), 100)

    @pytest.mark.parametrize("amount", [0, -5, 1.5])
    def test_invalid_amount(self, amount):
        """Test that invalid amounts are rejected before anything is touched"""
        with pytest.raises(InvalidAmount):
            self.coordinator.transfer(self.source, self.destination, amount)

        assert self.source.balance_snapshot() == 500
        assert self.destination.balance_snapshot() == 0

    def test_locked_holds_all_locks(self):
        """Test that the locking helper holds every lock until exit"""
        with self.coordinator.locked(self.destination, self.source, self.source):
            assert self.source.lock.locked()
            assert self.destination.lock.locked()

        assert not self.source.lock.locked()
        assert not self.destination.lock.locked()

    def test_invariant_after_mixed_operations(self):
        """Test that balances always equal the signed sum of entries"""
        third = Account("ACC3")
        self.coordinator.transfer(self.source, self.destination, 100)
        self.destination.withdraw(30)
        self.coordinator.transfer(self.destination, third, 70)
        third.deposit(5)
        self.coordinator.transfer(third, self.source, 75)

        for account in (self.source, self.destination, third):
            assert account.verify_balance()
        assert self.source.balance_snapshot() == 475
        assert self.destination.balance_snapshot() == 0
        assert third.balance_snapshot() == 0


class TestConcurrentTransfers:
    """Test transfers under concurrent access"""

    def setup_method(self):
        """Set up test fixtures"""
        self.coordinator = TransferCoordinator()
        self.account_a = Account("ACC1")
        self.account_b = Account("ACC2")
        self.account_a.deposit(10000)
        self.account_b.deposit(10000)

    def test_opposite_transfers_do_not_deadlock(self):
        """Test 1000 transfers each way between the same pair of accounts"""
        errors = []
        observed_totals = []
        done = threading.Event()

        def move(source, destination):
            try:
                for _ in range(1000):
                    self.coordinator.transfer(source, destination, 10)
            except Exception as e:
                errors.append(e)

        def observe():
            while True:
                with self.coordinator.locked(self.account_a, self.account_b):
                    observed_totals.append(
                        self.account_a.balance_locked + self.account_b.balance_locked
                    )
                if done.is_set():
                    break

        observer = threading.Thread(target=observe)
        workers = [
            threading.Thread(target=move, args=(self.account_a, self.account_b)),
            threading.Thread(target=move, args=(self.account_b, self.account_a)),
        ]
        observer.start()
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join(timeout=60)
            assert not worker.is_alive(), "transfer worker deadlocked"
        done.set()
        observer.join(timeout=10)

        assert errors == []
        assert self.account_a.balance_snapshot() == 10000
        assert self.account_b.balance_snapshot() == 10000
        assert observed_totals
        assert all(total == 20000 for total in observed_totals)
        assert len(self.account_a.history()) == 1 + 2000
        assert len(self.account_b.history()) == 1 + 2000
        assert self.account_a.verify_balance()
        assert self.account_b.verify_balance()

    def test_concurrent_overdraw_never_goes_negative(self):
        """Test that racing transfers cannot overdraw the source"""
        target = Account("ACC3")
        failures = []
        lock = threading.Lock()

        def drain():
            for _ in range(50):
                try:
                    self.coordinator.transfer(self.account_a, target, 100)
                except InsufficientFunds:
                    with lock:
                        failures.append(1)

        threads = [threading.Thread(target=drain) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # 200 attempts of 100 against a balance of 10000: exactly 100 succeed
        assert self.account_a.balance_snapshot() == 0
        assert target.balance_snapshot() == 10000
        assert len(failures) == 100
        assert self.account_a.verify_balance()
        assert target.verify_balance()
