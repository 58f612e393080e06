"""
Credential Store Module

Username -> secret registry used by the interactive shell to log users in.
It sits outside the ledger: the ledger never checks who is calling it.
Secrets are kept as given; hashing them belongs to a dedicated security
component that this package does not provide.
"""

from typing import Dict
import hmac
import threading

from .errors import UserAlreadyExists
from .logging_config import get_logger, log_action


class CredentialStore:
    """Registers users and checks their secrets"""

    def __init__(self):
        self._secrets: Dict[str, str] = {}
        self._lock = threading.Lock()
        self.logger = get_logger("online_banking.credentials")

    def register(self, username: str, secret: str) -> None:
        """
        Register a new user

        Raises:
            ValueError: If username is empty
            UserAlreadyExists: If username is already registered
        """
        if not username:
            raise ValueError("Username is required")

        with self._lock:
            if username in self._secrets:
                raise UserAlreadyExists(username)
            self._secrets[username] = secret

        log_action(self.logger, "info", "User registered",
                   action="register", username=username)

    def authenticate(self, username: str, secret: str) -> bool:
        """Check a username/secret pair; unknown users simply fail"""
        with self._lock:
            stored = self._secrets.get(username)

        valid = stored is not None and hmac.compare_digest(
            stored.encode("utf-8"), secret.encode("utf-8")
        )
        log_action(self.logger, "info" if valid else "warning",
                   "Login succeeded" if valid else "Login failed",
                   action="authenticate", username=username)
        return valid

    def __contains__(self, username) -> bool:
        with self._lock:
            return username in self._secrets

    def __len__(self) -> int:
        with self._lock:
            return len(self._secrets)
