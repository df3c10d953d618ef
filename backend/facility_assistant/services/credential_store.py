"""Account storage on top of the flat key/value store."""

import logging
from dataclasses import replace
from functools import lru_cache

from facility_assistant.config import get_settings
from facility_assistant.db.flat_store import FlatStore, get_flat_store
from facility_assistant.db.models import Account, Role

logger = logging.getLogger(__name__)

DEFAULT_ADMIN = Account(username="admin", password="password123", role=Role.ADMIN)


class DuplicateUsernameError(ValueError):
    """Raised when an account with the same case-insensitive username exists."""


class CredentialStore:
    """
    Mapping of username -> Account, persisted as one flat JSON list.

    Lookups are case-insensitive. The stored username keeps the casing used at
    registration. When the store has never been written, a default admin
    account is seeded so a fresh install can be administered.
    """

    def __init__(self, store: FlatStore, *, key: str = "vmcc-users"):
        self._store = store
        self._key = key
        self._accounts: list[Account] = self._load()

    def _load(self) -> list[Account]:
        if self._key not in self._store:
            accounts = [replace(DEFAULT_ADMIN)]
            self._store.set(self._key, [a.to_dict() for a in accounts])
            return accounts

        raw = self._store.get(self._key)
        try:
            return [Account.from_dict(item) for item in raw]
        except (TypeError, KeyError, ValueError):
            logger.exception("Malformed account list under %r, falling back to defaults", self._key)
            return [replace(DEFAULT_ADMIN)]

    def persist(self) -> None:
        """Write the full account list back to the flat store."""
        self._store.set(self._key, [a.to_dict() for a in self._accounts])

    def find(self, username: str) -> Account | None:
        wanted = username.lower()
        for account in self._accounts:
            if account.username.lower() == wanted:
                return account
        return None

    def add(self, account: Account) -> Account:
        if self.find(account.username) is not None:
            raise DuplicateUsernameError(account.username)
        self._accounts.append(account)
        self.persist()
        return account

    def set_password(self, account: Account, new_password: str) -> None:
        account.password = new_password
        self.persist()

    @staticmethod
    def verify_password(account: Account, password: str) -> bool:
        # Plaintext equality; a salted-hash comparison belongs here.
        return account.password == password

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self):
        return iter(list(self._accounts))


@lru_cache
def get_credential_store() -> CredentialStore:
    """Get the process-wide credential store."""
    return CredentialStore(get_flat_store(), key=get_settings().users_key)
