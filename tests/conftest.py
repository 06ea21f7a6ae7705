import copy
import itertools

import pytest

from cardwallet.models.card import Card, CardType
from cardwallet.models.user import User
from cardwallet.services.exceptions import RemoteServiceError
from cardwallet.services.gateway import PersistenceGateway
from cardwallet.services.identity_service import IdentityAccount, IdentitySession


class InMemoryDocumentStore:
    """DocumentStore with the same union/remove semantics as the Mongo adapter."""

    def __init__(self):
        self.records = {}
        self.calls = 0
        self.error = None  # RemoteServiceError raised by every call when set

    def _call(self):
        self.calls += 1
        if self.error is not None:
            raise self.error

    def _existing(self, key):
        if key not in self.records:
            raise RemoteServiceError(f"No document to update: users/{key}")
        return self.records[key]

    async def get(self, key):
        self._call()
        record = self.records.get(key)
        return copy.deepcopy(record) if record is not None else None

    async def set(self, key, record):
        self._call()
        self.records[key] = copy.deepcopy(record)

    async def delete(self, key):
        self._call()
        self.records.pop(key, None)

    async def array_union(self, key, field, items):
        self._call()
        values = self._existing(key).setdefault(field, [])
        for item in items:
            if item not in values:
                values.append(copy.deepcopy(item))

    async def array_remove(self, key, field, items):
        self._call()
        record = self._existing(key)
        record[field] = [value for value in record.get(field, []) if value not in items]


class FakeIdentityService:
    def __init__(self):
        self.accounts = {}  # email -> (account id, password)
        self.verified = []
        self.calls = 0
        self.verification_error = None
        self._ids = itertools.count(1)

    async def create_account(self, email, password):
        self.calls += 1
        if "@" not in email:
            raise RemoteServiceError("Unable to validate email address: invalid format")
        if email in self.accounts:
            raise RemoteServiceError("User already registered")
        account_id = f"uid-{next(self._ids)}"
        self.accounts[email] = (account_id, password)
        return IdentityAccount(id=account_id, email=email)

    async def send_verification(self, account):
        self.calls += 1
        if self.verification_error is not None:
            raise self.verification_error
        self.verified.append(account.id)

    async def sign_in(self, email, password):
        self.calls += 1
        account = self.accounts.get(email)
        if account is None or account[1] != password:
            raise RemoteServiceError("Invalid login credentials")
        return IdentitySession(account_id=account[0], email=email, access_token="access-token", refresh_token="refresh")


class RecordingNotifier:
    def __init__(self):
        self.alerts = []

    async def notify(self, title, message):
        self.alerts.append((title, message))


@pytest.fixture()
def store():
    return InMemoryDocumentStore()


@pytest.fixture()
def identity():
    return FakeIdentityService()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def gateway(identity, store, notifier):
    return PersistenceGateway(identity=identity, store=store, notifier=notifier)


@pytest.fixture()
def coffee_card():
    return Card(type=CardType.QR, is_clicked=False, name="Coffee", code="12345")


@pytest.fixture()
def user():
    return User(first_name="A", last_name="B", email="a@b.com", sex=1, cards=[])
