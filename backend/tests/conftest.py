"""
Pytest fixtures for Runway backend tests.

Provides an app bound to a throwaway SQLite file, tenant fixtures (two
organizations, each with one member), an in-memory ledger store, and
helpers for bearer-token headers.
"""

from types import SimpleNamespace

import pytest

from runway import create_app
from runway.extensions import db
from runway.models import Membership, Organization, User
from runway.services.auth_service import hash_password
from runway.services.ledger_store import LedgerStore, StoreError
from runway.services.session_service import issue_token
from runway.time_utils import utcnow


PASSWORD = "Password123!"


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'runway-test.sqlite3'}",
        'SEED_SAMPLE_TRANSACTIONS': False,
        'BCRYPT_ROUNDS': 4,
        'JWT_SECRET': 'test-secret',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    yield db.session
    db.session.rollback()


def _member(db_session, email: str, org: Organization) -> User:
    user = User(email=email, password_hash=hash_password(PASSWORD))
    db_session.add(user)
    db_session.flush()
    db_session.add(Membership(user_id=user.id, org_id=org.id, role="owner"))
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def org_a(db_session):
    """Create Organization A (first tenant)."""
    org = Organization(name="Acme Corp", default_currency="CAD")
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture(scope='function')
def org_b(db_session):
    """Create Organization B (second tenant)."""
    org = Organization(name="Beta Inc", default_currency="USD")
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture(scope='function')
def user_a(db_session, org_a):
    """Create User A, a member of Organization A only."""
    return _member(db_session, "user_a@acme.com", org_a)


@pytest.fixture(scope='function')
def user_b(db_session, org_b):
    """Create User B, a member of Organization B only."""
    return _member(db_session, "user_b@beta.com", org_b)


@pytest.fixture(scope='function')
def token_a(user_a, org_a):
    return issue_token(user_a.id, org_a.id)


@pytest.fixture(scope='function')
def headers_a(token_a):
    return auth_headers(token_a)


@pytest.fixture(scope='function')
def headers_b(user_b, org_b):
    return auth_headers(issue_token(user_b.id, org_b.id))


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def txn(amount, txn_type, occurred_at, description="Entry", currency="CAD", **extra):
    """A plain transaction record, shaped like the ORM row."""
    return SimpleNamespace(
        description=description,
        amount=amount,
        type=txn_type,
        currency=currency,
        occurred_at=occurred_at,
        **extra,
    )


class InMemoryLedgerStore(LedgerStore):
    """
    Dict-backed LedgerStore for service tests.

    Set fail_on to an operation name to make that operation raise StoreError.
    """

    def __init__(self):
        self.organizations = {}
        self.memberships = set()
        self.transactions = []
        self.summaries = {}
        self.summary_writes = 0
        self.fail_on = None

    def add_organization(self, org_id, name="Acme Corp", default_currency="CAD"):
        org = SimpleNamespace(id=org_id, name=name, default_currency=default_currency)
        self.organizations[org_id] = org
        return org

    def add_membership(self, user_id, org_id):
        self.memberships.add((user_id, org_id))

    def _check(self, operation):
        if self.fail_on == operation:
            raise StoreError(f"Failed to {operation}")

    def get_organization(self, org_id):
        self._check("get_organization")
        return self.organizations.get(org_id)

    def find_membership(self, user_id, org_id):
        self._check("find_membership")
        if (user_id, org_id) not in self.memberships:
            return None
        return SimpleNamespace(user_id=user_id, org_id=org_id, role="owner")

    def find_transactions(self, org_id, *, start=None, end=None, newest_first=False, limit=None):
        self._check("find_transactions")
        rows = [
            t for t in self.transactions
            if t.org_id == org_id
            and (start is None or t.occurred_at >= start)
            and (end is None or t.occurred_at <= end)
        ]
        rows.sort(key=lambda t: (t.occurred_at, t.id), reverse=newest_first)
        return rows[:limit] if limit is not None else rows

    def create_transaction(self, record):
        self._check("create_transaction")
        row = SimpleNamespace(id=len(self.transactions) + 1, created_at=utcnow(), **record)
        self.transactions.append(row)
        return row

    def upsert_summary(self, org_id, values):
        self._check("upsert_summary")
        self.summary_writes += 1
        row = SimpleNamespace(org_id=org_id, updated_at=utcnow(), **values)
        self.summaries[org_id] = row
        return row


@pytest.fixture(scope='function')
def memory_store(app):
    """Empty in-memory store with Organization 1 registered."""
    store = InMemoryLedgerStore()
    store.add_organization(1)
    return store
