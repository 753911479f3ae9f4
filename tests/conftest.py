import os

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import create_app
from storefront.api.deps import get_cart_store, get_notifier
from storefront.data.database import get_db, init_db
from storefront.data.models.product import ProductModel
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_store import CartStore
from storefront.services.identity_service import Identity, IdentityGate

ALICE = Identity(id="0b7c3f3e-1111-4c1e-9a55-6f1f5a0e0001", email="alice@example.com")
BOB = Identity(id="0b7c3f3e-2222-4c1e-9a55-6f1f5a0e0002", email="bob@example.com")
ADMIN = Identity(id="0b7c3f3e-9999-4c1e-9a55-6f1f5a0e0009", email="admin@example.com")

TOKENS = {"alice-token": ALICE, "bob-token": BOB, "admin-token": ADMIN}


class FakeRedis:
    """Just the get/set/delete calls CartStore makes."""

    def __init__(self):
        self.data = {}
        self.expiry = {}

    def get(self, name):
        return self.data.get(name)

    def set(self, name, value, ex=None):
        self.data[name] = value
        self.expiry[name] = ex
        return True

    def eval(self, script, numkeys, *keys_and_args):
        # the only script in use: delete KEYS[1] if it still holds ARGV[1]
        key, expected = keys_and_args[0], keys_and_args[1]
        if self.data.get(key) == expected:
            return self.delete(key)
        return 0

    def delete(self, *names):
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.expiry.pop(name, None)
        return removed


class StubIdentityClient:
    def __init__(self, tokens=None):
        self.tokens = dict(TOKENS if tokens is None else tokens)
        self.fetches = []
        self.logouts = []

    def fetch_user(self, token):
        self.fetches.append(token)
        return self.tokens.get(token)

    def logout(self, token):
        self.logouts.append(token)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, user_id, order_id):
        self.sent.append((user_id, order_id))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_conn, _):
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cart_store(fake_redis):
    return CartStore(client=fake_redis, ttl=600)


@pytest.fixture
def identity_client():
    return StubIdentityClient()


@pytest.fixture
def gate(identity_client):
    return IdentityGate(client=identity_client)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_product(db):
    repo = ProductRepo(db)

    def _make(name="Laptop Pro 14", price="999.99", stock=5, category="laptops", **extra):
        return repo.create_product(
            ProductModel(
                name=name,
                price=Decimal(price),
                stock_quantity=stock,
                category=category,
                **extra,
            )
        )

    return _make


@pytest.fixture
def client(db, cart_store, gate, notifier):
    app = create_app(identity_gate=gate)

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_cart_store] = lambda: cart_store
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as c:
        yield c
