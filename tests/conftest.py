import os
import tempfile
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

os.environ["ENVIRONMENT"] = "development"
os.environ["CART_BACKEND"] = "memory"
os.environ.setdefault("DB_FILE", os.path.join(tempfile.gettempdir(), "lydia-tests", "db.json"))

from lydia.api.deps import get_cart_storage
from lydia.db.init_db import seed_products
from lydia.db.json_db import JsonDatabase, get_db
from lydia.db.kv_store import InMemoryCartStorage, InMemoryKeyValueStore
from lydia.main import app
from lydia.services.cart_engine import CartEngine
from lydia.services.line_item_store import LineItemStore


class FakeClock:
    """Deterministic millisecond clock: each call advances by one tick."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.value = start

    def __call__(self) -> int:
        self.value += 1
        return self.value


@pytest.fixture()
def json_db(tmp_path) -> JsonDatabase:
    db = JsonDatabase(tmp_path / "data" / "db.json")
    db.ensure()
    return db


@pytest.fixture()
def seeded_db(json_db: JsonDatabase) -> JsonDatabase:
    seed_products(json_db)
    return json_db


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def store(kv: InMemoryKeyValueStore, clock: FakeClock) -> LineItemStore:
    return LineItemStore(kv, key="lydia_cart", clock=clock)


@pytest.fixture()
def engine(store: LineItemStore) -> CartEngine:
    return CartEngine(store)


@pytest.fixture()
def cart_storage() -> InMemoryCartStorage:
    return InMemoryCartStorage()


@pytest.fixture()
def client(json_db: JsonDatabase, cart_storage: InMemoryCartStorage) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db] = lambda: json_db
    app.dependency_overrides[get_cart_storage] = lambda: cart_storage
    app.state.limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
