from __future__ import annotations

import pytest

from app import create_app
from models import City, State, Vehicle, VehicleType
from store import MemoryVehicleStore, StoreError


class FailingStore(MemoryVehicleStore):
    """Banco em memória que falha nas operações marcadas."""

    def __init__(self):
        super().__init__()
        self.fail_insert = False
        self.fail_fetch = False
        self.inserts = 0
        self.fetches = 0

    def insert(self, collection, document):
        if self.fail_insert:
            raise StoreError("insert indisponível")
        self.inserts += 1
        return super().insert(collection, document)

    def fetch_all(self, collection, order_by, direction="desc", limit=None):
        if self.fail_fetch:
            raise StoreError("fetch indisponível")
        self.fetches += 1
        return super().fetch_all(collection, order_by, direction, limit)

    def fetch_filtered(self, collection, field, value, order_by, direction="desc"):
        if self.fail_fetch:
            raise StoreError("fetch indisponível")
        self.fetches += 1
        return super().fetch_filtered(collection, field, value, order_by, direction)


def make_draft(**overrides) -> dict:
    draft = {
        "plate": "ABC1D23",
        "state": "PR",
        "inspection_date": "2024-03-15",
        "brand": "VW",
        "model": "GOL",
        "vehicle_type": "Automóvel",
        "has_key": False,
        "chassis_observation": "",
        "release_date": "2024-04-01",
        "city": "Medianeira",
    }
    draft.update(overrides)
    return draft


@pytest.fixture
def store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def app(store):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "STORE_BACKEND": "memory",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
        },
        store=store,
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sql_app():
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "STORE_BACKEND": "sql",
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
        }
    )
    with app.app_context():
        yield app


def make_vehicle(number: int, **overrides) -> Vehicle:
    fields = dict(
        registration_number=number,
        plate=f"PLT{number % 10000:04d}",
        state=State.PR,
        inspection_date="2024-03-15",
        brand="VW",
        model="GOL",
        vehicle_type=VehicleType.AUTOMOVEL,
        has_key=False,
        release_date="2024-04-01",
        city=City.MEDIANEIRA,
        created_at="2024-03-15T10:00:00+00:00",
        id=str(number),
    )
    fields.update(overrides)
    return Vehicle(**fields)
