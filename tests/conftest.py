import datetime
from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest

from mis_canchas.enums import BookingStatus, CashRegisterStatus, PaymentStatus
from mis_canchas.models import (
    Booking,
    CashRegister,
    CashRegisterMovement,
    Court,
    Establishment,
    Notification,
)


class ExecResult:
    def __init__(self, all_items=None, first_item=None) -> None:
        self._all_items = all_items if all_items is not None else []
        self._first_item = first_item

    def all(self):
        return self._all_items

    def first(self):
        return self._first_item


class FakeAsyncSession:
    def __init__(self) -> None:
        self.exec = AsyncMock()
        self.get = AsyncMock()
        self.added = []
        self.add = Mock(side_effect=self._add)
        self.flush = AsyncMock(side_effect=self._flush)
        self.refresh = AsyncMock()
        self.commit = AsyncMock()
        self.rollback = AsyncMock()
        self._next_id = 100

    def _add(self, obj) -> None:
        if not any(item is obj for item in self.added):
            self.added.append(obj)

    async def _flush(self) -> None:
        for obj in self.added:
            if isinstance(
                obj, (Booking, CashRegister, CashRegisterMovement, Notification)
            ) and getattr(obj, "id", None) is None:
                self._next_id += 1
                obj.id = self._next_id

    def added_of(self, model):
        return [obj for obj in self.added if isinstance(obj, model)]


def _session_factory(session):
    @asynccontextmanager
    async def _factory():
        yield session

    return _factory


@pytest.fixture
def session_mock():
    return FakeAsyncSession()


@pytest.fixture
def session_factory():
    """Reemplazo de get_async_session para los estados."""
    return _session_factory


@pytest.fixture
def exec_result():
    def _factory(all_items=None, first_item=None):
        return ExecResult(all_items=all_items, first_item=first_item)

    return _factory


@pytest.fixture
def establishment_sample():
    return Establishment(
        id=1,
        name="Complejo Norte",
        slug="complejo-norte",
        city="Cordoba",
        address="Av. Siempre Viva 123",
    )


@pytest.fixture
def court_sample():
    return Court(
        id=7,
        establishment_id=1,
        name="Cancha 1",
        sport="futbol5",
        price_per_hour=Decimal("9000.00"),
        is_active=True,
    )


@pytest.fixture
def open_register():
    def _factory(**overrides):
        data = {
            "id": 1,
            "establishment_id": 1,
            "user_id": 5,
            "opened_at": datetime.datetime(2026, 3, 10, 9, 0),
            "status": CashRegisterStatus.open,
            "active_establishment_id": 1,
            "initial_cash": Decimal("100.00"),
            "expected_cash": Decimal("100.00"),
        }
        data.update(overrides)
        return CashRegister(**data)

    return _factory


@pytest.fixture
def booking_factory():
    def _factory(**overrides):
        data = {
            "id": 10,
            "user_id": 3,
            "establishment_id": 1,
            "court_id": 7,
            "sport": "futbol5",
            "date": datetime.date(2026, 3, 20),
            "start_time": datetime.time(20, 0),
            "end_time": datetime.time(21, 0),
            "duration": 60,
            "price": Decimal("9000.00"),
            "status": BookingStatus.pending,
            "payment_status": PaymentStatus.pending,
            "check_in_code": "A1B2C3",
        }
        data.update(overrides)
        return Booking(**data)

    return _factory
