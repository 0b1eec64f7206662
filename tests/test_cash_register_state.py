import datetime
from decimal import Decimal

import pytest
import reflex as rx

from mis_canchas.enums import CashRegisterStatus
from mis_canchas.states import cash_register_state as module
from mis_canchas.states.cash_register_state import CashRegisterState, cash_register_snapshot

STAFF_USER = {
    "id": 5,
    "email": "caja@complejo.test",
    "name": "Caja",
    "role": "staff",
    "establishment_id": 1,
}


class PollingCashRegisterState(CashRegisterState):
    """Permite `async with self` fuera del runtime de Reflex."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def toasts(monkeypatch):
    messages = []

    def _toast(message, **kwargs):
        messages.append(message)
        return ("toast", message)

    monkeypatch.setattr(rx, "toast", _toast)
    return messages


@pytest.fixture
def state(monkeypatch, session_mock, session_factory):
    monkeypatch.setattr(module, "get_async_session", session_factory(session_mock))
    state = CashRegisterState()
    state.current_user = dict(STAFF_USER)
    return state


async def _drain(generator):
    return [item async for item in generator]


@pytest.mark.asyncio
async def test_open_cash_register_sets_state_and_starts_polling(
    state, session_mock, exec_result, toasts
):
    session_mock.exec.return_value = exec_result(first_item=None)
    state.cash_open_amount_input = "150"

    events = await _drain(state.open_cash_register())

    assert state.cash_register["status"] == CashRegisterStatus.open.value
    assert state.cash_register["initial_cash"] == 150.0
    assert state.cash_register_submitting is False
    assert state.cash_open_amount_input == "0"
    assert toasts == ["Caja abierta correctamente."]
    assert events[-1] is CashRegisterState.start_cash_register_polling
    session_mock.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_open_cash_register_twice_shows_error(
    state, session_mock, exec_result, open_register, toasts
):
    session_mock.exec.return_value = exec_result(first_item=open_register())

    await _drain(state.open_cash_register())

    assert state.cash_register is None
    assert state.cash_register_submitting is False
    assert "Ya hay una caja abierta" in toasts[0]
    session_mock.commit.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_amount", ["-20", "nan", "inf", "abc"])
async def test_open_cash_register_rejects_invalid_amount(state, session_mock, toasts, raw_amount):
    state.cash_open_amount_input = raw_amount

    await _drain(state.open_cash_register())

    assert toasts == ["Ingrese un monto inicial valido."]
    session_mock.exec.assert_not_awaited()


@pytest.mark.asyncio
async def test_open_cash_register_requires_staff(state, session_mock, toasts):
    state.current_user = {**STAFF_USER, "role": "player"}

    await _drain(state.open_cash_register())

    assert toasts == ["No tiene permisos para esta operacion."]
    session_mock.exec.assert_not_awaited()


@pytest.mark.asyncio
async def test_open_ignored_while_submitting(state, session_mock, toasts):
    state.cash_register_submitting = True

    events = await _drain(state.open_cash_register())

    assert events == []
    session_mock.exec.assert_not_awaited()


@pytest.mark.asyncio
async def test_close_cash_register_moves_to_history(
    state, session_mock, exec_result, open_register, toasts
):
    register = open_register()
    state.cash_register = cash_register_snapshot(register)
    state.cash_close_amount_input = "250"
    state.cash_close_modal_open = True
    session_mock.exec.side_effect = [
        exec_result(first_item=register),
        exec_result(all_items=[]),
    ]

    await _drain(state.close_cash_register())

    assert state.cash_register is None
    assert state.last_closed_register["status"] == CashRegisterStatus.closed.value
    assert state.last_closed_register["cash_difference"] == 150.0
    assert state.last_closed_register["reconciliation"] == "surplus"
    assert state.cash_register_history[0]["id"] == register.id
    assert state.cash_close_modal_open is False
    assert toasts == ["Caja cerrada correctamente."]


@pytest.mark.asyncio
async def test_close_already_closed_elsewhere_clears_register(
    state, session_mock, exec_result, open_register, toasts
):
    state.cash_register = cash_register_snapshot(open_register())
    state.cash_close_amount_input = "100"
    session_mock.exec.return_value = exec_result(
        first_item=open_register(status=CashRegisterStatus.closed, active_establishment_id=None)
    )

    await _drain(state.close_cash_register())

    assert state.cash_register is None
    assert toasts == ["La caja ya esta cerrada."]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_amount", ["", "NaN", "-inf"])
async def test_close_requires_counted_cash(
    state, open_register, session_mock, toasts, raw_amount
):
    state.cash_register = cash_register_snapshot(open_register())
    state.cash_close_amount_input = raw_amount

    await _drain(state.close_cash_register())

    assert toasts == ["Ingrese el efectivo contado."]
    session_mock.exec.assert_not_awaited()


@pytest.mark.asyncio
async def test_polling_stops_after_register_closes(
    monkeypatch, session_mock, session_factory, exec_result, open_register
):
    monkeypatch.setattr(module, "get_async_session", session_factory(session_mock))
    monkeypatch.setattr(module, "CASH_REGISTER_POLL_SECONDS", 0.01)
    register = open_register()
    session_mock.exec.side_effect = [
        exec_result(first_item=register),
        exec_result(first_item=None),
    ]
    state = PollingCashRegisterState()
    state.current_user = dict(STAFF_USER)
    state.cash_register = cash_register_snapshot(register)

    await state.start_cash_register_polling()

    assert state.cash_register is None
    assert state.cash_register_polling is False
    assert session_mock.exec.await_count == 2


@pytest.mark.asyncio
async def test_polling_not_started_without_open_register(session_mock):
    state = PollingCashRegisterState()
    state.current_user = dict(STAFF_USER)

    await state.start_cash_register_polling()

    assert state.cash_register_polling is False
    session_mock.exec.assert_not_awaited()


@pytest.mark.asyncio
async def test_export_history(state, session_mock, exec_result, open_register, monkeypatch):
    monkeypatch.setattr(rx, "download", lambda **kwargs: kwargs)
    closed = open_register(
        status=CashRegisterStatus.closed,
        closed_at=datetime.datetime(2026, 3, 10, 23, 0),
        actual_cash=Decimal("100.00"),
        cash_difference=Decimal("0.00"),
    )
    session_mock.exec.return_value = exec_result(all_items=[closed])

    result = await state.export_cash_register_history()

    assert result["filename"] == "historial_cajas.xlsx"
    assert isinstance(result["data"], bytes)
