import datetime

import pytest
import reflex as rx

from mis_canchas.enums import BookingStatus
from mis_canchas.states import booking_state as module
from mis_canchas.states.booking_state import BookingState

PLAYER = {
    "id": 3,
    "email": "jugador@test.com",
    "name": "Jugador",
    "role": "player",
    "establishment_id": None,
}


def _row(booking_id=10, status="confirmed", **overrides):
    row = {
        "id": booking_id,
        "facility_name": "Complejo Norte",
        "court_name": "Cancha 1",
        "court_id": 7,
        "establishment_id": 1,
        "sport": "futbol5",
        "date": "2099-01-10",
        "start_time": "20:00",
        "end_time": "21:00",
        "duration": 60,
        "price": 9000.0,
        "status": status,
        "payment_status": "pending",
        "check_in_code": "A1B2C3",
        "cancellation_reason": "",
    }
    row.update(overrides)
    return row


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
    state = BookingState()
    state.current_user = dict(PLAYER)
    state.bookings = [_row()]
    return state


class TestOptimisticCancel:
    @pytest.mark.asyncio
    async def test_marks_cancelled_before_server_answers(
        self, state, session_mock, exec_result, booking_factory, toasts
    ):
        booking = booking_factory(
            status=BookingStatus.confirmed, date=datetime.date(2099, 1, 10)
        )
        session_mock.exec.return_value = exec_result(first_item=booking)
        state.booking_cancel_reason = "lesion"

        events = state.cancel_booking(10)
        await events.__anext__()

        assert state.bookings[0]["status"] == "cancelled"
        assert state.cancelling_booking_ids == [10]
        session_mock.exec.assert_not_awaited()

        rest = [item async for item in events]

        assert rest == [("toast", "Reserva cancelada.")]
        assert state.bookings[0]["status"] == "cancelled"
        assert state.bookings[0]["cancellation_reason"] == "lesion"
        assert state.bookings[0]["facility_name"] == "Complejo Norte"
        assert state.cancelling_booking_ids == []
        assert state.booking_cancel_reason == ""
        session_mock.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_restores_booking_when_server_rejects(
        self, state, session_mock, exec_result, booking_factory, toasts
    ):
        state.bookings = [_row(date="2000-01-10")]
        booking = booking_factory(
            status=BookingStatus.confirmed, date=datetime.date(2000, 1, 10)
        )
        session_mock.exec.return_value = exec_result(first_item=booking)

        [item async for item in state.cancel_booking(10)]

        assert state.bookings[0]["status"] == "confirmed"
        assert state.cancelling_booking_ids == []
        assert "anticipacion" in toasts[0]
        session_mock.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_restores_and_reraises_unexpected_errors(self, state, session_mock, toasts):
        session_mock.exec.side_effect = RuntimeError("db caida")

        with pytest.raises(RuntimeError):
            [item async for item in state.cancel_booking(10)]

        assert state.bookings[0]["status"] == "confirmed"
        assert state.cancelling_booking_ids == []

    @pytest.mark.asyncio
    async def test_second_cancel_while_in_flight_is_ignored(self, state, session_mock, toasts):
        state.cancelling_booking_ids = [10]

        events = [item async for item in state.cancel_booking(10)]

        assert events == []
        session_mock.exec.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_booking(self, state, toasts):
        [item async for item in state.cancel_booking(99)]

        assert toasts == ["Reserva no encontrada."]

    @pytest.mark.asyncio
    async def test_requires_login(self, state, session_mock, toasts):
        state.current_user = {"id": None, "role": "player"}

        [item async for item in state.cancel_booking(10)]

        assert toasts == ["Debe iniciar sesion para continuar."]
        assert state.bookings[0]["status"] == "confirmed"


class TestCreateBooking:
    @pytest.mark.asyncio
    async def test_invalid_form_shows_toast(self, state, session_mock, toasts):
        [item async for item in state.create_booking({"courtId": "x"})]

        assert toasts == ["Revise los datos de la reserva."]
        session_mock.exec.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_prepends_booking(
        self, state, session_mock, exec_result, court_sample, establishment_sample, toasts
    ):
        session_mock.exec.side_effect = [
            exec_result(first_item=court_sample),
            exec_result(all_items=[]),
        ]
        session_mock.get.side_effect = [court_sample, establishment_sample]

        [
            item
            async for item in state.create_booking(
                {
                    "courtId": 7,
                    "date": "2099-02-01",
                    "startTime": "19:00",
                    "endTime": "20:00",
                }
            )
        ]

        assert len(state.bookings) == 2
        assert state.bookings[0]["status"] == "pending"
        assert state.bookings[0]["price"] == 9000.0
        assert state.bookings[0]["court_name"] == "Cancha 1"
        assert state.bookings[0]["facility_name"] == "Complejo Norte"
        assert state.booking_submitting is False
        assert toasts[0].startswith("Reserva creada.")


class TestStaffActions:
    @pytest.mark.asyncio
    async def test_player_cannot_change_status(self, state, session_mock, toasts):
        await state.update_booking_status(10, "completed")

        assert toasts == ["No tiene permisos para esta operacion."]
        session_mock.exec.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_staff_confirms_booking(
        self, state, session_mock, exec_result, booking_factory, toasts
    ):
        state.current_user = {**PLAYER, "id": 5, "role": "staff", "establishment_id": 1}
        state.bookings = [_row(status="pending")]
        session_mock.exec.return_value = exec_result(first_item=booking_factory())

        await state.update_booking_status(10, "confirmed")

        assert state.bookings[0]["status"] == "confirmed"
        assert toasts == ["Reserva actualizada."]

    @pytest.mark.asyncio
    async def test_unknown_status(self, state, toasts):
        state.current_user = {**PLAYER, "role": "admin"}

        await state.update_booking_status(10, "archived")

        assert toasts == ["Estado de reserva invalido."]


def test_visible_bookings_apply_filters(state):
    state.bookings = [
        _row(1, "confirmed", date="2099-01-10", price=9000.0),
        _row(2, "cancelled", date="2099-01-11", price=7000.0),
        _row(3, "completed", date="2000-01-01", price=5000.0, sport="padel"),
    ]
    state.booking_status_filter = "all"
    state.booking_sport_filter = "futbol5"
    state.booking_sort_by = "price"
    state.booking_sort_order = "asc"

    assert [b["id"] for b in state._visible_bookings()] == [2, 1]

    state.reset_booking_filters()

    assert [b["id"] for b in state._visible_bookings()] == [2, 1, 3]
