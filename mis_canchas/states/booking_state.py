import reflex as rx
from pydantic import ValidationError

from mis_canchas.enums import BookingStatus, PaymentMethodType, PaymentStatus
from mis_canchas.models import Court, Establishment
from mis_canchas.schemas.booking_schemas import BookingCreateDTO
from mis_canchas.services.booking_service import (
    BookingError,
    BookingLifecycleService,
    serialize_booking,
)
from mis_canchas.services.cash_register_service import CashRegisterError
from mis_canchas.utils.booking_filters import booking_stats, filter_bookings, sort_bookings
from mis_canchas.utils.dates import parse_date
from mis_canchas.utils.db import get_async_session
from mis_canchas.utils.logger import get_logger

from .mixin_state import MixinState, require_login, require_role
from .types import BookingInfo, BookingStats

logger = get_logger("BookingState")

STAFF_STATUS_ACTIONS = {
    BookingStatus.confirmed.value: BookingLifecycleService.confirm,
    BookingStatus.in_progress.value: BookingLifecycleService.start,
    BookingStatus.completed.value: BookingLifecycleService.complete,
    BookingStatus.no_show.value: BookingLifecycleService.mark_no_show,
}


class BookingState(MixinState):
    bookings: list[BookingInfo] = []
    bookings_loading: bool = False
    booking_submitting: bool = False
    cancelling_booking_ids: list[int] = []
    booking_status_filter: str = "all"
    booking_sport_filter: str = ""
    booking_start_date: str = ""
    booking_end_date: str = ""
    booking_sort_by: str = "date"
    booking_sort_order: str = "desc"
    booking_cancel_reason: str = ""
    establishment_reservations: list[dict] = []
    reservations_date_filter: str = ""
    reservations_status_filter: str = ""

    def _visible_bookings(self) -> list[BookingInfo]:
        filtered = filter_bookings(
            self.bookings,
            status=self.booking_status_filter,
            sport=self.booking_sport_filter,
            start_date=self.booking_start_date,
            end_date=self.booking_end_date,
        )
        return sort_bookings(filtered, self.booking_sort_by, self.booking_sort_order)

    @rx.var
    def filtered_bookings(self) -> list[BookingInfo]:
        return self._visible_bookings()

    @rx.var
    def booking_summary(self) -> BookingStats:
        return booking_stats(self.bookings)

    @rx.event
    def set_booking_status_filter(self, value: str):
        self.booking_status_filter = value or "all"

    @rx.event
    def set_booking_sport_filter(self, value: str):
        self.booking_sport_filter = value or ""

    @rx.event
    def set_booking_date_range(self, start: str, end: str):
        self.booking_start_date = start or ""
        self.booking_end_date = end or ""

    @rx.event
    def set_booking_sort(self, sort_by: str, sort_order: str = "desc"):
        self.booking_sort_by = sort_by or "date"
        self.booking_sort_order = "asc" if sort_order == "asc" else "desc"

    @rx.event
    def set_booking_cancel_reason(self, value: str):
        self.booking_cancel_reason = value or ""

    @rx.event
    def reset_booking_filters(self):
        self.booking_status_filter = "all"
        self.booking_sport_filter = ""
        self.booking_start_date = ""
        self.booking_end_date = ""
        self.booking_sort_by = "date"
        self.booking_sort_order = "desc"

    def _booking_index(self, booking_id: int) -> int | None:
        for index, booking in enumerate(self.bookings):
            if booking["id"] == booking_id:
                return index
        return None

    def _replace_booking(self, booking_id: int, data: BookingInfo) -> None:
        index = self._booking_index(booking_id)
        if index is None:
            return
        bookings = list(self.bookings)
        bookings[index] = data
        self.bookings = bookings

    def _merge_server_booking(self, booking) -> None:
        """Reemplaza la fila local conservando los nombres ya resueltos."""
        status = BookingStatus(booking.status).value
        payment_status = PaymentStatus(booking.payment_status).value
        self.establishment_reservations = [
            {**item, "status": status, "paymentStatus": payment_status}
            if item.get("id") == booking.id
            else item
            for item in self.establishment_reservations
        ]
        index = self._booking_index(booking.id)
        if index is None:
            return
        current = self.bookings[index]
        self._replace_booking(
            booking.id,
            serialize_booking(
                booking,
                facility_name=current.get("facility_name", ""),
                court_name=current.get("court_name", ""),
            ),
        )

    @rx.event
    @require_login()
    async def load_bookings(self):
        self.bookings_loading = True
        yield
        try:
            async with get_async_session() as session:
                self.bookings = await BookingLifecycleService.list_user_bookings(
                    session, self._user_id()
                )
        finally:
            self.bookings_loading = False

    @rx.event
    @require_login()
    async def create_booking(self, form_data: dict):
        if self.booking_submitting:
            return
        try:
            data = BookingCreateDTO.model_validate(form_data)
        except ValidationError:
            yield rx.toast("Revise los datos de la reserva.", duration=3000)
            return

        self.booking_submitting = True
        yield
        try:
            async with get_async_session() as session:
                booking = await BookingLifecycleService.create_booking(
                    session, self._user_id(), data
                )
                await session.commit()
                court = await session.get(Court, booking.court_id)
                establishment = await session.get(Establishment, booking.establishment_id)
        except BookingError as e:
            yield rx.toast(str(e), duration=3000)
            return
        finally:
            self.booking_submitting = False

        row = serialize_booking(
            booking,
            facility_name=establishment.name if establishment else "",
            court_name=court.name if court else "",
        )
        self.bookings = [row] + list(self.bookings)
        yield rx.toast(
            f"Reserva creada. Codigo de ingreso: {booking.check_in_code}",
            duration=4000,
        )

    @rx.event
    @require_login()
    async def cancel_booking(self, booking_id: int):
        """
        Cancelacion optimista: la reserva se muestra cancelada de inmediato
        y se restaura si el servidor rechaza la operacion.
        """
        booking_id = int(booking_id)
        if booking_id in self.cancelling_booking_ids:
            return
        index = self._booking_index(booking_id)
        if index is None:
            yield rx.toast("Reserva no encontrada.", duration=3000)
            return

        previous = dict(self.bookings[index])
        self._replace_booking(
            booking_id, {**previous, "status": BookingStatus.cancelled.value}
        )
        self.cancelling_booking_ids = self.cancelling_booking_ids + [booking_id]
        yield

        try:
            async with get_async_session() as session:
                booking = await BookingLifecycleService.cancel(
                    session,
                    booking_id,
                    self.booking_cancel_reason,
                    user_id=self._user_id(),
                    enforce_policy=not self._is_staff(),
                )
                await session.commit()
        except BookingError as e:
            self._replace_booking(booking_id, previous)
            yield rx.toast(str(e), duration=3000)
            return
        except Exception:
            self._replace_booking(booking_id, previous)
            logger.exception("Error inesperado cancelando reserva %s", booking_id)
            raise
        finally:
            self.cancelling_booking_ids = [
                item for item in self.cancelling_booking_ids if item != booking_id
            ]

        self._merge_server_booking(booking)
        self.booking_cancel_reason = ""
        yield rx.toast("Reserva cancelada.", duration=3000)

    @rx.event
    @require_role("staff", "admin")
    async def update_booking_status(self, booking_id: int, status: str):
        action = STAFF_STATUS_ACTIONS.get(status)
        if action is None:
            return rx.toast("Estado de reserva invalido.", duration=3000)
        try:
            async with get_async_session() as session:
                booking = await action(session, int(booking_id))
                await session.commit()
        except BookingError as e:
            return rx.toast(str(e), duration=3000)
        self._merge_server_booking(booking)
        return rx.toast("Reserva actualizada.", duration=3000)

    @rx.event
    @require_role("staff", "admin")
    async def collect_booking_payment(self, booking_id: int, payment_method: str = "cash"):
        try:
            method = PaymentMethodType(payment_method)
        except ValueError:
            return rx.toast("Metodo de pago invalido.", duration=3000)
        try:
            async with get_async_session() as session:
                booking = await BookingLifecycleService.collect_payment(
                    session,
                    int(booking_id),
                    None,
                    method,
                    user_id=self._user_id(),
                )
                await session.commit()
        except (BookingError, CashRegisterError) as e:
            return rx.toast(str(e), duration=3000)
        self._merge_server_booking(booking)
        return rx.toast("Pago registrado en caja.", duration=3000)

    @rx.event
    def set_reservations_filters(self, date: str = "", status: str = ""):
        self.reservations_date_filter = date or ""
        self.reservations_status_filter = status or ""

    @rx.event
    @require_role("staff", "admin")
    async def load_establishment_reservations(self):
        establishment_id = self._establishment_id()
        if not establishment_id:
            return rx.toast("Seleccione un establecimiento.", duration=3000)
        day = parse_date(self.reservations_date_filter)
        status = self.reservations_status_filter or None
        if status and status not in {item.value for item in BookingStatus}:
            return rx.toast("Estado de reserva invalido.", duration=3000)
        async with get_async_session() as session:
            reservations = await BookingLifecycleService.list_establishment_reservations(
                session, establishment_id, status=status, date=day
            )
        self.establishment_reservations = [item.to_api() for item in reservations]
