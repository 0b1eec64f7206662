from __future__ import annotations

import datetime
import secrets
from typing import Any, Dict, List, Tuple

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.constants import (
    BOOKING_BLOCKING_STATUSES,
    CANCELLATION_MIN_HOURS,
    CHECK_IN_CODE_BYTES,
    DEFAULT_OPENING_HOURS,
    PROVIDER_PAYMENT_STATUS_MAP,
    SLOT_STEP_MINUTES,
    WEEKDAY_KEYS,
)
from mis_canchas.enums import (
    BookingStatus,
    CashMovementType,
    NotificationType,
    PaymentMethodType,
    PaymentStatus,
)
from mis_canchas.models import Booking, Court, Establishment
from mis_canchas.schemas.booking_schemas import (
    AdminReservationDTO,
    BookingCreateDTO,
    BookingUpdateDTO,
    CourtAvailabilityDTO,
    EstablishmentSummaryDTO,
    TimeSlotDTO,
)
from mis_canchas.services.cash_register_service import CashRegisterService
from mis_canchas.services.notification_service import NotificationService
from mis_canchas.utils.calculations import calculate_booking_price, round_money
from mis_canchas.utils.dates import (
    format_time,
    hours_until,
    minutes_between,
    minutes_to_time,
    parse_time,
    time_to_minutes,
)
from mis_canchas.utils.logger import get_logger

logger = get_logger("BookingService")


class BookingError(ValueError):
    pass


class BookingNotFoundError(BookingError):
    pass


class BookingTransitionError(BookingError):
    pass


class BookingPolicyError(BookingError):
    pass


class BookingConflictError(BookingError):
    pass


STATUS_TRANSITIONS: Dict[BookingStatus, frozenset] = {
    BookingStatus.pending: frozenset({BookingStatus.confirmed, BookingStatus.cancelled}),
    BookingStatus.confirmed: frozenset(
        {
            BookingStatus.in_progress,
            BookingStatus.completed,
            BookingStatus.cancelled,
            BookingStatus.no_show,
        }
    ),
    BookingStatus.in_progress: frozenset({BookingStatus.completed}),
    BookingStatus.completed: frozenset(),
    BookingStatus.cancelled: frozenset(),
    BookingStatus.no_show: frozenset(),
}

PAYMENT_TRANSITIONS: Dict[PaymentStatus, frozenset] = {
    PaymentStatus.pending: frozenset({PaymentStatus.paid, PaymentStatus.failed}),
    PaymentStatus.failed: frozenset({PaymentStatus.pending, PaymentStatus.paid}),
    PaymentStatus.paid: frozenset({PaymentStatus.refunded}),
    PaymentStatus.refunded: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    {BookingStatus.completed, BookingStatus.cancelled, BookingStatus.no_show}
)
REFUNDABLE_TERMINAL_STATUSES = frozenset({BookingStatus.cancelled, BookingStatus.no_show})

STATUS_LABELS = {
    BookingStatus.pending: "pendiente",
    BookingStatus.confirmed: "confirmada",
    BookingStatus.in_progress: "en curso",
    BookingStatus.completed: "completada",
    BookingStatus.cancelled: "cancelada",
    BookingStatus.no_show: "ausente",
}


def is_terminal(status: BookingStatus | str) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def can_transition_status(current: BookingStatus | str, target: BookingStatus | str) -> bool:
    return BookingStatus(target) in STATUS_TRANSITIONS[BookingStatus(current)]


def can_transition_payment(
    status: BookingStatus | str,
    current: PaymentStatus | str,
    target: PaymentStatus | str,
) -> bool:
    status = BookingStatus(status)
    current = PaymentStatus(current)
    target = PaymentStatus(target)
    if status in TERMINAL_STATUSES:
        return (
            status in REFUNDABLE_TERMINAL_STATUSES
            and current == PaymentStatus.paid
            and target == PaymentStatus.refunded
        )
    return target in PAYMENT_TRANSITIONS[current]


def map_provider_status(provider_status: str) -> PaymentStatus | None:
    mapped = PROVIDER_PAYMENT_STATUS_MAP.get((provider_status or "").strip().lower())
    return PaymentStatus(mapped) if mapped else None


def generate_check_in_code() -> str:
    return secrets.token_hex(CHECK_IN_CODE_BYTES).upper()


def opening_window(
    opening_hours: Dict[str, Any] | None,
    day: datetime.date,
) -> Tuple[int, int] | None:
    """
    Minutos de apertura y cierre del dia, o None si el establecimiento cierra.

    Sin horario cargado se usa DEFAULT_OPENING_HOURS; con horario cargado,
    un dia ausente se toma como cerrado. Un cierre a las 00:00 o 24:00 es
    el fin del mismo dia.
    """
    if opening_hours:
        schedule = opening_hours.get(WEEKDAY_KEYS[day.weekday()])
    else:
        schedule = DEFAULT_OPENING_HOURS
    if not schedule or schedule.get("closed"):
        return None

    opens = parse_time(str(schedule.get("open") or ""))
    close_raw = str(schedule.get("close") or "").strip()
    if close_raw in ("00:00", "24:00"):
        close_minutes = 24 * 60 - 1
    else:
        closes = parse_time(close_raw)
        close_minutes = time_to_minutes(closes) if closes else None
    if opens is None or close_minutes is None:
        return None
    open_minutes = time_to_minutes(opens)
    if close_minutes <= open_minutes:
        return None
    return open_minutes, close_minutes


def _set_status(
    booking: Booking,
    target: BookingStatus,
    now: datetime.datetime,
) -> None:
    current = BookingStatus(booking.status)
    if not can_transition_status(current, target):
        raise BookingTransitionError(
            f"No se puede pasar una reserva {STATUS_LABELS[current]} a {STATUS_LABELS[target]}."
        )
    booking.status = target
    if target == BookingStatus.confirmed:
        booking.confirmed_at = now
    elif target == BookingStatus.completed:
        booking.completed_at = now
    elif target == BookingStatus.cancelled:
        booking.cancelled_at = now
    booking.updated_at = now


def _set_payment_status(
    booking: Booking,
    target: PaymentStatus,
    now: datetime.datetime,
) -> None:
    if not can_transition_payment(booking.status, booking.payment_status, target):
        raise BookingTransitionError(
            f"No se puede cambiar el pago de {PaymentStatus(booking.payment_status).value} "
            f"a {target.value} en una reserva {STATUS_LABELS[BookingStatus(booking.status)]}."
        )
    booking.payment_status = target
    if target == PaymentStatus.paid:
        booking.paid_at = now
    booking.updated_at = now


def serialize_booking(booking: Booking, facility_name: str = "", court_name: str = "") -> Dict[str, Any]:
    """Diccionario plano para los estados (filtros, orden, estadisticas)."""
    return {
        "id": booking.id,
        "facility_name": facility_name,
        "court_name": court_name,
        "court_id": booking.court_id,
        "establishment_id": booking.establishment_id,
        "sport": booking.sport or "",
        "date": booking.date.isoformat() if booking.date else "",
        "start_time": format_time(booking.start_time),
        "end_time": format_time(booking.end_time),
        "duration": int(booking.duration or 0),
        "price": float(round_money(booking.price)),
        "status": BookingStatus(booking.status).value,
        "payment_status": PaymentStatus(booking.payment_status).value,
        "check_in_code": booking.check_in_code or "",
        "cancellation_reason": booking.cancellation_reason or "",
    }


class BookingLifecycleService:
    @staticmethod
    async def get_booking(
        session: AsyncSession,
        booking_id: int,
        for_update: bool = False,
    ) -> Booking:
        query = select(Booking).where(Booking.id == booking_id)
        if for_update:
            query = query.with_for_update()
        booking = (await session.exec(query)).first()
        if not booking:
            raise BookingNotFoundError("Reserva no encontrada.")
        return booking

    @staticmethod
    async def create_booking(
        session: AsyncSession,
        user_id: int | None,
        data: BookingCreateDTO,
        now: datetime.datetime | None = None,
    ) -> Booking:
        """
        Crea una reserva pendiente.

        Rechaza horarios invertidos y superposiciones con reservas vigentes
        de la misma cancha. Sin precio explicito se cobra la tarifa horaria
        proporcional a la duracion.

        Raises:
            BookingNotFoundError: Cancha inexistente o inactiva
            BookingError: Horario o precio invalido
            BookingConflictError: El horario ya esta ocupado
        """
        now = now or datetime.datetime.now()
        court = (
            await session.exec(select(Court).where(Court.id == data.court_id))
        ).first()
        if not court or not court.is_active:
            raise BookingNotFoundError("La cancha no existe o no esta disponible.")
        if data.end_time <= data.start_time:
            raise BookingError("La hora de fin debe ser posterior a la de inicio.")

        conflicts = (
            await session.exec(
                select(Booking)
                .where(Booking.court_id == court.id)
                .where(Booking.date == data.date)
                .where(Booking.status.in_([BookingStatus(s) for s in BOOKING_BLOCKING_STATUSES]))
                .where(Booking.start_time < data.end_time)
                .where(Booking.end_time > data.start_time)
                .with_for_update()
            )
        ).all()
        if conflicts:
            raise BookingConflictError("El horario seleccionado ya esta reservado.")

        duration = minutes_between(data.start_time, data.end_time)
        if data.price is not None:
            price = round_money(data.price)
        else:
            price = calculate_booking_price(court.price_per_hour, duration)
        if price < 0:
            raise BookingError("El precio no puede ser negativo.")

        booking = Booking(
            user_id=user_id,
            establishment_id=court.establishment_id,
            court_id=court.id,
            sport=(data.sport or court.sport or "").strip(),
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            duration=duration,
            price=price,
            status=BookingStatus.pending,
            payment_status=PaymentStatus.pending,
            payment_method=data.payment_method,
            participants=list(data.participants),
            max_participants=data.max_participants,
            notes=(data.notes or "").strip() or None,
            check_in_code=generate_check_in_code(),
            client_name=data.client_name.strip(),
            client_email=data.client_email.strip(),
            client_phone=data.client_phone.strip(),
            is_recurring=data.is_recurring,
            deposit_amount=round_money(data.deposit_amount),
            deposit_percent=data.deposit_percent,
            deposit_method=data.deposit_method,
            created_at=now,
            updated_at=now,
        )
        session.add(booking)
        await session.flush()
        logger.info(
            "Reserva %s creada en cancha %s (%s %s-%s)",
            booking.id,
            court.id,
            data.date,
            format_time(data.start_time),
            format_time(data.end_time),
        )
        return booking

    @staticmethod
    async def available_slots(
        session: AsyncSession,
        court_id: int,
        date: datetime.date,
        duration: int = 60,
    ) -> CourtAvailabilityDTO:
        """
        Turnos libres de una cancha para un dia.

        Recorre el horario del establecimiento en pasos de SLOT_STEP_MINUTES
        y descarta los turnos que se superponen con reservas vigentes, con
        la misma regla de superposicion que create_booking.

        Raises:
            BookingNotFoundError: Cancha inexistente o inactiva
            BookingError: Duracion invalida
        """
        duration = int(duration or 0)
        if duration <= 0:
            raise BookingError("La duracion debe ser mayor a cero.")
        court = (await session.exec(select(Court).where(Court.id == court_id))).first()
        if not court or not court.is_active:
            raise BookingNotFoundError("La cancha no existe o no esta disponible.")

        establishment = await session.get(Establishment, court.establishment_id)
        window = opening_window(
            establishment.opening_hours if establishment else None, date
        )
        availability = CourtAvailabilityDTO(
            court_id=court.id,
            court_name=court.name,
            date=date,
            duration=duration,
            price_per_hour=round_money(court.price_per_hour),
            closed=window is None,
        )
        if window is None:
            return availability

        bookings = (
            await session.exec(
                select(Booking)
                .where(Booking.court_id == court.id)
                .where(Booking.date == date)
                .where(Booking.status.in_([BookingStatus(s) for s in BOOKING_BLOCKING_STATUSES]))
            )
        ).all()
        taken = [
            (time_to_minutes(booking.start_time), time_to_minutes(booking.end_time))
            for booking in bookings
        ]
        price = calculate_booking_price(court.price_per_hour, duration)
        open_minutes, close_minutes = window
        for start in range(open_minutes, close_minutes - duration + 1, SLOT_STEP_MINUTES):
            end = start + duration
            if any(start < busy_end and end > busy_start for busy_start, busy_end in taken):
                continue
            availability.available_slots.append(
                TimeSlotDTO(
                    start_time=minutes_to_time(start),
                    end_time=minutes_to_time(end),
                    duration=duration,
                    price=price,
                )
            )
        return availability

    @staticmethod
    async def _notify(
        session: AsyncSession,
        booking: Booking,
        notification_type: NotificationType,
        title: str,
        message: str,
    ) -> None:
        if not booking.user_id:
            return
        await NotificationService.create(
            session,
            booking.user_id,
            notification_type,
            title,
            message,
            {"booking_id": booking.id},
        )

    @staticmethod
    async def _transition(
        session: AsyncSession,
        booking_id: int,
        target: BookingStatus,
        now: datetime.datetime | None = None,
    ) -> Booking:
        now = now or datetime.datetime.now()
        booking = await BookingLifecycleService.get_booking(session, booking_id, for_update=True)
        _set_status(booking, target, now)
        session.add(booking)
        if target == BookingStatus.confirmed:
            await BookingLifecycleService._notify(
                session,
                booking,
                NotificationType.booking_confirmed,
                "Reserva confirmada",
                f"Tu reserva del {booking.date} a las {format_time(booking.start_time)} fue confirmada.",
            )
        await session.flush()
        return booking

    @staticmethod
    async def confirm(session: AsyncSession, booking_id: int, now: datetime.datetime | None = None) -> Booking:
        return await BookingLifecycleService._transition(session, booking_id, BookingStatus.confirmed, now)

    @staticmethod
    async def start(session: AsyncSession, booking_id: int, now: datetime.datetime | None = None) -> Booking:
        return await BookingLifecycleService._transition(session, booking_id, BookingStatus.in_progress, now)

    @staticmethod
    async def complete(session: AsyncSession, booking_id: int, now: datetime.datetime | None = None) -> Booking:
        return await BookingLifecycleService._transition(session, booking_id, BookingStatus.completed, now)

    @staticmethod
    async def mark_no_show(session: AsyncSession, booking_id: int, now: datetime.datetime | None = None) -> Booking:
        return await BookingLifecycleService._transition(session, booking_id, BookingStatus.no_show, now)

    @staticmethod
    async def cancel(
        session: AsyncSession,
        booking_id: int,
        reason: str = "",
        user_id: int | None = None,
        enforce_policy: bool = True,
        now: datetime.datetime | None = None,
    ) -> Booking:
        """
        Cancela una reserva.

        Con enforce_policy (jugadores) se exige un minimo de horas de
        anticipacion; el personal del establecimiento no tiene ese limite.

        Raises:
            BookingTransitionError: La reserva ya esta en un estado terminal
            BookingPolicyError: Fuera del plazo de cancelacion
        """
        now = now or datetime.datetime.now()
        booking = await BookingLifecycleService.get_booking(session, booking_id, for_update=True)
        if user_id is not None and enforce_policy and booking.user_id not in (None, user_id):
            raise BookingPolicyError("No puede cancelar una reserva de otro usuario.")

        current = BookingStatus(booking.status)
        if current == BookingStatus.cancelled:
            raise BookingTransitionError("La reserva ya esta cancelada.")
        if current in TERMINAL_STATUSES or not can_transition_status(current, BookingStatus.cancelled):
            raise BookingTransitionError(
                f"No se puede cancelar una reserva {STATUS_LABELS[current]}."
            )
        if enforce_policy:
            remaining = hours_until(booking.starts_at, now)
            if remaining < CANCELLATION_MIN_HOURS:
                raise BookingPolicyError(
                    f"Solo se puede cancelar con al menos {CANCELLATION_MIN_HOURS} horas de anticipacion."
                )

        _set_status(booking, BookingStatus.cancelled, now)
        booking.cancellation_reason = (reason or "").strip() or None
        session.add(booking)
        await BookingLifecycleService._notify(
            session,
            booking,
            NotificationType.booking_cancelled,
            "Reserva cancelada",
            f"La reserva del {booking.date} a las {format_time(booking.start_time)} fue cancelada.",
        )
        await session.flush()
        logger.info("Reserva %s cancelada por usuario %s", booking.id, user_id)
        return booking

    @staticmethod
    async def update_booking(
        session: AsyncSession,
        booking_id: int,
        data: BookingUpdateDTO,
        user_id: int | None = None,
        enforce_policy: bool = False,
        now: datetime.datetime | None = None,
    ) -> Booking:
        """
        Aplica cambios de estado, notas y participantes en una sola llamada.

        Las notas y participantes se validan contra el estado previo, antes
        de la transicion, asi un cambio a cancelada puede llevar notas.
        """
        now = now or datetime.datetime.now()
        booking = await BookingLifecycleService.get_booking(session, booking_id, for_update=True)
        has_edits = data.notes is not None or data.participants is not None
        if has_edits:
            if is_terminal(booking.status):
                raise BookingTransitionError("La reserva ya no admite cambios.")
            if (
                data.participants is not None
                and booking.max_participants
                and len(data.participants) > booking.max_participants
            ):
                raise BookingError("Se supero el maximo de participantes.")

        if data.status is not None:
            target = BookingStatus(data.status)
            if target == BookingStatus.cancelled:
                booking = await BookingLifecycleService.cancel(
                    session,
                    booking_id,
                    data.cancellation_reason or "",
                    user_id=user_id,
                    enforce_policy=enforce_policy,
                    now=now,
                )
            else:
                booking = await BookingLifecycleService._transition(session, booking_id, target, now)

        if has_edits:
            if data.notes is not None:
                booking.notes = data.notes.strip() or None
            if data.participants is not None:
                booking.participants = list(data.participants)
            booking.updated_at = now
            session.add(booking)
            await session.flush()
        return booking

    @staticmethod
    async def update_payment_status(
        session: AsyncSession,
        booking_id: int,
        payment_status: PaymentStatus | str,
        payment_method: str | None = None,
        now: datetime.datetime | None = None,
    ) -> Booking:
        now = now or datetime.datetime.now()
        target = PaymentStatus(payment_status)
        booking = await BookingLifecycleService.get_booking(session, booking_id, for_update=True)
        _set_payment_status(booking, target, now)
        if payment_method:
            booking.payment_method = payment_method
        session.add(booking)
        await BookingLifecycleService._notify_payment(session, booking, target)
        await session.flush()
        return booking

    @staticmethod
    async def _notify_payment(
        session: AsyncSession,
        booking: Booking,
        target: PaymentStatus,
    ) -> None:
        if target == PaymentStatus.paid:
            await BookingLifecycleService._notify(
                session,
                booking,
                NotificationType.payment_received,
                "Pago recibido",
                f"Recibimos el pago de tu reserva del {booking.date}.",
            )
        elif target == PaymentStatus.failed:
            await BookingLifecycleService._notify(
                session,
                booking,
                NotificationType.payment_failed,
                "Pago rechazado",
                f"No se pudo procesar el pago de tu reserva del {booking.date}.",
            )

    @staticmethod
    async def apply_provider_status(
        session: AsyncSession,
        booking_id: int,
        provider_status: str,
        provider_payment_id: str | None = None,
        now: datetime.datetime | None = None,
    ) -> Booking:
        """
        Aplica el estado informado por Mercado Pago.

        approved confirma una reserva pendiente; los estados desconocidos
        no modifican la reserva y un aviso repetido no es un error.
        """
        now = now or datetime.datetime.now()
        booking = await BookingLifecycleService.get_booking(session, booking_id, for_update=True)
        target = map_provider_status(provider_status)
        if target is None:
            logger.info(
                "Estado de pago '%s' ignorado para reserva %s", provider_status, booking.id
            )
            return booking
        if provider_payment_id:
            booking.mp_payment_id = provider_payment_id
        if PaymentStatus(booking.payment_status) != target:
            _set_payment_status(booking, target, now)
            booking.payment_method = booking.payment_method or PaymentMethodType.mercadopago.value
            await BookingLifecycleService._notify_payment(session, booking, target)
        if target == PaymentStatus.paid and BookingStatus(booking.status) == BookingStatus.pending:
            _set_status(booking, BookingStatus.confirmed, now)
            await BookingLifecycleService._notify(
                session,
                booking,
                NotificationType.booking_confirmed,
                "Reserva confirmada",
                f"Tu reserva del {booking.date} a las {format_time(booking.start_time)} fue confirmada.",
            )
        session.add(booking)
        await session.flush()
        return booking

    @staticmethod
    async def collect_payment(
        session: AsyncSession,
        booking_id: int,
        amount: Any,
        payment_method: PaymentMethodType | str,
        user_id: int | None = None,
        now: datetime.datetime | None = None,
    ) -> Booking:
        """
        Cobro en mostrador: registra la venta en la caja abierta y marca
        la reserva como pagada.

        Raises:
            CashRegisterNotOpenError: No hay caja abierta
            BookingTransitionError: El pago no admite pasar a pagado
        """
        now = now or datetime.datetime.now()
        booking = await BookingLifecycleService.get_booking(session, booking_id, for_update=True)
        if not can_transition_payment(booking.status, booking.payment_status, PaymentStatus.paid):
            raise BookingTransitionError("La reserva no admite un nuevo cobro.")
        method = PaymentMethodType(payment_method)
        await CashRegisterService.record_movement(
            session,
            booking.establishment_id,
            CashMovementType.sale,
            method,
            amount if amount is not None else booking.price,
            description=f"Reserva #{booking.id}",
            booking_id=booking.id,
            user_id=user_id,
        )
        _set_payment_status(booking, PaymentStatus.paid, now)
        booking.payment_method = method.value
        session.add(booking)
        await BookingLifecycleService._notify_payment(session, booking, PaymentStatus.paid)
        await session.flush()
        return booking

    @staticmethod
    async def user_booking_rows(
        session: AsyncSession,
        user_id: int,
    ) -> List[Tuple[Booking, Court, Establishment]]:
        rows = (
            await session.exec(
                select(Booking, Court, Establishment)
                .join(Court, Court.id == Booking.court_id)
                .join(Establishment, Establishment.id == Booking.establishment_id)
                .where(Booking.user_id == user_id)
                .order_by(Booking.date.desc(), Booking.start_time.desc())
            )
        ).all()
        return list(rows)

    @staticmethod
    async def list_user_bookings(
        session: AsyncSession,
        user_id: int,
    ) -> List[Dict[str, Any]]:
        rows = await BookingLifecycleService.user_booking_rows(session, user_id)
        return [
            serialize_booking(booking, facility_name=establishment.name, court_name=court.name)
            for booking, court, establishment in rows
        ]

    @staticmethod
    async def list_establishment_reservations(
        session: AsyncSession,
        establishment_id: int,
        status: BookingStatus | str | None = None,
        date: datetime.date | None = None,
    ) -> List[AdminReservationDTO]:
        establishment = await session.get(Establishment, establishment_id)
        query = (
            select(Booking, Court)
            .join(Court, Court.id == Booking.court_id)
            .where(Booking.establishment_id == establishment_id)
        )
        if status:
            query = query.where(Booking.status == BookingStatus(status))
        if date:
            query = query.where(Booking.date == date)
        query = query.order_by(Booking.date, Booking.start_time)
        rows = (await session.exec(query)).all()
        return [
            BookingLifecycleService.to_admin_reservation(booking, court, establishment)
            for booking, court in rows
        ]

    @staticmethod
    def to_admin_reservation(
        booking: Booking,
        court: Court | None,
        establishment: Establishment | None,
    ) -> AdminReservationDTO:
        payload = booking.model_dump()
        payload["court_name"] = court.name if court else ""
        payload["establishment"] = (
            EstablishmentSummaryDTO.model_validate(establishment) if establishment else None
        )
        return AdminReservationDTO.model_validate(payload)

    @staticmethod
    async def booking_detail(
        session: AsyncSession,
        booking_id: int,
    ) -> Tuple[Booking, Court | None, Establishment | None]:
        booking = await BookingLifecycleService.get_booking(session, booking_id)
        court = await session.get(Court, booking.court_id)
        establishment = await session.get(Establishment, booking.establishment_id)
        return booking, court, establishment
