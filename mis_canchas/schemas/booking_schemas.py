from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import Field

from mis_canchas.constants import NOTES_MAX_LENGTH, REASON_MAX_LENGTH
from mis_canchas.enums import BookingStatus, PaymentMethodType, PaymentStatus
from mis_canchas.schemas.base import BaseSchema, Money


class BookingCreateDTO(BaseSchema):
    court_id: int
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    sport: str = ""
    price: Decimal | None = None
    payment_method: str | None = None
    participants: list[str] = Field(default_factory=list)
    max_participants: int | None = None
    notes: str = Field(default="", max_length=NOTES_MAX_LENGTH)
    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    is_recurring: bool = False
    deposit_amount: Decimal = Decimal("0.00")
    deposit_percent: int = 0
    deposit_method: str | None = None


class BookingUpdateDTO(BaseSchema):
    status: BookingStatus | None = None
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)
    participants: list[str] | None = None
    cancellation_reason: str | None = Field(default=None, max_length=REASON_MAX_LENGTH)


class BookingCancelDTO(BaseSchema):
    reason: str = Field(default="", max_length=REASON_MAX_LENGTH)


class PaymentUpdateDTO(BaseSchema):
    payment_status: PaymentStatus
    payment_method: PaymentMethodType | None = None
    # Si viene monto, el cobro se registra en la caja abierta.
    amount: Decimal | None = None


class PaymentWebhookDTO(BaseSchema):
    booking_id: int
    status: str
    payment_id: str | None = None


class BookingOut(BaseSchema):
    id: int | None = None
    user_id: int | None = None
    establishment_id: int
    court_id: int
    sport: str = ""
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    duration: int
    price: Money
    status: BookingStatus
    payment_status: PaymentStatus
    payment_method: str | None = None
    participants: list[str] = Field(default_factory=list)
    max_participants: int | None = None
    notes: str | None = None
    check_in_code: str | None = None
    cancellation_reason: str | None = None
    confirmed_at: dt.datetime | None = None
    cancelled_at: dt.datetime | None = None
    completed_at: dt.datetime | None = None
    paid_at: dt.datetime | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class EstablishmentSummaryDTO(BaseSchema):
    id: int | None = None
    name: str
    slug: str = ""
    city: str = ""
    address: str = ""
    phone: str | None = None


class AdminReservationDTO(BookingOut):
    court_name: str = ""
    establishment: EstablishmentSummaryDTO | None = None
    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    is_recurring: bool = False
    deposit_amount: Money = Decimal("0.00")
    deposit_percent: int = 0
    deposit_method: str | None = None
    service_fee: Money = Decimal("0.00")
    mp_payment_id: str | None = None


class BookingDetailDTO(BookingOut):
    court_name: str = ""
    facility_name: str = ""


class TimeSlotDTO(BaseSchema):
    start_time: dt.time
    end_time: dt.time
    duration: int
    price: Money
    available: bool = True


class CourtAvailabilityDTO(BaseSchema):
    court_id: int
    court_name: str = ""
    date: dt.date
    duration: int
    price_per_hour: Money = Decimal("0.00")
    closed: bool = False
    available_slots: list[TimeSlotDTO] = Field(default_factory=list)
