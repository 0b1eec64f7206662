import datetime as dt
from decimal import Decimal
from typing import List, Optional

import reflex as rx
import sqlalchemy
from sqlalchemy import Numeric
from sqlmodel import JSON, Column, Field

from mis_canchas.enums import BookingStatus, PaymentStatus


class Booking(rx.Model, table=True):
    """Reserva de una cancha. Nunca se borra fisicamente."""

    __table_args__ = (
        sqlalchemy.Index("ix_booking_court_slot", "court_id", "date", "start_time"),
    )

    user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    establishment_id: int = Field(foreign_key="establishment.id", index=True)
    court_id: int = Field(foreign_key="court.id", index=True)
    sport: str = Field(default="")

    date: dt.date = Field(index=True)
    start_time: dt.time = Field(nullable=False)
    end_time: dt.time = Field(nullable=False)
    duration: int = Field(default=60)  # minutos
    price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=sqlalchemy.Column(Numeric(10, 2)),
    )

    status: BookingStatus = Field(default=BookingStatus.pending, index=True)
    payment_status: PaymentStatus = Field(default=PaymentStatus.pending, index=True)
    payment_method: Optional[str] = Field(default=None)

    participants: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    max_participants: Optional[int] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    check_in_code: Optional[str] = Field(default=None)

    # Datos de contacto para reservas cargadas desde el mostrador
    client_name: str = Field(default="")
    client_email: str = Field(default="")
    client_phone: str = Field(default="")
    is_recurring: bool = Field(default=False)

    deposit_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=sqlalchemy.Column(Numeric(10, 2)),
    )
    deposit_percent: int = Field(default=0)
    deposit_method: Optional[str] = Field(default=None)
    service_fee: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=sqlalchemy.Column(Numeric(10, 2)),
    )
    mp_payment_id: Optional[str] = Field(default=None, index=True)

    cancellation_reason: Optional[str] = Field(default=None)
    confirmed_at: Optional[dt.datetime] = Field(
        default=None,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )
    cancelled_at: Optional[dt.datetime] = Field(
        default=None,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )
    completed_at: Optional[dt.datetime] = Field(
        default=None,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )
    paid_at: Optional[dt.datetime] = Field(
        default=None,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )
    created_at: dt.datetime = Field(
        default_factory=dt.datetime.now,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )
    updated_at: dt.datetime = Field(
        default_factory=dt.datetime.now,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )

    @property
    def starts_at(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.start_time)
