from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, Field

from mis_canchas.constants import NOTES_MAX_LENGTH
from mis_canchas.enums import CashMovementType, CashRegisterStatus, PaymentMethodType
from mis_canchas.schemas.base import BaseSchema, Money


class CashRegisterOpenDTO(BaseSchema):
    establishment_id: int
    initial_cash: Decimal = Decimal("0.00")
    opening_notes: str = Field(
        default="",
        max_length=NOTES_MAX_LENGTH,
        validation_alias=AliasChoices("openingNotes", "opening_notes", "notes"),
    )


class CashRegisterCloseDTO(BaseSchema):
    actual_cash: Decimal
    closing_notes: str = Field(
        default="",
        max_length=NOTES_MAX_LENGTH,
        validation_alias=AliasChoices("closingNotes", "closing_notes", "notes"),
    )


class CashMovementDTO(BaseSchema):
    movement_type: CashMovementType
    payment_method: PaymentMethodType = PaymentMethodType.cash
    amount: Decimal
    description: str = Field(default="", max_length=NOTES_MAX_LENGTH)
    order_id: str | None = None
    booking_id: int | None = None


class CashMovementOut(BaseSchema):
    id: int | None = None
    cash_register_id: int
    movement_type: CashMovementType
    payment_method: PaymentMethodType
    amount: Money
    description: str = ""
    order_id: str | None = None
    booking_id: int | None = None
    created_at: datetime | None = None


class CashRegisterOut(BaseSchema):
    id: int | None = None
    establishment_id: int
    user_id: int | None = None
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    status: CashRegisterStatus
    initial_cash: Money = Decimal("0.00")
    expected_cash: Money = Decimal("0.00")
    actual_cash: Money | None = None
    cash_difference: Money | None = None
    total_cash: Money = Decimal("0.00")
    total_card: Money = Decimal("0.00")
    total_transfer: Money = Decimal("0.00")
    total_credit_card: Money = Decimal("0.00")
    total_debit_card: Money = Decimal("0.00")
    total_mercadopago: Money = Field(
        default=Decimal("0.00"), serialization_alias="totalMercadoPago"
    )
    total_other: Money = Decimal("0.00")
    total_sales: Money = Decimal("0.00")
    total_expenses: Money = Decimal("0.00")
    total_orders: int = 0
    total_movements: int = 0
    opening_notes: str | None = None
    closing_notes: str | None = None
