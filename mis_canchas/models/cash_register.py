from typing import Optional
from datetime import datetime
from decimal import Decimal

import reflex as rx
import sqlalchemy
from sqlalchemy import Numeric
from sqlmodel import Field

from mis_canchas.enums import CashMovementType, CashRegisterStatus, PaymentMethodType


def _money_column(nullable: bool = False) -> sqlalchemy.Column:
    return sqlalchemy.Column(Numeric(10, 2), nullable=nullable)


class CashRegister(rx.Model, table=True):
    """Caja de un turno (apertura/cierre) de un establecimiento."""

    establishment_id: int = Field(foreign_key="establishment.id", index=True)
    user_id: Optional[int] = Field(default=None, foreign_key="user.id")
    opened_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False), index=True),
    )
    closed_at: Optional[datetime] = Field(
        default=None,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )
    status: CashRegisterStatus = Field(default=CashRegisterStatus.open, index=True)
    # Igual a establishment_id mientras la caja esta abierta, NULL al cerrar.
    # El indice unico impide dos cajas abiertas en el mismo establecimiento.
    active_establishment_id: Optional[int] = Field(default=None, unique=True)

    initial_cash: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    expected_cash: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    actual_cash: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))
    cash_difference: Optional[Decimal] = Field(default=None, sa_column=_money_column(True))

    total_cash: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_card: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_transfer: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_credit_card: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_debit_card: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_mercadopago: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_other: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())

    total_sales: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_expenses: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    total_orders: int = Field(default=0)
    total_movements: int = Field(default=0)

    opening_notes: Optional[str] = Field(default=None)
    closing_notes: Optional[str] = Field(default=None)

    @property
    def is_open(self) -> bool:
        return self.status == CashRegisterStatus.open


class CashRegisterMovement(rx.Model, table=True):
    """Movimiento (venta o gasto) registrado en una caja abierta."""

    cash_register_id: int = Field(foreign_key="cashregister.id", index=True)
    establishment_id: int = Field(foreign_key="establishment.id", index=True)
    movement_type: CashMovementType = Field(nullable=False, index=True)
    payment_method: PaymentMethodType = Field(default=PaymentMethodType.cash, index=True)
    amount: Decimal = Field(default=Decimal("0.00"), sa_column=_money_column())
    description: str = Field(default="")
    order_id: Optional[str] = Field(default=None)
    booking_id: Optional[int] = Field(default=None, foreign_key="booking.id")
    user_id: Optional[int] = Field(default=None, foreign_key="user.id")
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False), index=True),
    )
