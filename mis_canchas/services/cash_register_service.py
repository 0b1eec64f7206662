from __future__ import annotations

import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.constants import CASH_DIFFERENCE_TOLERANCE, CASH_REGISTER_HISTORY_LIMIT
from mis_canchas.enums import (
    CashMovementType,
    CashRegisterStatus,
    NotificationType,
    PaymentMethodType,
    ReconciliationStatus,
)
from mis_canchas.models import CashRegister, CashRegisterMovement
from mis_canchas.services.notification_service import NotificationService
from mis_canchas.utils.calculations import calculate_cash_difference, round_money, to_decimal
from mis_canchas.utils.dates import format_datetime_display
from mis_canchas.utils.exports import (
    add_data_rows,
    auto_adjust_column_widths,
    create_excel_workbook,
    style_header_row,
    workbook_to_bytes,
)
from mis_canchas.utils.logger import get_logger

logger = get_logger("CashRegisterService")


class CashRegisterError(ValueError):
    pass


class CashRegisterNotFoundError(CashRegisterError):
    pass


class CashRegisterAlreadyOpenError(CashRegisterError):
    pass


class CashRegisterNotOpenError(CashRegisterError):
    pass


METHOD_TOTAL_FIELDS = {
    PaymentMethodType.cash: "total_cash",
    PaymentMethodType.card: "total_card",
    PaymentMethodType.transfer: "total_transfer",
    PaymentMethodType.credit_card: "total_credit_card",
    PaymentMethodType.debit_card: "total_debit_card",
    PaymentMethodType.mercadopago: "total_mercadopago",
    PaymentMethodType.other: "total_other",
}

RECONCILIATION_LABELS = {
    ReconciliationStatus.balanced: "Cuadrada",
    ReconciliationStatus.surplus: "Sobrante",
    ReconciliationStatus.shortage: "Faltante",
}

REPORT_COLUMNS = [
    "Caja",
    "Apertura",
    "Cierre",
    "Estado",
    "Monto Inicial",
    "Efectivo Esperado",
    "Efectivo Contado",
    "Diferencia",
    "Conciliacion",
    "Efectivo",
    "Tarjeta",
    "Transferencia",
    "T. Credito",
    "T. Debito",
    "Mercado Pago",
    "Otros",
    "Ventas",
    "Gastos",
    "Operaciones",
]


def _reset_totals(register: CashRegister) -> None:
    for field in METHOD_TOTAL_FIELDS.values():
        setattr(register, field, Decimal("0.00"))
    register.total_sales = Decimal("0.00")
    register.total_expenses = Decimal("0.00")
    register.total_orders = 0
    register.total_movements = 0
    register.expected_cash = round_money(register.initial_cash)


def _apply_movement(
    register: CashRegister,
    movement_type: CashMovementType,
    payment_method: PaymentMethodType,
    amount: Decimal,
) -> None:
    if movement_type == CashMovementType.sale:
        field = METHOD_TOTAL_FIELDS[payment_method]
        setattr(register, field, round_money(to_decimal(getattr(register, field)) + amount))
        register.total_sales = round_money(to_decimal(register.total_sales) + amount)
        register.total_orders = int(register.total_orders or 0) + 1
        if payment_method == PaymentMethodType.cash:
            register.expected_cash = round_money(to_decimal(register.expected_cash) + amount)
    else:
        register.total_expenses = round_money(to_decimal(register.total_expenses) + amount)
        if payment_method == PaymentMethodType.cash:
            register.expected_cash = round_money(to_decimal(register.expected_cash) - amount)
    register.total_movements = int(register.total_movements or 0) + 1


def _input_amount(value: Any, message: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError) as e:
        raise CashRegisterError(message) from e
    if not amount.is_finite():
        raise CashRegisterError(message)
    return round_money(amount)


def _money_or_blank(value: Any) -> float | str:
    if value is None:
        return ""
    return float(round_money(value))


class CashRegisterService:
    @staticmethod
    async def get_active(
        session: AsyncSession,
        establishment_id: int,
        for_update: bool = False,
    ) -> CashRegister | None:
        query = (
            select(CashRegister)
            .where(CashRegister.establishment_id == establishment_id)
            .where(CashRegister.status == CashRegisterStatus.open)
        )
        if for_update:
            query = query.with_for_update()
        return (await session.exec(query)).first()

    @staticmethod
    async def get_register(
        session: AsyncSession,
        register_id: int,
        for_update: bool = False,
    ) -> CashRegister:
        query = select(CashRegister).where(CashRegister.id == register_id)
        if for_update:
            query = query.with_for_update()
        register = (await session.exec(query)).first()
        if not register:
            raise CashRegisterNotFoundError("Caja no encontrada.")
        return register

    @staticmethod
    async def open_register(
        session: AsyncSession,
        establishment_id: int,
        user_id: int | None,
        initial_cash: Any = Decimal("0.00"),
        notes: str = "",
    ) -> CashRegister:
        """
        Abre una caja para el establecimiento.

        Solo puede haber una caja abierta por establecimiento; el control
        previo se complementa con el indice unico de active_establishment_id
        para cubrir aperturas concurrentes.

        Raises:
            CashRegisterError: Monto inicial negativo
            CashRegisterAlreadyOpenError: Ya existe una caja abierta
        """
        initial = _input_amount(initial_cash, "Ingrese un monto inicial valido.")
        if initial < 0:
            raise CashRegisterError("El monto inicial no puede ser negativo.")

        existing = await CashRegisterService.get_active(
            session, establishment_id, for_update=True
        )
        if existing:
            raise CashRegisterAlreadyOpenError(
                "Ya hay una caja abierta en este establecimiento. Cierrela antes de abrir otra."
            )

        register = CashRegister(
            establishment_id=establishment_id,
            user_id=user_id,
            opened_at=datetime.datetime.now(),
            status=CashRegisterStatus.open,
            active_establishment_id=establishment_id,
            initial_cash=initial,
            expected_cash=initial,
            opening_notes=(notes or "").strip() or None,
        )
        session.add(register)
        try:
            await session.flush()
        except IntegrityError as e:
            raise CashRegisterAlreadyOpenError(
                "Ya hay una caja abierta en este establecimiento. Cierrela antes de abrir otra."
            ) from e

        logger.info(
            "Caja %s abierta en establecimiento %s con %s",
            register.id,
            establishment_id,
            initial,
        )
        return register

    @staticmethod
    async def record_movement(
        session: AsyncSession,
        establishment_id: int,
        movement_type: CashMovementType | str,
        payment_method: PaymentMethodType | str,
        amount: Any,
        description: str = "",
        order_id: str | None = None,
        booking_id: int | None = None,
        user_id: int | None = None,
    ) -> CashRegisterMovement:
        """Registra una venta o un gasto en la caja abierta."""
        value = _input_amount(amount, "Ingrese un monto valido.")
        if value <= 0:
            raise CashRegisterError("El monto debe ser mayor a cero.")
        try:
            movement_type = CashMovementType(movement_type)
            payment_method = PaymentMethodType(payment_method)
        except ValueError as e:
            raise CashRegisterError("Tipo de movimiento o metodo de pago invalido.") from e

        register = await CashRegisterService.get_active(
            session, establishment_id, for_update=True
        )
        if not register:
            raise CashRegisterNotOpenError("No hay una caja abierta en este establecimiento.")

        movement = CashRegisterMovement(
            cash_register_id=register.id,
            establishment_id=establishment_id,
            movement_type=movement_type,
            payment_method=payment_method,
            amount=value,
            description=(description or "").strip(),
            order_id=order_id,
            booking_id=booking_id,
            user_id=user_id,
            created_at=datetime.datetime.now(),
        )
        session.add(movement)
        _apply_movement(register, movement_type, payment_method, value)
        session.add(register)
        await session.flush()
        return movement

    @staticmethod
    async def list_movements(
        session: AsyncSession,
        register_id: int,
    ) -> List[CashRegisterMovement]:
        query = (
            select(CashRegisterMovement)
            .where(CashRegisterMovement.cash_register_id == register_id)
            .order_by(CashRegisterMovement.created_at)
        )
        return list((await session.exec(query)).all())

    @staticmethod
    async def close_register(
        session: AsyncSession,
        register_id: int,
        actual_cash: Any,
        notes: str = "",
        user_id: int | None = None,
    ) -> CashRegister:
        """
        Cierra la caja con el efectivo contado.

        Los totales se recalculan desde los movimientos registrados y la
        diferencia queda como efectivo contado menos efectivo esperado.

        Raises:
            CashRegisterError: Efectivo contado negativo
            CashRegisterNotFoundError: La caja no existe
            CashRegisterNotOpenError: La caja ya estaba cerrada
        """
        actual = _input_amount(actual_cash, "Ingrese un efectivo contado valido.")
        if actual < 0:
            raise CashRegisterError("El efectivo contado no puede ser negativo.")

        register = await CashRegisterService.get_register(
            session, register_id, for_update=True
        )
        if register.status != CashRegisterStatus.open:
            raise CashRegisterNotOpenError("La caja ya esta cerrada.")

        movements = await CashRegisterService.list_movements(session, register.id)
        _reset_totals(register)
        for movement in movements:
            _apply_movement(
                register,
                CashMovementType(movement.movement_type),
                PaymentMethodType(movement.payment_method),
                round_money(movement.amount),
            )

        register.actual_cash = actual
        register.cash_difference = calculate_cash_difference(actual, register.expected_cash)
        register.status = CashRegisterStatus.closed
        register.closed_at = datetime.datetime.now()
        register.active_establishment_id = None
        register.closing_notes = (notes or "").strip() or None
        session.add(register)

        recipient = user_id or register.user_id
        if recipient:
            status = CashRegisterService.reconciliation_status(register.cash_difference)
            await NotificationService.create(
                session,
                recipient,
                NotificationType.cash_register_closed,
                "Caja cerrada",
                f"Caja #{register.id} cerrada ({RECONCILIATION_LABELS[status]}).",
                {
                    "cash_register_id": register.id,
                    "cash_difference": float(register.cash_difference),
                },
            )
        await session.flush()

        logger.info(
            "Caja %s cerrada: esperado %s, contado %s, diferencia %s",
            register.id,
            register.expected_cash,
            actual,
            register.cash_difference,
        )
        return register

    @staticmethod
    async def list_registers(
        session: AsyncSession,
        establishment_id: int,
        limit: int = CASH_REGISTER_HISTORY_LIMIT,
    ) -> List[CashRegister]:
        query = (
            select(CashRegister)
            .where(CashRegister.establishment_id == establishment_id)
            .order_by(CashRegister.opened_at.desc())
            .limit(limit)
        )
        return list((await session.exec(query)).all())

    @staticmethod
    def reconciliation_status(difference: Any) -> ReconciliationStatus:
        value = to_decimal(difference)
        if abs(value) < CASH_DIFFERENCE_TOLERANCE:
            return ReconciliationStatus.balanced
        if value > 0:
            return ReconciliationStatus.surplus
        return ReconciliationStatus.shortage

    @staticmethod
    def build_report_rows(registers: Iterable[CashRegister]) -> List[List[Any]]:
        rows: List[List[Any]] = []
        for register in registers:
            if register.cash_difference is None:
                reconciliation = ""
            else:
                status = CashRegisterService.reconciliation_status(register.cash_difference)
                reconciliation = RECONCILIATION_LABELS[status]
            rows.append(
                [
                    register.id,
                    format_datetime_display(register.opened_at),
                    format_datetime_display(register.closed_at),
                    "Abierta" if register.status == CashRegisterStatus.open else "Cerrada",
                    _money_or_blank(register.initial_cash),
                    _money_or_blank(register.expected_cash),
                    _money_or_blank(register.actual_cash),
                    _money_or_blank(register.cash_difference),
                    reconciliation,
                    _money_or_blank(register.total_cash),
                    _money_or_blank(register.total_card),
                    _money_or_blank(register.total_transfer),
                    _money_or_blank(register.total_credit_card),
                    _money_or_blank(register.total_debit_card),
                    _money_or_blank(register.total_mercadopago),
                    _money_or_blank(register.total_other),
                    _money_or_blank(register.total_sales),
                    _money_or_blank(register.total_expenses),
                    int(register.total_orders or 0),
                ]
            )
        return rows

    @staticmethod
    def build_report_workbook(registers: Iterable[CashRegister]) -> bytes:
        workbook, sheet = create_excel_workbook("Historial de Cajas")
        style_header_row(sheet, 1, REPORT_COLUMNS)
        add_data_rows(sheet, CashRegisterService.build_report_rows(registers), start_row=2)
        auto_adjust_column_widths(sheet)
        return workbook_to_bytes(workbook)
