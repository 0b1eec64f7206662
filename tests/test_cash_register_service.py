"""Tests para mis_canchas/services/cash_register_service.py

Cobertura del ciclo de vida de la caja:
- Apertura unica por establecimiento
- Movimientos y totales por metodo de pago
- Cierre con recalculo y diferencia de efectivo
- Exportacion del historial
"""
import datetime
from decimal import Decimal
from io import BytesIO

import pytest
from openpyxl import load_workbook
from sqlalchemy.exc import IntegrityError

from mis_canchas.enums import (
    CashMovementType,
    CashRegisterStatus,
    NotificationType,
    PaymentMethodType,
    ReconciliationStatus,
)
from mis_canchas.models import CashRegister, CashRegisterMovement, Notification
from mis_canchas.services.cash_register_service import (
    REPORT_COLUMNS,
    CashRegisterAlreadyOpenError,
    CashRegisterError,
    CashRegisterNotFoundError,
    CashRegisterNotOpenError,
    CashRegisterService,
)


def _movement(movement_type, payment_method, amount):
    return CashRegisterMovement(
        cash_register_id=1,
        establishment_id=1,
        movement_type=movement_type,
        payment_method=payment_method,
        amount=Decimal(amount),
    )


class TestOpenRegister:
    @pytest.mark.asyncio
    async def test_open_creates_register_with_expected_cash(self, session_mock, exec_result):
        session_mock.exec.return_value = exec_result(first_item=None)

        register = await CashRegisterService.open_register(
            session_mock, 1, 5, Decimal("150.555"), "  turno noche  "
        )

        assert register.status == CashRegisterStatus.open
        assert register.initial_cash == Decimal("150.56")
        assert register.expected_cash == Decimal("150.56")
        assert register.active_establishment_id == 1
        assert register.opening_notes == "turno noche"
        assert register.id is not None
        session_mock.flush.assert_awaited()
        session_mock.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_open_twice_is_rejected(self, session_mock, exec_result, open_register):
        session_mock.exec.return_value = exec_result(first_item=open_register())

        with pytest.raises(CashRegisterAlreadyOpenError):
            await CashRegisterService.open_register(session_mock, 1, 5, Decimal("0"))

        assert session_mock.added == []

    @pytest.mark.asyncio
    async def test_concurrent_open_maps_integrity_error(self, session_mock, exec_result):
        session_mock.exec.return_value = exec_result(first_item=None)
        session_mock.flush.side_effect = IntegrityError(
            "INSERT INTO cashregister", {}, Exception("Duplicate entry")
        )

        with pytest.raises(CashRegisterAlreadyOpenError):
            await CashRegisterService.open_register(session_mock, 1, 5, Decimal("10"))

    @pytest.mark.asyncio
    async def test_negative_initial_cash_rejected(self, session_mock):
        with pytest.raises(CashRegisterError):
            await CashRegisterService.open_register(session_mock, 1, 5, Decimal("-1"))

        session_mock.exec.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), Decimal("NaN"), "no-es-numero"])
    async def test_invalid_initial_cash_rejected(self, session_mock, amount):
        with pytest.raises(CashRegisterError):
            await CashRegisterService.open_register(session_mock, 1, 5, amount)

        session_mock.exec.assert_not_awaited()


class TestRecordMovement:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [float("nan"), float("-inf")])
    async def test_non_finite_amount_rejected(self, session_mock, amount):
        with pytest.raises(CashRegisterError):
            await CashRegisterService.record_movement(session_mock, 1, "sale", "cash", amount)

        session_mock.exec.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cash_sale_updates_totals(self, session_mock, exec_result, open_register):
        register = open_register()
        session_mock.exec.return_value = exec_result(first_item=register)

        movement = await CashRegisterService.record_movement(
            session_mock, 1, "sale", "cash", "120.00", description="Reserva #10", booking_id=10
        )

        assert movement.cash_register_id == register.id
        assert movement.booking_id == 10
        assert register.total_cash == Decimal("120.00")
        assert register.total_sales == Decimal("120.00")
        assert register.expected_cash == Decimal("220.00")
        assert register.total_orders == 1
        assert register.total_movements == 1

    @pytest.mark.asyncio
    async def test_card_sale_does_not_touch_expected_cash(
        self, session_mock, exec_result, open_register
    ):
        register = open_register()
        session_mock.exec.return_value = exec_result(first_item=register)

        await CashRegisterService.record_movement(
            session_mock, 1, CashMovementType.sale, PaymentMethodType.card, Decimal("50")
        )

        assert register.total_card == Decimal("50.00")
        assert register.expected_cash == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_cash_expense_reduces_expected_cash(
        self, session_mock, exec_result, open_register
    ):
        register = open_register()
        session_mock.exec.return_value = exec_result(first_item=register)

        await CashRegisterService.record_movement(
            session_mock, 1, "expense", "cash", Decimal("30")
        )

        assert register.total_expenses == Decimal("30.00")
        assert register.expected_cash == Decimal("70.00")
        assert register.total_orders == 0
        assert register.total_movements == 1

    @pytest.mark.asyncio
    async def test_movement_requires_open_register(self, session_mock, exec_result):
        session_mock.exec.return_value = exec_result(first_item=None)

        with pytest.raises(CashRegisterNotOpenError):
            await CashRegisterService.record_movement(session_mock, 1, "sale", "cash", 10)

    @pytest.mark.asyncio
    async def test_movement_amount_must_be_positive(self, session_mock):
        with pytest.raises(CashRegisterError):
            await CashRegisterService.record_movement(session_mock, 1, "sale", "cash", 0)

    @pytest.mark.asyncio
    async def test_unknown_payment_method_rejected(self, session_mock):
        with pytest.raises(CashRegisterError):
            await CashRegisterService.record_movement(session_mock, 1, "sale", "cheque", 10)


class TestCloseRegister:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("actual_cash", [float("nan"), float("inf")])
    async def test_non_finite_counted_cash_rejected(self, session_mock, actual_cash):
        with pytest.raises(CashRegisterError):
            await CashRegisterService.close_register(session_mock, 1, actual_cash)

        session_mock.exec.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_recomputes_totals_and_difference(
        self, session_mock, exec_result, open_register
    ):
        register = open_register()
        movements = [
            _movement(CashMovementType.sale, PaymentMethodType.cash, "120.00"),
            _movement(CashMovementType.sale, PaymentMethodType.card, "50.00"),
            _movement(CashMovementType.expense, PaymentMethodType.cash, "20.00"),
        ]
        session_mock.exec.side_effect = [
            exec_result(first_item=register),
            exec_result(all_items=movements),
        ]

        closed = await CashRegisterService.close_register(
            session_mock, 1, Decimal("250.00"), "cierre", user_id=5
        )

        assert closed.status == CashRegisterStatus.closed
        assert closed.closed_at is not None
        assert closed.active_establishment_id is None
        assert closed.expected_cash == Decimal("200.00")
        assert closed.actual_cash == Decimal("250.00")
        assert closed.cash_difference == Decimal("50.00")
        assert closed.total_sales == Decimal("170.00")
        assert closed.total_card == Decimal("50.00")
        assert closed.total_expenses == Decimal("20.00")
        assert closed.total_orders == 2
        assert closed.total_movements == 3
        assert closed.closing_notes == "cierre"

        notifications = session_mock.added_of(Notification)
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.cash_register_closed
        assert notifications[0].user_id == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "actual, expected_difference",
        [
            ("100.00", Decimal("0.00")),
            ("99.99", Decimal("-0.01")),
            ("0", Decimal("-100.00")),
            ("100.005", Decimal("0.01")),
        ],
    )
    async def test_difference_is_actual_minus_expected(
        self, session_mock, exec_result, open_register, actual, expected_difference
    ):
        register = open_register()
        session_mock.exec.side_effect = [
            exec_result(first_item=register),
            exec_result(all_items=[]),
        ]

        closed = await CashRegisterService.close_register(session_mock, 1, Decimal(actual))

        assert closed.cash_difference == expected_difference
        assert closed.cash_difference == closed.actual_cash - closed.expected_cash

    @pytest.mark.asyncio
    async def test_second_close_is_rejected(self, session_mock, exec_result, open_register):
        register = open_register(
            status=CashRegisterStatus.closed, active_establishment_id=None
        )
        session_mock.exec.return_value = exec_result(first_item=register)

        with pytest.raises(CashRegisterNotOpenError):
            await CashRegisterService.close_register(session_mock, 1, Decimal("100"))

        assert session_mock.exec.await_count == 1

    @pytest.mark.asyncio
    async def test_close_unknown_register(self, session_mock, exec_result):
        session_mock.exec.return_value = exec_result(first_item=None)

        with pytest.raises(CashRegisterNotFoundError):
            await CashRegisterService.close_register(session_mock, 999, Decimal("0"))

    @pytest.mark.asyncio
    async def test_negative_actual_cash_rejected(self, session_mock):
        with pytest.raises(CashRegisterError):
            await CashRegisterService.close_register(session_mock, 1, Decimal("-5"))


class TestReconciliation:
    @pytest.mark.parametrize(
        "difference, status",
        [
            (Decimal("0"), ReconciliationStatus.balanced),
            (Decimal("0.009"), ReconciliationStatus.balanced),
            (Decimal("0.01"), ReconciliationStatus.surplus),
            (Decimal("-0.01"), ReconciliationStatus.shortage),
            (None, ReconciliationStatus.balanced),
        ],
    )
    def test_reconciliation_status(self, difference, status):
        assert CashRegisterService.reconciliation_status(difference) == status


class TestReport:
    def _closed(self, open_register):
        return open_register(
            id=3,
            status=CashRegisterStatus.closed,
            closed_at=datetime.datetime(2026, 3, 10, 23, 30),
            actual_cash=Decimal("180.00"),
            expected_cash=Decimal("200.00"),
            cash_difference=Decimal("-20.00"),
            total_cash=Decimal("100.00"),
            total_sales=Decimal("100.00"),
            total_orders=4,
        )

    def test_report_rows(self, open_register):
        rows = CashRegisterService.build_report_rows(
            [self._closed(open_register), open_register(id=4)]
        )

        assert len(rows) == 2
        closed_row, open_row = rows
        assert len(closed_row) == len(REPORT_COLUMNS)
        assert closed_row[0] == 3
        assert closed_row[1] == "2026-03-10 09:00"
        assert closed_row[3] == "Cerrada"
        assert closed_row[7] == -20.0
        assert closed_row[8] == "Faltante"
        assert closed_row[-1] == 4
        assert open_row[3] == "Abierta"
        assert open_row[6] == ""
        assert open_row[8] == ""

    def test_report_workbook(self, open_register):
        data = CashRegisterService.build_report_workbook([self._closed(open_register)])

        workbook = load_workbook(BytesIO(data))
        sheet = workbook.active
        assert sheet.title == "Historial de Cajas"
        assert [cell.value for cell in sheet[1]] == REPORT_COLUMNS
        assert sheet.cell(row=2, column=1).value == 3
