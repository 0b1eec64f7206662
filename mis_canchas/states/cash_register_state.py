"""Estado de la caja del establecimiento.

Mantiene la caja abierta (o None), el historial de cierres y el sondeo
periodico que revalida la caja contra el servidor mientras esta abierta.
"""
import reflex as rx

from mis_canchas.constants import CASH_REGISTER_POLL_SECONDS
from mis_canchas.enums import CashRegisterStatus
from mis_canchas.models import CashRegister
from mis_canchas.services.cash_register_service import (
    CashRegisterError,
    CashRegisterNotOpenError,
    CashRegisterService,
)
from mis_canchas.utils.dates import format_datetime_display
from mis_canchas.utils.db import get_async_session
from mis_canchas.utils.formatting import parse_float_safe
from mis_canchas.utils.logger import get_logger
from mis_canchas.utils.sync_poller import SyncPoller

from .mixin_state import MixinState, require_role
from .types import CashRegisterInfo

logger = get_logger("CashRegisterState")


def _money(value) -> float:
    return float(value) if value is not None else 0.0


def cash_register_snapshot(register: CashRegister) -> CashRegisterInfo:
    difference = register.cash_difference
    reconciliation = (
        CashRegisterService.reconciliation_status(difference).value
        if difference is not None
        else ""
    )
    return {
        "id": register.id,
        "establishment_id": register.establishment_id,
        "status": getattr(register.status, "value", register.status),
        "opened_at": format_datetime_display(register.opened_at),
        "closed_at": format_datetime_display(register.closed_at),
        "initial_cash": _money(register.initial_cash),
        "expected_cash": _money(register.expected_cash),
        "actual_cash": _money(register.actual_cash),
        "cash_difference": _money(difference),
        "reconciliation": reconciliation,
        "total_cash": _money(register.total_cash),
        "total_card": _money(register.total_card),
        "total_transfer": _money(register.total_transfer),
        "total_credit_card": _money(register.total_credit_card),
        "total_debit_card": _money(register.total_debit_card),
        "total_mercadopago": _money(register.total_mercadopago),
        "total_other": _money(register.total_other),
        "total_sales": _money(register.total_sales),
        "total_expenses": _money(register.total_expenses),
        "total_orders": int(register.total_orders or 0),
        "total_movements": int(register.total_movements or 0),
    }


class CashRegisterState(MixinState):
    cash_register: CashRegisterInfo | None = None
    cash_register_history: list[CashRegisterInfo] = []
    last_closed_register: CashRegisterInfo | None = None
    cash_register_loading: bool = False
    cash_register_submitting: bool = False
    cash_register_polling: bool = False
    cash_open_amount_input: str = "0"
    cash_open_notes: str = ""
    cash_close_amount_input: str = ""
    cash_close_notes: str = ""
    cash_close_modal_open: bool = False

    @rx.var
    def cash_register_is_open(self) -> bool:
        return bool(
            self.cash_register
            and self.cash_register.get("status") == CashRegisterStatus.open.value
        )

    @rx.event
    def set_cash_open_amount_input(self, value: str):
        self.cash_open_amount_input = value or "0"

    @rx.event
    def set_cash_open_notes(self, value: str):
        self.cash_open_notes = value or ""

    @rx.event
    def set_cash_close_amount_input(self, value: str):
        self.cash_close_amount_input = value or ""

    @rx.event
    def set_cash_close_notes(self, value: str):
        self.cash_close_notes = value or ""

    @rx.event
    def open_cash_close_modal(self):
        if not self.cash_register:
            return rx.toast("No hay una caja abierta.", duration=3000)
        self.cash_close_amount_input = ""
        self.cash_close_notes = ""
        self.cash_close_modal_open = True

    @rx.event
    def close_cash_close_modal(self):
        self.cash_close_modal_open = False

    def _cash_register_polls(self) -> bool:
        return bool(
            self.cash_register
            and self.cash_register.get("status") == CashRegisterStatus.open.value
        )

    async def _refresh_cash_register(self) -> None:
        establishment_id = self._establishment_id()
        if not establishment_id:
            self.cash_register = None
            return

        async with get_async_session() as session:
            register = await CashRegisterService.get_active(session, establishment_id)
        self.cash_register = cash_register_snapshot(register) if register else None

    async def _refresh_cash_register_history(self) -> None:
        establishment_id = self._establishment_id()
        if not establishment_id:
            self.cash_register_history = []
            return

        async with get_async_session() as session:
            registers = await CashRegisterService.list_registers(session, establishment_id)
        self.cash_register_history = [cash_register_snapshot(r) for r in registers]

    @rx.event
    @require_role("staff", "admin")
    async def load_cash_register(self):
        """Carga la caja abierta y el historial; inicia el sondeo si corresponde."""
        self.cash_register_loading = True
        yield
        try:
            await self._refresh_cash_register()
            await self._refresh_cash_register_history()
        finally:
            self.cash_register_loading = False
        if self._cash_register_polls():
            yield type(self).start_cash_register_polling

    @rx.event
    @require_role("staff", "admin")
    async def open_cash_register(self):
        if self.cash_register_submitting:
            return
        establishment_id = self._establishment_id()
        if not establishment_id:
            yield rx.toast("Seleccione un establecimiento.", duration=3000)
            return
        amount = parse_float_safe(self.cash_open_amount_input, default=-1.0)
        if amount < 0:
            yield rx.toast("Ingrese un monto inicial valido.", duration=3000)
            return

        self.cash_register_submitting = True
        yield

        try:
            async with get_async_session() as session:
                register = await CashRegisterService.open_register(
                    session,
                    establishment_id,
                    self._user_id(),
                    amount,
                    self.cash_open_notes,
                )
                await session.commit()
                self.cash_register = cash_register_snapshot(register)
        except CashRegisterError as e:
            yield rx.toast(str(e), duration=3000)
            return
        finally:
            self.cash_register_submitting = False

        self.cash_open_amount_input = "0"
        self.cash_open_notes = ""
        yield rx.toast("Caja abierta correctamente.", duration=3000)
        yield type(self).start_cash_register_polling

    @rx.event
    @require_role("staff", "admin")
    async def close_cash_register(self):
        if self.cash_register_submitting:
            return
        if not self.cash_register:
            yield rx.toast("No hay una caja abierta.", duration=3000)
            return
        raw_amount = (self.cash_close_amount_input or "").strip()
        actual_cash = parse_float_safe(raw_amount, default=-1.0)
        if actual_cash < 0:
            yield rx.toast("Ingrese el efectivo contado.", duration=3000)
            return

        self.cash_register_submitting = True
        yield

        try:
            async with get_async_session() as session:
                register = await CashRegisterService.close_register(
                    session,
                    self.cash_register["id"],
                    actual_cash,
                    self.cash_close_notes,
                    self._user_id(),
                )
                await session.commit()
                closed = cash_register_snapshot(register)
        except CashRegisterError as e:
            if isinstance(e, CashRegisterNotOpenError):
                # Otra terminal ya la cerro
                self.cash_register = None
            yield rx.toast(str(e), duration=3000)
            return
        finally:
            self.cash_register_submitting = False

        self.cash_register = None
        self.last_closed_register = closed
        self.cash_close_modal_open = False
        self.cash_register_history = [closed] + [
            item for item in self.cash_register_history if item["id"] != closed["id"]
        ]
        yield rx.toast("Caja cerrada correctamente.", duration=3000)

    @rx.event(background=True)
    async def start_cash_register_polling(self):
        """Revalida la caja cada intervalo mientras siga abierta."""
        async with self:
            if self.cash_register_polling or not self._cash_register_polls():
                return
            self.cash_register_polling = True

        async def fetch():
            async with self:
                await self._refresh_cash_register()

        poller = SyncPoller(
            fetch,
            CASH_REGISTER_POLL_SECONDS,
            should_continue=self._cash_register_polls,
            name="cash_register",
        )
        try:
            await poller.run()
        finally:
            async with self:
                self.cash_register_polling = False
        logger.info("Sondeo de caja detenido tras %s consultas", poller.ticks)

    @rx.event
    @require_role("staff", "admin")
    async def export_cash_register_history(self):
        establishment_id = self._establishment_id()
        if not establishment_id:
            return rx.toast("Seleccione un establecimiento.", duration=3000)

        async with get_async_session() as session:
            registers = await CashRegisterService.list_registers(session, establishment_id)
        if not registers:
            return rx.toast("No hay cajas para exportar.", duration=3000)
        data = CashRegisterService.build_report_workbook(registers)
        return rx.download(data=data, filename="historial_cajas.xlsx")
