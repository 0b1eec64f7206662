"""Tests para los DTO de caja: nombres de campos en el formato JSON."""
from decimal import Decimal

import pytest
from pydantic import ValidationError

from mis_canchas.enums import CashRegisterStatus
from mis_canchas.schemas.cash_register_schemas import (
    CashRegisterCloseDTO,
    CashRegisterOpenDTO,
    CashRegisterOut,
)


@pytest.mark.parametrize("key", ["openingNotes", "opening_notes", "notes"])
def test_open_accepts_opening_notes(key):
    data = CashRegisterOpenDTO.model_validate(
        {"establishmentId": 1, "initialCash": 100, key: "turno manana"}
    )

    assert data.opening_notes == "turno manana"
    assert data.initial_cash == Decimal("100")


@pytest.mark.parametrize("key", ["closingNotes", "notes"])
def test_close_accepts_closing_notes(key):
    data = CashRegisterCloseDTO.model_validate({"actualCash": "95.50", key: "faltan monedas"})

    assert data.closing_notes == "faltan monedas"


def test_close_rejects_nan():
    with pytest.raises(ValidationError):
        CashRegisterCloseDTO.model_validate({"actualCash": "NaN"})


def test_out_uses_mercado_pago_key(open_register):
    register = open_register(total_mercadopago=Decimal("2500.00"))

    body = CashRegisterOut.model_validate(register).to_api()

    assert body["totalMercadoPago"] == 2500.0
    assert body["status"] == CashRegisterStatus.open.value
    assert "totalMercadopago" not in body
