import hmac
import os

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.api.dependencies import get_session
from mis_canchas.schemas.booking_schemas import BookingOut, PaymentWebhookDTO
from mis_canchas.services.booking_service import BookingLifecycleService
from mis_canchas.utils.logger import get_logger

logger = get_logger("PaymentsWebhook")

router = APIRouter(prefix="/api/payments", tags=["payments"])

UNSIGNED_WEBHOOK_ENVS = {"dev", "development"}


def _verify_webhook_secret(provided: str | None) -> None:
    """
    Sin PAYMENTS_WEBHOOK_SECRET solo se aceptan avisos con ENV=dev (o sin
    ENV); en cualquier otro entorno el webhook queda cerrado.
    """
    expected = (os.getenv("PAYMENTS_WEBHOOK_SECRET") or "").strip()
    if not expected:
        env = (os.getenv("ENV") or "dev").strip().lower()
        if env in UNSIGNED_WEBHOOK_ENVS:
            logger.warning("PAYMENTS_WEBHOOK_SECRET no configurado, webhook sin verificar.")
            return
        logger.error("PAYMENTS_WEBHOOK_SECRET no configurado, webhook rechazado.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Webhook de pagos no configurado.",
        )
    if not provided or not hmac.compare_digest(provided, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Firma de webhook invalida.",
        )


@router.post("/webhook", response_model=BookingOut)
async def payment_webhook(
    payload: PaymentWebhookDTO,
    x_webhook_secret: str | None = Header(default=None),
    session: AsyncSession = Depends(get_session),
):
    """Recibe el estado de pago informado por Mercado Pago."""
    _verify_webhook_secret(x_webhook_secret)
    logger.info(
        "Webhook de pago: reserva %s estado %s", payload.booking_id, payload.status
    )
    booking = await BookingLifecycleService.apply_provider_status(
        session,
        payload.booking_id,
        payload.status,
        payload.payment_id,
    )
    await session.commit()
    return BookingOut.model_validate(booking)
