"""
Constantes centralizadas del sistema.

Este módulo contiene todas las constantes mágicas del sistema
para facilitar su mantenimiento y configuración.
"""
from __future__ import annotations

from decimal import Decimal

# =============================================================================
# POLLING / SINCRONIZACIÓN
# =============================================================================

# Intervalo de refresco de la caja abierta (segundos)
CASH_REGISTER_POLL_SECONDS: int = 30

# Intervalo de refresco de notificaciones (segundos)
NOTIFICATIONS_POLL_SECONDS: int = 60


# =============================================================================
# CAJA
# =============================================================================

# Diferencia máxima para considerar la caja cuadrada
CASH_DIFFERENCE_TOLERANCE: Decimal = Decimal("0.01")

# Cantidad de cajas a mostrar en el historial
CASH_REGISTER_HISTORY_LIMIT: int = 30


# =============================================================================
# RESERVAS
# =============================================================================

# Horas mínimas de anticipación para que un jugador cancele
CANCELLATION_MIN_HOURS: int = 2

# Estados de reserva que ocupan el horario de la cancha
BOOKING_BLOCKING_STATUSES: tuple[str, ...] = ("pending", "confirmed", "in_progress")

# Longitud del código de check-in (bytes hex)
CHECK_IN_CODE_BYTES: int = 3

# Paso entre turnos ofrecidos al consultar disponibilidad (minutos)
SLOT_STEP_MINUTES: int = 30

# Horario usado cuando el establecimiento no cargo el suyo
DEFAULT_OPENING_HOURS: dict[str, str] = {"open": "08:00", "close": "23:00"}

WEEKDAY_KEYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


# =============================================================================
# LÍMITES DE TEXTO
# =============================================================================

# Longitud máxima de notas/observaciones
NOTES_MAX_LENGTH: int = 250

# Longitud máxima de razones (cancelación)
REASON_MAX_LENGTH: int = 200


# =============================================================================
# PAGINACIÓN
# =============================================================================

DEFAULT_PAGE_SIZE: int = 20
MAX_PAGE_SIZE: int = 100


# =============================================================================
# RATE LIMITING DE LA API
# =============================================================================

# Peticiones permitidas por ventana
API_RATE_LIMIT: int = 120

# Ventana de rate limiting (segundos)
API_RATE_WINDOW_SECONDS: int = 60

# Reintentos del cliente ante HTTP 429
MAX_RATE_LIMIT_RETRIES: int = 3

# Espera entre avisos de rate limit al usuario (segundos)
RATE_LIMIT_NOTIFICATION_COOLDOWN: float = 5.0


# =============================================================================
# TOKENS Y SESIONES
# =============================================================================

# Duración de token JWT (horas)
TOKEN_EXPIRY_HOURS: int = 24


# =============================================================================
# PAGOS
# =============================================================================

# Estados de Mercado Pago y su equivalente en la reserva
PROVIDER_PAYMENT_STATUS_MAP: dict[str, str] = {
    "approved": "paid",
    "rejected": "failed",
    "cancelled": "failed",
    "refunded": "refunded",
    "charged_back": "refunded",
}


# =============================================================================
# CLIENTE HTTP
# =============================================================================

# URL por defecto de la API (MIS_CANCHAS_API_URL la reemplaza)
DEFAULT_API_URL: str = "http://localhost:8000"

# Timeout de las peticiones del cliente (segundos)
API_CLIENT_TIMEOUT: float = 10.0
