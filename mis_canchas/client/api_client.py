"""
Cliente HTTP de la API de Mis Canchas.

Envia el token Bearer guardado (argumento, MIS_CANCHAS_TOKEN o archivo de
token) y reintenta las respuestas HTTP 429 respetando Retry-After. Las
escrituras no se reintentan ante ningun otro error.
"""
from __future__ import annotations

import os
import time
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List

import requests
from dotenv import load_dotenv

from mis_canchas.constants import API_CLIENT_TIMEOUT, DEFAULT_API_URL, MAX_RATE_LIMIT_RETRIES
from mis_canchas.utils.logger import get_logger

load_dotenv()

logger = get_logger("ApiClient")

RateLimitListener = Callable[[int, int], Any]

DEFAULT_RETRY_AFTER = 1


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload


class RateLimitExceededError(ApiError):
    def __init__(self, retry_after: int, message: str, payload: Any = None) -> None:
        super().__init__(429, message, payload)
        self.retry_after = retry_after


def _default_token_file() -> Path:
    configured = (os.getenv("MIS_CANCHAS_TOKEN_FILE") or "").strip()
    if configured:
        return Path(configured)
    return Path.home() / ".mis_canchas" / "token"


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: _json_value(value) for key, value in data.items() if value is not None}


def parse_retry_after(value: str | None) -> int:
    try:
        seconds = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER
    return max(seconds, DEFAULT_RETRY_AFTER)


class MisCanchasClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        token_file: str | Path | None = None,
        session: requests.Session | None = None,
        timeout: float = API_CLIENT_TIMEOUT,
        max_retries: int = MAX_RATE_LIMIT_RETRIES,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.base_url = (
            base_url or os.getenv("MIS_CANCHAS_API_URL") or DEFAULT_API_URL
        ).rstrip("/")
        self.token_file = Path(token_file) if token_file else _default_token_file()
        self._token = token
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_retries = max(int(max_retries), 1)
        self._sleep = sleep
        self._listeners: List[RateLimitListener] = []

    # ------------------------------------------------------------------
    # Token
    # ------------------------------------------------------------------

    @property
    def token(self) -> str | None:
        if self._token:
            return self._token
        env_token = (os.getenv("MIS_CANCHAS_TOKEN") or "").strip()
        if env_token:
            return env_token
        if self.token_file.is_file():
            stored = self.token_file.read_text(encoding="utf-8").strip()
            return stored or None
        return None

    def save_token(self, token: str) -> None:
        self._token = token
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        self.token_file.write_text(token, encoding="utf-8")

    def clear_token(self) -> None:
        self._token = None
        if self.token_file.is_file():
            self.token_file.unlink()

    # ------------------------------------------------------------------
    # Rate limit
    # ------------------------------------------------------------------

    def on_rate_limit_hit(self, listener: RateLimitListener) -> Callable[[], None]:
        """Registra un oyente (retry_after, intento); devuelve la baja."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit_rate_limit(self, retry_after: int, attempt: int) -> None:
        for listener in list(self._listeners):
            listener(retry_after, attempt)

    # ------------------------------------------------------------------
    # Transporte
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _error_message(response: requests.Response) -> tuple[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return f"HTTP error! status: {response.status_code}", None
        if isinstance(payload, dict):
            detail = payload.get("detail") or payload.get("message")
            if isinstance(detail, str) and detail:
                return detail, payload
        return f"HTTP error! status: {response.status_code}", payload

    def request(
        self,
        method: str,
        endpoint: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        attempt = 0
        while True:
            try:
                response = self.session.request(
                    method,
                    url,
                    params=_clean(params) if params else None,
                    json=json,
                    headers=self._headers(),
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.error("Fallo la peticion %s %s: %s", method, endpoint, e)
                raise ApiError(0, f"Error de conexion: {e}") from e

            if response.status_code == 429:
                attempt += 1
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
                self._emit_rate_limit(retry_after, attempt)
                if attempt >= self.max_retries:
                    message, payload = self._error_message(response)
                    raise RateLimitExceededError(retry_after, message, payload)
                logger.warning(
                    "HTTP 429 en %s %s, reintento %s en %ss",
                    method,
                    endpoint,
                    attempt,
                    retry_after,
                )
                self._sleep(retry_after)
                continue

            if not response.ok:
                message, payload = self._error_message(response)
                raise ApiError(response.status_code, message, payload)
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

    # ------------------------------------------------------------------
    # Cajas
    # ------------------------------------------------------------------

    def get_active_cash_register(self, establishment_id: int) -> Dict[str, Any] | None:
        return self.request(
            "GET", "/api/cash-registers/active", params={"establishmentId": establishment_id}
        )

    def list_cash_registers(self, establishment_id: int, limit: int | None = None) -> List[Dict[str, Any]]:
        return self.request(
            "GET",
            "/api/cash-registers",
            params={"establishmentId": establishment_id, "limit": limit},
        )

    def open_cash_register(
        self,
        establishment_id: int,
        initial_cash: Any = 0,
        notes: str = "",
    ) -> Dict[str, Any]:
        return self.request(
            "POST",
            "/api/cash-registers",
            json=_clean(
                {
                    "establishmentId": establishment_id,
                    "initialCash": initial_cash,
                    "openingNotes": notes,
                }
            ),
        )

    def close_cash_register(
        self,
        register_id: int,
        actual_cash: Any,
        notes: str = "",
    ) -> Dict[str, Any]:
        return self.request(
            "PUT",
            f"/api/cash-registers/{register_id}/close",
            json=_clean({"actualCash": actual_cash, "closingNotes": notes}),
        )

    def record_cash_movement(
        self,
        register_id: int,
        movement_type: str,
        amount: Any,
        payment_method: str = "cash",
        description: str = "",
        booking_id: int | None = None,
        order_id: str | None = None,
    ) -> Dict[str, Any]:
        return self.request(
            "POST",
            f"/api/cash-registers/{register_id}/movements",
            json=_clean(
                {
                    "movementType": movement_type,
                    "paymentMethod": payment_method,
                    "amount": amount,
                    "description": description,
                    "bookingId": booking_id,
                    "orderId": order_id,
                }
            ),
        )

    # ------------------------------------------------------------------
    # Reservas
    # ------------------------------------------------------------------

    def list_bookings(self) -> List[Dict[str, Any]]:
        return self.request("GET", "/api/bookings")

    def get_booking(self, booking_id: int) -> Dict[str, Any]:
        return self.request("GET", f"/api/bookings/{booking_id}")

    def create_booking(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/api/bookings", json=_clean(data))

    def update_booking(self, booking_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/api/bookings/{booking_id}", json=_clean(data))

    def cancel_booking(self, booking_id: int, reason: str = "") -> Dict[str, Any]:
        return self.request(
            "POST", f"/api/bookings/{booking_id}/cancel", json={"reason": reason}
        )

    def update_booking_payment(
        self,
        booking_id: int,
        payment_status: str,
        payment_method: str | None = None,
        amount: Any = None,
    ) -> Dict[str, Any]:
        return self.request(
            "PUT",
            f"/api/bookings/{booking_id}/payment",
            json=_clean(
                {
                    "paymentStatus": payment_status,
                    "paymentMethod": payment_method,
                    "amount": amount,
                }
            ),
        )

    def list_establishment_reservations(
        self,
        establishment_id: int,
        status: str | None = None,
        date: str | None = None,
    ) -> List[Dict[str, Any]]:
        return self.request(
            "GET",
            f"/api/establishments/{establishment_id}/reservations",
            params={"status": status, "date": date},
        )

    def get_court_availability(
        self,
        court_id: int,
        date: str,
        duration: int = 60,
    ) -> Dict[str, Any]:
        return self.request(
            "GET",
            f"/api/courts/{court_id}/availability",
            params={"date": date, "duration": duration},
        )

    # ------------------------------------------------------------------
    # Establecimientos
    # ------------------------------------------------------------------

    def search_establishments(
        self,
        city: str | None = None,
        sport: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> Dict[str, Any]:
        return self.request(
            "GET",
            "/api/establishments",
            params={
                "city": city or None,
                "sport": sport or None,
                "q": search or None,
                "page": page,
                "limit": limit,
            },
        )

    def get_establishment(self, establishment_id: int) -> Dict[str, Any]:
        return self.request("GET", f"/api/establishments/{establishment_id}")

    # ------------------------------------------------------------------
    # Notificaciones
    # ------------------------------------------------------------------

    def list_notifications(self, unread_only: bool = False) -> Dict[str, Any]:
        return self.request(
            "GET", "/api/notifications", params={"unreadOnly": str(unread_only).lower()}
        )

    def mark_notification_read(self, notification_id: int) -> Dict[str, Any]:
        return self.request("PUT", f"/api/notifications/{notification_id}/read")

    def mark_all_notifications_read(self) -> Dict[str, Any]:
        return self.request("PUT", "/api/notifications/read-all")
