"""
Rate limiting de la API con soporte para Redis (producción) y memoria (desarrollo).

Cuenta las peticiones por cliente (token o IP) dentro de una ventana
fija y permite responder HTTP 429 con un ``Retry-After`` coherente entre
workers cuando hay Redis disponible.
"""
from __future__ import annotations

import os
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List

import redis

from mis_canchas.constants import API_RATE_LIMIT, API_RATE_WINDOW_SECONDS
from mis_canchas.utils.logger import get_logger, is_production

logger = get_logger("RateLimit")

# =============================================================================
# CONFIGURACIÓN
# =============================================================================

_redis_client: "redis.Redis | None" = None
_memory_store: Dict[str, List[datetime]] = defaultdict(list)


def configured_limit() -> int:
    raw = (os.getenv("API_RATE_LIMIT") or "").strip()
    return int(raw) if raw.isdigit() else API_RATE_LIMIT


def configured_window() -> int:
    raw = (os.getenv("API_RATE_WINDOW_SECONDS") or "").strip()
    return int(raw) if raw.isdigit() else API_RATE_WINDOW_SECONDS


def _get_redis() -> "redis.Redis | None":
    """
    Obtiene cliente Redis configurado.

    Returns:
        Cliente Redis o None si REDIS_URL no está configurado o no responde
    """
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = os.getenv("REDIS_URL", "").strip()
    if not redis_url:
        if is_production():
            logger.warning("REDIS_URL no configurado, rate limiting en memoria.")
        return None

    try:
        _redis_client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        _redis_client.ping()
        logger.info("Redis conectado para rate limiting")
        return _redis_client
    except redis.RedisError as e:
        logger.warning("Redis no disponible, usando memoria: %s", str(e)[:50])
        _redis_client = None
        return None


# =============================================================================
# FUNCIONES PRINCIPALES
# =============================================================================

def _normalize_ip(ip_address: str | None) -> str | None:
    if not ip_address:
        return None
    ip = str(ip_address).strip()
    if "," in ip:
        ip = ip.split(",", 1)[0].strip()
    return ip or None


def build_key(client_id: str | None, ip_address: str | None = None) -> str | None:
    """Clave de conteo: el usuario autenticado tiene prioridad sobre la IP."""
    key = (client_id or "").lower().strip()
    if key:
        return f"user:{key}"
    ip = _normalize_ip(ip_address)
    if ip:
        return f"ip:{ip}"
    return None


def is_rate_limited(
    key: str | None,
    max_requests: int = API_RATE_LIMIT,
    window_seconds: int = API_RATE_WINDOW_SECONDS,
) -> bool:
    """
    Verifica si un cliente agotó sus peticiones en la ventana actual.

    Args:
        key: Clave del cliente (ver build_key)
        max_requests: Número máximo de peticiones permitidas
        window_seconds: Ventana de tiempo en segundos

    Returns:
        True si debe responderse 429, False si puede continuar
    """
    if not key:
        return False

    redis_client = _get_redis()
    if redis_client is not None:
        try:
            count = redis_client.get(f"api_requests:{key}")
            return int(count or 0) >= max_requests
        except redis.RedisError as e:
            logger.error("Error Redis is_rate_limited: %s", e)

    return _is_rate_limited_memory(key, max_requests, window_seconds)


def _is_rate_limited_memory(
    key: str,
    max_requests: int,
    window_seconds: int,
) -> bool:
    """Rate limiting en memoria (single worker)."""
    cutoff = datetime.now() - timedelta(seconds=window_seconds)
    recent = [t for t in _memory_store.get(key, ()) if t > cutoff]
    if not recent:
        _memory_store.pop(key, None)
        return False
    _memory_store[key] = recent
    return len(recent) >= max_requests


def record_request(
    key: str | None,
    window_seconds: int = API_RATE_WINDOW_SECONDS,
) -> None:
    """
    Registra una petición del cliente.

    Args:
        key: Clave del cliente
        window_seconds: Tiempo de expiración del contador
    """
    if not key:
        return

    redis_client = _get_redis()
    if redis_client is not None:
        try:
            redis_key = f"api_requests:{key}"
            pipe = redis_client.pipeline()
            pipe.set(redis_key, 0, ex=window_seconds, nx=True)
            pipe.incr(redis_key)
            pipe.execute()
            return
        except redis.RedisError as e:
            logger.error("Error Redis record_request: %s", e)

    _memory_store[key].append(datetime.now())


def reset_requests(key: str | None) -> None:
    if not key:
        return

    redis_client = _get_redis()
    if redis_client is not None:
        try:
            redis_client.delete(f"api_requests:{key}")
        except redis.RedisError as e:
            logger.error("Error Redis reset_requests: %s", e)

    _memory_store.pop(key, None)


def retry_after_seconds(
    key: str | None,
    window_seconds: int = API_RATE_WINDOW_SECONDS,
) -> int:
    """
    Segundos hasta que el cliente vuelva a tener cupo (mínimo 1).
    """
    if not key:
        return 0

    redis_client = _get_redis()
    if redis_client is not None:
        try:
            ttl = redis_client.ttl(f"api_requests:{key}")
            if ttl and ttl > 0:
                return int(ttl)
            return 1
        except redis.RedisError as e:
            logger.error("Error Redis retry_after_seconds: %s", e)

    attempts = _memory_store.get(key)
    if not attempts:
        return 0
    unlock_time = min(attempts) + timedelta(seconds=window_seconds)
    remaining = (unlock_time - datetime.now()).total_seconds()
    return max(1, int(remaining) + 1)


def get_rate_limit_status() -> dict:
    """
    Obtiene estado del sistema de rate limiting (para debugging).
    """
    redis_client = _get_redis()

    return {
        "backend": "redis" if redis_client else "memory",
        "redis_connected": redis_client is not None,
        "limit": configured_limit(),
        "window_seconds": configured_window(),
        "memory_entries": len(_memory_store),
    }
