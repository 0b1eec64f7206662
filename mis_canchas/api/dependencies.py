"""Dependencias compartidas de la API REST (sesion, usuario, rate limit)."""
from __future__ import annotations

import os
from typing import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.enums import UserRole
from mis_canchas.models import User
from mis_canchas.utils.auth import decode_token
from mis_canchas.utils.db import get_async_session
from mis_canchas.utils.logger import get_logger
from mis_canchas.utils.rate_limit import (
    build_key,
    configured_limit,
    configured_window,
    is_rate_limited,
    record_request,
    retry_after_seconds,
)

logger = get_logger("API")

bearer_scheme = HTTPBearer(auto_error=False)

STAFF_ROLES = {UserRole.staff.value, UserRole.admin.value}


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_async_session() as session:
        yield session


def _token_subject(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    if not payload:
        return None
    return str(payload["sub"])


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    subject = _token_subject(credentials)
    if not subject or not subject.isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token invalido o expirado.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await session.get(User, int(subject))
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado o inactivo.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def user_role(user: User) -> str:
    return getattr(user.role, "value", user.role) or UserRole.player.value


def is_staff(user: User) -> bool:
    return user_role(user) in STAFF_ROLES


async def require_staff(user: User = Depends(get_current_user)) -> User:
    if not is_staff(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tiene permisos para esta operacion.",
        )
    return user


def ensure_establishment_access(user: User, establishment_id: int) -> None:
    """El personal solo opera sobre su establecimiento; el admin sobre todos."""
    if user_role(user) == UserRole.admin.value:
        return
    if user.establishment_id != establishment_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No tiene acceso a este establecimiento.",
        )


def trusted_proxy_count() -> int:
    raw = (os.getenv("TRUSTED_PROXY_COUNT") or "").strip()
    return int(raw) if raw.isdigit() else 0


def _client_ip(request: Request) -> str | None:
    """
    IP real del cliente. X-Forwarded-For solo se considera cuando la API
    corre detras de TRUSTED_PROXY_COUNT proxies propios; se toma la
    entrada agregada por el proxy mas externo.
    """
    peer = request.client.host if request.client else None
    proxies = trusted_proxy_count()
    forwarded = request.headers.get("x-forwarded-for")
    if not proxies or not forwarded:
        return peer
    hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    if not hops:
        return peer
    return hops[-min(proxies, len(hops))]


async def rate_limit(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> None:
    """Responde 429 con Retry-After cuando el cliente agota su cupo."""
    key = build_key(_token_subject(credentials), _client_ip(request))
    limit = configured_limit()
    window = configured_window()
    if is_rate_limited(key, limit, window):
        retry_after = retry_after_seconds(key, window)
        logger.warning("Rate limit alcanzado para %s (reintentar en %ss)", key, retry_after)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Demasiadas solicitudes. Intente nuevamente en unos segundos.",
            headers={"Retry-After": str(retry_after)},
        )
    record_request(key, window)
