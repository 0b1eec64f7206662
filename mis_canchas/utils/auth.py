from __future__ import annotations

import datetime
import os
from typing import Any

import jwt
from dotenv import load_dotenv
from jwt import ExpiredSignatureError, PyJWTError

from mis_canchas.constants import TOKEN_EXPIRY_HOURS

load_dotenv()

ALGORITHM = "HS256"


def _secret_key() -> str:
    value = os.getenv("AUTH_SECRET_KEY")
    if not value:
        raise RuntimeError("Missing required environment variable: AUTH_SECRET_KEY")
    return value


def create_access_token(subject: str | Any, role: str = "player") -> str:
    expire = datetime.datetime.now(tz=datetime.timezone.utc) + datetime.timedelta(
        hours=TOKEN_EXPIRY_HOURS
    )
    payload = {
        "sub": str(subject),
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, _secret_key(), algorithm=ALGORITHM)


def decode_token(token: str) -> dict | None:
    if not token:
        return None
    try:
        payload = jwt.decode(token, _secret_key(), algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        return None
    except PyJWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload


def verify_token(token: str) -> str | None:
    payload = decode_token(token)
    if not payload:
        return None
    return str(payload["sub"])
