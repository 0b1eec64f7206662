import os
from urllib.parse import quote_plus
from contextlib import asynccontextmanager
from typing import AsyncIterator

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.utils.logger import get_logger

load_dotenv()

logger = get_logger("Database")

_async_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def _require_env(var_name: str) -> str:
    """Obtiene una variable de entorno obligatoria o lanza error."""
    value = os.getenv(var_name)
    if not value:
        raise RuntimeError(f"Variable de entorno requerida no encontrada: {var_name}")
    return value


def database_url(async_driver: bool = True) -> str:
    """URL de conexion; DATABASE_URL tiene prioridad sobre las variables DB_*."""
    explicit = (os.getenv("DATABASE_URL") or "").strip()
    if explicit:
        if async_driver:
            return explicit.replace("+pymysql", "+aiomysql")
        return explicit.replace("+aiomysql", "+pymysql")
    user = quote_plus(_require_env("DB_USER"))
    password = quote_plus(_require_env("DB_PASSWORD"))
    host = _require_env("DB_HOST")
    port = os.getenv("DB_PORT", "3306")
    name = _require_env("DB_NAME")
    driver = "mysql+aiomysql" if async_driver else "mysql+pymysql"
    return f"{driver}://{user}:{password}@{host}:{port}/{name}"


def get_async_engine() -> AsyncEngine:
    global _async_engine
    if _async_engine is None:
        url = database_url()
        options = {"pool_pre_ping": True}
        if not url.startswith("sqlite"):
            options.update(pool_size=20, max_overflow=30, pool_recycle=1800)
        _async_engine = create_async_engine(url, **options)
    return _async_engine


def _get_session_factory() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Context manager asíncrono para obtener una sesión de base de datos."""
    async with _get_session_factory()() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Error en sesión DB: {e}")
            await session.rollback()
            raise
