from __future__ import annotations

import datetime
from typing import Any, Dict, List

from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.enums import NotificationType
from mis_canchas.models import Notification


class NotificationNotFoundError(ValueError):
    pass


class NotificationService:
    @staticmethod
    async def create(
        session: AsyncSession,
        user_id: int,
        notification_type: NotificationType | str,
        title: str,
        message: str = "",
        data: Dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=NotificationType(notification_type),
            title=title,
            message=message,
            data=dict(data or {}),
            is_read=False,
            created_at=datetime.datetime.now(),
        )
        session.add(notification)
        return notification

    @staticmethod
    async def list_for_user(
        session: AsyncSession,
        user_id: int,
        unread_only: bool = False,
        limit: int = 50,
    ) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712
        query = query.order_by(Notification.created_at.desc()).limit(limit)
        return list((await session.exec(query)).all())

    @staticmethod
    async def unread_count(session: AsyncSession, user_id: int) -> int:
        query = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.is_read == False)  # noqa: E712
        )
        return int((await session.exec(query)).first() or 0)

    @staticmethod
    async def mark_read(
        session: AsyncSession,
        notification_id: int,
        user_id: int,
    ) -> Notification:
        notification = (
            await session.exec(
                select(Notification)
                .where(Notification.id == notification_id)
                .where(Notification.user_id == user_id)
            )
        ).first()
        if not notification:
            raise NotificationNotFoundError("Notificacion no encontrada.")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.datetime.now()
            session.add(notification)
            await session.flush()
        return notification

    @staticmethod
    async def mark_all_read(session: AsyncSession, user_id: int) -> int:
        unread = (
            await session.exec(
                select(Notification)
                .where(Notification.user_id == user_id)
                .where(Notification.is_read == False)  # noqa: E712
            )
        ).all()
        now = datetime.datetime.now()
        for notification in unread:
            notification.is_read = True
            notification.read_at = now
            session.add(notification)
        if unread:
            await session.flush()
        return len(unread)
