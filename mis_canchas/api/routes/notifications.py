from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.api.dependencies import get_current_user, get_session
from mis_canchas.models import User
from mis_canchas.schemas.notification_schemas import NotificationListOut, NotificationOut
from mis_canchas.services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListOut)
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    items = await NotificationService.list_for_user(
        session, user.id, unread_only=unread_only, limit=limit
    )
    unread = await NotificationService.unread_count(session, user.id)
    return NotificationListOut(
        items=[NotificationOut.model_validate(item) for item in items],
        unread_count=unread,
    )


@router.put("/read-all")
async def mark_all_notifications_read(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    updated = await NotificationService.mark_all_read(session, user.id)
    await session.commit()
    return {"updated": updated}


@router.put("/{notification_id}/read", response_model=NotificationOut)
async def mark_notification_read(
    notification_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    notification = await NotificationService.mark_read(session, notification_id, user.id)
    await session.commit()
    return NotificationOut.model_validate(notification)
