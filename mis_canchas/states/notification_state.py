import reflex as rx

from mis_canchas.constants import NOTIFICATIONS_POLL_SECONDS
from mis_canchas.models import Notification
from mis_canchas.services.notification_service import (
    NotificationNotFoundError,
    NotificationService,
)
from mis_canchas.utils.dates import format_datetime_display
from mis_canchas.utils.db import get_async_session
from mis_canchas.utils.sync_poller import SyncPoller

from .mixin_state import MixinState, require_login
from .types import NotificationInfo


def notification_snapshot(notification: Notification) -> NotificationInfo:
    return {
        "id": notification.id,
        "type": getattr(notification.type, "value", notification.type),
        "title": notification.title,
        "message": notification.message or "",
        "is_read": bool(notification.is_read),
        "created_at": format_datetime_display(notification.created_at),
    }


class NotificationState(MixinState):
    notifications: list[NotificationInfo] = []
    unread_notifications: int = 0
    notifications_polling: bool = False

    async def _refresh_notifications(self) -> None:
        user_id = self._user_id()
        if not user_id:
            self.notifications = []
            self.unread_notifications = 0
            return
        async with get_async_session() as session:
            items = await NotificationService.list_for_user(session, user_id)
            unread = await NotificationService.unread_count(session, user_id)
        self.notifications = [notification_snapshot(item) for item in items]
        self.unread_notifications = unread

    @rx.event
    @require_login()
    async def load_notifications(self):
        await self._refresh_notifications()
        if not self.notifications_polling:
            return type(self).start_notifications_polling

    @rx.event
    @require_login()
    async def mark_notification_read(self, notification_id: int):
        try:
            async with get_async_session() as session:
                await NotificationService.mark_read(
                    session, int(notification_id), self._user_id()
                )
                await session.commit()
        except NotificationNotFoundError as e:
            return rx.toast(str(e), duration=3000)
        updated = []
        for item in self.notifications:
            if item["id"] == int(notification_id) and not item["is_read"]:
                item = {**item, "is_read": True}
                self.unread_notifications = max(self.unread_notifications - 1, 0)
            updated.append(item)
        self.notifications = updated

    @rx.event
    @require_login()
    async def mark_all_notifications_read(self):
        async with get_async_session() as session:
            await NotificationService.mark_all_read(session, self._user_id())
            await session.commit()
        self.notifications = [{**item, "is_read": True} for item in self.notifications]
        self.unread_notifications = 0

    @rx.event(background=True)
    async def start_notifications_polling(self):
        """Revisa avisos nuevos mientras haya un usuario con sesion."""
        async with self:
            if self.notifications_polling or not self._user_id():
                return
            self.notifications_polling = True

        async def fetch():
            async with self:
                await self._refresh_notifications()

        poller = SyncPoller(
            fetch,
            NOTIFICATIONS_POLL_SECONDS,
            should_continue=lambda: bool(self._user_id()),
            name="notifications",
        )
        try:
            await poller.run()
        finally:
            async with self:
                self.notifications_polling = False
