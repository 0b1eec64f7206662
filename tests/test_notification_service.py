"""Tests para avisos y busqueda de establecimientos."""
import datetime

import pytest

from mis_canchas.enums import NotificationType
from mis_canchas.models import Notification
from mis_canchas.services.establishment_service import (
    EstablishmentNotFoundError,
    EstablishmentService,
)
from mis_canchas.services.notification_service import (
    NotificationNotFoundError,
    NotificationService,
)


def _notification(notification_id, is_read=False):
    return Notification(
        id=notification_id,
        user_id=3,
        type=NotificationType.booking_confirmed,
        title="Reserva confirmada",
        is_read=is_read,
        created_at=datetime.datetime(2026, 3, 10, 12, 0),
    )


class TestNotificationService:
    @pytest.mark.asyncio
    async def test_create_adds_unread_notification(self, session_mock):
        notification = await NotificationService.create(
            session_mock, 3, "payment_received", "Pago recibido", data={"booking_id": 10}
        )

        assert notification.type == NotificationType.payment_received
        assert notification.is_read is False
        assert notification.data == {"booking_id": 10}
        assert session_mock.added == [notification]

    @pytest.mark.asyncio
    async def test_mark_read_stamps_read_at(self, session_mock, exec_result):
        notification = _notification(1)
        session_mock.exec.return_value = exec_result(first_item=notification)

        result = await NotificationService.mark_read(session_mock, 1, 3)

        assert result.is_read is True
        assert result.read_at is not None
        session_mock.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_mark_read_of_foreign_notification(self, session_mock, exec_result):
        session_mock.exec.return_value = exec_result(first_item=None)

        with pytest.raises(NotificationNotFoundError):
            await NotificationService.mark_read(session_mock, 1, 99)

    @pytest.mark.asyncio
    async def test_mark_all_read(self, session_mock, exec_result):
        items = [_notification(1), _notification(2)]
        session_mock.exec.return_value = exec_result(all_items=items)

        updated = await NotificationService.mark_all_read(session_mock, 3)

        assert updated == 2
        assert all(item.is_read for item in items)

    @pytest.mark.asyncio
    async def test_unread_count(self, session_mock, exec_result):
        session_mock.exec.return_value = exec_result(first_item=4)

        assert await NotificationService.unread_count(session_mock, 3) == 4


class TestEstablishmentService:
    @pytest.mark.asyncio
    async def test_search_clamps_pagination(
        self, session_mock, exec_result, establishment_sample
    ):
        session_mock.exec.side_effect = [
            exec_result(first_item=1),
            exec_result(all_items=[establishment_sample]),
        ]

        items, total, page, limit = await EstablishmentService.search(
            session_mock, city="Cordoba", sport="padel", query="norte", page=0, limit=1000
        )

        assert items == [establishment_sample]
        assert total == 1
        assert page == 1
        assert limit == 100

    @pytest.mark.asyncio
    async def test_get_missing_establishment(self, session_mock, exec_result):
        session_mock.exec.return_value = exec_result(first_item=None)

        with pytest.raises(EstablishmentNotFoundError):
            await EstablishmentService.get_with_courts(session_mock, 404)
