"""Tests para mis_canchas/client/rate_limit_notifier.py"""
from mis_canchas.client.rate_limit_notifier import RateLimitNotifier


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self):
        return self.now


def _notifier():
    messages = []
    clock = Clock()
    notifier = RateLimitNotifier(
        notify=lambda level, title, message: messages.append((level, title, message)),
        cooldown=5.0,
        clock=clock,
    )
    return notifier, messages, clock


def test_escalates_warning_warning_error():
    notifier, messages, clock = _notifier()

    notifier(2, 1)
    clock.now += 6
    notifier(2, 2)
    clock.now += 6
    notifier(7, 3)

    assert [(level, title) for level, title, _ in messages] == [
        ("warning", "Conexión lenta"),
        ("warning", "Muchas solicitudes"),
        ("error", "Límite de solicitudes alcanzado"),
    ]
    assert "7 segundos" in messages[-1][2]


def test_cooldown_suppresses_repeated_messages():
    notifier, messages, clock = _notifier()

    assert notifier.on_rate_limit(1, 1) is True
    clock.now += 2
    assert notifier.on_rate_limit(1, 2) is False

    assert len(messages) == 1


def test_final_error_shown_once():
    notifier, messages, clock = _notifier()

    notifier(3, 3)
    clock.now += 10
    notifier(3, 3)
    clock.now += 10
    notifier(3, 4)

    assert len(messages) == 1
    assert messages[0][0] == "error"


def test_reset_allows_new_cycle():
    notifier, messages, clock = _notifier()

    notifier(3, 3)
    notifier.reset()
    notifier(3, 3)

    assert len(messages) == 2
