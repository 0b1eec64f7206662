"""Cliente HTTP para consumidores remotos de la API."""
from mis_canchas.client.api_client import (
    ApiError,
    MisCanchasClient,
    RateLimitExceededError,
    parse_retry_after,
)
from mis_canchas.client.rate_limit_notifier import RateLimitNotifier


def create_client(**kwargs) -> MisCanchasClient:
    """Cliente con los avisos de rate limit ya conectados."""
    notifier = kwargs.pop("notifier", None) or RateLimitNotifier()
    client = MisCanchasClient(**kwargs)
    client.on_rate_limit_hit(notifier)
    return client


__all__ = [
    "ApiError",
    "MisCanchasClient",
    "RateLimitExceededError",
    "RateLimitNotifier",
    "create_client",
    "parse_retry_after",
]
