"""Primitivas de soporte (rate limiting, backoff, perfil de pedido)."""

from core.support.backoff import backoff_sequence, retry_call
from core.support.order_profile import encode_order_profile
from core.support.rate_limiter import TokenBucket

__all__ = [
    "TokenBucket",
    "backoff_sequence",
    "encode_order_profile",
    "retry_call",
]
