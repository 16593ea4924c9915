"""Resolución de payloads: templates estáticos y discovery de páginas."""

from adapters.resolvers.page_discovery import DiscoveredPage, PageDiscoveryResolver
from adapters.resolvers.static_payload import StaticPayloadResolver

__all__ = [
    "DiscoveredPage",
    "PageDiscoveryResolver",
    "StaticPayloadResolver",
]
