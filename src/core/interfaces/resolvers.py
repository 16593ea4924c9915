"""Contratos de resolución de payloads.

El scraping de tokens es frágil: vive detrás de `PageResolver` para poder
sustituirlo sin tocar el motor ni los proveedores.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import GameDefinition
from core.domain.options import CheckOptions


@runtime_checkable
class PayloadResolver(Protocol):
    def resolve(
        self,
        game_code: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        options: CheckOptions | None = None,
    ) -> dict[str, str]:
        ...


@runtime_checkable
class PageResolver(Protocol):
    def resolve_from_path(
        self,
        path_slug: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        price_point_id: int | None = None,
        price: float | None = None,
    ) -> dict[str, str]:
        ...

    def discover(self, path_slug: str) -> GameDefinition:
        ...
