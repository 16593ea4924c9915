"""Fachada de alto nivel: `ValidGameClient`.

Cablea transporte, registry, proveedores, discovery y motor a partir de
`AppSettings`, para que la CLI (u otra entrada) no tenga que conocer las
piezas internas.

Los atajos por juego salen de una tabla estática (`SHORTCUTS`), no de
despacho dinámico por nombre de método.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from adapters.catalog_loader import load_catalog_into
from adapters.http_client import HttpTransport
from adapters.providers import CodashopProvider, GopayGamesProvider
from adapters.resolvers import DiscoveredPage, PageDiscoveryResolver, StaticPayloadResolver
from core.config import AppSettings
from core.domain.models import GameDefinition, ProviderKey, ValidationResult
from core.domain.options import CheckOptions
from core.interfaces.transport import Transport
from core.registry import GameRegistry
from core.services.validation_engine import ValidationEngine
from core.support.backoff import backoff_sequence
from core.support.rate_limiter import TokenBucket

SHORTCUTS: dict[str, str] = {
    "freefire": "freefire",
    "mobile_legends": "mobilelegends",
    "call_of_duty": "cod",
    "pubg_mobile": "pubg",
    "honor_of_kings": "hok",
    "valorant": "valorant",
    "arena_of_valor": "aov",
    "point_blank": "pb",
    "fc_mobile": "fcmobile",
    "magic_chess": "magicchessgogo",
    "eight_ball_pool": "8ballpool",
    "azur_lane": "azurlane",
    "badlanders": "badlanders",
    "hago": "hago",
}


class ValidGameClient:
    """Punto de entrada de la librería."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        registry: GameRegistry | None = None,
        transport: Transport | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or AppSettings()
        self._logger = logger or logging.getLogger(__name__)
        self._registry = registry or GameRegistry()

        if self._settings.catalog_path is not None:
            codes = load_catalog_into(self._registry, self._settings.catalog_path)
            self._logger.info(
                "Loaded catalog file",
                extra={"path": str(self._settings.catalog_path), "games": len(codes)},
            )

        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpTransport(self._settings)

        retry_delays = backoff_sequence(self._settings.http_retries)
        self._codashop = CodashopProvider(
            self._registry,
            self._transport,
            resolver=StaticPayloadResolver(
                self._registry,
                price_strategy=self._settings.price_strategy,
                price_target=self._settings.price_target,
                prefer_ids=self._settings.price_prefer_ids,
            ),
            debug=self._settings.debug,
            retry_delays=retry_delays,
            sleep=sleep,
        )
        self._gopay = GopayGamesProvider(
            self._registry,
            self._transport,
            debug=self._settings.debug,
            retry_delays=retry_delays,
            sleep=sleep,
        )
        self._discovery = PageDiscoveryResolver(self._transport, base_url=self._settings.codashop_base_url)
        self._engine = ValidationEngine(
            self._registry,
            [self._codashop, self._gopay],
            preferred=self._settings.preferred_provider,
            fallback=self._settings.fallback,
            discovery=self._discovery,
            rate_limiter=TokenBucket(self._settings.discovery_capacity, self._settings.discovery_rate),
            retry_delays=retry_delays,
            cache_discovered=self._settings.cache_discovered,
            sleep=sleep,
        )

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def registry(self) -> GameRegistry:
        return self._registry

    @property
    def engine(self) -> ValidationEngine:
        return self._engine

    def close(self) -> None:
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            self._transport.close()

    def __enter__(self) -> "ValidGameClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # -- validación -------------------------------------------------------

    def check(
        self,
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None = None,
        *,
        product_path: str | None = None,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        return self._engine.check(game, user_id, zone_id, product_path=product_path, options=options)

    def check_with(
        self,
        provider: ProviderKey | str,
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None = None,
        *,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        return self._engine.check_with(provider, game, user_id, zone_id, options=options)

    def check_path(
        self,
        path_slug: str,
        user_id: str | int | None,
        zone_id: str | int | None = None,
        *,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        """Scrapea la página de producto y valida contra Codashop, esté o no en el catálogo."""

        return self._engine.check_path(path_slug, user_id, zone_id, options=options)

    def shortcut(self, name: str, user_id: str | int | None, zone_id: str | int | None = None) -> ValidationResult:
        code = SHORTCUTS.get(name)
        if code is None:
            raise KeyError(f"Unknown shortcut: {name}")
        return self.check(code, user_id, zone_id)

    def freefire(self, user_id: str | int) -> ValidationResult:
        return self.shortcut("freefire", user_id)

    def mobile_legends(self, user_id: str | int, zone_id: str | int) -> ValidationResult:
        return self.shortcut("mobile_legends", user_id, zone_id)

    def call_of_duty(self, user_id: str | int) -> ValidationResult:
        return self.shortcut("call_of_duty", user_id)

    def pubg_mobile(self, user_id: str | int) -> ValidationResult:
        return self.shortcut("pubg_mobile", user_id)

    def honor_of_kings(self, user_id: str | int) -> ValidationResult:
        return self.shortcut("honor_of_kings", user_id)

    def valorant(self, user_id: str | int) -> ValidationResult:
        return self.shortcut("valorant", user_id)

    # -- discovery --------------------------------------------------------

    def discover(self, path_slug: str) -> GameDefinition:
        """Descubre una página de producto; lanza si faltan campos."""

        return self._discovery.discover(path_slug)

    def inspect_page(self, path_slug: str) -> DiscoveredPage:
        return self._discovery.inspect(path_slug)

    def payload_from_path(
        self,
        path_slug: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        price_point_id: int | None = None,
        price: float | None = None,
    ) -> dict[str, str]:
        return self._discovery.resolve_from_path(path_slug, user_id, zone_id, price_point_id, price)

    # -- registry ---------------------------------------------------------

    def list_games(self) -> list[dict[str, Any]]:
        return self._registry.list_games()

    def search_games(self, query: str) -> dict[str, str]:
        return self._registry.search(query)

    def games_for_provider(self, provider: ProviderKey | str) -> list[str]:
        return self._registry.games_for_provider(provider)

    def supported_games(self) -> dict[str, str]:
        return self._registry.labels()

    def register(self, code: str, definition: GameDefinition) -> None:
        self._registry.register(code, definition)

    def alias(self, alias_text: str, code: str) -> None:
        self._registry.alias(alias_text, code)
