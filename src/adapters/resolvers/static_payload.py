"""Resolver estático: payload de initPayment a partir del catálogo."""

from __future__ import annotations

from typing import Iterable

from core.domain.models import GameDefinition, PricePoint
from core.domain.options import CheckOptions
from core.errors import InvalidInputError, PayloadBuildError
from core.normalize import map_server
from core.pricing import PriceStrategy, pick_price_point
from core.registry import GameRegistry
from core.support.order_profile import encode_order_profile

ORDER_PROFILE_FIELD = "order.data.profile"


class StaticPayloadResolver:
    """Construye el formulario plano que espera Codashop.

    Price point, por prioridad: override de la llamada > estrategia (de la
    llamada o de la configuración) sobre los price points de la definición >
    valor del template.
    """

    def __init__(
        self,
        registry: GameRegistry,
        *,
        price_strategy: PriceStrategy | None = None,
        price_target: float | None = None,
        prefer_ids: Iterable[int] | None = None,
    ) -> None:
        self._registry = registry
        self._price_strategy = price_strategy
        self._price_target = price_target
        self._prefer_ids = list(prefer_ids or [])

    def resolve(
        self,
        game_code: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        options: CheckOptions | None = None,
    ) -> dict[str, str]:
        definition = self._registry.get(game_code)
        if definition is None:
            raise InvalidInputError(f"Unknown game: {game_code}")
        return self.resolve_definition(definition, user_id, zone_id, options)

    def resolve_definition(
        self,
        definition: GameDefinition,
        user_id: str | int,
        zone_id: str | int | None = None,
        options: CheckOptions | None = None,
    ) -> dict[str, str]:
        code = definition.code
        options = options or CheckOptions()
        if definition.requires_zone and (zone_id is None or str(zone_id) == ""):
            raise InvalidInputError(f"Server/Zone is required for {code}")
        if definition.codashop is None:
            raise InvalidInputError(f"{code} has no Codashop template")

        if zone_id is not None and str(zone_id) != "":
            zone_id = map_server(definition.server_map, zone_id)

        payload = definition.codashop.render(user_id, zone_id, self._pick_price_point(definition, options))

        if options.price_point_id is not None:
            payload["voucherPricePoint.id"] = str(options.price_point_id)
        if options.price_point_price is not None:
            payload["voucherPricePoint.price"] = f"{options.price_point_price:.4f}"

        zone = payload.get("user.zoneId")
        if zone and "exUserInfo" not in options.extras:
            payload["exUserInfo"] = zone

        payload.update(options.extras)
        if options.with_profile and ORDER_PROFILE_FIELD not in payload:
            payload[ORDER_PROFILE_FIELD] = encode_order_profile()

        if not payload.get("voucherTypeName"):
            raise PayloadBuildError(f"Payload template for {code} returned invalid payload.")
        return payload

    def _pick_price_point(self, definition: GameDefinition, options: CheckOptions) -> PricePoint | None:
        if options.price_point_id is not None and options.price_point_price is not None:
            return PricePoint(id=options.price_point_id, price=options.price_point_price)
        strategy = options.price_strategy or self._price_strategy
        if strategy is None or not definition.price_points:
            return None
        return pick_price_point(
            definition.price_points,
            strategy,
            target=options.price_target if options.price_target is not None else self._price_target,
            prefer_ids=options.prefer_ids or self._prefer_ids,
        )
