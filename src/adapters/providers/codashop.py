"""Proveedor Codashop: endpoint initPayment.

Envía el formulario de inicio de pedido y lee la respuesta JSON. Un pedido
nunca se completa: Codashop valida el ID (y devuelve el nickname) antes de
pedir el pago.

Clasificación:
- 2xx y `errorCode == ""`  -> OK
- `errorCode` no vacío     -> API_ERROR (mensaje de `errorMsg`)
- cualquier otra cosa      -> UNEXPECTED_FORMAT
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Sequence

from adapters.http_client import FORM_HEADERS
from adapters.providers.base import BaseProvider, parse_json_body
from adapters.resolvers.static_payload import StaticPayloadResolver
from core.domain.models import GameDefinition, ProviderKey, StatusCode, ValidationResult
from core.domain.options import CheckOptions
from core.errors import HttpError
from core.interfaces.transport import Transport
from core.registry import GameRegistry

INIT_PAYMENT_URL = "https://order-sg.codashop.com/initPayment.action"

# Flags de sesión que el checkout web envía siempre ("0" = false en formulario).
SESSION_FLAGS = {
    "userVariablePrice": "0",
    "isRiskCheckingEnabled": "0",
    "userCustomCommerceEmailConsent": "0",
    "userEmailConsent": "0",
    "userMarketingConsent": "0",
    "userMobileConsent": "0",
}
SESSION_ID_FIELDS = ("deviceId", "userSessionId", "checkoutId")


def apply_session_defaults(
    payload: dict[str, str],
    *,
    id_factory: Callable[[], object] = uuid.uuid4,
) -> dict[str, str]:
    """Completa ids de sesión y flags sin pisar lo que ya trae el payload."""

    for name in SESSION_ID_FIELDS:
        if not payload.get(name):
            payload[name] = str(id_factory())
    for name, value in SESSION_FLAGS.items():
        payload.setdefault(name, value)
    return payload


class CodashopProvider(BaseProvider):
    key = ProviderKey.CODASHOP
    label = "Codashop"

    def __init__(
        self,
        registry: GameRegistry,
        transport: Transport,
        *,
        resolver: StaticPayloadResolver | None = None,
        endpoint: str = INIT_PAYMENT_URL,
        debug: bool = False,
        retry_delays: Sequence[int] = (),
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(
            registry,
            transport,
            debug=debug,
            retry_delays=retry_delays,
            sleep=sleep,
            logger=logger or logging.getLogger(__name__),
        )
        self._resolver = resolver or StaticPayloadResolver(registry)
        self._endpoint = endpoint

    def validate(
        self,
        game_code: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        definition = self._registry.get(game_code)
        if definition is None or definition.codashop is None:
            return self._unknown_game(game_code, user_id, zone_id)
        return self.validate_definition(definition, user_id, zone_id, options)

    def validate_definition(
        self,
        definition: GameDefinition,
        user_id: str | int,
        zone_id: str | int | None = None,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        """Valida contra una definición concreta (también las descubiertas).

        `InvalidInputError` / `PayloadBuildError` del resolver se propagan.
        """

        game = definition.code
        zone = self._resolve_zone(definition, zone_id)
        payload = apply_session_defaults(self._resolver.resolve_definition(definition, user_id, zone_id, options))

        try:
            response = self._send("POST", self._endpoint, FORM_HEADERS, form=payload)
        except HttpError as exc:
            return self._result(
                game,
                user_id,
                zone,
                status=False,
                code=StatusCode.HTTP_ERROR,
                message=str(exc),
            )

        data = parse_json_body(response.body)
        if data is None:
            return self._result(
                game,
                user_id,
                zone,
                status=False,
                code=StatusCode.NON_JSON,
                message="Received non-JSON or empty response from Codashop.",
                http_status=response.status,
                meta=self._meta(raw=response.body),
            )

        return self._classify(definition, data, response.status, user_id, zone)

    def _classify(
        self,
        definition: GameDefinition,
        data: dict[str, Any],
        http_status: int,
        user_id: str | int,
        zone: str | int | None,
    ) -> ValidationResult:
        game = definition.code
        error_code = data.get("errorCode")

        if 200 <= http_status < 300 and error_code == "":
            nickname, extracted_zone = self._extract(data, definition.nickname_paths, definition.zone_path)
            return self._result(
                game,
                user_id,
                extracted_zone if extracted_zone is not None else zone,
                status=True,
                code=StatusCode.OK,
                message="User ID is valid.",
                nickname=nickname,
                http_status=http_status,
                meta=self._meta(data=data),
            )

        if error_code not in (None, ""):
            message = data.get("errorMsg")
            return self._result(
                game,
                user_id,
                zone,
                status=False,
                code=StatusCode.API_ERROR,
                message=message if isinstance(message, str) and message else "API returned an error.",
                http_status=http_status,
                meta=self._meta(data=data),
            )

        return self._result(
            game,
            user_id,
            zone,
            status=False,
            code=StatusCode.UNEXPECTED_FORMAT,
            message=f"Unexpected response from Codashop (HTTP {http_status}).",
            http_status=http_status,
            meta=self._meta(data=data),
        )
