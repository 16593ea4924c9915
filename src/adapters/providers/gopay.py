"""Proveedor GoPay Games: endpoint JSON de cuenta de usuario.

La API no es uniforme entre juegos; la regla de éxito acepta cualquiera de
las formas observadas (solo con HTTP 2xx):
- `message` igual a "success" (sin distinguir mayúsculas)
- `success: true` o `status: true`
- `data.username` / `data.userAccount` no vacío
"""

from __future__ import annotations

from typing import Any

from adapters.http_client import JSON_HEADERS
from adapters.providers.base import BaseProvider, parse_json_body
from core.domain.models import GameDefinition, ProviderKey, StatusCode, ValidationResult
from core.domain.options import CheckOptions
from core.errors import HttpError
from core.normalize import first_string

USER_ACCOUNT_URL = "https://gopay.co.id/games/v1/order/user-account"

NICKNAME_PATHS = (
    "data.username",
    "data.userAccount",
    "data.nickname",
    "data.name",
    "username",
    "userAccount",
)
ERROR_MESSAGE_PATHS = ("message", "error", "data.message", "errorMessage", "msg")


def is_success_response(http_status: int, data: dict[str, Any]) -> bool:
    if not 200 <= http_status < 300:
        return False
    message = data.get("message")
    if isinstance(message, str) and message.lower() == "success":
        return True
    if data.get("success") is True or data.get("status") is True:
        return True
    return first_string(data, ("data.username", "data.userAccount")) is not None


class GopayGamesProvider(BaseProvider):
    key = ProviderKey.GOPAY_GAMES
    label = "GoPay Games"
    endpoint = USER_ACCOUNT_URL

    def validate(
        self,
        game_code: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        # GoPay no tiene price points ni campos extra.
        definition = self._registry.get(game_code)
        if definition is None or not definition.gopay_code:
            return self._unknown_game(game_code, user_id, zone_id)

        zone = self._resolve_zone(definition, zone_id)
        body = {
            "code": definition.gopay_code,
            "data": {
                "userId": str(user_id),
                "zoneId": "" if zone is None else str(zone),
            },
        }

        try:
            response = self._send("POST", self.endpoint, JSON_HEADERS, json_body=body)
        except HttpError as exc:
            return self._result(
                game_code,
                user_id,
                zone,
                status=False,
                code=StatusCode.HTTP_ERROR,
                message=str(exc),
            )

        data = parse_json_body(response.body)
        if data is None:
            return self._result(
                game_code,
                user_id,
                zone,
                status=False,
                code=StatusCode.NON_JSON,
                message="Received non-JSON or empty response from GoPay Games.",
                http_status=response.status,
                meta=self._meta(raw=response.body),
            )

        if is_success_response(response.status, data):
            nickname, extracted_zone = self._extract(data, self._nickname_paths(definition), definition.zone_path)
            return self._result(
                game_code,
                user_id,
                extracted_zone if extracted_zone is not None else zone,
                status=True,
                code=StatusCode.OK,
                message="User ID is valid.",
                nickname=nickname,
                http_status=response.status,
                meta=self._meta(data=data),
            )

        return self._result(
            game_code,
            user_id,
            zone,
            status=False,
            code=StatusCode.API_ERROR,
            message=first_string(data, ERROR_MESSAGE_PATHS) or "GoPay Games API returned an error.",
            http_status=response.status,
            meta=self._meta(data=data),
        )

    @staticmethod
    def _nickname_paths(definition: GameDefinition) -> list[str]:
        paths = list(definition.nickname_paths)
        paths.extend(p for p in NICKNAME_PATHS if p not in paths)
        return paths
