"""Piezas comunes a los proveedores de validación.

Por qué una base:
- Ambos proveedores comparten el mismo ciclo (resolver zona, enviar, parsear
  JSON, clasificar) y el mismo formato de resultado.
- Los reintentos ante fallos de transporte se configuran en un único sitio.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Mapping, Sequence

from core.domain.models import GameDefinition, ProviderKey, StatusCode, ValidationResult
from core.errors import HttpError
from core.interfaces.transport import Transport, TransportResponse
from core.normalize import dot_get, first_string, map_server
from core.registry import GameRegistry
from core.support.backoff import retry_call

RAW_PREVIEW_CHARS = 2000


def parse_json_body(body: str) -> dict[str, Any] | None:
    """Body -> dict; None si está vacío, no es JSON o no es un objeto."""

    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class BaseProvider:
    """Estado y utilidades compartidas; las subclases implementan `validate`."""

    key: ProviderKey
    label: str = "provider"

    def __init__(
        self,
        registry: GameRegistry,
        transport: Transport,
        *,
        debug: bool = False,
        retry_delays: Sequence[int] = (),
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._transport = transport
        self._debug = debug
        self._retry_delays = tuple(retry_delays)
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)

    def supports(self, game_code: str) -> bool:
        return self._registry.has_provider(game_code, self.key)

    # -- helpers ----------------------------------------------------------

    def _result(self, game: str, user_id: str | int | None, zone_id: str | int | None, **kwargs: Any) -> ValidationResult:
        return ValidationResult.make(
            game=game,
            user_id=user_id,
            zone_id=zone_id,
            provider=self.key.value,
            **kwargs,
        )

    def _unknown_game(self, game: str, user_id: str | int, zone_id: str | int | None) -> ValidationResult:
        return self._result(
            game,
            user_id,
            zone_id,
            status=False,
            code=StatusCode.UNKNOWN_GAME,
            message=f"Game '{game}' is not supported by {self.label} provider.",
        )

    @staticmethod
    def _resolve_zone(definition: GameDefinition, zone_id: str | int | None) -> str | int | None:
        if zone_id is None or str(zone_id) == "":
            return zone_id
        return map_server(definition.server_map, zone_id)

    def _send(self, method: str, url: str, headers: Mapping[str, str], **body: Any) -> TransportResponse:
        return retry_call(
            lambda: self._transport.send(method, url, headers, **body),
            self._retry_delays,
            retry_on=(HttpError,),
            sleep=self._sleep,
        )

    def _meta(self, **values: Any) -> dict[str, Any] | None:
        if not self._debug:
            return None
        out: dict[str, Any] = {}
        for name, value in values.items():
            if value is None:
                continue
            out[name] = value[:RAW_PREVIEW_CHARS] if isinstance(value, str) else value
        return out

    @staticmethod
    def _extract(
        data: dict[str, Any],
        nickname_paths: Sequence[str],
        zone_path: str | None,
    ) -> tuple[str | None, str | int | None]:
        nickname = first_string(data, nickname_paths)
        zone: str | int | None = None
        if zone_path:
            value = dot_get(data, zone_path)
            if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value) != "":
                zone = value
        return nickname, zone
