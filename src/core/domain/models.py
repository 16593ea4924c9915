"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los catálogos de juegos quedan como datos revisables (no closures), y el
  mismo modelo valida los ficheros JSON de catálogo externos.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict


class StatusCode(str, Enum):
    """Códigos de resultado (conjunto cerrado)."""

    OK = "OK"
    INVALID_INPUT = "INVALID_INPUT"
    UNKNOWN_GAME = "UNKNOWN_GAME"
    HTTP_ERROR = "HTTP_ERROR"
    API_ERROR = "API_ERROR"
    NON_JSON = "NON_JSON"
    UNEXPECTED_FORMAT = "UNEXPECTED_FORMAT"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    EXCEPTION = "EXCEPTION"


class ProviderKey(str, Enum):
    """Identificadores de proveedor. El orden de declaración es el orden por defecto."""

    CODASHOP = "codashop"
    GOPAY_GAMES = "gopaygames"

    @classmethod
    def parse(cls, value: "str | ProviderKey") -> "ProviderKey":
        if isinstance(value, ProviderKey):
            return value
        key = value.strip().lower().replace("-", "").replace("_", "")
        if key in ("gopay", "gopaygames"):
            return cls.GOPAY_GAMES
        return cls(key)


class PricePoint(BaseModel):
    """SKU con precio del lado del proveedor."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Id del voucherPricePoint.")
    price: float = Field(..., ge=0, description="Precio del SKU.")


# Tokens por vista de página que Codashop exige en algunos productos.
TOKEN_FIELDS = ("dynamicSkuToken", "pricePointDynamicSkuToken")


class ZoneField(str, Enum):
    """Cómo se rellena `user.zoneId` en el payload de Codashop."""

    OMIT = "omit"
    SERVER = "server"
    OPTIONAL = "optional"
    FIXED = "fixed"


class CodashopTemplate(BaseModel):
    """Template declarativo del payload de initPayment para un juego."""

    model_config = ConfigDict(frozen=True)

    voucher_type_name: str = Field(..., min_length=1, description="voucherTypeName.")
    price_point_id: str = Field(..., min_length=1, description="voucherPricePoint.id por defecto.")
    price: str = Field(..., min_length=1, description="voucherPricePoint.price por defecto.")
    variable_price: str = Field(default="0")
    zone_field: ZoneField = Field(default=ZoneField.OMIT)
    fixed_zone: str = Field(default="0", description="Valor para ZoneField.FIXED.")
    fixed: dict[str, str] = Field(
        default_factory=dict,
        description="Campos fijos extra (voucherTypeId, gvtId, lvtId, pcId, tokens...).",
    )
    shop_lang: str = Field(default="id_ID")
    absolute_url: str | None = None

    def render(
        self,
        user_id: str | int,
        zone_id: str | int | None = None,
        price_point: PricePoint | None = None,
    ) -> dict[str, str]:
        if price_point is not None:
            pp_id, pp_price = str(price_point.id), f"{price_point.price:.4f}"
        else:
            pp_id, pp_price = self.price_point_id, self.price

        payload: dict[str, str] = {
            "voucherPricePoint.id": pp_id,
            "voucherPricePoint.price": pp_price,
            "voucherPricePoint.variablePrice": self.variable_price,
            "user.userId": str(user_id),
        }

        zone = "" if zone_id is None else str(zone_id)
        if self.zone_field is ZoneField.SERVER:
            payload["user.zoneId"] = zone
        elif self.zone_field is ZoneField.OPTIONAL and zone:
            payload["user.zoneId"] = zone
        elif self.zone_field is ZoneField.FIXED:
            payload["user.zoneId"] = self.fixed_zone

        payload["voucherTypeName"] = self.voucher_type_name
        payload.update({k: str(v) for k, v in self.fixed.items()})
        payload["shopLang"] = self.shop_lang
        if self.absolute_url:
            payload["absoluteUrl"] = self.absolute_url
        return payload


class GameDefinition(BaseModel):
    """Definición canónica de un juego.

    Por qué un modelo y no un dict:
    - Un código canónico tiene exactamente una definición, con sub-definiciones
      por proveedor tipadas (`codashop`, `gopay_code`).
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1, description="Código canónico (clave única).")
    label: str = Field(..., min_length=1, description="Nombre legible.")
    requires_zone: bool = Field(default=False)
    codashop: CodashopTemplate | None = None
    gopay_code: str | None = None
    server_map: dict[str, str] = Field(default_factory=dict)
    nickname_paths: list[str] = Field(
        default_factory=lambda: ["confirmationFields.username"],
        description="Paths candidatos; gana el primer string no vacío.",
    )
    zone_path: str | None = None
    price_points: list[PricePoint] = Field(default_factory=list)
    product_path: str | None = Field(
        default=None,
        description="Slug de la página de producto (discovery).",
    )

    @field_validator("price_points")
    @classmethod
    def _sort_price_points(cls, value: list[PricePoint]) -> list[PricePoint]:
        return sorted(value, key=lambda pp: pp.price)

    @property
    def providers(self) -> list[ProviderKey]:
        out: list[ProviderKey] = []
        if self.codashop is not None:
            out.append(ProviderKey.CODASHOP)
        if self.gopay_code:
            out.append(ProviderKey.GOPAY_GAMES)
        return out

    def supports(self, provider: ProviderKey | str) -> bool:
        return ProviderKey.parse(provider) in self.providers

    @property
    def needs_discovery(self) -> bool:
        """True si hay página de producto y al template le faltan los tokens."""

        if not self.product_path or self.codashop is None:
            return False
        return any(not self.codashop.fixed.get(name) for name in TOKEN_FIELDS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidationResult(BaseModel):
    """Resultado unificado de un intento de validación.

    Inmutable: lo crea una sola vez el componente que llega al desenlace.
    `meta` solo se rellena en modo debug.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: bool = Field(..., description="True solo si el ID es válido.")
    code: StatusCode
    message: str = ""
    game: str | None = None
    user_id: str | int | None = Field(default=None, alias="userId")
    zone_id: str | int | None = Field(default=None, alias="zoneId")
    nickname: str | None = None
    provider: str | None = None
    http_status: int | None = Field(default=None, alias="httpStatus")
    timestamp: datetime = Field(default_factory=_utcnow)
    meta: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_message(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("message"):
            code = data.get("code")
            if code is not None:
                data = {**data, "message": StatusCode(code).value}
        return data

    @model_validator(mode="after")
    def _success_implies_ok(self) -> "ValidationResult":
        if self.status and self.code is not StatusCode.OK:
            raise ValueError("status=True requires code=OK")
        return self

    @classmethod
    def make(
        cls,
        *,
        status: bool,
        code: StatusCode,
        message: str | None = None,
        game: str | None = None,
        user_id: str | int | None = None,
        zone_id: str | int | None = None,
        nickname: str | None = None,
        provider: str | None = None,
        http_status: int | None = None,
        meta: dict[str, Any] | None = None,
    ) -> "ValidationResult":
        return cls(
            status=status,
            code=code,
            message=message or "",
            game=game,
            user_id=user_id,
            zone_id=zone_id,
            nickname=nickname,
            provider=provider,
            http_status=http_status,
            meta=meta,
        )

    @property
    def is_valid(self) -> bool:
        return self.status

    @property
    def code_value(self) -> str:
        return self.code.value

    def to_dict(self) -> dict[str, Any]:
        """Mapa plano (camelCase) apto para JSON."""

        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)
