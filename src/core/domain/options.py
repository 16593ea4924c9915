"""Opciones por llamada de `check()`.

Por qué un modelo aparte:
- Los overrides de price point y los campos extra afectan solo al payload de
  Codashop; se validan una vez en el borde y viajan intactos hasta el resolver.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.pricing import PriceStrategy


class CheckOptions(BaseModel):
    """Overrides de una validación concreta (todos opcionales)."""

    model_config = ConfigDict(frozen=True)

    price_point_id: int | None = Field(default=None, ge=0, description="Fuerza voucherPricePoint.id.")
    price_point_price: float | None = Field(default=None, ge=0, description="Fuerza voucherPricePoint.price.")
    price_strategy: PriceStrategy | None = Field(
        default=None,
        description="Estrategia para esta llamada; sustituye a la de la configuración.",
    )
    price_target: float | None = Field(default=None, ge=0, description="Objetivo de closest/prefer_price.")
    prefer_ids: list[int] = Field(default_factory=list, description="Ids preferidos para prefer_ids.")
    extras: dict[str, str] = Field(
        default_factory=dict,
        description="Campos añadidos tal cual al formulario (ganan sobre el template).",
    )
    with_profile: bool = Field(
        default=False,
        description="Añade un `order.data.profile` vacío si no viene en `extras`.",
    )

    @field_validator("extras", mode="before")
    @classmethod
    def _stringify_extras(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value
