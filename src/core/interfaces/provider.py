"""Contrato de proveedores de validación.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que proveedores (Codashop, GoPay Games, ...) sean intercambiables
  y testeables sin acoplar el motor a implementaciones concretas.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ProviderKey, ValidationResult
from core.domain.options import CheckOptions


@runtime_checkable
class ValidationProvider(Protocol):
    """Contrato mínimo para un proveedor.

    Reglas de diseño:
    - `validate` devuelve siempre un `ValidationResult`; los fallos normales
      (API, HTTP, formato) no se lanzan como excepción.
    - `supports` es barato: solo mira el registry.
    - `options` (overrides por llamada) puede ignorarse si el proveedor no
      tiene nada que ajustar.
    """

    key: ProviderKey

    def supports(self, game_code: str) -> bool:
        ...

    def validate(
        self,
        game_code: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        ...
