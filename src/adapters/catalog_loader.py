"""Carga de catálogos JSON de juegos (data-driven).

Formato:
    {"games": [ {GameDefinition...} ], "aliases": {"alias": "codigo"}}

Nota:
- Los price points y tokens de Codashop caducan; un fichero local permite
  actualizarlos sin tocar el catálogo incorporado.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from core.domain.models import GameDefinition
from core.errors import CatalogError
from core.normalize import canonical_key
from core.registry import GameRegistry


class CatalogFile(BaseModel):
    games: list[GameDefinition] = Field(default_factory=list)
    aliases: dict[str, str] = Field(default_factory=dict)


def load_catalog(path: Path) -> CatalogFile:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc
    try:
        return CatalogFile.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        raise CatalogError(f"Invalid catalog {path}: {exc}") from exc


def apply_catalog(registry: GameRegistry, catalog: CatalogFile) -> list[str]:
    """Registra juegos y alias; devuelve los códigos canónicos registrados."""

    codes: list[str] = []
    for definition in catalog.games:
        code = canonical_key(definition.code)
        if not code:
            raise CatalogError(f"Game code {definition.code!r} normalizes to an empty key")
        registry.register(code, definition)
        codes.append(code)
    for alias_text, target in catalog.aliases.items():
        try:
            registry.alias(alias_text, canonical_key(target))
        except ValueError as exc:
            raise CatalogError(str(exc)) from exc
    return codes


def load_catalog_into(registry: GameRegistry, path: Path) -> list[str]:
    return apply_catalog(registry, load_catalog(path))
