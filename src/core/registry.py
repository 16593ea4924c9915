"""Registry central de juegos: códigos canónicos, alias y servidores.

Por qué un objeto y no un singleton de módulo:
- Se construye una vez en el arranque y se inyecta en motor/proveedores.
- Las mutaciones (`register`/`alias`) pasan por su API y un único lock, así
  que lectores concurrentes nunca ven una definición a medio actualizar.
"""

from __future__ import annotations

import threading
from typing import Any, Iterable

from core.catalog import BUILTIN_ALIASES, BUILTIN_GAMES
from core.domain.models import GameDefinition, ProviderKey
from core.normalize import canonical_key, map_server


class GameRegistry:
    """Mapa código canónico -> definición, más tabla de alias.

    Se siembra de forma perezosa (e idempotente) en el primer uso con el
    catálogo incorporado, salvo que se pasen otras semillas.
    """

    def __init__(
        self,
        games: Iterable[GameDefinition] | None = None,
        aliases: dict[str, str] | None = None,
    ) -> None:
        self._seed_games = tuple(BUILTIN_GAMES if games is None else games)
        self._seed_aliases = dict(BUILTIN_ALIASES if aliases is None else aliases)
        self._games: dict[str, GameDefinition] = {}
        self._aliases: dict[str, str] = {}
        self._seeded = False
        self._lock = threading.RLock()

    def _ensure_seeded(self) -> None:
        if self._seeded:
            return
        with self._lock:
            if self._seeded:
                return
            for definition in self._seed_games:
                self._games[definition.code] = definition
            for alias_text, code in self._seed_aliases.items():
                self._aliases[canonical_key(alias_text)] = code
            self._seeded = True

    def reset(self) -> None:
        """Solo para tests: vacía todo; el siguiente acceso vuelve a sembrar."""

        with self._lock:
            self._games.clear()
            self._aliases.clear()
            self._seeded = False

    # -- resolución -------------------------------------------------------

    def resolve_canonical(self, text: str | None) -> str | None:
        key = canonical_key(text)
        if not key:
            return None
        self._ensure_seeded()
        with self._lock:
            if key in self._games:
                return key
            return self._aliases.get(key)

    def get(self, code: str) -> GameDefinition | None:
        self._ensure_seeded()
        with self._lock:
            return self._games.get(code)

    def resolve_server(self, code: str, text: str | int) -> str:
        """Nombre de servidor -> código. Si no hay mapeo, se devuelve el texto tal cual."""

        definition = self.get(code)
        if definition is None:
            return str(text)
        return map_server(definition.server_map, text)

    # -- mutación ---------------------------------------------------------

    def register(self, code_or_definition: str | GameDefinition, definition: GameDefinition | None = None) -> None:
        """Upsert idempotente; gana el último en escribir.

        El código se normaliza igual que la entrada de `resolve_canonical`,
        así `register("New-Game", ...)` queda accesible como "New-Game".
        """

        if isinstance(code_or_definition, GameDefinition):
            definition = code_or_definition
            raw = definition.code
        else:
            if definition is None:
                raise TypeError("register(code, definition) requires a definition")
            raw = code_or_definition
        code = canonical_key(raw)
        if not code:
            raise ValueError(f"game code {raw!r} normalizes to an empty key")
        if definition.code != code:
            definition = definition.model_copy(update={"code": code})

        self._ensure_seeded()
        with self._lock:
            self._games[code] = definition

    def alias(self, alias_text: str, code: str) -> None:
        key = canonical_key(alias_text)
        if not key:
            raise ValueError(f"alias {alias_text!r} normalizes to an empty key")
        self._ensure_seeded()
        with self._lock:
            self._aliases[key] = canonical_key(code) or code

    # -- vistas de solo lectura ---------------------------------------------

    def all_codes(self) -> list[str]:
        self._ensure_seeded()
        with self._lock:
            return list(self._games)

    def all_aliases(self) -> dict[str, str]:
        self._ensure_seeded()
        with self._lock:
            return dict(self._aliases)

    def labels(self) -> dict[str, str]:
        self._ensure_seeded()
        with self._lock:
            return {code: d.label for code, d in self._games.items()}

    def has_provider(self, code: str, provider: ProviderKey | str) -> bool:
        definition = self.get(code)
        return definition is not None and definition.supports(provider)

    def games_for_provider(self, provider: ProviderKey | str) -> list[str]:
        key = ProviderKey.parse(provider)
        self._ensure_seeded()
        with self._lock:
            return [code for code, d in self._games.items() if d.supports(key)]

    def list_games(self) -> list[dict[str, Any]]:
        """Una entrada por código canónico."""

        self._ensure_seeded()
        with self._lock:
            aliases_by_code: dict[str, list[str]] = {}
            for alias_key, code in self._aliases.items():
                aliases_by_code.setdefault(code, []).append(alias_key)
            return [
                {
                    "code": code,
                    "label": d.label,
                    "requiresZone": d.requires_zone,
                    "providers": [p.value for p in d.providers],
                    "aliases": sorted(aliases_by_code.get(code, [])),
                    "servers": list(d.server_map),
                }
                for code, d in self._games.items()
            ]

    def search(self, query: str) -> dict[str, str]:
        """Coincidencia por substring en código, label y alias (ambos normalizados)."""

        needle = canonical_key(query)
        if not needle:
            return {}
        self._ensure_seeded()
        with self._lock:
            hits: dict[str, str] = {}
            for code, d in self._games.items():
                if needle in canonical_key(code) or needle in canonical_key(d.label):
                    hits[code] = d.label
            for alias_key, code in self._aliases.items():
                definition = self._games.get(code)
                if definition is not None and code not in hits and needle in alias_key:
                    hits[code] = definition.label
            return hits
