"""Normalización de texto y acceso a JSON anidado.

Funciones puras: sin I/O ni estado, usadas por el registry y los proveedores.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")


def canonical_key(text: str | None) -> str:
    """Lowercase y elimina todo lo que no sea [a-z0-9].

    "Free Fire", "free_fire" y "FREE-FIRE" dan "freefire". Un input solo de
    puntuación da "" (el registry lo trata como no encontrado).
    """

    if not text:
        return ""
    return _NON_ALNUM_RE.sub("", str(text).lower())


def server_key(text: str | None) -> str:
    """Clave de los mapas de servidores: lowercase y sin espacios."""

    if text is None:
        return ""
    return _WHITESPACE_RE.sub("", str(text)).lower()


def map_server(server_map: dict[str, str], text: str | int) -> str:
    """Código de servidor para `text`; sin mapeo, el texto pasa tal cual."""

    raw = str(text)
    if not server_map:
        return raw
    return server_map.get(server_key(raw), raw)


def dot_get(data: Any, path: str) -> Any:
    """Recorre `data` siguiendo `a.b.0.c`.

    Segmentos numéricos indexan listas; el resto indexa dicts. Cualquier
    fallo devuelve None.
    """

    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            idx = int(part)
            current = current[idx] if idx < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def first_string(data: Any, paths: Iterable[str]) -> str | None:
    """Primer path que produzca un string no vacío."""

    for path in paths:
        value = dot_get(data, path)
        if isinstance(value, str) and value != "":
            return value
    return None
