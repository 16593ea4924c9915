"""Selección automática de price points.

Los endpoints de validación exigen un SKU con precio aunque no haya compra.
Cuando una definición trae varios, se elige uno según una estrategia.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

from core.domain.models import PricePoint


class PriceStrategy(str, Enum):
    """Estrategias soportadas para elegir un price point."""

    LOWEST = "lowest"
    HIGHEST = "highest"
    CLOSEST = "closest"
    PREFER_IDS = "prefer_ids"
    PREFER_PRICE = "prefer_price"


def sort_price_points(points: Iterable[PricePoint]) -> list[PricePoint]:
    """Orden ascendente por precio; `sorted` es estable, los empates conservan su orden."""

    return sorted(points, key=lambda pp: pp.price)


def _closest(points: Sequence[PricePoint], target: float) -> PricePoint:
    # Comparación estricta: ante empate gana el primero en orden ascendente (el más barato).
    best = points[0]
    best_diff = abs(best.price - target)
    for pp in points[1:]:
        diff = abs(pp.price - target)
        if diff < best_diff:
            best, best_diff = pp, diff
    return best


def pick_price_point(
    points: Iterable[PricePoint],
    strategy: PriceStrategy | str = PriceStrategy.LOWEST,
    *,
    target: float | None = None,
    prefer_ids: Iterable[int] | None = None,
) -> PricePoint | None:
    """Elige un price point de `points` (se ordena antes de elegir).

    - lowest / highest: extremos de la lista ordenada.
    - closest / prefer_price: mínima diferencia absoluta con `target`; ante
      empate, el primero encontrado en orden ascendente. Sin target, lowest.
    - prefer_ids: primer punto (en orden ascendente) cuyo id esté en
      `prefer_ids`; si ninguno coincide, lowest.
    """

    ordered = sort_price_points(points)
    if not ordered:
        return None

    strategy = PriceStrategy(strategy)

    if strategy is PriceStrategy.HIGHEST:
        return ordered[-1]
    if strategy in (PriceStrategy.CLOSEST, PriceStrategy.PREFER_PRICE):
        if target is None:
            return ordered[0]
        return _closest(ordered, float(target))
    if strategy is PriceStrategy.PREFER_IDS:
        wanted = {int(i) for i in prefer_ids or []}
        for pp in ordered:
            if pp.id in wanted:
                return pp
        return ordered[0]
    return ordered[0]
