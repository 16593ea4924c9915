"""Reintentos con backoff exponencial acotado.

La secuencia de esperas se precalcula; las esperas bloquean y no se pueden
cancelar (el único límite es el timeout del transporte).
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_sequence(retries: int, base_ms: float = 200.0, factor: float = 2.0) -> list[int]:
    """`retries` esperas en ms: base, base*factor, base*factor^2, ..."""

    delays: list[int] = []
    ms = base_ms
    for _ in range(max(0, retries)):
        delays.append(int(ms))
        ms *= factor
    return delays


def retry_call(
    fn: Callable[[], T],
    delays: Sequence[int],
    *,
    retry_on: tuple[type[BaseException], ...],
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Ejecuta `fn` hasta `len(delays) + 1` veces.

    Solo reintenta ante `retry_on`; tras el último intento la excepción se
    propaga tal cual.
    """

    attempts = len(delays) + 1
    for attempt in range(attempts):
        try:
            return fn()
        except retry_on as exc:
            if attempt >= len(delays):
                raise
            logger.debug(
                "Retrying after failure",
                extra={"attempt": attempt + 1, "delay_ms": delays[attempt], "error": str(exc)},
            )
            sleep(delays[attempt] / 1000.0)
    raise RuntimeError("unreachable")  # pragma: no cover
