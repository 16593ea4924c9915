"""Excepciones del dominio.

Solo la construcción de payloads y el discovery lanzan excepciones hacia su
invocador inmediato; el resto de condiciones se devuelven como
`ValidationResult`.
"""

from __future__ import annotations

from typing import Iterable


class ValidGameError(Exception):
    """Base de todas las excepciones del paquete."""


class InvalidInputError(ValidGameError):
    """Input inválido (juego desconocido, zona requerida ausente...)."""


class PayloadBuildError(ValidGameError):
    """El template de un juego produjo un payload inutilizable."""


class HttpError(ValidGameError):
    """Fallo de transporte (DNS, timeout, reset, proxy). Nunca un 4xx/5xx."""


class HttpScrapeError(ValidGameError):
    """La página de producto no se pudo descargar (status no-2xx o body vacío)."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DiscoveryFieldsMissingError(ValidGameError):
    """Faltan campos obligatorios en la página; se nombran todos."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__("SCRAPE_FIELD_MISSING: " + ",".join(self.missing))


class CatalogError(ValidGameError):
    """El fichero de catálogo no existe o no valida."""
