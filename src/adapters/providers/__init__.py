"""Proveedores de validación (Codashop, GoPay Games)."""

from adapters.providers.codashop import CodashopProvider
from adapters.providers.gopay import GopayGamesProvider

__all__ = [
    "CodashopProvider",
    "GopayGamesProvider",
]
