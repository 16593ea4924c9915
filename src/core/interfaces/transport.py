"""Contrato del transporte HTTP."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    """Respuesta cruda: los 4xx/5xx también llegan aquí, no como excepción."""

    status: int
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@runtime_checkable
class Transport(Protocol):
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        *,
        form: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> TransportResponse:
        """Lanza `HttpError` solo ante fallos de transporte."""

        ...
