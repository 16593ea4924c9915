"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, proxy y logging para todos los proveedores.
- Facilita testeo: se puede inyectar un `httpx.Client` con `MockTransport`.
- Traduce fallos de transporte a `HttpError`; los 4xx/5xx se devuelven tal cual.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

import httpx

from core.config import AppSettings
from core.errors import HttpError
from core.interfaces.transport import TransportResponse

_PREVIEW_CHARS = 2000

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "id-ID",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

FORM_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Accept-Language": "id-ID",
    "Origin": "https://www.codashop.com",
    "Referer": "https://www.codashop.com/",
}

JSON_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def build_http_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers/proxy para que todos los proveedores se comporten igual.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {"User-Agent": settings.user_agent}
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        proxy=settings.proxy_url or None,
    )


class HttpTransport:
    """Envía una request y devuelve (status, headers, body)."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_http_client(self._settings)
        self._logger = logger or logging.getLogger(__name__)

    @property
    def debug(self) -> bool:
        return self._settings.debug

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        *,
        form: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> TransportResponse:
        started = time.perf_counter()
        try:
            response = self._client.request(
                method.upper(),
                url,
                headers=dict(headers or {}),
                data=dict(form) if form is not None else None,
                json=json_body,
            )
        except httpx.TransportError as exc:
            self._logger.error(
                "HTTP transport failure",
                extra={"method": method.upper(), "url": url, "error": str(exc)},
            )
            raise HttpError(str(exc) or exc.__class__.__name__) from exc

        elapsed_ms = int(round((time.perf_counter() - started) * 1000))
        body = response.text
        response_headers: dict[str, list[str]] = {}
        for name, value in response.headers.multi_items():
            response_headers.setdefault(name, []).append(value)

        if self.debug:
            self._logger.debug(
                "HTTP %s %s -> %s (%d ms)",
                method.upper(),
                url,
                response.status_code,
                elapsed_ms,
                extra={"body_preview": body[:_PREVIEW_CHARS]},
            )

        return TransportResponse(status=response.status_code, headers=response_headers, body=body)

    def get(self, url: str, headers: Mapping[str, str] | None = None) -> TransportResponse:
        return self.send("GET", url, {**BROWSER_HEADERS, **(headers or {})})

    def post_form(
        self,
        url: str,
        form: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        return self.send("POST", url, {**FORM_HEADERS, **(headers or {})}, form=form)

    def post_json(
        self,
        url: str,
        body: Any,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        return self.send("POST", url, {**JSON_HEADERS, **(headers or {})}, json_body=body)
