from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from adapters.http_client import HttpTransport
from core.config import AppSettings
from core.registry import GameRegistry


@pytest.fixture
def settings() -> AppSettings:
    """Settings aislados de cualquier .env local."""
    return AppSettings(_env_file=None)


@pytest.fixture
def registry() -> GameRegistry:
    return GameRegistry()


class Recorder:
    """Guarda las requests que llegan al `MockTransport`."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)


@pytest.fixture
def make_transport(settings):
    def _make(handler: Callable[[httpx.Request], httpx.Response], **overrides) -> tuple[HttpTransport, Recorder]:
        recorder = Recorder(handler)
        transport_settings = settings.model_copy(update=overrides) if overrides else settings
        client = httpx.Client(transport=httpx.MockTransport(recorder))
        return HttpTransport(transport_settings, client=client), recorder

    return _make


def json_response(payload: object, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=json.dumps(payload), headers={"Content-Type": "application/json"})
