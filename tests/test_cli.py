import json

import pytest
from typer.testing import CliRunner

from cli import main as cli_main
from core.config import AppSettings
from core.domain.models import StatusCode, ValidationResult
from core.pricing import PriceStrategy

runner = CliRunner()


class StubClient:
    """Sustituye a `ValidGameClient` dentro de la CLI."""

    result = ValidationResult.make(
        status=True,
        code=StatusCode.OK,
        game="freefire",
        user_id="123",
        nickname="Booyah",
        provider="codashop",
    )
    calls: list = []

    def __init__(self, settings=None, **kwargs):
        self.settings = settings

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def check(self, game, user_id, zone_id=None, *, product_path=None, options=None):
        StubClient.calls.append(("check", game, user_id, zone_id, product_path, options))
        return self.result

    def check_with(self, provider, game, user_id, zone_id=None, *, options=None):
        StubClient.calls.append(("check_with", provider, game, user_id, zone_id, options))
        return self.result

    def check_path(self, path_slug, user_id, zone_id=None, *, options=None):
        StubClient.calls.append(("check_path", path_slug, user_id, zone_id))
        return self.result

    def list_games(self):
        return [
            {
                "code": "freefire",
                "label": "Free Fire",
                "requiresZone": False,
                "providers": ["codashop", "gopaygames"],
                "aliases": ["ff"],
                "servers": [],
            }
        ]

    def games_for_provider(self, provider):
        if provider == "bogus":
            raise ValueError("'bogus' is not a valid ProviderKey")
        return ["freefire"]

    def search_games(self, query):
        return {"freefire": "Free Fire"} if "fire" in query else {}


@pytest.fixture(autouse=True)
def stub_client(monkeypatch):
    StubClient.calls = []
    StubClient.result = StubClient.result.model_copy(update={"status": True, "code": StatusCode.OK})
    monkeypatch.setattr(cli_main, "ValidGameClient", StubClient)
    monkeypatch.setattr(cli_main, "AppSettings", lambda: AppSettings(_env_file=None))
    monkeypatch.setattr(cli_main, "_setup_logging", lambda debug: None)
    return StubClient


def test_check_prints_json_and_exits_zero():
    result = runner.invoke(cli_main.app, ["check", "ff", "123", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["nickname"] == "Booyah"
    assert data["code"] == "OK"
    assert StubClient.calls == [("check", "ff", "123", None, None, None)]


def test_check_invalid_exits_one():
    StubClient.result = ValidationResult.make(status=False, code=StatusCode.API_ERROR, message="Invalid user")
    result = runner.invoke(cli_main.app, ["check", "ff", "999"])
    assert result.exit_code == 1
    assert "Invalid user" in result.stdout


def test_check_with_provider_and_zone():
    result = runner.invoke(cli_main.app, ["check", "mlbb", "1", "--zone", "2001", "--provider", "gopay", "--json"])
    assert result.exit_code == 0
    assert StubClient.calls == [("check_with", "gopay", "mlbb", "1", "2001", None)]


def test_games_table():
    result = runner.invoke(cli_main.app, ["games", "--provider", "codashop"])
    assert result.exit_code == 0
    assert "Free Fire" in result.stdout


def test_search_without_hits_exits_one():
    assert runner.invoke(cli_main.app, ["search", "fire"]).exit_code == 0
    assert runner.invoke(cli_main.app, ["search", "zzz"]).exit_code == 1


def test_discover_with_user_id_scrapes_the_page():
    result = runner.invoke(cli_main.app, ["discover", "aether-gazer", "555", "--json"])
    assert result.exit_code == 0
    assert StubClient.calls == [("check_path", "aether-gazer", "555", None)]


def test_games_with_unknown_provider_exits_one():
    result = runner.invoke(cli_main.app, ["games", "--provider", "bogus"])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Unknown provider" in result.stdout


def test_check_builds_payload_options():
    result = runner.invoke(
        cli_main.app,
        [
            "check",
            "ff",
            "1",
            "--price-point-id",
            "42",
            "--price",
            "9.5",
            "--strategy",
            "prefer_ids",
            "--prefer-id",
            "3",
            "--prefer-id",
            "4",
            "--extra",
            "voucherQuantity=2",
            "--with-profile",
            "--json",
        ],
    )

    assert result.exit_code == 0
    options = StubClient.calls[0][-1]
    assert options.price_point_id == 42
    assert options.price_point_price == 9.5
    assert options.price_strategy is PriceStrategy.PREFER_IDS
    assert options.prefer_ids == [3, 4]
    assert options.extras == {"voucherQuantity": "2"}
    assert options.with_profile is True


def test_check_rejects_malformed_extra():
    result = runner.invoke(cli_main.app, ["check", "ff", "1", "--extra", "novalue", "--json"])
    assert result.exit_code == 2
    assert StubClient.calls == []
