import logging
from unittest.mock import Mock

import httpx
import pytest

from adapters.providers import CodashopProvider
from adapters.resolvers import PageDiscoveryResolver
from core.domain.models import CodashopTemplate, GameDefinition, ProviderKey, StatusCode, ValidationResult
from core.domain.options import CheckOptions
from core.services.validation_engine import ValidationEngine
from core.support.rate_limiter import TokenBucket
from tests.conftest import json_response
from tests.test_page_discovery import PRODUCT_PAGE


class FakeProvider:
    def __init__(self, key, supported=None, result=None, error=None):
        self.key = key
        self._supported = supported
        self._result = result
        self._error = error
        self.calls = []
        self.options = []

    def supports(self, game_code):
        return self._supported is None or game_code in self._supported

    def validate(self, game_code, user_id, zone_id=None, options=None):
        self.calls.append((game_code, user_id, zone_id))
        self.options.append(options)
        if self._error is not None:
            raise self._error
        if self._result is not None:
            return self._result
        return ValidationResult.make(
            status=True,
            code=StatusCode.OK,
            game=game_code,
            user_id=user_id,
            zone_id=zone_id,
            provider=self.key.value,
        )


def _failure(key, code=StatusCode.API_ERROR):
    return ValidationResult.make(status=False, code=code, provider=key.value)


@pytest.mark.parametrize("user_id", [None, "", "   "])
def test_blank_user_id_is_invalid_input_without_network(registry, user_id):
    provider = FakeProvider(ProviderKey.CODASHOP)
    engine = ValidationEngine(registry, [provider])

    result = engine.check("freefire", user_id)

    assert result.code is StatusCode.INVALID_INPUT
    assert provider.calls == []


def test_unknown_game_without_network(registry):
    provider = FakeProvider(ProviderKey.CODASHOP)
    result = ValidationEngine(registry, [provider]).check("nonexistentgame123", "1")
    assert result.code is StatusCode.UNKNOWN_GAME
    assert provider.calls == []


def test_zone_required(registry):
    provider = FakeProvider(ProviderKey.CODASHOP)
    engine = ValidationEngine(registry, [provider])

    assert engine.check("mlbb", "12345").code is StatusCode.INVALID_INPUT
    assert provider.calls == []

    result = engine.check("mlbb", "12345", "2001")
    assert result.status is True
    assert provider.calls == [("mobilelegends", "12345", "2001")]


def test_alias_resolves_before_dispatch(registry):
    provider = FakeProvider(ProviderKey.CODASHOP)
    ValidationEngine(registry, [provider]).check("Free-Fire", "1")
    assert provider.calls[0][0] == "freefire"


def test_fallback_after_provider_fault_logs_warning(registry, caplog):
    broken = FakeProvider(ProviderKey.CODASHOP, error=RuntimeError("kaboom"))
    healthy = FakeProvider(ProviderKey.GOPAY_GAMES)
    engine = ValidationEngine(registry, [broken, healthy], fallback=True)

    with caplog.at_level(logging.WARNING):
        result = engine.check("freefire", "1")

    assert result.status is True
    assert result.provider == "gopaygames"
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings and warnings[0].provider == "codashop"


def test_provider_fault_without_fallback_returns_provider_error(registry):
    broken = FakeProvider(ProviderKey.CODASHOP, error=RuntimeError("kaboom"))
    healthy = FakeProvider(ProviderKey.GOPAY_GAMES)
    result = ValidationEngine(registry, [broken, healthy], fallback=False).check("freefire", "1")

    assert result.code is StatusCode.PROVIDER_ERROR
    assert result.message == "kaboom"
    assert healthy.calls == []


def test_failure_without_fallback_returns_immediately(registry):
    first = FakeProvider(ProviderKey.CODASHOP, result=_failure(ProviderKey.CODASHOP))
    second = FakeProvider(ProviderKey.GOPAY_GAMES)
    result = ValidationEngine(registry, [first, second], fallback=False).check("freefire", "1")
    assert result.code is StatusCode.API_ERROR
    assert second.calls == []


def test_returns_last_failure_when_all_fail(registry):
    first = FakeProvider(ProviderKey.CODASHOP, result=_failure(ProviderKey.CODASHOP))
    second = FakeProvider(ProviderKey.GOPAY_GAMES, result=_failure(ProviderKey.GOPAY_GAMES, StatusCode.NON_JSON))
    result = ValidationEngine(registry, [first, second]).check("freefire", "1")
    assert result.code is StatusCode.NON_JSON
    assert result.provider == "gopaygames"


def test_preferred_provider_goes_first(registry):
    codashop = FakeProvider(ProviderKey.CODASHOP)
    gopay = FakeProvider(ProviderKey.GOPAY_GAMES)
    engine = ValidationEngine(registry, [codashop, gopay], preferred="gopay")

    result = engine.check("freefire", "1")

    assert result.provider == "gopaygames"
    assert codashop.calls == []


def test_skips_non_supporting_providers(registry):
    codashop = FakeProvider(ProviderKey.CODASHOP, supported={"freefire"})
    gopay = FakeProvider(ProviderKey.GOPAY_GAMES, supported={"pubg"})
    result = ValidationEngine(registry, [codashop, gopay]).check("pubg", "1")
    assert result.provider == "gopaygames"
    assert codashop.calls == []


def test_no_provider_available(registry):
    provider = FakeProvider(ProviderKey.GOPAY_GAMES, supported=set())
    result = ValidationEngine(registry, [provider]).check("hago", "1")
    assert result.code is StatusCode.PROVIDER_ERROR
    assert result.message == "No provider available for this game."


def test_check_never_raises(registry):
    bad_registry = Mock(wraps=registry)
    bad_registry.resolve_canonical.side_effect = RuntimeError("registry exploded")
    result = ValidationEngine(bad_registry, []).check("freefire", "1")
    assert result.code is StatusCode.EXCEPTION
    assert result.message == "registry exploded"


def test_check_with_restricts_to_one_provider(registry):
    codashop = FakeProvider(ProviderKey.CODASHOP, supported={"freefire"})
    gopay = FakeProvider(ProviderKey.GOPAY_GAMES)
    engine = ValidationEngine(registry, [codashop, gopay])

    assert engine.check_with("gopay", "freefire", "1").provider == "gopaygames"
    assert codashop.calls == []

    unsupported = engine.check_with("codashop", "pubg", "1")
    assert unsupported.code is StatusCode.PROVIDER_ERROR

    assert engine.check_with("steam", "freefire", "1").code is StatusCode.PROVIDER_ERROR
    assert engine.check_with("gopay", "freefire", "").code is StatusCode.INVALID_INPUT


def test_check_with_validates_input_before_provider_name(registry):
    engine = ValidationEngine(registry, [FakeProvider(ProviderKey.CODASHOP)])

    assert engine.check_with("bogus", "ff", "").code is StatusCode.INVALID_INPUT
    assert engine.check_with("bogus", "nonexistentgame123", "1").code is StatusCode.UNKNOWN_GAME
    assert engine.check_with("bogus", "mlbb", "1").code is StatusCode.INVALID_INPUT
    assert engine.check_with("bogus", "ff", "1").code is StatusCode.PROVIDER_ERROR


def test_check_resolves_game_once(registry):
    spy = Mock(wraps=registry)
    engine = ValidationEngine(spy, [FakeProvider(ProviderKey.CODASHOP)])

    assert engine.check("ml", "1", "2001").status is True
    assert engine.check_with("codashop", "ml", "1", "2001").status is True
    assert spy.resolve_canonical.call_count == 2


def test_options_reach_the_provider(registry):
    provider = FakeProvider(ProviderKey.CODASHOP)
    options = CheckOptions(price_point_id=7, price_point_price=1.5)
    engine = ValidationEngine(registry, [provider])

    engine.check("ff", "1", options=options)
    engine.check_with("codashop", "ff", "1", options=options)

    assert provider.options == [options, options]


# -- discovery ---------------------------------------------------------------


def _discovery_engine(registry, make_transport, handler, **kwargs):
    transport, recorder = make_transport(handler)
    codashop = CodashopProvider(registry, transport)
    engine = ValidationEngine(
        registry,
        [codashop],
        discovery=PageDiscoveryResolver(transport),
        retry_delays=[],
        **kwargs,
    )
    return engine, recorder


def _store(request):
    if request.method == "GET":
        return httpx.Response(200, text=PRODUCT_PAGE)
    return json_response({"errorCode": "", "confirmationFields": {"username": "Dazzler"}})


def test_discovery_path_validates_unknown_game(registry, make_transport):
    engine, recorder = _discovery_engine(registry, make_transport, _store)

    result = engine.check("dazz live", "555", product_path="dazz-live")

    assert result.status is True
    assert result.nickname == "Dazzler"
    assert result.game == "dazzlive"
    assert [r.method for r in recorder.requests] == ["GET", "POST"]
    assert registry.get("dazzlive") is None


def test_discovery_can_cache_definition(registry, make_transport):
    engine, _ = _discovery_engine(registry, make_transport, _store, cache_discovered=True)
    engine.check("dazz live", "555", product_path="dazz-live")
    assert registry.get("dazzlive").product_path == "dazz-live"


def test_discovery_is_rate_limited(registry, make_transport):
    bucket = TokenBucket(capacity=1, rate=0.001, clock=lambda: 0.0)
    engine, recorder = _discovery_engine(registry, make_transport, _store, rate_limiter=bucket)

    assert engine.check("dazz live", "1", product_path="dazz-live").status is True
    limited = engine.check("dazz live", "1", product_path="dazz-live")

    assert limited.code is StatusCode.PROVIDER_ERROR
    assert "rate limit" in limited.message
    assert len(recorder.requests) == 2


def test_discovery_failure_becomes_provider_error(registry, make_transport):
    sleeps = []
    transport, recorder = make_transport(lambda request: httpx.Response(503, text="busy"))
    engine = ValidationEngine(
        registry,
        [CodashopProvider(registry, transport)],
        discovery=PageDiscoveryResolver(transport),
        retry_delays=[200, 400],
        sleep=sleeps.append,
    )

    result = engine.check("dazz live", "1", product_path="dazz-live")

    assert result.code is StatusCode.PROVIDER_ERROR
    assert result.message.startswith("SCRAPE_HTTP_ERROR")
    assert len(recorder.requests) == 3
    assert sleeps == [0.2, 0.4]


def test_discovery_field_errors_are_not_retried(registry, make_transport):
    transport, recorder = make_transport(lambda request: httpx.Response(200, text="<html></html>"))
    engine = ValidationEngine(
        registry,
        [CodashopProvider(registry, transport)],
        discovery=PageDiscoveryResolver(transport),
        retry_delays=[1, 1],
        sleep=lambda _: None,
    )
    result = engine.check("x", "1", product_path="x")
    assert result.message.startswith("SCRAPE_FIELD_MISSING")
    assert len(recorder.requests) == 1


def test_known_game_ignores_product_path(registry):
    provider = FakeProvider(ProviderKey.CODASHOP)
    discovery = Mock()
    ValidationEngine(registry, [provider], discovery=discovery).check("ff", "1", product_path="free-fire")
    discovery.discover.assert_not_called()


def test_discovery_unavailable(registry):
    result = ValidationEngine(registry, [FakeProvider(ProviderKey.CODASHOP)]).check("x", "1", product_path="x")
    assert result.code is StatusCode.PROVIDER_ERROR




def test_check_path_always_discovers(registry, make_transport):
    engine, recorder = _discovery_engine(registry, make_transport, _store)

    result = engine.check_path("dazz-live", "555")

    assert result.status is True
    assert result.game == "dazzlive"
    assert [r.method for r in recorder.requests] == ["GET", "POST"]


def test_check_path_requires_user_id(registry):
    discovery = Mock()
    result = ValidationEngine(registry, [FakeProvider(ProviderKey.CODASHOP)], discovery=discovery).check_path("x", " ")
    assert result.code is StatusCode.INVALID_INPUT
    discovery.discover.assert_not_called()


def _tokenless(registry):
    registry.register(
        GameDefinition(
            code="dazzlive",
            label="Dazz Live",
            codashop=CodashopTemplate(voucher_type_name="DAZZ_LIVE", price_point_id="1", price="1.0"),
            nickname_paths=["confirmationFields.username"],
            product_path="dazz-live",
            server_map={"asia": "9"},
        )
    )


def test_catalog_game_without_tokens_goes_through_discovery(registry, make_transport):
    _tokenless(registry)
    engine, recorder = _discovery_engine(registry, make_transport, _store)

    result = engine.check("Dazz Live", "555")

    assert result.status is True
    assert result.game == "dazzlive"
    assert [r.method for r in recorder.requests] == ["GET", "POST"]
    assert str(recorder.requests[0].url) == "https://www.codashop.com/id-id/dazz-live"
    form = recorder.requests[1].content.decode()
    assert "dynamicSkuToken=eyJhbGciOiJIUzI1NiJ9.eyJza3UiOjF9.c2lnbmF0dXJl" in form
    assert "voucherTypeName=DAZZ_LIVE" in form
    # la definición del catálogo no se reemplaza
    assert "dynamicSkuToken" not in registry.get("dazzlive").codashop.fixed


def test_catalog_game_with_tokens_skips_discovery(registry):
    assert registry.get("aethergazer").needs_discovery is False
    provider = FakeProvider(ProviderKey.CODASHOP)
    discovery = Mock()

    ValidationEngine(registry, [provider], discovery=discovery).check("aether gazer", "1")

    discovery.discover.assert_not_called()
    assert provider.calls == [("aethergazer", "1", None)]


def test_tokenless_game_without_discovery_uses_provider(registry):
    _tokenless(registry)
    provider = FakeProvider(ProviderKey.CODASHOP)
    assert ValidationEngine(registry, [provider]).check("dazzlive", "1").status is True
    assert provider.calls == [("dazzlive", "1", None)]
