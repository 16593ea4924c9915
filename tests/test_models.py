from datetime import timezone

import pytest
from pydantic import ValidationError

from core.domain.models import (
    CodashopTemplate,
    GameDefinition,
    PricePoint,
    ProviderKey,
    StatusCode,
    ValidationResult,
    ZoneField,
)


def test_result_defaults_message_to_code():
    result = ValidationResult.make(status=False, code=StatusCode.UNKNOWN_GAME)
    assert result.message == "UNKNOWN_GAME"
    assert result.code_value == "UNKNOWN_GAME"
    assert result.timestamp.tzinfo == timezone.utc


def test_success_requires_ok():
    with pytest.raises(ValidationError):
        ValidationResult.make(status=True, code=StatusCode.API_ERROR)


def test_result_is_immutable():
    result = ValidationResult.make(status=True, code=StatusCode.OK, nickname="Nick")
    with pytest.raises(ValidationError):
        result.nickname = "Other"


def test_to_dict_uses_flat_camel_case_keys():
    result = ValidationResult.make(
        status=True,
        code=StatusCode.OK,
        game="freefire",
        user_id="123",
        zone_id=None,
        nickname="Nick",
        provider="codashop",
        http_status=200,
    )
    data = result.to_dict()
    assert data["status"] is True
    assert data["code"] == "OK"
    assert data["userId"] == "123"
    assert data["httpStatus"] == 200
    assert data["meta"] is None
    assert isinstance(data["timestamp"], str)
    assert '"nickname": "Nick"' in result.to_json()


def test_provider_key_parse():
    assert ProviderKey.parse("gopay") is ProviderKey.GOPAY_GAMES
    assert ProviderKey.parse("GoPay-Games") is ProviderKey.GOPAY_GAMES
    assert ProviderKey.parse("Codashop") is ProviderKey.CODASHOP
    with pytest.raises(ValueError):
        ProviderKey.parse("steam")


def test_definition_sorts_price_points_and_lists_providers():
    definition = GameDefinition(
        code="x",
        label="X",
        codashop=CodashopTemplate(voucher_type_name="X", price_point_id="1", price="1.0"),
        gopay_code="X",
        price_points=[PricePoint(id=2, price=20), PricePoint(id=1, price=10)],
    )
    assert [pp.id for pp in definition.price_points] == [1, 2]
    assert definition.providers == [ProviderKey.CODASHOP, ProviderKey.GOPAY_GAMES]
    assert definition.supports("gopay")


def test_template_zone_modes():
    base = dict(voucher_type_name="T", price_point_id="5", price="10.0")
    assert "user.zoneId" not in CodashopTemplate(**base).render("1", "9")
    assert CodashopTemplate(**base, zone_field=ZoneField.SERVER).render("1", "9")["user.zoneId"] == "9"
    assert "user.zoneId" not in CodashopTemplate(**base, zone_field=ZoneField.OPTIONAL).render("1", "")
    assert CodashopTemplate(**base, zone_field=ZoneField.FIXED).render("1", "9")["user.zoneId"] == "0"


def test_template_price_point_override_is_stringified():
    template = CodashopTemplate(voucher_type_name="T", price_point_id="5", price="10.0")
    payload = template.render(42, price_point=PricePoint(id=7, price=1500))
    assert payload["voucherPricePoint.id"] == "7"
    assert payload["voucherPricePoint.price"] == "1500.0000"
    assert payload["user.userId"] == "42"
    assert payload["shopLang"] == "id_ID"
