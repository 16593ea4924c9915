import json

import pytest

from adapters.catalog_loader import apply_catalog, load_catalog, load_catalog_into
from core.errors import CatalogError


def _write(tmp_path, payload):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_catalog_registers_games_and_aliases(tmp_path, registry):
    path = _write(
        tmp_path,
        {
            "games": [
                {
                    "code": "Genshin Impact",
                    "label": "Genshin Impact",
                    "requires_zone": True,
                    "codashop": {
                        "voucher_type_name": "GENSHIN_IMPACT",
                        "price_point_id": "116054",
                        "price": "16000.0",
                        "zone_field": "server",
                    },
                    "server_map": {"asia": "os_asia", "america": "os_usa"},
                    "price_points": [{"id": 2, "price": 50}, {"id": 1, "price": 10}],
                }
            ],
            "aliases": {"gi": "genshin-impact"},
        },
    )

    codes = load_catalog_into(registry, path)

    assert codes == ["genshinimpact"]
    assert registry.resolve_canonical("GI") == "genshinimpact"
    assert registry.resolve_server("genshinimpact", "Asia") == "os_asia"
    assert [pp.id for pp in registry.get("genshinimpact").price_points] == [1, 2]


def test_catalog_can_override_builtin(tmp_path, registry):
    path = _write(tmp_path, {"games": [{"code": "hago", "label": "Hago (GoPay)", "gopay_code": "HAGO"}]})
    apply_catalog(registry, load_catalog(path))
    assert registry.get("hago").label == "Hago (GoPay)"
    assert registry.has_provider("hago", "gopay")


def test_missing_file(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "absent.json")


def test_invalid_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(path)


def test_invalid_definition(tmp_path):
    path = _write(tmp_path, {"games": [{"code": "x"}]})
    with pytest.raises(CatalogError):
        load_catalog(path)
