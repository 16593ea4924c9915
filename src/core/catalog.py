"""Catálogo de juegos incorporado.

Datos puros: cada juego es un `GameDefinition` con su template de Codashop
y/o su código de GoPay Games. Los price points y tokens caducan en el lado del
proveedor; se pueden sobreescribir en runtime con `GameRegistry.register()` o
con un fichero de catálogo.
"""

from __future__ import annotations

from core.domain.models import CodashopTemplate, GameDefinition, ZoneField

_ROLE_THEN_USERNAME = ["confirmationFields.roles.0.role", "confirmationFields.username"]
_USERNAME = ["confirmationFields.username"]

# Tokens capturados de la página de producto. Si Codashop los rechaza, el
# `product_path` permite volver a pedirlos con discovery.
_AETHER_GAZER_SKU_TOKEN = (
    "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9.eyJkeW5hbWljU2t1SW5mbyI6IntcInNrdUlkXCI6XCJjb20ueW9zdGFyLmFldGhlcmdhemVyLnNoaWZ0aW5nZmxvd2VyMVwiLFwiZXZlbnRQYWNrYWdlXCI6XCIwXCIsXCJkZW5vbUltYWdlVXJsXCI6XCJodHRwczovL2NkbjEuY29kYXNob3AuY29tL2ltYWdlcy81NDdfM2QyMTBiNzUtNTJkYi00YjUxLTgzMGYtZDYxMTFiNjFkNDQ5X0FFVEhFUiBHQVpFUl9pbWFnZS9Db2RhX0FHX1NLVWltYWdlcy82MC5wbmdcIixcImRlbm9tTmFtZVwiOlwiNjAgU2hpZnRpbmcgRmxvd2Vyc1wiLFwiZGVub21DYXRlZ29yeU5hbWVcIjpcIlNoaWZ0aW5nIEZsb3dlcnNcIixcInRhZ3NcIjpbXSxcImNvdW50cnkyTmFtZVwiOlwiSURcIixcImx2dElkXCI6MTE4NDAsXCJhZGRpdGlvbmFsSW5mb1wiOntcIkR5bmFtaWNTa3VQcm9tb0RldGFpbFwiOlwibnVsbFwifX0ifQ"
    ".eKiPyHwGZJUuUGGzwWiPiDuF6xC5G7_PWLn6TXVAKVs"
)
_AETHER_GAZER_PRICE_TOKEN = (
    "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9.eyJkeW5hbWljU2t1SW5mbyI6IntcInBjSWRcIjo5MDYsXCJwcmljZVwiOjE2NjUwLjAsXCJjdXJyZW5jeVwiOlwiSURSXCIsXCJhcGlQcmljZVwiOjE2NjUwLjAsXCJhcGlQcmljZUN1cnJlbmN5XCI6XCJJRFJcIixcImRpc2NvdW50UHJpY2VcIjoxNjY1MC4wLFwicHJpY2VCZWZvcmVUYXhcIjoxNTAwMC4wLFwidGF4QW1vdW50XCI6MTY1MC4wLFwic2t1SWRcIjpcImNvbS55b3N0YXIuYWV0aGVyZ2F6ZXIuc2hpZnRpbmdmbG93ZXIxXCIsXCJsdnRJZFwiOjExODQwfSJ9"
    ".y89THkVNztOzAXS64nr9Rtamn3wbWLIYXeRWrZ9yMBc"
)


def _coda(
    type_name: str,
    pp_id: str,
    price: str,
    *,
    zone: ZoneField = ZoneField.OMIT,
    **fixed: str,
) -> CodashopTemplate:
    return CodashopTemplate(
        voucher_type_name=type_name,
        price_point_id=pp_id,
        price=price,
        zone_field=zone,
        fixed=fixed,
    )


BUILTIN_GAMES: tuple[GameDefinition, ...] = (
    GameDefinition(
        code="8ballpool",
        label="8 Ball Pool",
        codashop=_coda("EIGHT_BALL_POOL", "272564", "14000.0000"),
        nickname_paths=_ROLE_THEN_USERNAME,
    ),
    GameDefinition(
        code="aethergazer",
        label="Aether Gazer",
        codashop=_coda(
            "547-AETHER_GAZER",
            "2",
            "16650.0",
            voucherTypeId="524",
            gvtId="691",
            lvtId="11840",
            pcId="906",
            dynamicSkuToken=_AETHER_GAZER_SKU_TOKEN,
            pricePointDynamicSkuToken=_AETHER_GAZER_PRICE_TOKEN,
        ),
        nickname_paths=["confirmationFields.username", "confirmationFields.roles.0.role"],
        product_path="aether-gazer",
    ),
    GameDefinition(
        code="aov",
        label="Arena of Valor",
        codashop=_coda("AOV", "270294", "10000.0000"),
        gopay_code="AOV",
        nickname_paths=_ROLE_THEN_USERNAME,
        zone_path="confirmationFields.roles.0.server",
    ),
    GameDefinition(
        code="autochess",
        label="Auto Chess",
        codashop=_coda("AUTO_CHESS", "203879", "150000.0000"),
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="azurlane",
        label="Azur Lane",
        requires_zone=True,
        codashop=_coda("AZUR_LANE", "99665", "70000.0000", zone=ZoneField.SERVER),
        server_map={
            "avrora": "1",
            "lexington": "2",
            "sandy": "3",
            "washington": "4",
            "amagi": "5",
            "littleenterprise": "6",
        },
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="badlanders",
        label="Badlanders",
        requires_zone=True,
        codashop=_coda("BAD_LANDERS", "333121", "2300.0000", zone=ZoneField.SERVER),
        server_map={"global": "11001", "jf": "21004"},
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="barbarq",
        label="BarbarQ",
        codashop=_coda("ELECSOUL", "5145", "120000.0000"),
        nickname_paths=["confirmationFields.apiResult"],
    ),
    GameDefinition(
        code="basketrio",
        label="Basketrio",
        requires_zone=True,
        codashop=_coda("BASKETRIO", "147203", "832500.0000", zone=ZoneField.SERVER),
        server_map={"buzzerbeater": "2", "001": "3", "002": "4"},
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="cod",
        label="Call of Duty Mobile",
        codashop=_coda("CALL_OF_DUTY", "270251", "20000.0000"),
        gopay_code="CODM",
        nickname_paths=_ROLE_THEN_USERNAME,
    ),
    GameDefinition(
        code="dragoncity",
        label="Dragon City",
        codashop=_coda("DRAGON_CITY", "254206", "65000.0000"),
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="freefire",
        label="Free Fire",
        codashop=_coda("FREEFIRE", "270288", "200000.0000"),
        gopay_code="FREEFIRE",
        nickname_paths=_ROLE_THEN_USERNAME,
    ),
    GameDefinition(
        code="hago",
        label="Hago",
        codashop=_coda("HAGO", "272113", "29700.0000"),
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="mobilelegends",
        label="Mobile Legends",
        requires_zone=True,
        codashop=_coda("MOBILE_LEGENDS", "5199", "68543.0000", zone=ZoneField.SERVER),
        gopay_code="MOBILE_LEGENDS",
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="pb",
        label="Point Blank",
        codashop=_coda("POINT_BLANK", "344845", "11000.0000", zone=ZoneField.FIXED),
        nickname_paths=_USERNAME,
    ),
    GameDefinition(
        code="valorant",
        label="Valorant",
        codashop=_coda(
            "VALORANT",
            "950525",
            "75000.0000",
            zone=ZoneField.FIXED,
            userVariablePrice="0",
        ),
        gopay_code="VALORANT",
        nickname_paths=_USERNAME,
    ),
    # Solo GoPay Games.
    GameDefinition(code="pubg", label="PUBG Mobile", gopay_code="PUBG_ID", nickname_paths=[]),
    GameDefinition(code="hok", label="Honor of Kings", gopay_code="HOK", nickname_paths=[]),
    GameDefinition(code="fcmobile", label="FC Mobile", gopay_code="FC_MOBILE", nickname_paths=[]),
    GameDefinition(
        code="magicchessgogo",
        label="Magic Chess: Go Go",
        requires_zone=True,
        gopay_code="MAGIC_CHESS_GOGO",
        nickname_paths=[],
    ),
)


BUILTIN_ALIASES: dict[str, str] = {
    "eightballpool": "8ballpool",
    "arenaofvalor": "aov",
    "aovmobile": "aov",
    "ml": "mobilelegends",
    "mlbb": "mobilelegends",
    "mobilelegend": "mobilelegends",
    "mobilelegendsbangbang": "mobilelegends",
    "pointblank": "pb",
    "ff": "freefire",
    "garena": "freefire",
    "garenafreefire": "freefire",
    "codm": "cod",
    "callofduty": "cod",
    "callofdutymobile": "cod",
    "pubgm": "pubg",
    "pubgmobile": "pubg",
    "honorofkings": "hok",
    "fcm": "fcmobile",
    "eafcmobile": "fcmobile",
    "magicchess": "magicchessgogo",
    "azur": "azurlane",
    "bl": "badlanders",
}
