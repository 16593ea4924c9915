"""Discovery dinámico: tokens y price points desde la página de producto.

Por qué existe:
- Los tokens anti-abuso (`dynamicSkuToken`, `pricePointDynamicSkuToken`) se
  incrustan en cada vista de página y caducan pronto: hay que recogerlos
  justo antes de validar.
- El scraping por regex es frágil; vive aislado detrás de `PageResolver`.

Si falta algún campo obligatorio se lanza `DiscoveryFieldsMissingError` con
*todos* los que faltan, para que un cambio de formato sea diagnosticable.
"""

from __future__ import annotations

import html as html_lib
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from adapters.http_client import BROWSER_HEADERS
from core.domain.models import CodashopTemplate, GameDefinition, PricePoint, ZoneField
from core.errors import DiscoveryFieldsMissingError, HttpScrapeError
from core.interfaces.transport import Transport
from core.normalize import canonical_key

DEFAULT_BASE_URL = "https://www.codashop.com"
DEFAULT_LOCALE_PATH = "id-id"
SHOP_LANG = "id_ID"
FALLBACK_PRICE_POINT_ID = "1"
FALLBACK_PRICE = "10000"

_LOCALE_PREFIX_RE = re.compile(r"^[a-z]{2}-[a-z]{2}/")

# Comillas opcionales, también escapadas (JSON dentro de un string JS).
_Q = r"""\\?["']?"""

_VALUE_PATTERNS = {
    "text": r"""([^"'\\,}\s<]+)""",
    "int": r"(\d+)",
    # Tokens tipo bearer/JWT: base64url con puntos.
    "token": r"([A-Za-z0-9._\-+/=]{8,})",
}

REQUIRED_FIELDS: dict[str, str] = {
    "voucherTypeName": "text",
    "voucherTypeId": "int",
    "gvtId": "int",
    "lvtId": "int",
    "dynamicSkuToken": "token",
    "pricePointDynamicSkuToken": "token",
}

OPTIONAL_FIELDS: dict[str, str] = {
    "pcId": "int",
}

_DEFAULT_PP_ID_RES = (
    re.compile(r""""voucherPricePoint"\s*:\s*\{\s*"id"\s*:\s*"?(\d+)"?""", re.IGNORECASE),
    re.compile(r""""voucherPricePointList".*?"id"\s*:\s*"?(\d+)"?""", re.IGNORECASE | re.DOTALL),
)
_DEFAULT_PP_PRICE_RES = (
    re.compile(r""""voucherPricePoint"\s*:\s*\{[^}]*"price"\s*:\s*"?(\d+(?:\.\d+)?)"?""", re.IGNORECASE),
    re.compile(r""""voucherPricePointList".*?"price"\s*:\s*"?(\d+(?:\.\d+)?)"?""", re.IGNORECASE | re.DOTALL),
)
_PRICE_LIST_RE = re.compile(
    r""""id"\s*:\s*"?(\d{1,9})"?[^}]{0,250}?"price"\s*:\s*"?(\d+(?:\.\d+)?)"?""",
    re.IGNORECASE,
)


def _field_re(key: str, kind: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?<![A-Za-z0-9_]){_Q}{re.escape(key)}{_Q}\s*[:=]\s*{_Q}{_VALUE_PATTERNS[kind]}",
        re.IGNORECASE,
    )


def _grab(haystacks: list[str], patterns: tuple[re.Pattern[str], ...] | list[re.Pattern[str]]) -> str | None:
    for text in haystacks:
        for pattern in patterns:
            match = pattern.search(text)
            if match and match.group(1):
                return html_lib.unescape(match.group(1))
    return None


def normalize_path(path_slug: str) -> str:
    """`dazz-live` -> `id-id/dazz-live`; un prefijo de locale (`xx-yy/`) se respeta."""

    trimmed = path_slug.strip().lstrip("/")
    if _LOCALE_PREFIX_RE.match(trimmed):
        return trimmed
    return f"{DEFAULT_LOCALE_PATH}/{trimmed}"


@dataclass
class DiscoveredPage:
    """Campos extraídos de una página de producto."""

    url: str
    fields: dict[str, str]
    title: str | None = None
    default_price_point_id: str | None = None
    default_price: str | None = None
    price_points: list[PricePoint] = field(default_factory=list)


class PageDiscoveryResolver:
    """Scrapea la página de producto de Codashop."""

    def __init__(self, transport: Transport, *, base_url: str = DEFAULT_BASE_URL) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")

    def url_for(self, path_slug: str) -> str:
        return f"{self._base_url}/{normalize_path(path_slug)}"

    def fetch(self, path_slug: str) -> tuple[str, str]:
        url = self.url_for(path_slug)
        response = self._transport.send("GET", url, BROWSER_HEADERS)
        if not response.ok:
            raise HttpScrapeError(
                f"SCRAPE_HTTP_ERROR: failed to fetch game page (status {response.status})",
                status=response.status,
            )
        if not response.body:
            raise HttpScrapeError("SCRAPE_HTTP_ERROR: empty body", status=response.status)
        return url, response.body

    def extract(self, url: str, html: str) -> DiscoveredPage:
        soup = BeautifulSoup(html, "html.parser")
        scripts = "\n".join(tag.get_text() for tag in soup.find_all("script"))
        haystacks = [scripts, html] if scripts.strip() else [html]

        fields: dict[str, str] = {}
        missing: list[str] = []
        for key, kind in REQUIRED_FIELDS.items():
            value = _grab(haystacks, [_field_re(key, kind)])
            if value:
                fields[key] = value
            else:
                missing.append(key)
        if missing:
            raise DiscoveryFieldsMissingError(missing)

        for key, kind in OPTIONAL_FIELDS.items():
            value = _grab(haystacks, [_field_re(key, kind)])
            if value:
                fields[key] = value

        points: dict[int, PricePoint] = {}
        for text in haystacks:
            for match in _PRICE_LIST_RE.finditer(text):
                pp_id = int(match.group(1))
                if pp_id not in points:
                    points[pp_id] = PricePoint(id=pp_id, price=float(match.group(2)))

        title = soup.title.string.strip() if soup.title and soup.title.string else None

        return DiscoveredPage(
            url=url,
            fields=fields,
            title=title,
            default_price_point_id=_grab(haystacks, _DEFAULT_PP_ID_RES),
            default_price=_grab(haystacks, _DEFAULT_PP_PRICE_RES),
            price_points=sorted(points.values(), key=lambda pp: pp.price),
        )

    def inspect(self, path_slug: str) -> DiscoveredPage:
        url, html = self.fetch(path_slug)
        return self.extract(url, html)

    def resolve_from_path(
        self,
        path_slug: str,
        user_id: str | int,
        zone_id: str | int | None = None,
        price_point_id: int | None = None,
        price: float | None = None,
    ) -> dict[str, str]:
        """Payload de initPayment listo para enviar.

        Price point: override > detectado en la página > fallback (1 / 10000).
        """

        page = self.inspect(path_slug)

        pp_id = price_point_id if price_point_id is not None else page.default_price_point_id
        pp_price = price if price is not None else page.default_price

        payload: dict[str, str | None] = {
            "voucherPricePoint.id": str(pp_id if pp_id is not None else FALLBACK_PRICE_POINT_ID),
            "voucherPricePoint.price": str(pp_price if pp_price is not None else FALLBACK_PRICE),
            "voucherPricePoint.variablePrice": "0",
            "user.userId": str(user_id),
            "user.zoneId": str(zone_id) if zone_id is not None and str(zone_id) != "" else None,
            **page.fields,
            "shopLang": SHOP_LANG,
            "absoluteUrl": page.url,
        }
        return {k: v for k, v in payload.items() if v is not None}

    def discover(self, path_slug: str) -> GameDefinition:
        """Convierte la página en una definición registrable."""

        page = self.inspect(path_slug)
        fields = dict(page.fields)
        slug = normalize_path(path_slug).split("/", 1)[1]
        code = canonical_key(slug) or canonical_key(fields["voucherTypeName"])

        template = CodashopTemplate(
            voucher_type_name=fields.pop("voucherTypeName"),
            price_point_id=page.default_price_point_id or FALLBACK_PRICE_POINT_ID,
            price=page.default_price or FALLBACK_PRICE,
            zone_field=ZoneField.OPTIONAL,
            fixed=fields,
            shop_lang=SHOP_LANG,
            absolute_url=page.url,
        )
        return GameDefinition(
            code=code,
            label=page.title or slug,
            codashop=template,
            nickname_paths=[
                "confirmationFields.username",
                "confirmationFields.roles.0.role",
                "confirmationFields.apiResult",
            ],
            zone_path="confirmationFields.roles.0.server",
            price_points=page.price_points,
            product_path=slug,
        )
