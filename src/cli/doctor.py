"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import BROWSER_HEADERS, build_http_client
from adapters.providers.gopay import USER_ACCOUNT_URL
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.models import ProviderKey
from core.pricing import PriceStrategy

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(settings: AppSettings, url: str) -> tuple[bool, str]:
    try:
        with build_http_client(settings, extra_headers=BROWSER_HEADERS) as client:
            response = client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="valid-game Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Preferred provider", "OK", settings.preferred_provider.value)
    table.add_row("Fallback", "OK", "enabled" if settings.fallback else "disabled")
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    if settings.proxy_url:
        table.add_row("Proxy", "OK", settings.proxy_url)
    else:
        table.add_row("Proxy", "OPTIONAL", "No proxy set -> direct connection")
    if settings.catalog_path is None:
        table.add_row("Catalog file", "OPTIONAL", "Built-in catalog only")
    elif settings.catalog_path.exists():
        table.add_row("Catalog file", "OK", str(settings.catalog_path))
    else:
        table.add_row("Catalog file", "FAIL", f"Not found: {settings.catalog_path}")
    table.add_row("User config", "OK", str(get_user_env_file()))

    # Connectivity (best-effort)
    for name, url in (
        ("Codashop", settings.codashop_base_url),
        ("GoPay Games", USER_ACCOUNT_URL.split("/games/", 1)[0]),
    ):
        ok_http, detail_http = _check_http(settings, url)
        table.add_row(f"{name} connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env).

    Designed for non-Python users: no manual .env editing.
    """

    provider = typer.prompt(
        "Preferred provider (codashop/gopay)",
        default=ProviderKey.CODASHOP.value,
        show_default=True,
    ).strip().lower()
    try:
        provider_key = ProviderKey.parse(provider)
    except ValueError as exc:
        raise typer.BadParameter(f"unknown provider: {provider}") from exc

    fallback = typer.confirm("Fall back to the next provider on failure?", default=True)
    proxy = typer.prompt("Proxy URL (empty for none)", default="", show_default=False).strip()
    timeout = typer.prompt("HTTP timeout (seconds)", default=15.0, type=float)
    strategy = typer.prompt(
        "Price strategy (lowest/highest/closest/prefer_ids/prefer_price, empty for none)",
        default="",
        show_default=False,
    ).strip().lower()
    if strategy and strategy not in {s.value for s in PriceStrategy}:
        raise typer.BadParameter(f"unknown price strategy: {strategy}")

    env_path = write_user_env_vars(
        {
            "VALID_GAME_PREFERRED_PROVIDER": provider_key.value,
            "VALID_GAME_FALLBACK": "true" if fallback else "false",
            "VALID_GAME_PROXY_URL": proxy or None,
            "VALID_GAME_HTTP_TIMEOUT_SECONDS": f"{timeout:g}",
            "VALID_GAME_PRICE_STRATEGY": strategy or None,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
