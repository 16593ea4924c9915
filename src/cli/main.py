"""CLI principal (Typer).

Por qué Typer:
- Tipos de Python como contrato de argumentos/opciones.
- Ayuda autogenerada; los sub-comandos (doctor) se montan con `add_typer`.

La CLI solo presenta: toda la lógica vive en `ValidGameClient`.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from cli import doctor
from cli.ui_components import build_games_table, build_result_panel, build_search_table, print_banner
from core.config import AppSettings
from core.domain.models import ValidationResult
from core.domain.options import CheckOptions
from core.errors import ValidGameError
from core.pricing import PriceStrategy
from core.services.client import ValidGameClient

app = typer.Typer(no_args_is_help=True, help="Validate in-game player IDs against top-up storefronts.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _settings(debug: bool) -> AppSettings:
    settings = AppSettings()
    if debug:
        settings = settings.model_copy(update={"debug": True})
    _setup_logging(settings.debug)
    return settings


def _emit(result: ValidationResult, as_json: bool) -> None:
    if as_json:
        typer.echo(result.to_json())
    else:
        _console.print(build_result_panel(result))
    raise typer.Exit(code=0 if result.status else 1)


def _parse_extras(values: list[str]) -> dict[str, str]:
    extras: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--extra")
        extras[key.strip()] = value
    return extras


def _check_options(
    price_point_id: Optional[int],
    price: Optional[float],
    strategy: Optional[PriceStrategy],
    target: Optional[float],
    prefer_ids: Optional[List[int]],
    extras: Optional[List[str]],
    with_profile: bool,
) -> Optional[CheckOptions]:
    """None si no se pasó ninguna opción de payload."""

    if (
        price_point_id is None
        and price is None
        and strategy is None
        and target is None
        and not prefer_ids
        and not extras
        and not with_profile
    ):
        return None
    return CheckOptions(
        price_point_id=price_point_id,
        price_point_price=price,
        price_strategy=strategy,
        price_target=target,
        prefer_ids=prefer_ids or [],
        extras=_parse_extras(extras or []),
        with_profile=with_profile,
    )


@app.command()
def check(
    game: str = typer.Argument(..., help="Game code or alias (ff, mlbb, codm...)."),
    user_id: str = typer.Argument(..., help="Player ID."),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help="Zone/server id or name."),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Only use this provider."),
    product_path: Optional[str] = typer.Option(
        None,
        "--path",
        help="Codashop product page slug, used when the game is not in the catalog.",
    ),
    price_point_id: Optional[int] = typer.Option(None, "--price-point-id", help="Force voucherPricePoint.id."),
    price: Optional[float] = typer.Option(None, "--price", help="Force voucherPricePoint.price."),
    strategy: Optional[PriceStrategy] = typer.Option(None, "--strategy", help="Price point strategy for this call."),
    target: Optional[float] = typer.Option(None, "--target", help="Target price for closest/prefer_price."),
    prefer_ids: Optional[List[int]] = typer.Option(None, "--prefer-id", help="Preferred price point id (repeatable)."),
    extras: Optional[List[str]] = typer.Option(None, "--extra", help="Extra form field KEY=VALUE (repeatable)."),
    with_profile: bool = typer.Option(False, "--with-profile", help="Send an empty order.data.profile."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging and raw response in meta."),
) -> None:
    """Validate a player ID."""

    options = _check_options(price_point_id, price, strategy, target, prefer_ids, extras, with_profile)
    settings = _settings(debug)
    if not as_json:
        print_banner(_console)
    with ValidGameClient(settings) as client:
        if provider:
            result = client.check_with(provider, game, user_id, zone, options=options)
        else:
            result = client.check(game, user_id, zone, product_path=product_path, options=options)
    _emit(result, as_json)


@app.command()
def games(
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Filter by provider."),
) -> None:
    """List supported games."""

    _setup_logging(False)
    with ValidGameClient(AppSettings()) as client:
        entries = client.list_games()
        if provider:
            try:
                allowed = set(client.games_for_provider(provider))
            except ValueError as exc:
                _console.print(f"[red]Unknown provider:[/red] {provider}")
                raise typer.Exit(code=1) from exc
            entries = [e for e in entries if e["code"] in allowed]
    _console.print(build_games_table(entries))


@app.command()
def search(query: str = typer.Argument(..., help="Text to match against code, label and aliases.")) -> None:
    """Search games by name or alias."""

    _setup_logging(False)
    with ValidGameClient(AppSettings()) as client:
        hits = client.search_games(query)
    if not hits:
        _console.print(f"[yellow]No games match[/yellow] {query!r}")
        raise typer.Exit(code=1)
    _console.print(build_search_table(hits))


@app.command()
def discover(
    path: str = typer.Argument(..., help="Codashop product page slug (e.g. aether-gazer)."),
    user_id: Optional[str] = typer.Argument(None, help="Player ID; omit to only inspect the page."),
    zone: Optional[str] = typer.Option(None, "--zone", "-z", help="Zone/server id."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging and raw response in meta."),
) -> None:
    """Scrape a product page and validate against it."""

    settings = _settings(debug)
    with ValidGameClient(settings) as client:
        if user_id is None:
            try:
                definition = client.discover(path)
            except ValidGameError as exc:
                _console.print(f"[red]Discovery failed:[/red] {exc}")
                raise typer.Exit(code=1) from exc
            typer.echo(definition.model_dump_json(indent=2))
            return
        result = client.check_path(path, user_id, zone)
    _emit(result, as_json)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
