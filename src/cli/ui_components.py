"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ValidationResult


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("VALID-GAME", style="bold cyan")
    subtitle = Text("Validación de IDs de juego • Codashop • GoPay Games", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_games_table(games: Iterable[dict[str, Any]]) -> Table:
    table = Table(title="Supported Games")
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Label", style="white")
    table.add_column("Zone", style="yellow")
    table.add_column("Providers", style="green")
    table.add_column("Aliases", style="dim")
    for game in games:
        table.add_row(
            game["code"],
            game["label"],
            "required" if game["requiresZone"] else "-",
            ", ".join(game["providers"]),
            ", ".join(game["aliases"]),
        )
    return table


def build_search_table(hits: dict[str, str]) -> Table:
    table = Table(title="Search Results")
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Label", style="white")
    for code, label in hits.items():
        table.add_row(code, label)
    return table


def build_result_panel(result: ValidationResult) -> Panel:
    """Panel para un `ValidationResult`."""

    color = "green" if result.status else "red"
    title = Text("VALID" if result.status else "INVALID", style=f"bold {color}")

    body = Text()
    body.append(f"{result.code_value}: ", style="bold")
    body.append(result.message + "\n\n")
    rows = (
        ("Game", result.game),
        ("User ID", result.user_id),
        ("Zone", result.zone_id),
        ("Nickname", result.nickname),
        ("Provider", result.provider),
        ("HTTP", result.http_status),
    )
    for label, value in rows:
        if value is None or value == "":
            continue
        body.append(f"{label}: ", style="dim")
        body.append(f"{value}\n")
    body.append(result.timestamp.isoformat(), style="dim")

    return Panel(body, title=title, border_style=color)
