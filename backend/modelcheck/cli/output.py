"""Terminal output for the modelcheck CLI.

Rich tables for the catalog and validation results, plus the small set of
error/warning/success helpers every command uses. Commands print through the
shared ``console`` rather than calling ``print`` directly.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from modelcheck.services.catalog_cache import DiscoveryResults
from modelcheck.services.validation_service import TestResult, TestSummary

# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

_theme = Theme(
    {
        "info": "cyan",
        "success": "bold green",
        "error": "bold red",
        "error.detail": "red",
        "warning": "bold yellow",
        "muted": "dim",
        "model": "bold cyan",
        "status.success": "green",
        "status.failed": "red",
        "status.untested": "yellow",
        "status.skipped": "dim",
    }
)

console = Console(theme=_theme, highlight=False)

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def print_catalog(snapshot: DiscoveryResults) -> None:
    table = Table(
        title="Discovered Models",
        show_lines=False,
        border_style="dim",
        title_style="bold",
        header_style="bold dim",
    )
    table.add_column("Provider", style="muted", width=11)
    table.add_column("Model ID", style="model", min_width=30)
    table.add_column("Name", min_width=20)
    table.add_column("Type", width=10)
    table.add_column("Created", width=10, style="muted")

    for result in snapshot.results:
        for model in result.models:
            table.add_row(
                model.provider.value,
                model.id,
                model.display_name if model.display_name != model.id else "",
                model.model_type.value,
                model.created.date().isoformat() if model.created else "-",
            )

    console.print()
    console.print(table)
    console.print(f"\n[muted]{snapshot.total_models} models found[/]")
    for error in snapshot.errors:
        print_warning("Discovery failed", detail=error)
    for provider, reason in snapshot.skipped.items():
        console.print(f"[muted]{provider.value}: skipped ({reason})[/]")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def print_results(results: list[TestResult], summary: TestSummary) -> None:
    table = Table(
        title="Validation Results",
        show_lines=False,
        border_style="dim",
        title_style="bold",
        header_style="bold dim",
    )
    table.add_column("Provider", style="muted", width=11)
    table.add_column("Model", style="model", min_width=28)
    table.add_column("Type", width=10)
    table.add_column("Status", width=9)
    table.add_column("Latency", justify="right", width=9)
    table.add_column("Error", overflow="fold")

    for result in results:
        status = result.status.value
        table.add_row(
            result.provider.value,
            result.label,
            result.modality.value,
            f"[status.{status}]{status}[/]",
            f"{result.latency}ms" if result.latency is not None else "-",
            result.error or "",
        )

    console.print()
    console.print(table)
    console.print(
        f"\n[muted]{summary.total} tested:[/] "
        f"[status.success]{summary.passed} passed[/], "
        f"[status.failed]{summary.failed} failed[/], "
        f"[status.untested]{summary.untested} untested[/], "
        f"[status.skipped]{summary.skipped} skipped[/]"
        + (f" [muted](avg {summary.avg_latency}ms)[/]" if summary.passed else "")
    )


# ---------------------------------------------------------------------------
# Errors, warnings, success
# ---------------------------------------------------------------------------


def print_error(
    title: str,
    detail: str | None = None,
    suggestion: str | None = None,
) -> None:
    """Print a structured, actionable error message."""
    console.print(f"[error]✘ {title}[/]")
    if detail:
        console.print(f"  [error.detail]{detail}[/]")
    if suggestion:
        console.print(f"  [muted]→ {suggestion}[/]")


def print_warning(title: str, detail: str | None = None) -> None:
    console.print(f"[warning]⚠ {title}[/]")
    if detail:
        console.print(f"  [muted]{detail}[/]")


def print_success(message: str) -> None:
    console.print(f"[success]{message}[/]")
