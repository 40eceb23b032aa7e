"""modelcheck CLI entry point.

    modelcheck discover                 -> list models from every configured provider
    modelcheck verify PROVIDER MODEL    -> cheap existence check
    modelcheck validate PROVIDER MODEL  -> probe one model/modality
    modelcheck sweep                    -> discover, then probe everything found
    modelcheck sweep --mode quick       -> one configured model per provider

Credentials come from the same settings as the API (OPENAI_API_KEY, ...).
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from pydantic import TypeAdapter

from modelcheck.cli import output as out
from modelcheck.core.config import get_settings
from modelcheck.models.enums import Modality, Provider, TestMode, TestStatus
from modelcheck.services.catalog_cache import DiscoveryResults
from modelcheck.services.catalog_service import get_catalog_service
from modelcheck.services.validation_service import (
    ModelToTest,
    TestResult,
    ValidationService,
    get_validation_service,
    select_models,
    summarize,
)

PROVIDER_CHOICES = ["all"] + [p.value for p in Provider]
TYPE_CHOICES = [m.value for m in Modality]


def _scope(provider: str) -> list[Provider] | None:
    return None if provider == "all" else [Provider(provider)]


def _exit_on_failures(results: list[TestResult]) -> None:
    if any(result.status is TestStatus.FAILED for result in results):
        sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=out.VERSION, prog_name="modelcheck")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log provider traffic")
def cli(verbose: bool) -> None:
    """Discover and validate models across AI providers."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# discover / verify
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--provider", "-p", type=click.Choice(PROVIDER_CHOICES), default="all")
@click.option("--refresh", is_flag=True, default=False, help="Bypass the catalog cache")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print raw JSON")
def discover(provider: str, refresh: bool, as_json: bool) -> None:
    """List models reported by each provider's API."""
    catalog = get_catalog_service()
    snapshot = asyncio.run(
        catalog.discover_all(get_settings().api_keys, providers=_scope(provider), force_refresh=refresh)
    )
    if as_json:
        click.echo(TypeAdapter(DiscoveryResults).dump_json(snapshot, indent=2).decode())
        return
    out.print_catalog(snapshot)


@cli.command()
@click.argument("provider", type=click.Choice([p.value for p in Provider]))
@click.argument("model")
def verify(provider: str, model: str) -> None:
    """Check whether PROVIDER still lists MODEL."""
    target = Provider(provider)
    catalog = get_catalog_service()
    api_key = get_settings().api_keys.get(target)
    if not api_key and catalog.needs_credential(target):
        out.print_error(
            f"No API key configured for {target.label}",
            suggestion=f"Set {target.value.upper()}_API_KEY",
        )
        sys.exit(2)

    if asyncio.run(catalog.verify_model(target, model, api_key)):
        out.print_success(f"{model} exists on {target.label}")
    else:
        out.print_error(f"{model} was not found on {target.label}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# validate / sweep
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("provider", type=click.Choice([p.value for p in Provider]))
@click.argument("model")
@click.option("--type", "-t", "model_type", default="chat", help="Modality to probe", show_default=True)
@click.option("--label", default=None, help="Label shown in the results")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print raw JSON")
def validate(provider: str, model: str, model_type: str, label: str | None, as_json: bool) -> None:
    """Probe MODEL on PROVIDER with the cheapest request for its modality."""
    item = ModelToTest.from_request(Provider(provider), model, model_type, label)
    result = asyncio.run(get_validation_service().test_model(item))
    if as_json:
        click.echo(TypeAdapter(list[TestResult]).dump_json([result], indent=2).decode())
    else:
        out.print_results([result], summarize([result]))
    _exit_on_failures([result])


@cli.command()
@click.option("--provider", "-p", type=click.Choice(PROVIDER_CHOICES), default="all")
@click.option("--type", "-t", "model_type", type=click.Choice(TYPE_CHOICES), default=None, help="Only probe this modality")
@click.option(
    "--mode",
    "-m",
    type=click.Choice([m.value for m in TestMode]),
    default=TestMode.FULL.value,
    show_default=True,
    help="quick: one configured model per provider; individual: only --select models",
)
@click.option("--select", "-s", "selected", multiple=True, metavar="PROVIDER:MODEL", help="Model to probe in individual mode")
@click.option("--concurrency", "-c", type=click.IntRange(1, 16), default=None, help="Probes in flight at once")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print raw JSON")
def sweep(
    provider: str,
    model_type: str | None,
    mode: str,
    selected: tuple[str, ...],
    concurrency: int | None,
    as_json: bool,
) -> None:
    """Discover every model, then validate each one."""
    test_mode = TestMode(mode)
    if test_mode is TestMode.INDIVIDUAL and not selected:
        raise click.UsageError("--mode individual needs at least one --select PROVIDER:MODEL")
    settings = get_settings()

    async def _run() -> tuple[DiscoveryResults, list[TestResult]]:
        snapshot = await get_catalog_service().discover_all(settings.api_keys, providers=_scope(provider))
        items = [
            ModelToTest.from_request(model.provider, model.id, model.model_type.value, model.display_name)
            for result in snapshot.results
            for model in result.models
        ]
        if model_type:
            items = [item for item in items if item.modality.value == model_type]
        items = select_models(test_mode, items, set(selected), settings.quick_models)
        service = ValidationService(concurrency=concurrency) if concurrency else get_validation_service()
        return snapshot, await service.run_tests(items)

    if not as_json:
        out.console.print("[muted]Discovering models...[/]")
    snapshot, results = asyncio.run(_run())

    if as_json:
        click.echo(TypeAdapter(list[TestResult]).dump_json(results, indent=2).decode())
    else:
        for error in snapshot.errors:
            out.print_warning("Discovery failed", detail=error)
        out.print_results(results, summarize(results))
    _exit_on_failures(results)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
