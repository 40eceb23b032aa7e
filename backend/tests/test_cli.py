import json

import pytest
from click.testing import CliRunner
from conftest import FakeAdapter

from modelcheck.cli import main as cli_main
from modelcheck.core.config import Settings
from modelcheck.models.enums import Modality, Provider
from modelcheck.services.catalog_cache import InMemoryCatalogCache
from modelcheck.services.catalog_service import CatalogService
from modelcheck.services.probe_registry import ProbeRegistry
from modelcheck.services.probes_base import Probe
from modelcheck.services.validation_service import ValidationService


async def _ok(ctx, api_key, model):
    return None


async def _missing(ctx, api_key, model):
    raise RuntimeError("model: not_found_error")


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def wire(monkeypatch):
    """Point the CLI at fake adapters and scripted probes."""

    def _wire(adapters, keys, probes=()):
        catalog = CatalogService(
            adapters={adapter.provider: adapter for adapter in adapters},
            cache=InMemoryCatalogCache(),
            ttl_seconds=3600,
        )
        settings = Settings(**{f"{provider.value}_api_key": keys.get(provider, "") for provider in Provider})
        validation = ValidationService(registry=ProbeRegistry(probes=list(probes), settings=Settings()), keys=keys)
        monkeypatch.setattr(cli_main, "get_catalog_service", lambda: catalog)
        monkeypatch.setattr(cli_main, "get_settings", lambda: settings)
        monkeypatch.setattr(cli_main, "get_validation_service", lambda: validation)
        return catalog

    return _wire


def test_discover_prints_a_table(runner, wire):
    wire(
        [FakeAdapter(Provider.OPENAI, ["gpt-4o"]), FakeAdapter(Provider.GEMINI, ["gemini-2.0-flash"])],
        {Provider.OPENAI: "sk"},
    )

    result = runner.invoke(cli_main.cli, ["discover"])

    assert result.exit_code == 0
    assert "gpt-4o" in result.output
    assert "1 models found" in result.output
    assert "gemini: skipped (no credential)" in result.output


def test_discover_json(runner, wire):
    wire([FakeAdapter(Provider.OPENAI, ["gpt-4o", "gpt-4o-mini"])], {Provider.OPENAI: "sk"})

    result = runner.invoke(cli_main.cli, ["discover", "--provider", "openai", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["total_models"] == 2
    assert [m["id"] for m in payload["results"][0]["models"]] == ["gpt-4o", "gpt-4o-mini"]


def test_verify_exit_codes(runner, wire):
    wire([FakeAdapter(Provider.OPENAI, missing={"gpt-nope"}), FakeAdapter(Provider.ANTHROPIC)], {Provider.OPENAI: "sk"})

    found = runner.invoke(cli_main.cli, ["verify", "openai", "gpt-4o"])
    missing = runner.invoke(cli_main.cli, ["verify", "openai", "gpt-nope"])
    no_key = runner.invoke(cli_main.cli, ["verify", "anthropic", "claude-x"])

    assert found.exit_code == 0
    assert "gpt-4o exists on OpenAI" in found.output
    assert missing.exit_code == 1
    assert no_key.exit_code == 2
    assert "ANTHROPIC_API_KEY" in no_key.output


def test_validate_success_and_failure(runner, wire):
    wire(
        [],
        {Provider.OPENAI: "sk", Provider.ANTHROPIC: "sk-ant"},
        probes=[Probe(Provider.OPENAI, Modality.TTS, _ok, 5), Probe(Provider.ANTHROPIC, Modality.CHAT, _missing, 5)],
    )

    passed = runner.invoke(cli_main.cli, ["validate", "openai", "tts-1", "--type", "tts", "--json"])
    failed = runner.invoke(cli_main.cli, ["validate", "anthropic", "claude-x"])

    assert passed.exit_code == 0
    assert json.loads(passed.output)[0]["status"] == "success"
    assert failed.exit_code == 1
    assert "failed" in failed.output


def test_sweep_filters_by_type(runner, wire):
    wire(
        [FakeAdapter(Provider.OPENAI, ["gpt-4o", "gpt-4o-mini"])],
        {Provider.OPENAI: "sk"},
        probes=[Probe(Provider.OPENAI, Modality.CHAT, _ok, 5)],
    )

    everything = runner.invoke(cli_main.cli, ["sweep", "--json"])
    only_images = runner.invoke(cli_main.cli, ["sweep", "--type", "image", "--json"])

    assert everything.exit_code == 0
    assert [r["model"] for r in json.loads(everything.output)] == ["gpt-4o", "gpt-4o-mini"]
    assert json.loads(only_images.output) == []


def test_sweep_quick_mode_uses_configured_models(runner, wire, monkeypatch):
    wire(
        [FakeAdapter(Provider.OPENAI, ["gpt-4o", "gpt-4o-mini"]), FakeAdapter(Provider.GEMINI, ["gemini-2.0-flash"])],
        {Provider.OPENAI: "sk", Provider.GEMINI: "gm"},
        probes=[Probe(Provider.OPENAI, Modality.CHAT, _ok, 5), Probe(Provider.GEMINI, Modality.CHAT, _ok, 5)],
    )
    settings = Settings(
        openai_api_key="sk",
        gemini_api_key="gm",
        anthropic_api_key="",
        openrouter_api_key="",
        quick_test_models={"openai": "gpt-4o-mini", "gemini": "gemini-2.0-flash", "mistral": "ignored"},
    )
    monkeypatch.setattr(cli_main, "get_settings", lambda: settings)

    result = runner.invoke(cli_main.cli, ["sweep", "--mode", "quick", "--json"])

    assert result.exit_code == 0
    assert [r["model"] for r in json.loads(result.output)] == ["gpt-4o-mini", "gemini-2.0-flash"]


def test_sweep_individual_mode(runner, wire):
    wire(
        [FakeAdapter(Provider.OPENAI, ["gpt-4o", "gpt-4o-mini"])],
        {Provider.OPENAI: "sk"},
        probes=[Probe(Provider.OPENAI, Modality.CHAT, _ok, 5)],
    )

    picked = runner.invoke(cli_main.cli, ["sweep", "--mode", "individual", "--select", "openai:gpt-4o", "--json"])
    nothing_selected = runner.invoke(cli_main.cli, ["sweep", "--mode", "individual"])

    assert picked.exit_code == 0
    assert [r["model"] for r in json.loads(picked.output)] == ["gpt-4o"]
    assert nothing_selected.exit_code == 2
    assert "--select" in nothing_selected.output
