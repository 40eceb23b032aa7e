from conftest import FakeAdapter

from modelcheck.core.config import Settings, get_settings
from modelcheck.main import app
from modelcheck.models.enums import Modality, Provider
from modelcheck.services.catalog_cache import InMemoryCatalogCache
from modelcheck.services.catalog_service import CatalogService, get_catalog_service
from modelcheck.services.probe_registry import ProbeRegistry
from modelcheck.services.probes_base import Probe
from modelcheck.services.validation_service import ValidationService, get_validation_service


def _install_catalog(adapters, **keys) -> CatalogService:
    catalog = CatalogService(
        adapters={adapter.provider: adapter for adapter in adapters},
        cache=InMemoryCatalogCache(),
        ttl_seconds=3600,
    )
    app.dependency_overrides[get_catalog_service] = lambda: catalog
    app.dependency_overrides[get_settings] = lambda: Settings(**keys)
    return catalog


def _install_validation(probes, keys) -> None:
    service = ValidationService(registry=ProbeRegistry(probes=probes, settings=Settings()), keys=keys)
    app.dependency_overrides[get_validation_service] = lambda: service


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_provider_models_reports_every_provider(client):
    _install_catalog(
        [
            FakeAdapter(Provider.OPENAI, ["gpt-4o"]),
            FakeAdapter(Provider.ANTHROPIC, error="Anthropic API error: 401 - invalid x-api-key"),
            FakeAdapter(Provider.GEMINI, ["gemini-2.0-flash"]),
        ],
        openai_api_key="sk-openai",
        anthropic_api_key="sk-bad",
        gemini_api_key="",
    )

    response = client.get("/v1/provider-models")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["totalModels"] == 1
    assert body["errors"] == ["anthropic: Anthropic API error: 401 - invalid x-api-key"]
    assert "cachedAt" in body
    assert body["providers"]["openai"]["available"] is True
    assert body["providers"]["openai"]["models"][0] == {
        "id": "gpt-4o",
        "displayName": "gpt-4o",
        "provider": "openai",
        "type": "chat",
        "created": None,
        "ownedBy": None,
    }
    assert body["providers"]["anthropic"] == {
        "available": False,
        "models": [],
        "error": "Anthropic API error: 401 - invalid x-api-key",
    }
    assert body["providers"]["gemini"]["error"] == "No API key configured"


def test_provider_models_single_provider_and_refresh(client):
    openai = FakeAdapter(Provider.OPENAI, ["gpt-4o"])
    _install_catalog([openai, FakeAdapter(Provider.GEMINI, ["gemini-2.0-flash"])], openai_api_key="sk", gemini_api_key="gm")

    first = client.get("/v1/provider-models", params={"provider": "openai"})
    client.get("/v1/provider-models", params={"provider": "openai"})
    client.get("/v1/provider-models", params={"provider": "openai", "refresh": "true"})

    assert list(first.json()["providers"]) == ["openai"]
    assert len(openai.calls) == 2


def test_provider_models_reports_the_skip_reason(client):
    _install_catalog([FakeAdapter(Provider.OPENAI, ["gpt-4o"])], openai_api_key="sk", gemini_api_key="gm")

    response = client.get("/v1/provider-models", params={"provider": "gemini"})

    assert response.status_code == 200
    assert response.json()["providers"]["gemini"] == {
        "available": False,
        "models": [],
        "error": "discovery not supported",
    }


def test_api_keys_status_never_exposes_keys(client):
    app.dependency_overrides[get_settings] = lambda: Settings(
        openai_api_key="sk-secret", anthropic_api_key="", gemini_api_key="gm-secret", openrouter_api_key=""
    )

    response = client.get("/v1/api-keys-status")

    assert response.status_code == 200
    assert response.json() == {
        "providers": {"openai": True, "anthropic": False, "gemini": True, "openrouter": False},
        "configured": ["openai", "gemini"],
    }
    assert "secret" not in response.text


def test_provider_models_rejects_unknown_provider(client):
    _install_catalog([FakeAdapter(Provider.OPENAI, ["gpt-4o"])], openai_api_key="sk")

    response = client.get("/v1/provider-models", params={"provider": "mistral"})

    assert response.status_code == 400


def test_verify_model(client):
    _install_catalog([FakeAdapter(Provider.OPENAI, missing={"gpt-nope"})], openai_api_key="sk")

    found = client.get("/v1/provider-models/openai/verify", params={"model": "gpt-4o"})
    missing = client.get("/v1/provider-models/openai/verify", params={"model": "gpt-nope"})

    assert found.json() == {"provider": "openai", "model": "gpt-4o", "exists": True}
    assert missing.json()["exists"] is False


def test_verify_requires_a_key(client):
    _install_catalog([FakeAdapter(Provider.ANTHROPIC, ["claude-x"])], anthropic_api_key="")

    response = client.get("/v1/provider-models/anthropic/verify", params={"model": "claude-x"})

    assert response.status_code == 400
    assert response.json()["detail"] == "No API key configured for anthropic"


def test_validation_batch_returns_results_and_summary(client):
    async def ok(ctx, api_key, model):
        return None

    async def missing(ctx, api_key, model):
        raise RuntimeError("model: not_found_error")

    _install_validation(
        [Probe(Provider.OPENAI, Modality.CHAT, ok, 5), Probe(Provider.ANTHROPIC, Modality.CHAT, missing, 5)],
        keys={Provider.OPENAI: "sk", Provider.ANTHROPIC: "sk-ant"},
    )

    response = client.post(
        "/v1/validation/test",
        json={
            "models": [
                {"provider": "openai", "model": "gpt-4o-mini", "label": "GPT-4o mini", "type": "chat"},
                {"provider": "anthropic", "model": "claude-x"},
                {"provider": "gemini", "model": "gemini-2.0-flash"},
            ]
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [r["status"] for r in body["results"]] == ["success", "failed", "failed"]
    assert body["results"][0]["modelLabel"] == "GPT-4o mini"
    assert body["results"][1]["error"].startswith("This model is not available through Anthropic's direct API")
    assert body["results"][2]["error"] == "No API key configured"
    assert body["summary"]["total"] == 3
    assert body["summary"]["passed"] == 1
    assert body["summary"]["failed"] == 2
    assert "avgLatency" in body["summary"]


def test_validation_batch_honours_test_mode(client):
    async def ok(ctx, api_key, model):
        return None

    _install_validation([Probe(Provider.OPENAI, Modality.CHAT, ok, 5)], keys={Provider.OPENAI: "sk"})
    app.dependency_overrides[get_settings] = lambda: Settings(quick_test_models={"openai": "gpt-4o-mini"})
    models = [
        {"provider": "openai", "model": "gpt-4o"},
        {"provider": "openai", "model": "gpt-4o-mini"},
        {"provider": "openai", "model": "gpt-4.1"},
    ]

    quick = client.post("/v1/validation/test", json={"models": models, "mode": "quick"})
    individual = client.post(
        "/v1/validation/test",
        json={"models": models, "mode": "individual", "selected": ["openai:gpt-4o", "openai:gpt-4.1"]},
    )
    full = client.post("/v1/validation/test", json={"models": models})

    assert [r["model"] for r in quick.json()["results"]] == ["gpt-4o-mini"]
    assert [r["model"] for r in individual.json()["results"]] == ["gpt-4o", "gpt-4.1"]
    assert full.json()["summary"]["total"] == 3


def test_validation_single_model(client):
    async def ok(ctx, api_key, model):
        return None

    _install_validation([Probe(Provider.OPENAI, Modality.RESPONSES, ok, 5)], keys={Provider.OPENAI: "sk"})

    response = client.post("/v1/validation/test-model", json={"provider": "openai", "model": "o3-mini"})

    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "responses"
    assert body["status"] == "success"
    assert body["modelLabel"] == "o3-mini"


def test_validation_rejects_unknown_provider(client):
    _install_validation([], keys={})

    response = client.post("/v1/validation/test-model", json={"provider": "mistral", "model": "x"})

    assert response.status_code == 422
