from fastapi import APIRouter, Depends, HTTPException, Query, status

from modelcheck.core.config import Settings, get_settings
from modelcheck.models.enums import Provider
from modelcheck.schemas.discovery import (
    ApiKeysStatusResponse,
    ProviderAvailability,
    ProviderModelResponse,
    ProviderModelsResponse,
    VerifyModelResponse,
)
from modelcheck.services.catalog_cache import DiscoveryResults
from modelcheck.services.catalog_service import NO_API_KEY_CONFIGURED, NO_CREDENTIAL, CatalogService, get_catalog_service
from modelcheck.services.provider_service import discoverable_providers, providers_with_keys

router = APIRouter(prefix="")


def _scope(provider: str, catalog: CatalogService) -> list[Provider]:
    if provider == "all":
        return catalog.providers
    try:
        return [Provider(provider)]
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported provider {provider}") from exc


def _skip_reason(reason: str | None) -> str | None:
    if reason == NO_CREDENTIAL:
        return NO_API_KEY_CONFIGURED
    return reason


def _to_response(snapshot: DiscoveryResults, scope: list[Provider]) -> ProviderModelsResponse:
    providers: dict[Provider, ProviderAvailability] = {}
    for provider in scope:
        result = snapshot.result_for(provider)
        if result is None:
            error = _skip_reason(snapshot.skipped.get(provider))
            providers[provider] = ProviderAvailability(available=False, error=error)
        elif not result.success:
            providers[provider] = ProviderAvailability(available=False, error=result.error)
        else:
            providers[provider] = ProviderAvailability(
                available=True,
                models=[
                    ProviderModelResponse(
                        id=model.id,
                        display_name=model.display_name or model.id,
                        provider=model.provider,
                        type=model.model_type.value,
                        created=model.created,
                        owned_by=model.owned_by,
                    )
                    for model in result.models
                ],
            )
    return ProviderModelsResponse(
        providers=providers,
        total_models=snapshot.total_models,
        errors=snapshot.errors,
        cached_at=snapshot.timestamp,
    )


@router.get("/provider-models", response_model=ProviderModelsResponse)
async def get_provider_models(
    provider: str = Query(default="all"),
    refresh: bool = Query(default=False),
    catalog: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_settings),
) -> ProviderModelsResponse:
    scope = _scope(provider, catalog)
    snapshot = await catalog.discover_all(settings.api_keys, providers=scope, force_refresh=refresh)
    return _to_response(snapshot, scope)


@router.get("/provider-models/{provider}/verify", response_model=VerifyModelResponse)
async def verify_provider_model(
    provider: Provider,
    model: str = Query(min_length=1),
    catalog: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_settings),
) -> VerifyModelResponse:
    api_key = settings.api_keys.get(provider)
    if not api_key and catalog.needs_credential(provider):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{NO_API_KEY_CONFIGURED} for {provider.value}",
        )
    exists = await catalog.verify_model(provider, model, api_key)
    return VerifyModelResponse(provider=provider, model=model, exists=exists)


@router.get("/api-keys-status", response_model=ApiKeysStatusResponse)
async def get_api_keys_status(settings: Settings = Depends(get_settings)) -> ApiKeysStatusResponse:
    """Which providers have a server-side key. Never returns the keys themselves."""
    configured = providers_with_keys(settings.api_keys)
    return ApiKeysStatusResponse(
        providers={provider: provider in configured for provider in discoverable_providers()},
        configured=configured,
    )
