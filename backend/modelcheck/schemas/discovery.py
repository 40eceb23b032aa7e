from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from modelcheck.models.enums import Provider


class ProviderModelResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: str = Field(alias="displayName")
    provider: Provider
    type: str
    created: datetime | None = None
    owned_by: str | None = Field(default=None, alias="ownedBy")


class ProviderAvailability(BaseModel):
    available: bool = False
    models: list[ProviderModelResponse] = Field(default_factory=list)
    error: str | None = None


class ProviderModelsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    providers: dict[Provider, ProviderAvailability]
    total_models: int = Field(default=0, alias="totalModels")
    errors: list[str] = Field(default_factory=list)
    cached_at: datetime = Field(alias="cachedAt")


class VerifyModelResponse(BaseModel):
    provider: Provider
    model: str
    exists: bool


class ApiKeysStatusResponse(BaseModel):
    providers: dict[Provider, bool]
    configured: list[Provider] = Field(default_factory=list)
