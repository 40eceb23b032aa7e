from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from modelcheck.models.enums import Provider, TestMode, TestStatus


class ModelToTestRequest(BaseModel):
    provider: Provider
    model: str = Field(min_length=1)
    label: str | None = None
    type: str | None = "chat"


class ValidationRequest(BaseModel):
    models: list[ModelToTestRequest]
    mode: TestMode = TestMode.FULL
    # provider:model keys, used by individual mode
    selected: list[str] = Field(default_factory=list)


class ValidationResultResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    provider: Provider
    model: str
    model_label: str = Field(alias="modelLabel")
    type: str
    status: TestStatus
    timestamp: datetime
    latency: int | None = None
    error: str | None = None


class ValidationSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    passed: int
    failed: int
    untested: int
    skipped: int
    avg_latency: int = Field(alias="avgLatency")


class ValidationResponse(BaseModel):
    results: list[ValidationResultResponse]
    summary: ValidationSummaryResponse
