from fastapi import APIRouter, Depends

from modelcheck.core.config import Settings, get_settings
from modelcheck.schemas.validation import (
    ModelToTestRequest,
    ValidationRequest,
    ValidationResponse,
    ValidationResultResponse,
    ValidationSummaryResponse,
)
from modelcheck.services.validation_service import (
    ModelToTest,
    TestResult,
    ValidationService,
    get_validation_service,
    select_models,
    summarize,
)

router = APIRouter(prefix="")


def _to_model(item: ModelToTestRequest) -> ModelToTest:
    return ModelToTest.from_request(item.provider, item.model, item.type, item.label)


def _to_response(result: TestResult) -> ValidationResultResponse:
    return ValidationResultResponse(
        provider=result.provider,
        model=result.model,
        model_label=result.label,
        type=result.modality.value,
        status=result.status,
        timestamp=result.timestamp,
        latency=result.latency,
        error=result.error,
    )


@router.post("/validation/test", response_model=ValidationResponse)
async def run_validation(
    payload: ValidationRequest,
    validation: ValidationService = Depends(get_validation_service),
    settings: Settings = Depends(get_settings),
) -> ValidationResponse:
    items = [_to_model(item) for item in payload.models]
    items = select_models(payload.mode, items, set(payload.selected), settings.quick_models)
    results = await validation.run_tests(items)
    summary = summarize(results)
    return ValidationResponse(
        results=[_to_response(result) for result in results],
        summary=ValidationSummaryResponse(
            total=summary.total,
            passed=summary.passed,
            failed=summary.failed,
            untested=summary.untested,
            skipped=summary.skipped,
            avg_latency=summary.avg_latency,
        ),
    )


@router.post("/validation/test-model", response_model=ValidationResultResponse)
async def run_single_validation(
    payload: ModelToTestRequest,
    validation: ValidationService = Depends(get_validation_service),
) -> ValidationResultResponse:
    result = await validation.test_model(_to_model(payload))
    return _to_response(result)
