"""
카테고리 프롬프트 API 라우터
"""

from fastapi import APIRouter, Depends

from src.backend import schemas
from src.generation.category_prompt import (
    CategoryPromptService,
    FixedPromptService,
    MessageContext,
    PromptResult,
    get_category_prompt_service,
    get_fixed_prompt_service,
)
from src.generation.category_prompt.models import GenerationInfo
from src.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/prompt", tags=["Prompt"])


def _history(items):
    return [item.model_dump() for item in items] if items else None


def _to_response(result: PromptResult) -> schemas.PromptResultResponse:
    return schemas.PromptResultResponse.model_validate(result.to_dict())


@router.post("/convert", response_model=schemas.PromptResultResponse)
async def convert_message(
    payload: schemas.ConvertRequest,
    service: CategoryPromptService = Depends(get_category_prompt_service),
):
    """
    메시지 → 카테고리 기반 이미지 프롬프트

    LLM 호출이 실패해도 기본 카테고리로 조립된 프롬프트를 반환한다.
    """
    logger.info(
        f"[/prompt/convert] message={payload.message[:50]}, "
        f"gender={payload.gender}, quality={payload.quality_level}"
    )
    result = await service.convert_message_to_prompt(
        payload.message,
        gender=payload.gender,
        quality_level=payload.quality_level,
        chat_history=_history(payload.chat_history),
        age=payload.age,
    )
    return _to_response(result)


@router.post("/convert/batch", response_model=schemas.BatchConvertResponse)
async def convert_messages(
    payload: schemas.BatchConvertRequest,
    service: CategoryPromptService = Depends(get_category_prompt_service),
):
    contexts = [
        MessageContext(
            message=item.message,
            gender=item.gender,
            quality_level=item.quality_level,
            chat_history=_history(item.chat_history),
            age=item.age,
        )
        for item in payload.messages
    ]
    results = await service.convert_messages(contexts)
    return {"count": len(results), "results": [_to_response(r) for r in results]}


@router.post("/analyze", response_model=schemas.AnalyzeResponse)
async def analyze_message(
    payload: schemas.AnalyzeRequest,
    service: CategoryPromptService = Depends(get_category_prompt_service),
):
    """디버깅용 추출 결과 조회 (통계 미반영)"""
    return await service.analyze_message(
        payload.message,
        gender=payload.gender,
        chat_history=_history(payload.chat_history),
    )


@router.post("/validate", response_model=schemas.ValidationResponse)
def validate_prompt(
    payload: schemas.PromptResultResponse,
    service: CategoryPromptService = Depends(get_category_prompt_service),
):
    result = PromptResult(
        positive_prompt=payload.positive_prompt,
        negative_prompt=payload.negative_prompt,
        category_breakdown=payload.category_breakdown.model_dump(),
        quality_score=payload.quality_score,
        generation_info=GenerationInfo(**payload.generation_info.model_dump()),
    )
    return service.validate_prompt(result)


@router.get("/stats", response_model=schemas.StatsResponse)
def get_stats(service: CategoryPromptService = Depends(get_category_prompt_service)):
    return service.get_performance_stats()


@router.post("/stats/reset")
def reset_stats(service: CategoryPromptService = Depends(get_category_prompt_service)):
    service.reset_stats()
    return {"status": "success", "message": "Stats reset"}


@router.get("/health", response_model=schemas.HealthResponse)
def get_health(service: CategoryPromptService = Depends(get_category_prompt_service)):
    return service.get_service_health()


@router.get("/categories", response_model=schemas.CategoriesResponse)
def get_categories(service: CategoryPromptService = Depends(get_category_prompt_service)):
    return service.get_available_categories()


@router.post("/fixed", response_model=schemas.FixedPromptResponse)
def build_fixed_prompt(
    payload: schemas.FixedPromptRequest,
    fixed_service: FixedPromptService = Depends(get_fixed_prompt_service),
):
    """관계 유형/성별 고정 프롬프트 + 생성 프롬프트 조합"""
    return fixed_service.build_final_prompt(
        payload.generated_prompt,
        relationship_type=payload.relationship_type,
        gender=payload.gender,
    )
