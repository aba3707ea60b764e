"""
카테고리 프롬프트 서비스

메시지 → (CategoryAnalyzer) → (PromptAssembler) → PromptResult
변환은 예외를 올리지 않는다. LLM 실패는 추출기에서 default 로 흡수되고,
그 밖의 예외는 여기서 잡아 실패로 기록한 뒤 기본 프롬프트를 돌려준다.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from src.generation.category_prompt.analyzer import CategoryAnalyzer
from src.generation.category_prompt.assembler import PromptAssembler
from src.generation.category_prompt.mappings import (
    CATEGORY_KEYS,
    MAPPINGS_VERSION,
    get_available_keywords,
    get_default_phrase,
)
from src.generation.category_prompt.models import (
    EXTRACTION_FALLBACK,
    CategoryExtraction,
    GenerationInfo,
    MessageContext,
    PromptResult,
    normalize_age,
    normalize_gender,
)
from src.generation.category_prompt.stats import ConversionStats
from src.generation.category_prompt.templates import (
    CAMERA_COMPOSITION,
    DEFAULT_QUALITY_LEVEL,
    QUALITY_TIERS,
    NegativePromptBuilder,
    get_person_base,
)
from src.utils.config import settings
from src.utils.logging import get_logger

logger = get_logger(__name__)

POSITIVE_MAX_LENGTH = 1500
NEGATIVE_MAX_LENGTH = 1000
RECOMMENDED_MIN_SCORE = 70
NSFW_KEYWORDS = ("nude", "sexual", "explicit", "inappropriate")


class CategoryPromptService:
    """
    Args:
        analyzer: 카테고리 추출기 (테스트에서는 가짜 LLM 클라이언트 주입)
        assembler: 프롬프트 조립기
        stats: 변환 통계
        clock: 지연시간 측정용 시계 (초 단위 float)
    """

    def __init__(
        self,
        analyzer: Optional[CategoryAnalyzer] = None,
        assembler: Optional[PromptAssembler] = None,
        stats: Optional[ConversionStats] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.analyzer = analyzer or CategoryAnalyzer()
        self.assembler = assembler or PromptAssembler()
        self.stats = stats or ConversionStats(window_size=settings.HEALTH_WINDOW_SIZE)
        self._clock = clock

    def _elapsed_ms(self, start: float) -> float:
        return (self._clock() - start) * 1000

    async def convert_message_to_prompt(
        self,
        message: str,
        gender: str = "female",
        quality_level: Optional[str] = None,
        chat_history: Optional[List[Dict[str, Any]]] = None,
        age: Optional[int] = None,
    ) -> PromptResult:
        """
        메시지 → 카테고리 기반 프롬프트

        Args:
            message: 채팅 메시지 (빈 문자열 허용)
            gender: female | male
            quality_level: draft | standard | high | premium (기본 standard)
            chat_history: 최근 대화 (마지막 5개만 사용)
            age: 캐릭터 나이

        Returns:
            PromptResult (항상 반환)
        """
        start = self._clock()
        gender = normalize_gender(gender)
        age = normalize_age(age)

        try:
            extracted = await self.analyzer.extract(message, gender, chat_history)
            result = self.assembler.assemble(
                extracted.extraction,
                gender=gender,
                quality_level=quality_level,
                age=age,
                extraction_method=extracted.method,
                context_message=message,
            )
        except Exception as e:
            latency = self._elapsed_ms(start)
            logger.error(f"프롬프트 변환 실패 → 기본 프롬프트 사용: {e}", exc_info=True)
            self.stats.record_conversion(success=False, latency_ms=latency, fallback=True)
            return self.create_fallback_prompt(gender)

        latency = self._elapsed_ms(start)
        self.stats.record_conversion(
            success=True,
            latency_ms=latency,
            fallback=extracted.is_fallback,
        )
        logger.info(
            f"✅ 프롬프트 변환 완료 ({latency:.0f}ms) "
            f"method={extracted.method}, tier={result.generation_info.quality_level}, "
            f"score={result.quality_score}"
        )
        return result

    async def convert_messages(
        self,
        messages: Sequence[Union[MessageContext, Dict[str, Any], str]],
    ) -> List[PromptResult]:
        """
        배치 변환 (메시지별 독립 실행, 입력 순서대로 반환)
        """
        contexts = [self._to_context(item) for item in messages]
        logger.info(f"배치 변환 시작: {len(contexts)}건")
        return list(await asyncio.gather(*(
            self.convert_message_to_prompt(
                ctx.message,
                gender=ctx.gender,
                quality_level=ctx.quality_level,
                chat_history=ctx.chat_history,
                age=ctx.age,
            )
            for ctx in contexts
        )))

    @staticmethod
    def _to_context(item: Union[MessageContext, Dict[str, Any], str]) -> MessageContext:
        if isinstance(item, MessageContext):
            return item
        if isinstance(item, str):
            return MessageContext(message=item)
        if not isinstance(item, dict):
            logger.warning(f"배치 항목 형식 오류 → 빈 메시지로 처리: {type(item).__name__}")
            return MessageContext(message="")
        return MessageContext(
            message=item.get("message") or "",
            gender=item.get("gender") or "female",
            quality_level=item.get("quality_level"),
            chat_history=item.get("chat_history"),
            age=item.get("age"),
        )

    def create_fallback_prompt(self, gender: str = "female") -> PromptResult:
        """
        전체 default 카테고리로 조립한 standard 프롬프트

        나이 등 실패 원인이 될 수 있는 입력은 쓰지 않는다.
        조립기마저 실패하면 템플릿 상수만으로 만든 프롬프트를 돌려준다.
        """
        gender = normalize_gender(gender)
        try:
            return self.assembler.assemble(
                CategoryExtraction(),
                gender=gender,
                quality_level=DEFAULT_QUALITY_LEVEL,
                extraction_method=EXTRACTION_FALLBACK,
            )
        except Exception as e:
            logger.error(f"기본 프롬프트 조립 실패 → 고정 프롬프트 사용: {e}", exc_info=True)
            return self._static_fallback_prompt(gender)

    @staticmethod
    def _static_fallback_prompt(gender: str) -> PromptResult:
        tier = QUALITY_TIERS[DEFAULT_QUALITY_LEVEL]
        parts = [get_person_base(gender), CAMERA_COMPOSITION, *tier.enhancers, tier.suffix]
        return PromptResult(
            positive_prompt=", ".join(part for part in parts if part),
            negative_prompt=NegativePromptBuilder.build(gender),
            category_breakdown={category: get_default_phrase(category) for category in CATEGORY_KEYS},
            quality_score=float(tier.base_score),
            generation_info=GenerationInfo(
                gender=gender,
                template_used=f"category_based_{DEFAULT_QUALITY_LEVEL}",
                quality_level=DEFAULT_QUALITY_LEVEL,
                categories_filled=0,
                extraction_method=EXTRACTION_FALLBACK,
                generated_at=datetime.now(timezone.utc).isoformat(),
            ),
        )

    def get_performance_stats(self) -> Dict:
        stats = self.stats.get_stats()
        stats["mappings_version"] = MAPPINGS_VERSION
        return stats

    def get_service_health(self) -> Dict:
        return self.stats.get_health()

    def reset_stats(self) -> None:
        self.stats.reset()
        logger.info("변환 통계 초기화")

    async def analyze_message(
        self,
        message: str,
        gender: str = "female",
        chat_history: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict:
        """디버깅용: 추출 결과와 매핑 구문 (통계에 반영하지 않음)"""
        extracted = await self.analyzer.extract(message, normalize_gender(gender), chat_history)
        mapped = self.assembler.map_categories(extracted.extraction, message)
        return {
            "original_message": message,
            "extracted_keywords": extracted.extraction.as_dict(),
            "mapped_prompts": {
                category: phrase or get_default_phrase(category)
                for category, phrase in mapped.items()
            },
            "categories_filled": self.assembler.count_filled_categories(mapped),
            "hidden_tags": extracted.hidden_tags,
            "analysis_method": extracted.method,
            "processing_time_ms": round(extracted.processing_time_ms, 2),
            "error": extracted.error,
            "analyzed_at": datetime.now(timezone.utc).isoformat(),
        }

    def validate_prompt(self, prompt: PromptResult) -> Dict:
        """
        프롬프트 품질 검증

        Returns:
            {"is_valid": bool, "issues": [...], "recommendations": [...]}
        """
        issues: List[str] = []
        recommendations: List[str] = []

        if len(prompt.positive_prompt) > POSITIVE_MAX_LENGTH:
            issues.append("긍정 프롬프트가 너무 깁니다")
            recommendations.append(f"프롬프트 길이를 {POSITIVE_MAX_LENGTH}자 이하로 줄여주세요")

        if len(prompt.negative_prompt) > NEGATIVE_MAX_LENGTH:
            issues.append("부정 프롬프트가 너무 깁니다")

        positive = prompt.positive_prompt.lower()
        if any(keyword in positive for keyword in NSFW_KEYWORDS):
            issues.append("긍정 프롬프트에 부적절한 키워드가 포함되어 있습니다")
            recommendations.append("NSFW 키워드를 제거해주세요")

        if prompt.quality_score < RECOMMENDED_MIN_SCORE:
            recommendations.append("더 구체적인 키워드를 사용하여 품질을 향상시켜주세요")

        return {
            "is_valid": not issues,
            "issues": issues,
            "recommendations": recommendations,
        }

    def get_available_categories(self) -> Dict:
        return {
            "categories": list(CATEGORY_KEYS),
            "keywords": get_available_keywords(),
            "quality_levels": list(QUALITY_TIERS),
            "mappings_version": MAPPINGS_VERSION,
        }


# 전역 서비스 인스턴스 (싱글톤)
_service_instance: Optional[CategoryPromptService] = None


def get_category_prompt_service() -> CategoryPromptService:
    """서비스 인스턴스 반환"""
    global _service_instance
    if _service_instance is None:
        _service_instance = CategoryPromptService()
    return _service_instance
