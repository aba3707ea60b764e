"""
프롬프트 조립기

CategoryExtraction + 성별 + 품질 티어 → PromptResult

Positive 순서:
    인물 기본 → 카메라 구도 → 티어 enhancer → 장소 → 의상
    → "동작 with 표정 expression" → 분위기 → 티어 suffix
"""

import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from src.generation.category_prompt.mappings import (
    CATEGORY_KEYS,
    get_default_phrase,
    map_category_value,
)
from src.generation.category_prompt.models import (
    EXTRACTION_LLM,
    CategoryExtraction,
    GenerationInfo,
    PromptResult,
    normalize_age,
    normalize_gender,
    normalize_quality_level,
)
from src.generation.category_prompt.templates import (
    CAMERA_COMPOSITION,
    QUALITY_TIERS,
    NegativePromptBuilder,
    QualityTier,
    get_person_base,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)

TEMPLATE_PREFIX = "category_based"

# 카테고리가 모두 채워졌을 때 최대 보너스
CATEGORY_BONUS_MAX = 10
MAX_QUALITY_SCORE = 100

# 길이 최적화 시 반드시 남길 토큰
CRITICAL_KEYWORDS = (
    "1girl", "1boy", "solo", "single person",
    "medium shot", "half body", "waist up", "portrait",
    "masterpiece", "best quality", "detailed", "professional",
    "beautiful", "perfect", "high quality",
)


def _join_parts(parts: List[Optional[str]]) -> str:
    prompt = ", ".join(part.strip() for part in parts if part and part.strip())
    prompt = re.sub(r",\s*,", ",", prompt)
    return prompt.rstrip(", ")


class PromptAssembler:
    """카테고리 추출 결과를 최종 프롬프트로 조립"""

    def map_categories(
        self,
        extraction: CategoryExtraction,
        context_message: Optional[str] = None,
    ) -> Dict[str, Optional[str]]:
        """카테고리별 영어 구문 (default/미매핑은 None)"""
        return {
            category: map_category_value(category, getattr(extraction, category), context_message)
            for category in CATEGORY_KEYS
        }

    def build_positive_prompt(
        self,
        person_base: str,
        mapped: Dict[str, Optional[str]],
        tier: QualityTier,
    ) -> str:
        action = mapped.get("action_pose")
        expression = mapped.get("expression_emotion")
        if action and expression:
            action_expression = f"{action} with {expression} expression"
        else:
            action_expression = action or expression

        return _join_parts([
            person_base,
            CAMERA_COMPOSITION,
            ", ".join(tier.enhancers),
            mapped.get("location_environment"),
            mapped.get("outfit_style"),
            action_expression,
            mapped.get("atmosphere_lighting"),
            tier.suffix,
        ])

    def build_negative_prompt(self, gender: str) -> str:
        return NegativePromptBuilder.build(gender)

    @staticmethod
    def count_filled_categories(mapped: Dict[str, Optional[str]]) -> int:
        return sum(1 for phrase in mapped.values() if phrase)

    def calculate_quality_score(self, filled: int, tier: QualityTier) -> float:
        """
        품질 점수 = 티어 기본 점수 + 채워진 카테고리 비율 보너스 (최대 100)

        같은 추출 결과라면 premium > high > standard > draft
        """
        bonus = (filled / len(CATEGORY_KEYS)) * CATEGORY_BONUS_MAX
        return round(min(MAX_QUALITY_SCORE, tier.base_score + bonus), 1)

    def assemble(
        self,
        extraction: CategoryExtraction,
        gender: str = "female",
        quality_level: Optional[str] = None,
        age: Optional[int] = None,
        extraction_method: str = EXTRACTION_LLM,
        context_message: Optional[str] = None,
    ) -> PromptResult:
        """
        Args:
            extraction: 카테고리 추출 결과
            gender: female | male (그 외는 female)
            quality_level: draft | standard | high | premium (그 외는 standard)
            age: 캐릭터 나이 (인물 기본 구문에 반영)
            extraction_method: llm | fallback | skipped
            context_message: 원본 메시지 (장소 세분화용)

        Returns:
            PromptResult
        """
        gender = normalize_gender(gender)
        age = normalize_age(age)
        level = normalize_quality_level(quality_level)
        tier = QUALITY_TIERS[level]

        mapped = self.map_categories(extraction, context_message)
        filled = self.count_filled_categories(mapped)

        breakdown = {
            category: phrase or get_default_phrase(category)
            for category, phrase in mapped.items()
        }

        result = PromptResult(
            positive_prompt=self.build_positive_prompt(get_person_base(gender, age), mapped, tier),
            negative_prompt=self.build_negative_prompt(gender),
            category_breakdown=breakdown,
            quality_score=self.calculate_quality_score(filled, tier),
            generation_info=GenerationInfo(
                gender=gender,
                template_used=f"{TEMPLATE_PREFIX}_{level}",
                quality_level=level,
                categories_filled=filled,
                extraction_method=extraction_method,
                generated_at=datetime.now(timezone.utc).isoformat(),
            ),
        )
        logger.debug(
            f"프롬프트 조립: tier={level}, filled={filled}/{len(CATEGORY_KEYS)}, "
            f"score={result.quality_score}, len={len(result.positive_prompt)}"
        )
        return result

    def optimize_prompt_length(self, prompt: str, max_length: int = 1500) -> str:
        """
        길이 초과 시 핵심 토큰(인물 수, 구도, 가중치 토큰, 짧은 토큰)만 남긴다.
        그래도 길면 짧은 토큰부터 채운다.
        """
        if len(prompt) <= max_length:
            return prompt

        parts = [part.strip() for part in prompt.split(",") if part.strip()]
        critical = [
            part for part in parts
            if any(keyword in part.lower() for keyword in CRITICAL_KEYWORDS)
            or ":1." in part
            or len(part) < 20
        ]

        joined = ", ".join(critical)
        if len(joined) <= max_length:
            return joined

        result = ""
        for part in sorted(critical, key=len):
            candidate = f"{result}, {part}" if result else part
            if len(candidate) > max_length:
                break
            result = candidate
        return result
