"""
카테고리 프롬프트 데이터 모델

- CategoryExtraction: LLM 출력 디코더 (필드별 parse-or-default)
- PromptResult / GenerationInfo: 조립 결과 (읽기 전용)
- ExtractionResult: 추출기 반환값 (추출 결과 + 방식)
- MessageContext: 배치 변환 입력
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from src.generation.category_prompt.mappings import CATEGORY_KEYS, DEFAULT_KEY
from src.generation.category_prompt.templates import DEFAULT_QUALITY_LEVEL, QUALITY_TIERS

GENDERS = ("female", "male")
DEFAULT_GENDER = "female"

# 외부에서 들어오는 티어 이름 별칭
QUALITY_ALIASES = {
    "low": "draft",
    "fast": "draft",
    "normal": "standard",
    "medium": "standard",
    "hq": "high",
    "best": "premium",
    "ultra": "premium",
}

EXTRACTION_LLM = "llm"
EXTRACTION_FALLBACK = "fallback"
EXTRACTION_SKIPPED = "skipped"


def normalize_gender(gender: Optional[str]) -> str:
    value = gender.strip().lower() if isinstance(gender, str) else ""
    return value if value in GENDERS else DEFAULT_GENDER


def normalize_age(age: Any) -> Optional[int]:
    """양의 정수만 나이로 인정, 그 외(문자열, bool, 0 이하)는 None"""
    if isinstance(age, bool) or not isinstance(age, int) or age <= 0:
        return None
    return age


def normalize_quality_level(quality_level: Optional[str]) -> str:
    """알 수 없는 티어는 standard"""
    value = quality_level.strip().lower() if isinstance(quality_level, str) else ""
    value = QUALITY_ALIASES.get(value, value)
    return value if value in QUALITY_TIERS else DEFAULT_QUALITY_LEVEL


class CategoryExtraction(BaseModel):
    """
    LLM이 고른 5개 카테고리 키워드

    누락/문자열 아님/빈 문자열 → "default"
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    location_environment: str = DEFAULT_KEY
    outfit_style: str = DEFAULT_KEY
    action_pose: str = DEFAULT_KEY
    expression_emotion: str = DEFAULT_KEY
    atmosphere_lighting: str = DEFAULT_KEY

    @field_validator(*CATEGORY_KEYS, mode="before")
    @classmethod
    def _default_when_invalid(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_KEY
        return value.strip()

    @classmethod
    def from_llm_payload(cls, payload: Any) -> "CategoryExtraction":
        """dict 가 아니면 전체 default"""
        if not isinstance(payload, dict):
            return cls()
        return cls.model_validate(payload)

    def as_dict(self) -> Dict[str, str]:
        return {key: getattr(self, key) for key in CATEGORY_KEYS}

    def is_all_default(self) -> bool:
        return all(value == DEFAULT_KEY for value in self.as_dict().values())


@dataclass(frozen=True)
class ExtractionResult:
    extraction: CategoryExtraction
    method: str
    processing_time_ms: float = 0.0
    hidden_tags: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.method == EXTRACTION_FALLBACK


@dataclass(frozen=True)
class GenerationInfo:
    gender: str
    template_used: str
    quality_level: str
    categories_filled: int
    extraction_method: str
    generated_at: str


@dataclass(frozen=True)
class PromptResult:
    """조립된 최종 프롬프트"""

    positive_prompt: str
    negative_prompt: str
    category_breakdown: Dict[str, str]
    quality_score: float
    generation_info: GenerationInfo

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MessageContext:
    message: str
    gender: str = DEFAULT_GENDER
    quality_level: Optional[str] = None
    chat_history: Optional[List[Dict[str, Any]]] = None
    age: Optional[int] = None
