"""
고정 프롬프트 서비스

관계 유형/성별별 고정 프롬프트와 외부에서 생성된 상황 프롬프트를 합친다.
    positive = 성별 프롬프트 + 생성 프롬프트 + 공통 프롬프트
    negative = 성별 negative + 공통 negative
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from src.generation.category_prompt.models import normalize_gender
from src.utils.logging import get_logger

logger = get_logger(__name__)

COMMON = "common"


@dataclass(frozen=True)
class FixedPromptTemplate:
    prompt_id: str
    relationship_type: str
    gender: str
    positive_prompt: str
    negative_prompt: str


_SHARED_NEGATIVE = (
    "anime, cartoon, animated, 2d, illustration, drawing, sketch, manga, stylized, "
    "nsfw, nude, sexual content, inappropriate, explicit, "
    "(watermark:1.5), (text:1.4), (logo:1.4), (signature:1.3), "
    "news, newspaper, magazine, caption, subtitle, label, brand, copyright"
)

FIXED_PROMPTS = (
    FixedPromptTemplate(
        prompt_id="3",
        relationship_type=COMMON,
        gender=COMMON,
        positive_prompt=(
            "(single person:1.5), (solo:1.4), (one person only:1.3), (medium shot:1.3), "
            "(half body:1.3), (waist up:1.2), (portrait:1.2), upper body to waist composition, "
            "looking at camera, natural pose, soft lighting, professional photography, "
            "photorealistic, high quality, detailed, sharp focus, 8k resolution, masterpiece, "
            "real person, consistent face structure, same person appearance"
        ),
        negative_prompt=(
            "(multiple people:1.5), (two people:1.5), (2girls:1.5), (2boys:1.5), (couple:1.4), "
            "(group:1.4), (crowd:1.4), (multiple faces:1.4), (different person:1.3), "
            "(full body:1.3), low quality, blurry, distorted, ugly, bad anatomy, extra limbs, deformed, "
            + _SHARED_NEGATIVE
        ),
    ),
    FixedPromptTemplate(
        prompt_id="1",
        relationship_type="female",
        gender="female",
        positive_prompt=(
            "(1girl:1.5), (solo:1.4), (single person:1.3), (one woman only:1.3), beautiful woman, "
            "milky white skin, porcelain complexion, small face, clear transparent skin, "
            "soft feminine features, natural makeup, beautiful eyes, delicate facial features, "
            "photorealistic, natural lighting, keep facial identity"
        ),
        negative_prompt=(
            "(2girls:1.5), (multiple girls:1.4), (two women:1.4), (multiple faces:1.3), "
            "masculine features, male characteristics, beard, mustache"
        ),
    ),
    FixedPromptTemplate(
        prompt_id="2",
        relationship_type="male",
        gender="male",
        positive_prompt=(
            "(1boy:1.5), (solo:1.4), (single person:1.3), (one man only:1.3), handsome man, "
            "healthy skin tone, masculine face structure, clear skin, defined facial features, "
            "strong jawline, confident expression, well-groomed, photorealistic, "
            "natural lighting, keep facial identity"
        ),
        negative_prompt=(
            "(2boys:1.5), (multiple boys:1.4), (two men:1.4), (multiple faces:1.3), "
            "feminine features, female characteristics, makeup, lipstick, nail polish"
        ),
    ),
)


class FixedPromptService:
    def __init__(self, templates=FIXED_PROMPTS):
        self.templates = tuple(templates)

    def _find(self, relationship_type: str, gender: str) -> Optional[FixedPromptTemplate]:
        for template in self.templates:
            if template.relationship_type == relationship_type and template.gender == gender:
                return template
        for template in self.templates:
            if template.gender == gender and template.gender != COMMON:
                return template
        return None

    def get_prompt_config(self, relationship_type: str = COMMON, gender: str = "female") -> Dict[str, str]:
        """
        관계 유형 + 성별 프롬프트 구성

        Returns:
            base_positive / base_negative / gender_positive / gender_negative
        """
        gender = normalize_gender(gender)
        common = self._find(COMMON, COMMON)
        gender_template = self._find(relationship_type or COMMON, gender)

        if gender_template is None:
            logger.warning(f"고정 프롬프트 없음: relationship={relationship_type}, gender={gender}")

        return {
            "base_positive": common.positive_prompt if common
            else "photorealistic portrait, high quality, professional photography",
            "base_negative": common.negative_prompt if common
            else "anime, cartoon, illustration, low quality, nsfw, nude",
            "gender_positive": gender_template.positive_prompt if gender_template
            else ("beautiful young woman" if gender == "female" else "handsome young man"),
            "gender_negative": gender_template.negative_prompt if gender_template else "",
        }

    def build_final_prompt(
        self,
        generated_prompt: str,
        relationship_type: str = COMMON,
        gender: str = "female",
    ) -> Dict[str, str]:
        config = self.get_prompt_config(relationship_type, gender)

        positive = ", ".join(part for part in (
            config["gender_positive"],
            (generated_prompt or "").strip(),
            config["base_positive"],
        ) if part)
        negative = ", ".join(part for part in (
            config["gender_negative"],
            config["base_negative"],
        ) if part)

        logger.info(
            f"고정 프롬프트 조합 완료: relationship={relationship_type}, gender={gender}, "
            f"positive={len(positive)}자, negative={len(negative)}자"
        )
        return {"positive": positive, "negative": negative}

    def get_available_relationship_types(self) -> List[str]:
        types = []
        for template in self.templates:
            if template.relationship_type != COMMON and template.relationship_type not in types:
                types.append(template.relationship_type)
        return types

    def get_service_status(self) -> Dict:
        return {
            "prompts_loaded": len(self.templates),
            "load_type": "hardcoded",
            "available_relationship_types": self.get_available_relationship_types(),
        }


_fixed_service: Optional[FixedPromptService] = None


def get_fixed_prompt_service() -> FixedPromptService:
    global _fixed_service
    if _fixed_service is None:
        _fixed_service = FixedPromptService()
    return _fixed_service
