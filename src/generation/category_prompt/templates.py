"""
카테고리 프롬프트 고정 템플릿

- 인물 기본 구문 (성별별, 1girl/1boy 가 반드시 포함)
- 카메라 구도
- 품질 티어 (draft / standard / high / premium)
- Negative prompt (안전 필터는 티어와 무관하게 항상 포함)
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


def _squash(text: str) -> str:
    return " ".join(text.split())


WHITE_SKIN_KEYWORDS = _squash("""
    pale white skin, milky white skin, porcelain complexion,
    ivory skin tone, fair complexion, light skin tone
""")

PERSON_BASE_FEMALE = _squash(f"""
    {WHITE_SKIN_KEYWORDS},
    (1girl:1.4), (solo:1.3), (single person:1.2), beautiful woman,
    small face, clear transparent skin, beautiful detailed eyes,
    natural eyebrows, soft facial features, elegant feminine appearance
""")

PERSON_BASE_MALE = _squash(f"""
    {WHITE_SKIN_KEYWORDS},
    (1boy:1.4), (solo:1.3), (single person:1.2), handsome man,
    masculine face structure, clear skin, defined facial features,
    expressive eyes, natural eyebrows, strong jawline, confident masculine appearance
""")

CAMERA_COMPOSITION = _squash("""
    (medium shot:1.3), (half body:1.3), (waist up:1.2), (portrait:1.2),
    upper body to waist composition, looking at camera,
    professional portrait composition, person-centered focus, natural pose
""")

_PERSON_BASE = MappingProxyType({"female": PERSON_BASE_FEMALE, "male": PERSON_BASE_MALE})
_PERSON_NOUN = MappingProxyType({"female": ("beautiful", "woman"), "male": ("handsome", "man")})

# (상한 나이, 키워드) - 상한 미만이면 해당 키워드
AGE_KEYWORDS: Tuple[Tuple[int, str], ...] = (
    (13, "child"),
    (20, "teenage"),
    (25, "young"),
    (35, "young adult"),
    (45, "adult"),
    (55, "middle-aged"),
    (65, "mature"),
)


def get_age_keyword(age: int) -> str:
    for upper, keyword in AGE_KEYWORDS:
        if age < upper:
            return keyword
    return "elderly"


def get_person_base(gender: str, age: Optional[int] = None) -> str:
    """
    성별(+나이) 인물 기본 구문

    나이가 주어지면 "beautiful woman" → "beautiful 30 years old young adult woman"
    """
    base = _PERSON_BASE[gender]
    if not age or age <= 0:
        return base

    adjective, noun = _PERSON_NOUN[gender]
    return base.replace(
        f"{adjective} {noun}",
        f"{adjective} {age} years old {get_age_keyword(age)} {noun}",
        1,
    )


# ============================================
# 품질 티어
# ============================================

@dataclass(frozen=True)
class QualityTier:
    name: str
    rank: int
    base_score: int
    enhancers: Tuple[str, ...]
    suffix: str


QUALITY_TIERS: Mapping[str, QualityTier] = MappingProxyType({
    "draft": QualityTier(
        name="draft",
        rank=0,
        base_score=60,
        enhancers=("high quality", "detailed"),
        suffix="good lighting, clear image",
    ),
    "standard": QualityTier(
        name="standard",
        rank=1,
        base_score=75,
        enhancers=(
            "(masterpiece:1.2)",
            "(best quality:1.2)",
            "(ultra detailed:1.1)",
            "professional photography",
        ),
        suffix="perfect lighting, professional composition, sharp focus",
    ),
    "high": QualityTier(
        name="high",
        rank=2,
        base_score=82,
        enhancers=(
            "(masterpiece:1.3)",
            "(best quality:1.3)",
            "(ultra detailed:1.2)",
            "professional photography",
            "perfect composition",
            "beautiful lighting",
        ),
        suffix="soft studio lighting, professional composition, ultra sharp focus",
    ),
    "premium": QualityTier(
        name="premium",
        rank=3,
        base_score=90,
        enhancers=(
            "(masterpiece:1.4)",
            "(best quality:1.3)",
            "(ultra detailed:1.2)",
            "(photorealistic:1.2)",
            "professional photography",
            "perfect composition",
            "beautiful lighting",
            "sharp focus",
            "vivid colors",
            "8k resolution",
        ),
        suffix="studio lighting, cinematic composition, ultra sharp focus, award winning photography",
    ),
})

DEFAULT_QUALITY_LEVEL = "standard"


# ============================================
# Negative Prompt
# ============================================

# 어떤 경우에도 negative prompt 에 남아 있어야 하는 항목
SAFETY_TERMS = ("nsfw", "nude", "sexual content", "inappropriate", "explicit")


class NegativePromptBuilder:
    """
    Negative Prompt 빌더

    인물 수/구도 제어 → 안전 필터 → 품질 → 기술 → 스타일 → 성별 필터 순
    """

    SUBJECT_CONTROL = [
        "(multiple people:1.4), (2girls:1.4), (2boys:1.4), (couple:1.3), (group:1.3)",
        "(full body:1.3), (whole body:1.3), (legs visible:1.2), (feet visible:1.2)",
    ]

    SAFETY_FILTERS = [
        ", ".join(SAFETY_TERMS) + ", adult content",
        "sexual pose, sexual expression, revealing clothing, underwear",
        "sexual gesture, pornographic, erotic",
    ]

    QUALITY_FILTERS = [
        "blurry, low quality, distorted, ugly, bad anatomy, worst quality",
        "low resolution, artifacts, deformed, malformed, disfigured",
        "bad hands, missing fingers, extra digits, fewer digits",
        "mutation, mutated, extra limbs, missing limbs",
    ]

    TECHNICAL_FILTERS = [
        "jpeg artifacts, compression artifacts, noise, grain",
        "watermark, text, signature, logo, username",
        "cropped, cut off, out of frame, border",
    ]

    STYLE_FILTERS = [
        "duplicate, crowd, multiple subjects, background people",
        "cartoon, anime style, illustration, drawing",
    ]

    GENDER_FILTERS = {
        "female": [
            "(2girls:1.4), (multiple girls:1.3)",
            "masculine features, male characteristics",
            "beard, mustache, male body type",
        ],
        "male": [
            "(2boys:1.4), (multiple boys:1.3)",
            "feminine features, female characteristics",
            "makeup, lipstick, nail polish",
        ],
    }

    @classmethod
    def build(cls, gender: str) -> str:
        """
        Args:
            gender: female | male

        Returns:
            str: Negative prompt (티어와 무관)
        """
        parts = (
            cls.SUBJECT_CONTROL
            + cls.SAFETY_FILTERS
            + cls.QUALITY_FILTERS
            + cls.TECHNICAL_FILTERS
            + cls.STYLE_FILTERS
            + cls.GENDER_FILTERS[gender]
        )
        return ", ".join(parts)
