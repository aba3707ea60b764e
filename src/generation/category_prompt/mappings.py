"""
카테고리 키워드 매핑 테이블

한국어 카테고리 키워드 → 영어 이미지 프롬프트 구문.
모든 테이블은 읽기 전용(MappingProxyType)이며 'default' 항목을 반드시 가진다.
테이블을 수정하면 MAPPINGS_VERSION 을 올린다.
"""

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from src.utils.logging import get_logger

logger = get_logger(__name__)

MAPPINGS_VERSION = "1.3.0"

DEFAULT_KEY = "default"

CATEGORY_KEYS = (
    "location_environment",
    "outfit_style",
    "action_pose",
    "expression_emotion",
    "atmosphere_lighting",
)


LOCATION_MAPPINGS: Mapping[str, str] = MappingProxyType({
    # 실내
    "카페에서": "in a cozy cafe, coffee shop setting, warm interior",
    "집에서": "at home, indoor setting, comfortable interior",
    "침실에서": "bedroom interior, residential bedroom, cozy bedroom",
    "거실에서": "living room interior, cozy living space, home living area",
    "부엌에서": "kitchen interior, home cooking area, warm domestic kitchen",
    "욕실에서": "bathroom interior, modern residential bathroom",
    "사무실에서": "in a modern office, professional workspace, office desk",
    "직장에서": "in a modern office, professional workspace, office desk",
    "학교에서": "in a school classroom, academic setting, school hallway",
    "도서관에서": "in a quiet library, bookshelves background, study space",
    "식당에서": "in a stylish restaurant, dining table, elegant interior",
    "헬스장에서": "in a fitness gym, workout equipment, bright gym interior",
    "영화관에서": "in a movie theater, cinema seats, dim theater lights",
    "쇼핑몰에서": "in a shopping mall, bright retail interior, storefronts",
    # 야외
    "해변에서": "on the beach, seaside, ocean view",
    "공원에서": "in the park, outdoor garden, nature setting",
    "도시에서": "in the city, urban environment, cityscape",
    "거리에서": "on a city street, urban sidewalk, street background",
    "숲에서": "in the forest, woodland, nature scene",
    "산에서": "on a mountain trail, scenic mountain view, hiking path",
    "호숫가에서": "lakeside, natural lake shore, lake waterfront",
    "수영장에서": "at a swimming pool, poolside, clear blue water",
    "정원에서": "in a flower garden, blooming flowers, green garden",
    "옥상에서": "on a rooftop, city skyline view, open sky",
    "캠핑장에서": "at a campsite, tent and campfire, outdoor camping",
    "놀이공원에서": "at an amusement park, colorful rides, festive background",
    # 기본값
    DEFAULT_KEY: "in comfortable indoor setting, soft natural lighting",
})


OUTFIT_MAPPINGS: Mapping[str, str] = MappingProxyType({
    # 계절
    "여름옷": "comfortable summer outfit, light clothing, breathable fabric",
    "여름": "comfortable summer outfit, light clothing, breathable fabric",
    "겨울옷": "warm winter clothing, cozy sweater, layered outfit",
    "겨울": "warm winter clothing, cozy sweater, layered outfit",
    "봄옷": "spring clothing, light cardigan, comfortable casual wear",
    "가을옷": "autumn clothing, stylish jacket, layered fall fashion",
    # 상황
    "정장": "formal business attire, professional clothing",
    "비즈니스": "formal business attire, professional clothing",
    "캐주얼": "casual everyday wear, relaxed clothing style",
    "편한옷": "comfortable casual wear, relaxed clothing",
    "운동복": "athletic wear, sportswear, comfortable workout clothing",
    "파티": "party outfit, elegant evening wear, stylish formal clothing",
    "데이트": "date outfit, stylish romantic clothing, attractive casual wear",
    "여행": "travel outfit, comfortable practical clothing",
    "홈웨어": "home wear, comfortable indoor clothing, cozy loungewear",
    "잠옷": "sleepwear, comfortable nighttime clothing, cozy pajamas",
    "수영복": "swimwear, beach outfit, summer swimming attire",
    "등산복": "hiking clothes, outdoor gear, trekking attire",
    # 스타일
    "모던": "modern stylish outfit, contemporary fashion, trendy clothing",
    "클래식": "classic timeless outfit, traditional elegant style",
    "빈티지": "vintage style clothing, retro fashion, classic vintage outfit",
    "미니멀": "minimalist outfit, simple clean style, understated fashion",
    "로맨틱": "romantic style outfit, elegant soft clothing",
    # 아이템
    "드레스": "beautiful dress, elegant outfit, stylish dress wear",
    "원피스": "one-piece dress, elegant outfit, stylish dress wear",
    "블라우스": "stylish blouse, elegant top",
    "셔츠": "stylish shirt, clean button-up, professional top",
    "티셔츠": "comfortable t-shirt, casual top, relaxed everyday wear",
    "니트": "cozy knit sweater, warm comfortable top",
    "스웨터": "cozy sweater, warm comfortable clothing",
    "재킷": "stylish jacket, fashionable outer wear",
    "코트": "elegant coat, sophisticated outerwear, stylish winter coat",
    "청바지": "denim jeans, casual comfortable pants",
    "치마": "stylish skirt, elegant skirt outfit",
    # 제복
    "교복": "school uniform, student outfit, academic attire",
    "의료진": "medical professional attire, healthcare uniform",
    "요리사": "chef outfit, culinary professional attire",
    # 기본값
    DEFAULT_KEY: "stylish casual outfit, comfortable everyday clothing",
})


ACTION_MAPPINGS: Mapping[str, str] = MappingProxyType({
    # 자세
    "앉아있는": "sitting comfortably, relaxed sitting posture",
    "서있는": "standing naturally, confident standing pose",
    "누워있는": "lying down comfortably, relaxed reclining pose",
    "기대고": "leaning comfortably, casual leaning pose",
    # 움직임
    "걷고있는": "walking gracefully, natural walking movement",
    "달리는": "running energetically, dynamic running pose",
    "춤추는": "dancing gracefully, elegant dance movement",
    "점프": "jumping joyfully, dynamic jumping pose",
    # 제스처
    "웃고있는": "smiling warmly, happy cheerful gesture",
    "손흔드는": "waving hand, friendly greeting gesture",
    "포옹": "hugging warmly, affectionate embrace",
    "인사": "greeting politely, friendly bow",
    # 일상
    "요리하는": "cooking with care, preparing food",
    "먹는": "eating deliciously, enjoying meal",
    "마시는": "drinking comfortably, enjoying beverage",
    "읽는": "reading peacefully, focused on book",
    "공부하는": "studying diligently, focused learning",
    "일하는": "working diligently, focused on task",
    "전화하는": "talking on phone, communication gesture",
    # 휴식
    "자는": "sleeping peacefully, restful slumber pose",
    "쉬는": "resting comfortably, relaxed peaceful pose",
    "생각하는": "thinking deeply, contemplative pose",
    # 운동
    "운동하는": "exercising actively, fitness workout pose",
    "요가": "doing yoga, peaceful stretching pose",
    "수영하는": "swimming gracefully, aquatic sports pose",
    # 창작
    "그림그리는": "drawing artistically, creative artistic pose",
    "글쓰는": "writing thoughtfully, focused writing pose",
    "노래하는": "singing beautifully, vocal performance pose",
    # 시선
    "바라보는": "looking intently, focused gaze direction",
    "돌아보는": "looking back, turning head pose",
    # 기본값
    DEFAULT_KEY: "natural relaxed pose, comfortable body posture",
})


EXPRESSION_MAPPINGS: Mapping[str, str] = MappingProxyType({
    # 긍정
    "행복한": "happy and joyful expression, bright cheerful smile",
    "즐거운": "happy and joyful expression, bright cheerful smile",
    "미소": "gentle smile, soft pleasant expression",
    "신나는": "excited energetic expression, enthusiastic demeanor",
    "만족한": "satisfied content expression, pleased demeanor",
    # 애정
    "사랑스러운": "lovely affectionate expression, tender loving gaze",
    "로맨틱한": "romantic and tender expression, loving gaze",
    "따뜻한": "warm and caring expression, gentle smile",
    "다정한": "kind gentle expression, warm caring demeanor",
    # 평온
    "평화로운": "peaceful and serene expression, calm demeanor",
    "차분한": "calm composed expression, peaceful demeanor",
    "편안한": "comfortable relaxed expression, at ease demeanor",
    # 매력
    "신비로운": "mysterious and enigmatic expression, subtle smile",
    "우아한": "elegant graceful expression, refined demeanor",
    "귀여운": "cute adorable expression, charming sweet demeanor",
    "자신감있는": "confident assured expression, self-assured demeanor",
    # 진지
    "진지한": "serious focused expression, earnest demeanor",
    "고민하는": "worried thoughtful expression, concerned demeanor",
    # 놀람
    "놀란": "surprised expression, wide-eyed amazement",
    "궁금한": "curious wondering expression, inquisitive demeanor",
    # 수줍음
    "부끄러운": "shy bashful expression, embarrassed demeanor",
    "수줍은": "shy timid expression, bashful modest demeanor",
    # 기타
    "피곤한": "tired weary expression, fatigued demeanor",
    "졸린": "sleepy drowsy expression, tired relaxed demeanor",
    "슬픈": "sad melancholic expression, teary eyes",
    "그리운": "longing nostalgic expression, wistful demeanor",
    # 기본값
    DEFAULT_KEY: "natural pleasant expression, gentle comfortable demeanor",
})


ATMOSPHERE_MAPPINGS: Mapping[str, str] = MappingProxyType({
    # 자연광
    "자연광": "natural daylight, soft window lighting",
    "햇빛": "natural sunlight, bright sunny illumination",
    "밝은": "bright natural lighting, well-lit atmosphere",
    # 시간대
    "노을": "sunset golden light, warm evening glow",
    "황금시간": "golden hour lighting, warm sunset glow",
    "새벽": "dawn lighting, soft morning illumination",
    "아침": "morning lighting, fresh daylight atmosphere",
    "오후": "afternoon lighting, warm slanted sunlight",
    "저녁": "evening lighting, soft twilight atmosphere",
    "밤": "nighttime lighting, artificial evening illumination",
    # 따뜻함
    "따뜻한": "warm cozy lighting, comfortable golden illumination",
    "아늑한": "cozy warm lighting, intimate atmosphere",
    "부드러운": "soft diffused lighting, gentle warm illumination",
    # 무드
    "로맨틱한": "romantic mood lighting, soft intimate atmosphere",
    "몽환적인": "dreamy atmospheric lighting, ethereal mood",
    "드라마틱한": "dramatic lighting, strong contrast atmosphere",
    "은은한": "subtle soft lighting, gentle atmospheric glow",
    "어두운": "dim lighting, moody dark atmosphere",
    # 날씨
    "흐린날": "overcast lighting, diffused cloudy atmosphere",
    "비오는날": "rainy day lighting, moody atmospheric glow",
    "눈오는날": "snowy lighting, bright winter atmosphere",
    # 특수
    "촛불": "candlelight, warm flickering glow",
    "벽난로": "fireplace lighting, warm cozy glow",
    "네온": "neon lighting, colorful urban glow",
    "차가운": "cool lighting, blue-toned illumination",
    # 기본값
    DEFAULT_KEY: "soft natural lighting, comfortable warm atmosphere",
})


ALL_MAPPINGS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "location_environment": LOCATION_MAPPINGS,
    "outfit_style": OUTFIT_MAPPINGS,
    "action_pose": ACTION_MAPPINGS,
    "expression_emotion": EXPRESSION_MAPPINGS,
    "atmosphere_lighting": ATMOSPHERE_MAPPINGS,
})


# 테이블에 없는 값을 대표 키워드로 모으는 동의어 그룹
SIMILAR_KEYWORDS: Mapping[str, Mapping[str, tuple]] = MappingProxyType({
    "location_environment": MappingProxyType({
        "집에서": ("집", "댁", "자택", "가정"),
        "카페에서": ("카페", "커피숍", "찻집", "커피하우스"),
        "공원에서": ("공원", "잔디밭", "야외"),
        "해변에서": ("바다", "해안", "해변", "바닷가"),
        "직장에서": ("회사", "사무실", "오피스"),
        "산에서": ("산", "등산로", "산길"),
    }),
    "outfit_style": MappingProxyType({
        "캐주얼": ("일상복", "평상복", "편한 옷"),
        "정장": ("정식", "수트", "양복"),
        "운동복": ("스포츠", "헬스", "운동"),
        "여름옷": ("시원한옷", "반팔", "얇은옷"),
    }),
    "action_pose": MappingProxyType({
        "앉아있는": ("앉은", "앉는", "앉다"),
        "서있는": ("선", "서는", "서다"),
        "웃고있는": ("웃는", "웃다"),
        "걷고있는": ("걷는", "걷다", "산책"),
    }),
    "expression_emotion": MappingProxyType({
        "행복한": ("기쁜", "좋은"),
        "따뜻한": ("온화한", "상냥한"),
        "로맨틱한": ("달콤한", "애정어린"),
        "평화로운": ("안정된", "고요한"),
    }),
    "atmosphere_lighting": MappingProxyType({
        "자연광": ("일광", "낮"),
        "따뜻한": ("포근한", "온화한"),
        "부드러운": ("연한", "희미한"),
        "드라마틱한": ("강렬한", "선명한", "대비가강한"),
    }),
})


# '집에서' 는 메시지 내용으로 공간을 세분화한다
HOME_LOCATION_DETAILS = (
    (("욕실", "샤워", "세면대", "목욕"), LOCATION_MAPPINGS["욕실에서"]),
    (("침대", "침실", "이불", "베개"), LOCATION_MAPPINGS["침실에서"]),
    (("거실", "소파", "쇼파", "TV"), LOCATION_MAPPINGS["거실에서"]),
    (("부엌", "주방", "요리", "냉장고", "식탁"), LOCATION_MAPPINGS["부엌에서"]),
)


# 테이블에 없는 장소 키워드를 접미사/브랜드 패턴으로 구문화한다 (위에서부터 첫 매칭)
# (패턴, 치환 템플릿, 신뢰도)
LOCATION_RULES: Tuple[Tuple[re.Pattern, str, float], ...] = tuple(
    (re.compile(pattern), template, confidence)
    for pattern, template, confidence in (
        # 매장/상점
        (r"(.+)매장$", r"in \1 store, retail commercial interior, shopping environment", 0.85),
        (r"(.+)가게$", r"in \1 shop, commercial retail interior, store environment", 0.80),
        (r"(.+)점$", r"in \1 store, commercial retail interior, business environment", 0.75),
        (r"(.+)샵$", r"in \1 shop, modern retail interior, commercial space", 0.80),
        # 위치 조사
        (r"(.+)에서$", r"in/at \1, comfortable setting, appropriate environment", 0.70),
        (r"(.+)안에$", r"inside \1, interior space, enclosed environment", 0.75),
        (r"(.+)앞에$", r"in front of \1, outdoor area, external environment", 0.65),
        (r"(.+)옆에$", r"beside \1, adjacent area, neighboring environment", 0.65),
        # 건물/시설
        (r"(.+)건물$", r"in \1 building, architectural interior, commercial space", 0.70),
        (r"(.+)센터$", r"in \1 center, facility interior, service environment", 0.75),
        (r"(.+)타워$", r"in \1 tower, high-rise building interior, urban environment", 0.70),
        (r"(.+)플라자$", r"in \1 plaza, commercial complex interior, shopping environment", 0.75),
        # 특수 장소
        (r"(.+)클럽$", r"in \1 club, membership facility interior, social environment", 0.80),
        (r"(.+)룸$", r"in \1 room, private space interior, comfortable environment", 0.85),
        (r"(.+)홀$", r"in \1 hall, spacious interior, formal environment", 0.80),
        (r"(.+)라운지$", r"in \1 lounge, comfortable relaxation space, upscale environment", 0.80),
        # 지역명
        (r"(.+)시$", r"in \1 city, urban environment, metropolitan setting", 0.60),
        (r"(.+)구$", r"in \1 district, urban area, city neighborhood", 0.60),
        (r"(.+)동$", r"in \1 neighborhood, local community area, residential district", 0.55),
        # 브랜드
        (r"(스타벅스|투썸|이디야|컴포즈|할리스)",
         r"in \1 cafe, branded coffee shop interior, modern cafe environment", 0.90),
        (r"(맥도날드|버거킹|롯데리아|KFC|써브웨이)",
         r"in \1 restaurant, fast food interior, casual dining environment", 0.90),
        (r"(이마트|홈플러스|롯데마트|코스트코)",
         r"in \1 supermarket, large retail interior, shopping environment", 0.90),
        # 업종
        (r"(.+)(은행|농협|신협)$",
         r"in \1\2 bank, financial institution interior, professional business environment", 0.85),
        (r"(.+)(병원|의원|클리닉)$",
         r"in \1\2 medical facility, healthcare interior, professional clinical environment", 0.85),
        (r"(.+)(약국|팜)$",
         r"in \1\2 pharmacy, medical retail interior, healthcare commercial space", 0.85),
    )
)

RULE_BASED_MAPPINGS: Mapping[str, tuple] = MappingProxyType({
    "location_environment": LOCATION_RULES,
})

# 이 이상이면 유사 키워드보다 규칙 구문을 먼저 쓴다
RULE_CONFIDENCE_THRESHOLD = 0.7
# 유사 키워드도 없을 때 받아들이는 최소 신뢰도
RULE_MIN_CONFIDENCE = 0.5

# 부분 일치에서 제외할 만큼 짧은 키 길이
_MIN_PARTIAL_KEY_LENGTH = 2
# 부분 일치 전에 떼어 내는 공통 조사
_PARTIAL_MATCH_SUFFIXES = ("에서",)


def _strip_suffix(value: str) -> str:
    for suffix in _PARTIAL_MATCH_SUFFIXES:
        if value.endswith(suffix):
            return value[: -len(suffix)]
    return value


def is_default_value(value: Optional[str]) -> bool:
    return not value or value.strip().lower() == DEFAULT_KEY


def get_default_phrase(category: str) -> str:
    """카테고리의 기본 구문 (모든 테이블에 존재)"""
    return ALL_MAPPINGS[category][DEFAULT_KEY]


def find_similar_keyword(value: str, category: str) -> Optional[str]:
    """
    테이블에 없는 값을 비슷한 키워드로 연결

    1) 동의어 그룹 정확 일치
    2) 값 안에 키가 포함된 경우 (긴 키 우선)
    3) 조사(에서)를 뗀 값이 키에 포함된 경우
    4) 값 안에 동의어가 포함된 경우

    Returns:
        매칭된 테이블 키 또는 None
    """
    mapping = ALL_MAPPINGS.get(category)
    if mapping is None:
        return None

    similar_groups = SIMILAR_KEYWORDS.get(category, {})
    stem = _strip_suffix(value)
    for original, synonyms in similar_groups.items():
        if value in synonyms and original in mapping:
            return original

    candidates = sorted(
        (key for key in mapping if key != DEFAULT_KEY and len(key) >= _MIN_PARTIAL_KEY_LENGTH),
        key=len,
        reverse=True,
    )
    for key in candidates:
        if key in value:
            return key
    if len(stem) >= _MIN_PARTIAL_KEY_LENGTH:
        for key in candidates:
            if stem in key:
                return key

    for original, synonyms in similar_groups.items():
        if any(len(s) >= _MIN_PARTIAL_KEY_LENGTH and s in value for s in synonyms):
            return original

    return None


def generate_rule_phrase(value: str, category: str) -> Optional[Tuple[str, float]]:
    """
    패턴 규칙으로 구문 생성 (예: '수영복매장' → 'in 수영복 store, ...')

    Returns:
        (구문, 신뢰도) 또는 매칭되는 규칙이 없으면 None
    """
    for pattern, template, confidence in RULE_BASED_MAPPINGS.get(category, ()):
        match = pattern.search(value)
        if match:
            return match.expand(template), confidence
    return None


def _refine_home_location(context_message: str) -> str:
    for keywords, phrase in HOME_LOCATION_DETAILS:
        if any(keyword in context_message for keyword in keywords):
            return phrase
    return LOCATION_MAPPINGS["집에서"]


def map_category_value(
    category: str,
    value: Optional[str],
    context_message: Optional[str] = None,
) -> Optional[str]:
    """
    카테고리 값 → 영어 구문

    Args:
        category: CATEGORY_KEYS 중 하나
        value: LLM이 고른 한국어 키워드
        context_message: 원본 메시지 ('집에서' 세분화용)

    Returns:
        영어 구문. default 이거나 매핑할 수 없으면 None
    """
    if category not in ALL_MAPPINGS:
        raise KeyError(f"알 수 없는 카테고리: {category}")

    if is_default_value(value):
        return None

    keyword = value.strip()
    mapping = ALL_MAPPINGS[category]

    if keyword not in mapping:
        rule = generate_rule_phrase(keyword, category)
        if rule and rule[1] >= RULE_CONFIDENCE_THRESHOLD:
            logger.debug(f"[{category}] 규칙 매핑: {keyword} → {rule[0]} ({rule[1]:.2f})")
            return rule[0]

        similar = find_similar_keyword(keyword, category)
        if similar is None:
            if rule and rule[1] >= RULE_MIN_CONFIDENCE:
                logger.debug(f"[{category}] 낮은 신뢰도 규칙 사용: {keyword} ({rule[1]:.2f})")
                return rule[0]
            logger.debug(f"[{category}] 매핑 없음: {keyword}")
            return None
        logger.debug(f"[{category}] 유사 키워드 매칭: {keyword} → {similar}")
        keyword = similar

    if category == "location_environment" and keyword == "집에서" and context_message:
        return _refine_home_location(context_message)

    return mapping[keyword]


def get_available_keywords() -> Dict[str, List[str]]:
    """카테고리별 사용 가능한 키워드 (default 제외)"""
    return {
        category: [key for key in mapping if key != DEFAULT_KEY]
        for category, mapping in ALL_MAPPINGS.items()
    }
