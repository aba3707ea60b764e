import pytest

from src.generation.category_prompt.mappings import (
    ALL_MAPPINGS,
    CATEGORY_KEYS,
    DEFAULT_KEY,
    LOCATION_MAPPINGS,
    MAPPINGS_VERSION,
    find_similar_keyword,
    generate_rule_phrase,
    get_available_keywords,
    get_default_phrase,
    map_category_value,
)


def test_every_table_has_non_empty_default():
    assert set(ALL_MAPPINGS) == set(CATEGORY_KEYS)
    for category in CATEGORY_KEYS:
        assert get_default_phrase(category).strip()


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        LOCATION_MAPPINGS["카페에서"] = "changed"
    with pytest.raises(TypeError):
        ALL_MAPPINGS["outfit_style"] = {}


def test_version_is_set():
    assert MAPPINGS_VERSION


@pytest.mark.parametrize("value", [None, "", "   ", "default", "DEFAULT"])
def test_default_values_contribute_nothing(value):
    assert map_category_value("location_environment", value) is None


def test_exact_keyword_mapping():
    assert "cozy cafe" in map_category_value("location_environment", "카페에서")
    assert "casual" in map_category_value("outfit_style", " 캐주얼 ")
    assert "sitting" in map_category_value("action_pose", "앉아있는")


def test_synonym_matching():
    assert find_similar_keyword("커피숍", "location_environment") == "카페에서"
    assert "cafe" in map_category_value("location_environment", "찻집")
    assert "sitting" in map_category_value("action_pose", "앉은")


def test_partial_matching():
    assert find_similar_keyword("아늑한 카페에서", "location_environment") == "카페에서"
    assert find_similar_keyword("카페 실내", "location_environment") == "카페에서"


def test_unknown_value_maps_to_nothing():
    assert find_similar_keyword("우주정거장", "location_environment") is None
    assert map_category_value("location_environment", "우주정거장") is None


def test_home_location_is_refined_by_message():
    living = map_category_value("location_environment", "집에서", "소파에 누워서 쉬는 중이야")
    kitchen = map_category_value("location_environment", "집에서", "주방에서 요리하고 있어")
    plain = map_category_value("location_environment", "집에서", "그냥 있어")

    assert "living room" in living
    assert "kitchen" in kitchen
    assert plain == LOCATION_MAPPINGS["집에서"]


def test_unknown_category_raises():
    with pytest.raises(KeyError):
        map_category_value("weather", "맑은")


def test_available_keywords_exclude_default():
    keywords = get_available_keywords()
    assert set(keywords) == set(CATEGORY_KEYS)
    for values in keywords.values():
        assert values
        assert DEFAULT_KEY not in values


@pytest.mark.parametrize("value, expected", [
    ("수영복매장", "in 수영복 store, retail commercial interior, shopping environment"),
    ("꽃가게", "in 꽃 shop, commercial retail interior, store environment"),
    ("편의점", "in 편의 store, commercial retail interior, business environment"),
    ("스타벅스", "in 스타벅스 cafe, branded coffee shop interior, modern cafe environment"),
    ("서울대병원", "in 서울대병원 medical facility, healthcare interior, professional clinical environment"),
])
def test_rule_based_location_phrases(value, expected):
    assert map_category_value("location_environment", value) == expected


def test_rule_applies_before_similar_keyword():
    phrase = map_category_value("location_environment", "카페건물")
    assert phrase == "in 카페 building, architectural interior, commercial space"


def test_low_confidence_rule_yields_to_similar_keyword():
    assert generate_rule_phrase("바다앞에", "location_environment")[1] < 0.7
    assert map_category_value("location_environment", "바다앞에") == LOCATION_MAPPINGS["해변에서"]


def test_low_confidence_rule_used_as_last_resort():
    phrase, confidence = generate_rule_phrase("역삼동", "location_environment")
    assert confidence == 0.55
    assert map_category_value("location_environment", "역삼동") == phrase
    assert "역삼 neighborhood" in phrase


def test_rules_only_cover_locations():
    assert generate_rule_phrase("수영복매장", "outfit_style") is None
    assert "swimwear" in map_category_value("outfit_style", "수영복매장")


def test_exact_keyword_wins_over_rule():
    assert map_category_value("location_environment", "카페에서") == LOCATION_MAPPINGS["카페에서"]


def test_bare_particle_matches_nothing():
    assert find_similar_keyword("에서", "location_environment") is None
    assert map_category_value("location_environment", "에서") is None


def test_partial_match_ignores_particle_suffix():
    assert find_similar_keyword("놀이공원", "location_environment") == "놀이공원에서"
    assert find_similar_keyword("공원에서", "location_environment") == "공원에서"
