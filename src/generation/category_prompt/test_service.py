import asyncio
import json

import pytest

from src.generation.category_prompt.assembler import PromptAssembler
from src.generation.category_prompt.mappings import CATEGORY_KEYS
from src.generation.category_prompt.models import MessageContext
from src.generation.category_prompt.service import (
    CategoryPromptService,
    get_category_prompt_service,
)
from src.generation.category_prompt.templates import SAFETY_TERMS


def _assert_well_formed(result):
    assert result.positive_prompt
    assert result.negative_prompt
    assert result.quality_score > 0
    assert set(result.category_breakdown) == set(CATEGORY_KEYS)
    assert all(value.strip() for value in result.category_breakdown.values())
    for term in SAFETY_TERMS:
        assert term in result.negative_prompt
    assert "category_based" in result.generation_info.template_used


def test_convert_full_message(make_service, cafe_categories):
    service = make_service(cafe_categories)
    message = "카페에서 편안한 옷을 입고 앉아서 웃으면서 따뜻한 분위기에서 커피를 마시고 있어"

    result = asyncio.run(service.convert_message_to_prompt(message, gender="female"))

    _assert_well_formed(result)
    for token in ("1girl", "cozy cafe", "casual", "sitting", "happy", "warm"):
        assert token in result.positive_prompt
    breakdown = result.category_breakdown
    assert "cafe" in breakdown["location_environment"]
    assert "casual" in breakdown["outfit_style"]
    assert "sitting" in breakdown["action_pose"]
    assert "happy" in breakdown["expression_emotion"]
    assert "warm" in breakdown["atmosphere_lighting"]
    assert result.generation_info.categories_filled == 5
    assert len(service.client.calls) == 1


def test_gender_branching(make_service, default_categories):
    service = make_service(default_categories)

    female = asyncio.run(service.convert_message_to_prompt("안녕하세요", gender="female"))
    male = asyncio.run(service.convert_message_to_prompt("안녕하세요", gender="male"))

    assert "1girl" in female.positive_prompt
    assert female.generation_info.gender == "female"
    assert "1boy" in male.positive_prompt
    assert male.generation_info.gender == "male"


def test_llm_failure_still_returns_prompt(make_service):
    service = make_service(error=RuntimeError("API 호출 실패"))

    result = asyncio.run(service.convert_message_to_prompt("테스트 메시지"))

    _assert_well_formed(result)
    assert result.generation_info.extraction_method == "fallback"


def test_empty_message_is_valid(make_service, cafe_categories):
    service = make_service(cafe_categories)

    result = asyncio.run(service.convert_message_to_prompt(""))

    _assert_well_formed(result)
    assert service.client.calls == []
    assert service.get_performance_stats()["success_rate"] == 100.0


def test_quality_levels(make_service, default_categories):
    service = make_service(default_categories)

    results = {
        level: asyncio.run(service.convert_message_to_prompt("테스트", quality_level=level))
        for level in ("draft", "standard", "high", "premium")
    }

    assert "high quality" in results["draft"].positive_prompt
    assert "(masterpiece:1.4)" in results["premium"].positive_prompt
    assert "8k resolution" in results["premium"].positive_prompt
    assert "(masterpiece:1.4)" not in results["draft"].positive_prompt
    assert "8k resolution" not in results["draft"].positive_prompt
    assert (
        results["premium"].quality_score
        > results["high"].quality_score
        > results["standard"].quality_score
        > results["draft"].quality_score
    )


def test_default_quality_is_standard(make_service, default_categories):
    service = make_service(default_categories)
    result = asyncio.run(service.convert_message_to_prompt("테스트"))
    assert result.generation_info.quality_level == "standard"


def test_batch_conversion_mixed_outcomes(make_service, cafe_categories):
    def respond(kwargs):
        if "실패" in kwargs["messages"][1]["content"]:
            return RuntimeError("boom")
        return json.dumps(cafe_categories, ensure_ascii=False)

    service = make_service(respond)
    results = asyncio.run(service.convert_messages([
        "카페에 왔어",
        {"message": "실패할 메시지", "gender": "male"},
        MessageContext(message="또 카페", quality_level="premium"),
    ]))

    assert len(results) == 3
    for result in results:
        _assert_well_formed(result)
    assert results[0].generation_info.extraction_method == "llm"
    assert results[1].generation_info.extraction_method == "fallback"
    assert "1boy" in results[1].positive_prompt
    assert results[2].generation_info.quality_level == "premium"
    assert service.get_performance_stats()["total_conversions"] == 3


def test_stats_count_fallbacks_as_success(make_service, cafe_categories):
    def respond(kwargs):
        if "fail" in kwargs["messages"][1]["content"]:
            return ConnectionError("rejected")
        return json.dumps(cafe_categories, ensure_ascii=False)

    service = make_service(respond)
    n, m = 4, 3
    messages = [f"ok {i}" for i in range(n)] + [f"fail {i}" for i in range(m)]
    asyncio.run(service.convert_messages(messages))

    stats = service.get_performance_stats()
    assert stats["total_conversions"] == n + m
    assert stats["success_rate"] == 100.0
    assert stats["fallback_conversions"] == m
    assert stats["failed_conversions"] == 0
    assert service.get_service_health()["status"] == "healthy"


class _BrokenAssembler(PromptAssembler):
    def assemble(self, extraction, gender="female", quality_level=None, age=None,
                 extraction_method="llm", context_message=None):
        if extraction_method != "fallback":
            raise ValueError("assembly broke")
        return super().assemble(extraction, gender, quality_level, age, extraction_method, context_message)


def test_unexpected_error_counts_as_failure(make_service, cafe_categories):
    service = make_service(cafe_categories, assembler=_BrokenAssembler())

    result = asyncio.run(service.convert_message_to_prompt("카페", gender="male"))

    _assert_well_formed(result)
    assert "1boy" in result.positive_prompt
    assert result.generation_info.quality_level == "standard"
    stats = service.get_performance_stats()
    assert stats["failed_conversions"] == 1
    assert stats["success_rate"] == 0.0
    assert service.get_service_health()["status"] == "unhealthy"


def test_latency_uses_injected_clock(make_service, cafe_categories):
    ticks = iter([10.0, 10.25, 20.0, 20.75])
    service = make_service(cafe_categories, clock=lambda: next(ticks))

    asyncio.run(service.convert_message_to_prompt("카페"))
    asyncio.run(service.convert_message_to_prompt("카페"))

    assert service.get_performance_stats()["avg_processing_time_ms"] == 500.0


def test_reset_stats(make_service, cafe_categories):
    service = make_service(cafe_categories)
    asyncio.run(service.convert_message_to_prompt("카페"))

    service.reset_stats()

    assert service.get_performance_stats()["total_conversions"] == 0


def test_analyze_message_does_not_touch_stats(make_service, cafe_categories):
    service = make_service(cafe_categories)

    analysis = asyncio.run(service.analyze_message("카페에서 <!-- EMOTION: 행복한 --> 놀자"))

    assert analysis["extracted_keywords"] == cafe_categories
    assert "cozy cafe" in analysis["mapped_prompts"]["location_environment"]
    assert analysis["categories_filled"] == 5
    assert analysis["hidden_tags"] == {"emotion": "행복한"}
    assert analysis["analysis_method"] == "llm"
    assert service.get_performance_stats()["total_conversions"] == 0


def test_validate_prompt(make_service, cafe_categories):
    service = make_service(cafe_categories)
    result = asyncio.run(service.convert_message_to_prompt("카페", quality_level="premium"))

    report = service.validate_prompt(result)
    assert report == {"is_valid": True, "issues": [], "recommendations": []}


def test_validate_prompt_flags_problems(make_service, default_categories):
    service = make_service(default_categories)
    draft = asyncio.run(service.convert_message_to_prompt("안녕", quality_level="draft"))

    low_score = service.validate_prompt(draft)
    assert low_score["is_valid"] is True
    assert low_score["recommendations"]

    bad = type(draft)(
        positive_prompt=draft.positive_prompt + ", explicit" + ", x" * 800,
        negative_prompt=draft.negative_prompt,
        category_breakdown=draft.category_breakdown,
        quality_score=draft.quality_score,
        generation_info=draft.generation_info,
    )
    report = service.validate_prompt(bad)
    assert report["is_valid"] is False
    assert len(report["issues"]) == 2


def test_available_categories(make_service):
    info = make_service().get_available_categories()
    assert info["categories"] == list(CATEGORY_KEYS)
    assert info["quality_levels"] == ["draft", "standard", "high", "premium"]
    assert "카페에서" in info["keywords"]["location_environment"]


def test_default_service_is_singleton(monkeypatch):
    from src.generation.category_prompt import service as service_module

    monkeypatch.setattr(service_module, "_service_instance", None)
    first = get_category_prompt_service()
    assert isinstance(first, CategoryPromptService)
    assert get_category_prompt_service() is first


@pytest.mark.parametrize("age", ["30", -5, 0, True, 29.5])
def test_invalid_age_is_ignored(make_service, cafe_categories, age):
    service = make_service(cafe_categories)

    result = asyncio.run(service.convert_message_to_prompt("카페", gender="male", age=age))

    _assert_well_formed(result)
    assert "years old" not in result.positive_prompt
    assert result.generation_info.extraction_method == "llm"
    assert service.get_performance_stats()["failed_conversions"] == 0


def test_batch_keeps_going_with_malformed_items(make_service, cafe_categories):
    service = make_service(cafe_categories)

    results = asyncio.run(service.convert_messages([
        {"message": "카페", "age": "30"},
        "공원",
        {"message": "카페", "gender": 7, "quality_level": 3, "age": 25},
        None,
    ]))

    assert len(results) == 4
    for result in results:
        _assert_well_formed(result)
    assert "25 years old" in results[2].positive_prompt
    assert results[2].generation_info.gender == "female"
    assert results[2].generation_info.quality_level == "standard"


class _AlwaysBrokenAssembler(PromptAssembler):
    def assemble(self, *args, **kwargs):
        raise RuntimeError("assembler down")


def test_fallback_survives_broken_assembler(make_service, cafe_categories):
    service = make_service(cafe_categories, assembler=_AlwaysBrokenAssembler())

    single = asyncio.run(service.convert_message_to_prompt("카페", gender="male", age=40))
    batch = asyncio.run(service.convert_messages(["하나", {"message": "둘", "gender": "male"}]))

    for result in (single, *batch):
        _assert_well_formed(result)
        assert result.generation_info.extraction_method == "fallback"
        assert result.generation_info.quality_level == "standard"
        assert "years old" not in result.positive_prompt
    assert "1boy" in single.positive_prompt
    assert "1girl" in batch[0].positive_prompt
    assert service.get_performance_stats()["failed_conversions"] == 3
