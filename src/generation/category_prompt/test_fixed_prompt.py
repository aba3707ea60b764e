from src.generation.category_prompt.fixed_prompt import FixedPromptService, get_fixed_prompt_service


def test_prompt_config_for_gender():
    config = FixedPromptService().get_prompt_config("common", "male")

    assert "(1boy:1.5)" in config["gender_positive"]
    assert "feminine features" in config["gender_negative"]
    assert "(single person:1.5)" in config["base_positive"]
    assert "nsfw" in config["base_negative"]


def test_build_final_prompt_order():
    prompt = FixedPromptService().build_final_prompt("in a cozy cafe, sitting", "common", "female")

    positive = prompt["positive"]
    assert positive.index("(1girl:1.5)") < positive.index("in a cozy cafe") < positive.index("(single person:1.5)")
    assert prompt["negative"].index("masculine features") < prompt["negative"].index("nsfw")


def test_empty_generated_prompt_is_skipped():
    positive = FixedPromptService().build_final_prompt("", gender="female")["positive"]
    assert ", ," not in positive


def test_unknown_relationship_uses_gender_template():
    config = FixedPromptService().get_prompt_config("friend", "female")
    assert "(1girl:1.5)" in config["gender_positive"]


def test_missing_templates_fall_back_to_builtin_phrases():
    config = FixedPromptService(templates=()).get_prompt_config("common", "male")
    assert config["gender_positive"] == "handsome young man"
    assert config["gender_negative"] == ""
    assert "nsfw" in config["base_negative"]


def test_relationship_types_and_status():
    service = FixedPromptService()
    assert service.get_available_relationship_types() == ["female", "male"]
    assert service.get_service_status()["prompts_loaded"] == 3
    assert get_fixed_prompt_service() is get_fixed_prompt_service()
