from backend.app.models.recipe import Difficulty
from backend.app.services.prompt_builder import PromptBuilder


def test_prompt_lists_ingredients_and_defaults():
    prompt = PromptBuilder.build(["tomato", "egg", "spring onion"])

    assert prompt.startswith("<s>[INST] ")
    assert prompt.endswith(" [/INST]")
    assert "tomato, egg, spring onion" in prompt
    assert "Cuisine: any" in prompt
    assert "Difficulty: medium" in prompt


def test_prompt_uses_given_cuisine_and_difficulty():
    prompt = PromptBuilder.build(["rice"], cuisine="japanese", difficulty=Difficulty.HARD)

    assert "Cuisine: japanese" in prompt
    assert "Difficulty: hard" in prompt


def test_prompt_asks_for_labeled_sections():
    prompt = PromptBuilder.build(["lentils"])

    for section in ("Recipe Title", "Cooking Time (in minutes)", "Servings", "Step-by-Step Instructions"):
        assert section in prompt


def test_prompt_is_deterministic():
    assert PromptBuilder.build(["a", "b"], "thai", "easy") == PromptBuilder.build(["a", "b"], "thai", "easy")
