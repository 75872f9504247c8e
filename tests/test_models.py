from datetime import datetime, timezone

import pytest

from domain.models import DEFAULT_QUANTITY, GroceryItem, Ingredient, Recipe
from domain.schemas import ParsedRecipe

from conftest import PANCAKES


def test_parsed_recipe_to_recipe(pancakes: ParsedRecipe) -> None:
    recipe = pancakes.to_recipe()

    assert recipe.name == "Pancakes"
    assert recipe.description is None
    assert [(i.name, i.quantity) for i in recipe.ingredients] == [("Flour", "1 cup")]
    assert recipe.steps == ["Mix.", "Cook."]
    assert recipe.image is None


def test_parsed_recipe_default_quantity() -> None:
    parsed = ParsedRecipe.model_validate(
        {"recipeName": "Tea", "ingredients": [{"name": "Tea bag"}, {"name": "Water"}]}
    )

    recipe = parsed.to_recipe()

    assert [i.quantity for i in recipe.ingredients] == [DEFAULT_QUANTITY] * 2
    assert DEFAULT_QUANTITY == "1 serving"
    assert recipe.steps == []


def test_parsed_recipe_keeps_empty_quantity() -> None:
    parsed = ParsedRecipe.model_validate(
        {"recipeName": "Tea", "ingredients": [{"name": "Sugar", "quantity": ""}]}
    )

    assert parsed.to_recipe().ingredients[0].quantity == ""


def test_parsed_recipe_accepts_name_key() -> None:
    parsed = ParsedRecipe.model_validate({"name": "Tea"})
    assert parsed.name == "Tea"


def test_fresh_ids_per_mapping(pancakes: ParsedRecipe) -> None:
    first, second = pancakes.to_recipe(), pancakes.to_recipe()

    assert first.id != second.id
    assert first.ingredients[0].id != second.ingredients[0].id


@pytest.mark.parametrize(
    "description,expected",
    ((None, None), ("", None), ("   ", None), ("  Fluffy. ", "Fluffy.")),
)
def test_recipe_description_normalized(
    description: str | None, expected: str | None
) -> None:
    assert Recipe(name="Tea", description=description).description == expected


def test_recipe_html() -> None:
    recipe = ParsedRecipe.model_validate(PANCAKES).to_recipe()

    html = recipe.html

    assert "No description provided." in html
    assert "<strong>Flour</strong> (1 cup)" in html
    assert "<ol>" in html
    assert html.index("Mix.") < html.index("Cook.")


def test_recipe_html_escapes_markup() -> None:
    recipe = Recipe(
        name="Tea",
        description="<script>alert(1)</script>",
        ingredients=[Ingredient(name="Tea bag", quantity="1")],
    )

    assert "<script>" not in recipe.html


def test_recipe_matches() -> None:
    recipe = Recipe(
        name="Tomato soup",
        ingredients=[Ingredient(name="Basil")],
        steps=["Blend."],
    )

    assert recipe.matches("tomato")
    assert recipe.matches("BASIL")
    assert recipe.matches("blend")
    assert not recipe.matches("pesto")


def test_recipe_to_dict() -> None:
    created_at = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    recipe = Recipe(
        id="r1",
        name="Tea",
        description="  ",
        ingredients=[Ingredient(id="i1", name="Tea bag", quantity="1")],
        steps=["Steep."],
        image=b"jpeg",
        created_at=created_at,
    )

    assert recipe.to_dict() == {
        "id": "r1",
        "name": "Tea",
        "description": None,
        "ingredients": [{"id": "i1", "name": "Tea bag", "quantity": "1"}],
        "steps": ["Steep."],
        "created_at": "2024-05-01T12:30:00.000000+00:00",
    }


def test_grocery_item_to_dict() -> None:
    item = GroceryItem(
        id="g1",
        name="Milk",
        quantity="1 l",
        is_checked=True,
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )

    assert item.to_dict() == {
        "id": "g1",
        "name": "Milk",
        "quantity": "1 l",
        "is_checked": True,
        "created_at": "2024-05-01T00:00:00.000000+00:00",
    }
