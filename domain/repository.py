from datetime import datetime
import json
from typing import Any, Mapping

from databases import Database

from domain.errors import GroceryItemNotFound, RecipeNotFound
from domain.models import GroceryItem, Ingredient, Recipe


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS Recipes (
    id VARCHAR(64) PRIMARY KEY,
    name VARCHAR(256) NOT NULL,
    description TEXT,
    ingredients TEXT NOT NULL,
    steps TEXT NOT NULL,
    image BLOB,
    created_at VARCHAR(64) NOT NULL
)
"""


CREATE_GROCERY_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS GroceryItems (
    id VARCHAR(64) PRIMARY KEY,
    name VARCHAR(256) NOT NULL,
    quantity VARCHAR(256) NOT NULL,
    is_checked INTEGER NOT NULL,
    created_at VARCHAR(64) NOT NULL
)
"""


CREATE_RECIPE = """
INSERT INTO Recipes(id, name, description, ingredients, steps, image, created_at)
VALUES (:id, :name, :description, :ingredients, :steps, :image, :created_at)
"""


UPDATE_RECIPE = """
UPDATE Recipes
SET name = :name, description = :description, ingredients = :ingredients,
    steps = :steps, image = :image, created_at = :created_at
WHERE id = :id
"""


GET_RECIPE = "SELECT * FROM Recipes WHERE id = :id"


LIST_RECIPES = "SELECT * FROM Recipes ORDER BY created_at DESC"


DELETE_RECIPE = "DELETE FROM Recipes WHERE id = :id"


CREATE_GROCERY_ITEM = """
INSERT INTO GroceryItems(id, name, quantity, is_checked, created_at)
VALUES (:id, :name, :quantity, :is_checked, :created_at)
"""


UPDATE_GROCERY_ITEM = """
UPDATE GroceryItems
SET name = :name, quantity = :quantity, is_checked = :is_checked,
    created_at = :created_at
WHERE id = :id
"""


GET_GROCERY_ITEM = "SELECT * FROM GroceryItems WHERE id = :id"


LIST_GROCERY_ITEMS = "SELECT * FROM GroceryItems ORDER BY created_at ASC"


DELETE_GROCERY_ITEM = "DELETE FROM GroceryItems WHERE id = :id"


async def create_db(db: Database) -> None:
    await db.execute(query=CREATE_RECIPES_TABLE)  # pyright: ignore[reportUnknownMemberType]
    await db.execute(query=CREATE_GROCERY_ITEMS_TABLE)  # pyright: ignore[reportUnknownMemberType]


def recipe_values(recipe: Recipe) -> dict[str, Any]:
    values = recipe.to_dict()
    values["ingredients"] = json.dumps(values["ingredients"])
    values["steps"] = json.dumps(values["steps"])
    values["image"] = recipe.image
    return values


def recipe_from_record(record: Mapping[str, Any]) -> Recipe:
    return Recipe(
        id=record["id"],
        name=record["name"],
        description=record["description"],
        ingredients=[Ingredient.from_dict(i) for i in json.loads(record["ingredients"])],
        steps=json.loads(record["steps"]),
        image=record["image"],
        created_at=datetime.fromisoformat(record["created_at"]),
    )


def grocery_item_values(item: GroceryItem) -> dict[str, Any]:
    values = item.to_dict()
    values["is_checked"] = int(item.is_checked)
    return values


def grocery_item_from_record(record: Mapping[str, Any]) -> GroceryItem:
    return GroceryItem(
        id=record["id"],
        name=record["name"],
        quantity=record["quantity"],
        is_checked=bool(record["is_checked"]),
        created_at=datetime.fromisoformat(record["created_at"]),
    )


class RecipesRepository:
    """Recipes repository."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def add(self, recipe: Recipe) -> Recipe:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            CREATE_RECIPE, values=recipe_values(recipe)
        )
        return recipe

    async def get(self, id: str) -> Recipe:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_RECIPE, values={"id": id}
        )
        if result is None:
            raise RecipeNotFound(id)
        return recipe_from_record(result)  # pyright: ignore[reportArgumentType]

    async def list(self, search: str | None = None) -> list[Recipe]:
        """Newest first, optionally narrowed to recipes mentioning `search`."""
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_RECIPES
        )
        recipes = [recipe_from_record(r) for r in result]  # pyright: ignore[reportArgumentType]
        if search:
            recipes = [r for r in recipes if r.matches(search)]
        return recipes

    async def update(self, recipe: Recipe) -> Recipe:
        await self.get(recipe.id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            UPDATE_RECIPE, values=recipe_values(recipe)
        )
        return recipe

    async def delete(self, id: str) -> None:
        await self.get(id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            DELETE_RECIPE, values={"id": id}
        )


class GroceryRepository:
    """Grocery list repository."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def add(self, item: GroceryItem) -> GroceryItem:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            CREATE_GROCERY_ITEM, values=grocery_item_values(item)
        )
        return item

    async def get(self, id: str) -> GroceryItem:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_GROCERY_ITEM, values={"id": id}
        )
        if result is None:
            raise GroceryItemNotFound(id)
        return grocery_item_from_record(result)  # pyright: ignore[reportArgumentType]

    async def list(self) -> list[GroceryItem]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_GROCERY_ITEMS
        )
        return [grocery_item_from_record(r) for r in result]  # pyright: ignore[reportArgumentType]

    async def update(self, item: GroceryItem) -> GroceryItem:
        await self.get(item.id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            UPDATE_GROCERY_ITEM, values=grocery_item_values(item)
        )
        return item

    async def delete(self, id: str) -> None:
        await self.get(id)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            DELETE_GROCERY_ITEM, values={"id": id}
        )
