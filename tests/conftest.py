from pathlib import Path
from typing import Any

from databases import Database
import pytest
import pytest_asyncio

from domain.repository import GroceryRepository, RecipesRepository, create_db
from domain.schemas import ParsedRecipe


PANCAKES: dict[str, Any] = {
    "recipeName": "Pancakes",
    "ingredients": [{"name": "Flour", "quantity": "1 cup"}],
    "steps": ["Mix.", "Cook."],
}


class FakeExtractor:
    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.calls: list[Any] = []

    async def extract(self, image: Any) -> list[str]:
        self.calls.append(image)
        return list(self.lines)


class FakeLLM:
    def __init__(
        self,
        recipe: ParsedRecipe | None = None,
        error: Exception | None = None,
    ) -> None:
        self.recipe = recipe
        self.error = error
        self.texts: list[str] = []

    async def parse_recipe(self, text: str) -> ParsedRecipe:
        self.texts.append(text)
        if self.error is not None:
            raise self.error
        assert self.recipe is not None
        return self.recipe


def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'whisk-test.db'}"


@pytest.fixture
def pancakes() -> ParsedRecipe:
    return ParsedRecipe.model_validate(PANCAKES)


@pytest_asyncio.fixture
async def db(tmp_path: Path):
    database = Database(db_url(tmp_path))
    await database.connect()
    await create_db(database)
    yield database
    await database.disconnect()


@pytest.fixture
def recipes(db: Database) -> RecipesRepository:
    return RecipesRepository(db)


@pytest.fixture
def groceries(db: Database) -> GroceryRepository:
    return GroceryRepository(db)
