import logging
from typing import Any, Callable, Iterable, Protocol

from domain.errors import ParseError
from domain.models import GroceryItem, Ingredient, Recipe
from domain.repository import GroceryRepository, RecipesRepository
from domain.schemas import ParsedRecipe


logger = logging.getLogger(__name__)


class Extractor(Protocol):
    async def extract(self, image: Any) -> list[str]:
        ...


class RecipeParser(Protocol):
    async def parse_recipe(self, text: str) -> ParsedRecipe:
        ...


class IngestionState:
    """Progress of scans, owned by whoever displays it.

    Several scans may share one state. It stays processing until the last of
    them finishes, and a scan only clears the error when it is the first one
    in flight.
    """

    def __init__(
        self,
        observer: Callable[["IngestionState"], None] | None = None,
    ) -> None:
        self.error: str | None = None
        self.observer = observer
        self._active = 0

    @property
    def processing(self) -> bool:
        return self._active > 0

    def __repr__(self) -> str:
        return f"<IngestionState(processing={self.processing}, error={self.error!r})>"

    def _notify(self) -> None:
        if self.observer is not None:
            self.observer(self)

    def begin(self) -> None:
        if not self._active:
            self.error = None
        self._active += 1
        self._notify()

    def fail(self, message: str) -> None:
        self.error = message
        self._notify()

    def finish(self) -> None:
        self._active = max(0, self._active - 1)
        self._notify()

    def dismiss_error(self) -> None:
        self.error = None
        self._notify()


async def ingest_recipe(
    image: Any,
    *,
    extractor: Extractor,
    llm: RecipeParser,
    repository: RecipesRepository,
    state: IngestionState,
    attach_image: bool = False,
) -> Recipe | None:
    """Scan, parse and store a recipe page.

    Returns the stored recipe, or None when nothing was recognized or the
    text could not be parsed. Parse failures land in `state.error`; the store
    is only written once the whole recipe has been built.
    """
    state.begin()
    try:
        lines = await extractor.extract(image)
        if not lines:
            return None

        try:
            parsed = await llm.parse_recipe("\n".join(lines))
        except ParseError as e:
            logger.warning("Could not parse scanned recipe: %s", e.message)
            state.fail(e.message)
            return None

        recipe = parsed.to_recipe(
            image=bytes(image) if attach_image and isinstance(image, (bytes, bytearray)) else None
        )
        await repository.add(recipe)
        logger.info("Stored scanned recipe %s (%s)", recipe.id, recipe.name)
        return recipe
    finally:
        state.finish()


def clean_ingredients(ingredients: Iterable[Ingredient]) -> list[Ingredient]:
    return [
        Ingredient(id=i.id, name=i.name.strip(), quantity=i.quantity.strip())
        for i in ingredients
        if i.name.strip() or i.quantity.strip()
    ]


def clean_steps(steps: Iterable[str]) -> list[str]:
    return [s.strip() for s in steps if s.strip()]


def clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValueError("A recipe needs a name.")
    return name


async def create_recipe(
    *,
    name: str,
    description: str | None,
    ingredients: Iterable[Ingredient],
    steps: Iterable[str],
    image: bytes | None,
    repository: RecipesRepository,
) -> Recipe:
    recipe = Recipe(
        name=clean_name(name),
        description=description,
        ingredients=clean_ingredients(ingredients),
        steps=clean_steps(steps),
        image=image,
    )
    return await repository.add(recipe)


async def update_recipe(
    id: str,
    *,
    name: str,
    description: str | None,
    ingredients: Iterable[Ingredient],
    steps: Iterable[str],
    image: bytes | None,
    repository: RecipesRepository,
) -> Recipe:
    existing = await repository.get(id)
    recipe = Recipe(
        id=existing.id,
        name=clean_name(name),
        description=description,
        ingredients=clean_ingredients(ingredients),
        steps=clean_steps(steps),
        image=image,
        created_at=existing.created_at,
    )
    return await repository.update(recipe)


async def delete_recipe(id: str, *, repository: RecipesRepository) -> None:
    await repository.delete(id)


async def search_recipes(
    text: str | None,
    *,
    repository: RecipesRepository,
) -> list[Recipe]:
    text = (text or "").strip()
    return await repository.list(search=text or None)


async def add_grocery_item(
    name: str,
    quantity: str = "",
    *,
    repository: GroceryRepository,
) -> GroceryItem:
    name = name.strip()
    if not name:
        raise ValueError("A grocery item needs a name.")
    item = GroceryItem(name=name, quantity=quantity.strip(), is_checked=False)
    return await repository.add(item)


async def toggle_grocery_item(id: str, *, repository: GroceryRepository) -> GroceryItem:
    item = await repository.get(id)
    item.is_checked = not item.is_checked
    return await repository.update(item)


async def delete_grocery_item(id: str, *, repository: GroceryRepository) -> None:
    await repository.delete(id)
