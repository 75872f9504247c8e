"""Wire shapes exchanged with the chat-completion API."""

from pydantic import BaseModel, ConfigDict, Field

from domain.models import DEFAULT_QUANTITY, Ingredient, Recipe


class ParsedIngredient(BaseModel):
    name: str
    quantity: str | None = None


class ParsedRecipe(BaseModel):
    """The recipe JSON the model is asked to return."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="recipeName")
    description: str | None = None
    ingredients: list[ParsedIngredient] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)

    def to_recipe(self, image: bytes | None = None) -> Recipe:
        ingredients = [
            Ingredient(
                name=i.name,
                quantity=DEFAULT_QUANTITY if i.quantity is None else i.quantity,
            )
            for i in self.ingredients
        ]
        return Recipe(
            name=self.name,
            description=self.description,
            ingredients=ingredients,
            steps=self.steps,
            image=image,
        )


class CompletionMessage(BaseModel):
    role: str
    content: str


class CompletionChoice(BaseModel):
    message: CompletionMessage
    finish_reason: str | None = None


class ChatCompletion(BaseModel):
    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
    choices: list[CompletionChoice]
