from jinja2 import Environment
from markupsafe import Markup

from domain.models import Recipe


class RecipeDetail:
    def __init__(
        self,
        recipe: Recipe,
        *,
        environment: Environment,
        template_name: str = "recipe-detail.html",
    ) -> None:
        self.recipe = recipe
        self.env = environment
        self.name = template_name

    @property
    def id(self) -> str:
        return self.recipe.id

    @property
    def title(self) -> str:
        return self.recipe.name

    @property
    def has_image(self) -> bool:
        return self.recipe.image is not None

    @property
    def content(self) -> Markup:
        return Markup(self.recipe.html)

    def render(self) -> str:
        return self.env.get_template(self.name).render(recipe=self)
