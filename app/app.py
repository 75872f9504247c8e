import contextlib
import functools
import io
import logging
from typing import Any, Awaitable, Callable

from databases import Database
from jinja2 import Environment, FileSystemLoader, select_autoescape
from PIL import Image, UnidentifiedImageError
from starlette.applications import Starlette
from starlette.background import BackgroundTask
from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse, Response
from starlette.routing import Route

from app import config
from app.html.recipe_detail import RecipeDetail
from domain.errors import GroceryItemNotFound, RecipeNotFound
from domain.llm_service import LLMService
from domain.models import Ingredient, Recipe
from domain.ocr import TesseractRecognizer, TextExtractor
from domain.repository import GroceryRepository, RecipesRepository, create_db
from domain.services import (
    Extractor,
    IngestionState,
    RecipeParser,
    add_grocery_item,
    create_recipe,
    delete_grocery_item,
    delete_recipe,
    ingest_recipe,
    search_recipes,
    toggle_grocery_item,
    update_recipe,
)


logger = logging.getLogger(__name__)


# Blank rows offered on the recipe form for new ingredients and steps.
BLANK_INGREDIENT_ROWS = 3
BLANK_STEP_ROWS = 2


def aHTMLResponse(route: Callable[..., Awaitable[str | tuple[str, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> HTMLResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            html, code = resp, 200
        else:
            html, code = resp
        return HTMLResponse(html, status_code=code)

    return wrapper


def templates(request: Request) -> Environment:
    return request.app.state.templates


def recipes_repo(request: Request) -> RecipesRepository:
    return request.app.state.recipes


def grocery_repo(request: Request) -> GroceryRepository:
    return request.app.state.groceries


async def read_upload(form: FormData, field: str) -> bytes | None:
    upload = form.get(field)
    if isinstance(upload, UploadFile) and upload.size:
        return await upload.read()
    return None


def image_media_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format or "", "application/octet-stream")
    except UnidentifiedImageError:
        return "application/octet-stream"


def ingredients_from_form(form: FormData) -> list[Ingredient]:
    ids = form.getlist("ingredient_id")
    names = form.getlist("ingredient_name")
    quantities = form.getlist("ingredient_quantity")
    ingredients: list[Ingredient] = []
    for n, name in enumerate(names):
        quantity = quantities[n] if n < len(quantities) else ""
        id = ids[n] if n < len(ids) else ""
        ingredients.append(
            Ingredient(id=str(id) or None, name=str(name), quantity=str(quantity))
        )
    return ingredients


def render_form(
    request: Request,
    *,
    recipe: Recipe | None,
    values: dict[str, Any] | None = None,
    error: str | None = None,
) -> str:
    values = {} if values is None else values
    ingredients = values.get("ingredients", recipe.ingredients if recipe else [])
    steps = values.get("steps", recipe.steps if recipe else [])
    return (
        templates(request)
        .get_template("recipe-form.html")
        .render(
            recipe=recipe,
            name=values.get("name", recipe.name if recipe else ""),
            description=values.get(
                "description", (recipe.description or "") if recipe else ""
            ),
            ingredients=list(ingredients)
            + [Ingredient(id="", name="")] * BLANK_INGREDIENT_ROWS,
            steps=list(steps) + [""] * BLANK_STEP_ROWS,
            error=error,
        )
    )


@aHTMLResponse
async def homepage(request: Request) -> str:
    search = request.query_params.get("q", "")
    recipes = await search_recipes(search, repository=recipes_repo(request))
    return (
        templates(request)
        .get_template("index.html")
        .render(recipes=recipes, search=search, scan=request.app.state.scan)
    )


@aHTMLResponse
async def recipe_detail(request: Request) -> str:
    recipe = await recipes_repo(request).get(request.path_params["id"])
    return RecipeDetail(recipe, environment=templates(request)).render()


async def recipe_image(request: Request) -> Response:
    recipe = await recipes_repo(request).get(request.path_params["id"])
    if recipe.image is None:
        return Response("No image.", status_code=404)
    return Response(recipe.image, media_type=image_media_type(recipe.image))


async def new_recipe(request: Request) -> HTMLResponse | RedirectResponse:
    match request.method.lower():
        case "get":
            return HTMLResponse(render_form(request, recipe=None))
        case "post":
            async with request.form() as form:
                ingredients = ingredients_from_form(form)
                steps = [str(s) for s in form.getlist("step")]
                name = str(form.get("name", ""))
                description = str(form.get("description", ""))
                image = await read_upload(form, "image")
            try:
                recipe = await create_recipe(
                    name=name,
                    description=description,
                    ingredients=ingredients,
                    steps=steps,
                    image=image,
                    repository=recipes_repo(request),
                )
            except ValueError as e:
                values = {
                    "name": name,
                    "description": description,
                    "ingredients": ingredients,
                    "steps": steps,
                }
                return HTMLResponse(
                    render_form(request, recipe=None, values=values, error=str(e)),
                    status_code=400,
                )
            return RedirectResponse(f"/recipes/{recipe.id}", status_code=303)
        case _:
            raise ValueError("Unsupported method.")


async def edit_recipe(request: Request) -> HTMLResponse | RedirectResponse:
    recipe = await recipes_repo(request).get(request.path_params["id"])
    match request.method.lower():
        case "get":
            return HTMLResponse(render_form(request, recipe=recipe))
        case "post":
            async with request.form() as form:
                ingredients = ingredients_from_form(form)
                steps = [str(s) for s in form.getlist("step")]
                name = str(form.get("name", ""))
                description = str(form.get("description", ""))
                image = await read_upload(form, "image")
                if image is None and not form.get("remove_image"):
                    image = recipe.image
            try:
                await update_recipe(
                    recipe.id,
                    name=name,
                    description=description,
                    ingredients=ingredients,
                    steps=steps,
                    image=image,
                    repository=recipes_repo(request),
                )
            except ValueError as e:
                values = {
                    "name": name,
                    "description": description,
                    "ingredients": ingredients,
                    "steps": steps,
                }
                return HTMLResponse(
                    render_form(request, recipe=recipe, values=values, error=str(e)),
                    status_code=400,
                )
            return RedirectResponse(f"/recipes/{recipe.id}", status_code=303)
        case _:
            raise ValueError("Unsupported method.")


async def remove_recipe(request: Request) -> RedirectResponse:
    await delete_recipe(request.path_params["id"], repository=recipes_repo(request))
    return RedirectResponse("/", status_code=303)


async def scan(request: Request) -> RedirectResponse:
    async with request.form() as form:
        # Read now, the upload is gone once the form closes.
        image = await read_upload(form, "image")
    task = BackgroundTask(
        ingest_recipe,
        image,
        extractor=request.app.state.extractor,
        llm=request.app.state.llm,
        repository=recipes_repo(request),
        state=request.app.state.scan,
    )
    return RedirectResponse("/", status_code=303, background=task)


async def dismiss_scan_error(request: Request) -> RedirectResponse:
    request.app.state.scan.dismiss_error()
    return RedirectResponse("/", status_code=303)


async def groceries(request: Request) -> HTMLResponse | RedirectResponse:
    repository = grocery_repo(request)
    error = None
    code = 200
    if request.method.lower() == "post":
        async with request.form() as form:
            name = str(form.get("name", ""))
            quantity = str(form.get("quantity", ""))
        try:
            await add_grocery_item(name, quantity, repository=repository)
        except ValueError as e:
            error, code = str(e), 400
        else:
            return RedirectResponse("/groceries", status_code=303)
    items = await repository.list()
    html = (
        templates(request)
        .get_template("groceries.html")
        .render(items=items, error=error)
    )
    return HTMLResponse(html, status_code=code)


async def toggle_grocery(request: Request) -> RedirectResponse:
    await toggle_grocery_item(request.path_params["id"], repository=grocery_repo(request))
    return RedirectResponse("/groceries", status_code=303)


async def remove_grocery(request: Request) -> RedirectResponse:
    await delete_grocery_item(request.path_params["id"], repository=grocery_repo(request))
    return RedirectResponse("/groceries", status_code=303)


async def not_found(request: Request, exc: Exception) -> HTMLResponse:
    return HTMLResponse(f"Not found: {exc}", status_code=404)


def create_app(
    conf: config.Config | None = None,
    *,
    llm: RecipeParser | None = None,
    extractor: Extractor | None = None,
) -> Starlette:
    conf = config.Config() if conf is None else conf
    db = Database(conf.db_url)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        await db.connect()
        await create_db(db)
        yield
        if isinstance(app.state.llm, LLMService):
            await app.state.llm.aclose()
        await db.disconnect()

    app = Starlette(
        debug=True if conf.env == config.Env.local else False,
        routes=[
            Route("/", homepage),
            Route("/recipes/new", new_recipe, methods=["GET", "POST"]),
            Route("/recipes/{id}", recipe_detail),
            Route("/recipes/{id}/edit", edit_recipe, methods=["GET", "POST"]),
            Route("/recipes/{id}/delete", remove_recipe, methods=["POST"]),
            Route("/recipes/{id}/image", recipe_image),
            Route("/scan", scan, methods=["POST"]),
            Route("/scan/dismiss", dismiss_scan_error, methods=["POST"]),
            Route("/groceries", groceries, methods=["GET", "POST"]),
            Route("/groceries/{id}/toggle", toggle_grocery, methods=["POST"]),
            Route("/groceries/{id}/delete", remove_grocery, methods=["POST"]),
        ],
        exception_handlers={
            RecipeNotFound: not_found,
            GroceryItemNotFound: not_found,
        },
        lifespan=lifespan,
    )

    app.state.templates = Environment(
        loader=FileSystemLoader(conf.html_dir),
        autoescape=select_autoescape(),
    )
    app.state.recipes = RecipesRepository(db)
    app.state.groceries = GroceryRepository(db)
    app.state.llm = (
        LLMService(
            conf.groq_api_key,
            model=conf.groq_model,
            base_url=conf.groq_base_url,
            timeout=conf.request_timeout,
        )
        if llm is None
        else llm
    )
    app.state.extractor = (
        TextExtractor(TesseractRecognizer(lang=conf.ocr_lang))
        if extractor is None
        else extractor
    )
    app.state.scan = IngestionState()
    return app


app = create_app()
