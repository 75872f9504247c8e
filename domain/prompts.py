PARSE_RECIPE_PROMPT = """
You are an expert recipe parser. Given raw text extracted from a recipe image,
your task is to identify the recipe name, an optional description,
a list of ingredients (each with a name and quantity), and a list of preparation steps.
Return the information STRICTLY in the following JSON format:
{
  "recipeName": "Name of the Recipe",
  "description": "Optional short description of the recipe.",
  "ingredients": [
    {"name": "Ingredient Name 1", "quantity": "Quantity 1"},
    {"name": "Ingredient Name 2", "quantity": "Quantity 2"}
  ],
  "steps": [
    "Step 1 description.",
    "Step 2 description."
  ]
}
If a description is not clearly identifiable, you can omit the "description" field or set it to null.
Ensure all text values are properly escaped JSON strings.
You can add more ingredients or steps as needed.
Give nothing except the raw json.
Don't acknowledge the request or provide any additional text AT ALL.
Adjust as needed for accuracy and ensure that the text provided makes sense.
""".strip()


OCR_TEXT_PREFIX = "Here is the OCR text from the recipe:\n\n"


class ParseRecipePrompt:
    def __init__(
        self,
        content: str | None = None,
    ) -> None:
        self.content = PARSE_RECIPE_PROMPT if content is None else content

    def __str__(self) -> str:
        return self.content

    @staticmethod
    def user_message(text: str) -> str:
        return f"{OCR_TEXT_PREFIX}{text}"
