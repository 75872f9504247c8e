"""Describes the Whisk domain. Centres around scanning a recipe page.

The scan goes image -> recognized lines -> chat completion -> stored recipe.

- Recognition is handed to Tesseract and is allowed to come back empty.
- Structuring the text is handed to a hosted language model which is told,
  not forced, to answer with recipe JSON.
- Storage is a small SQL database holding recipes and the grocery list.

Each of those is passed in, so they can all be faked.
"""
