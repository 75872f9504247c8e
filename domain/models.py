from datetime import datetime, timezone
from typing import Any
import uuid

import markdown2  # pyright: ignore[reportMissingTypeStubs]


DEFAULT_QUANTITY = "1 serving"


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class Ingredient:
    def __init__(
        self,
        *,
        name: str,
        quantity: str = "",
        id: str | None = None,
    ) -> None:
        self.id = new_id() if id is None else id
        self.name = name
        self.quantity = quantity

    def __repr__(self) -> str:
        return f"<Ingredient(name={self.name}, quantity={self.quantity})>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ingredient):
            return NotImplemented
        return (self.id, self.name, self.quantity) == (
            other.id,
            other.name,
            other.quantity,
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ingredient":
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            quantity=data.get("quantity") or "",
        )


class Recipe:
    def __init__(
        self,
        *,
        name: str,
        description: str | None = None,
        ingredients: list[Ingredient] | None = None,
        steps: list[str] | None = None,
        image: bytes | None = None,
        id: str | None = None,
        created_at: datetime | None = None,
    ) -> None:
        self.id = new_id() if id is None else id
        self.name = name
        self.description = blank_to_none(description)
        self.ingredients = [] if ingredients is None else list(ingredients)
        self.steps = [] if steps is None else list(steps)
        self.image = image
        self.created_at = utcnow() if created_at is None else created_at

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.name})>"

    def matches(self, text: str) -> bool:
        """Case-insensitive search over name, description, ingredients and steps."""
        needle = text.lower()
        haystack = [self.name, self.description or ""]
        haystack.extend(i.name for i in self.ingredients)
        haystack.extend(self.steps)
        return any(needle in h.lower() for h in haystack)

    @property
    def markdown(self) -> str:
        lines = ["#### Description", ""]
        lines.append(self.description or "No description provided.")
        lines.extend(["", "#### Ingredients", ""])
        for ingredient in self.ingredients:
            line = f"- **{ingredient.name}**"
            if ingredient.quantity:
                line += f" ({ingredient.quantity})"
            lines.append(line)
        lines.extend(["", "#### Steps", ""])
        lines.extend(f"{n}. {step}" for n, step in enumerate(self.steps, start=1))
        return "\n".join(lines) + "\n"

    @property
    def html(self) -> str:
        return markdown2.markdown(  # pyright: ignore[reportUnknownVariableType, reportUnknownMemberType]
            self.markdown, safe_mode="escape"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "steps": list(self.steps),
            "created_at": self.created_at.isoformat(timespec="microseconds"),
        }


class GroceryItem:
    def __init__(
        self,
        *,
        name: str,
        quantity: str = "",
        is_checked: bool = False,
        id: str | None = None,
        created_at: datetime | None = None,
    ) -> None:
        self.id = new_id() if id is None else id
        self.name = name
        self.quantity = quantity
        self.is_checked = is_checked
        self.created_at = utcnow() if created_at is None else created_at

    def __repr__(self) -> str:
        return f"<GroceryItem(name={self.name}, checked={self.is_checked})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "is_checked": self.is_checked,
            "created_at": self.created_at.isoformat(timespec="microseconds"),
        }
