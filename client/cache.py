"""In-session cache of full recipe payloads"""

from typing import Any, Dict, Optional


class RecipeCache:
    """Map of recipe id to the last fetched detail payload"""

    def __init__(self):
        self._items: Dict[int, Dict[str, Any]] = {}

    def get(self, recipe_id: int) -> Optional[Dict[str, Any]]:
        return self._items.get(recipe_id)

    def put(self, recipe: Dict[str, Any]) -> None:
        self._items[recipe["id"]] = recipe

    def invalidate(self, recipe_id: int) -> None:
        self._items.pop(recipe_id, None)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, recipe_id: int) -> bool:
        return recipe_id in self._items

    def __len__(self) -> int:
        return len(self._items)
