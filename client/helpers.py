"""Small helpers shared by the client views"""

import re
from typing import Any, Dict, Iterable, List, Mapping

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(title: str) -> str:
    """URL key for a recipe title: ``"Whiskey Sour!"`` -> ``"whiskey-sour"``"""
    return _NON_ALNUM.sub("-", title.lower()).strip("-")


def format_ingredients(ingredients: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Turn detail ingredient rows into ``{name, amount}`` form rows"""
    rows = []
    for ing in ingredients:
        ing_type = ing.get("type") or {}
        rows.append({"name": ing_type.get("name") or "", "amount": ing.get("amount", "")})
    return rows
