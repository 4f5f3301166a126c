"""
Hash-fragment routing.

The app has no URL router; the only addressable view is the QR review
page, reached through ``#/review/<recipe id>?token=<qr token>``.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, quote
import re

_REVIEW_HASH = re.compile(r"^#?/review/(\d+)/?(?:\?(.*))?$")


@dataclass(frozen=True)
class ReviewRoute:
    recipe_id: int
    token: Optional[str] = None


def parse_hash(fragment: Optional[str]) -> Optional[ReviewRoute]:
    """Return the review route encoded in ``fragment``, or None"""
    if not fragment:
        return None
    match = _REVIEW_HASH.match(fragment.strip())
    if not match:
        return None

    recipe_id = int(match.group(1))
    if recipe_id < 1:
        return None
    params = parse_qs(match.group(2) or "")
    tokens = params.get("token")
    return ReviewRoute(recipe_id=recipe_id, token=tokens[0] if tokens else None)


def build_review_hash(recipe_id: int, token: str) -> str:
    return f"#/review/{recipe_id}?token={quote(token, safe='')}"
