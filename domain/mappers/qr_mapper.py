"""
QR token mappers.
"""

from domain.models import QrToken
from domain.schemas.qr_schemas import QrRecipeInfo, QrTokenResponse


class QrMapper:
    """Mapper for QR token transformations."""

    @staticmethod
    def to_response(qr_token: QrToken, qr_url: str) -> QrTokenResponse:
        recipe = qr_token.recipe
        return QrTokenResponse(
            id=qr_token.id,
            token=qr_token.token,
            qr_url=qr_url,
            expires_at=qr_token.expires_at,
            recipe_id=qr_token.recipe_id,
            recipe=QrRecipeInfo(id=recipe.id, title=recipe.title, slug=recipe.slug),
            used=bool(qr_token.used),
            used_at=qr_token.used_at,
            created_at=qr_token.created_at,
        )
