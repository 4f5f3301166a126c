"""Recipe image upload route"""

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool
import logging

from api.dependencies import require_admin
from domain.schemas.auth_schemas import TokenClaims
from services.image_service import ImageService

router = APIRouter(prefix="/images", tags=["Images"])
logger = logging.getLogger("mymixes.api.images")


@router.post("/upload")
async def upload_image(
    image: UploadFile = File(...),
    _admin: TokenClaims = Depends(require_admin),
):
    """Store an image and return the URL to put in a recipe's imageUrl"""
    data = await image.read()
    image_url = await run_in_threadpool(ImageService.store_image, data)
    return {"success": True, "imageUrl": image_url}
