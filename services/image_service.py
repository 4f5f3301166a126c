"""
Image upload handling.

Uploaded bytes are decoded with Pillow and re-encoded to JPEG before they
are written to the upload directory, so nothing but pixel data is stored.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional
from uuid import uuid4
import logging

from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.exceptions import ServiceValidationError

logger = logging.getLogger("mymixes.images")

# Allowed image formats (PIL format names)
ALLOWED_FORMATS = {"JPEG", "PNG", "GIF", "WEBP"}

# Decompression bomb guard
MAX_WIDTH = 4096
MAX_HEIGHT = 4096

# Stored images are scaled down to fit this box
MAX_STORED_SIDE = 2048


class ImageService:
    """Validate, normalize and store recipe images"""

    @staticmethod
    def store_image(data: bytes, upload_dir: Optional[Path] = None) -> str:
        """
        Persist an uploaded image and return its public URL.

        Raises:
            ServiceValidationError: empty, oversized, corrupt or
                unsupported images
        """
        if not data:
            raise ServiceValidationError("Image file is required")
        if len(data) > settings.max_upload_bytes:
            raise ServiceValidationError(
                "Image too large",
                details={"size": len(data), "max": settings.max_upload_bytes},
            )

        buffer = BytesIO(data)
        try:
            img = Image.open(buffer)
            img.verify()
            # verify() leaves the image unusable
            buffer.seek(0)
            img = Image.open(buffer)

            if img.format not in ALLOWED_FORMATS:
                raise ServiceValidationError(
                    f"Invalid image format: {img.format}",
                    details={"allowed": sorted(ALLOWED_FORMATS)},
                )

            width, height = img.size
            if width > MAX_WIDTH or height > MAX_HEIGHT:
                raise ServiceValidationError(
                    f"Image dimensions too large: {width}x{height}"
                )

            if width > MAX_STORED_SIDE or height > MAX_STORED_SIDE:
                img.thumbnail((MAX_STORED_SIDE, MAX_STORED_SIDE), Image.Resampling.LANCZOS)

            if img.mode != "RGB":
                img = ImageService._flatten(img)

            target_dir = Path(upload_dir or settings.upload_dir)
            target_dir.mkdir(parents=True, exist_ok=True)
            filename = f"{uuid4().hex}.jpg"
            img.save(target_dir / filename, "JPEG", quality=85, optimize=True)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
            logger.warning(f"image_rejected size={len(data)} error={e}")
            raise ServiceValidationError("Invalid or corrupted image")

        url = f"{settings.public_base_url}{settings.upload_url_prefix}/{filename}"
        logger.info(f"image_stored filename={filename} size={len(data)}")
        return url

    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        """Composite transparency onto white and drop to RGB"""
        if img.mode == "P":
            img = img.convert("RGBA")
        if img.mode in ("RGBA", "LA"):
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        return img.convert("RGB")
