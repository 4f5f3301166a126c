"""API routes package"""

from . import health, recipes, reviews, auth, qr, images

__all__ = ["health", "recipes", "reviews", "auth", "qr", "images"]
