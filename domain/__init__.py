"""
Domain layer - ORM models, API schemas, mappers between them, and enums.
"""

from domain import enums, models, schemas, mappers

__all__ = ["enums", "models", "schemas", "mappers"]
