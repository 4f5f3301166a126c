"""
Domain enums for MyMixes application.
"""

import enum


class Role(str, enum.Enum):
    """Roles carried in bearer token claims"""

    ADMIN = "admin"
