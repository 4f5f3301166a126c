"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports and points
the settings at throwaway resources before the application is imported.
"""

import os
import sys
import tempfile
from pathlib import Path

import bcrypt

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

ADMIN_PASSWORD = "shaken-not-stirred"
JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"

# Settings are read once at import of app.config
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = JWT_SECRET
os.environ["ADMIN_PASSWORD_HASH"] = bcrypt.hashpw(
    ADMIN_PASSWORD.encode("utf-8"), bcrypt.gensalt(4)
).decode("utf-8")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="mymixes-uploads-")
os.environ["FRONTEND_URL"] = "http://localhost:5173"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
