#!/usr/bin/env python3
"""
Print a bcrypt hash for the shared admin password
Usage: python scripts/generate_admin_password.py "your-password"
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from services.auth_service import AuthService

SALT_ROUNDS = 12


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv or not argv[0]:
        print('Usage: python scripts/generate_admin_password.py "your-password"')
        return 1

    password_hash = AuthService.hash_password(argv[0], rounds=SALT_ROUNDS)

    print("\n=== ADMIN PASSWORD SETUP ===")
    print("Add this to your .env file:")
    print(f'ADMIN_PASSWORD_HASH="{password_hash}"')
    print('JWT_SECRET="change-me-to-a-long-random-string"')
    print("=== END SETUP ===\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
