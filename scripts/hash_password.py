#!/usr/bin/env python3
"""
Generate a bcrypt password hash for the admin password.
Usage: python scripts/hash_password.py <password>
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kaghati.auth import hash_password


def main():
    if len(sys.argv) != 2:
        print("Usage: python scripts/hash_password.py <password>")
        sys.exit(1)

    hashed = hash_password(sys.argv[1])

    print("\nAdd this to your .env file:\n")
    print(f"ADMIN_PASSWORD_HASH={hashed}")
    print()


if __name__ == "__main__":
    main()
