"""
Password hashing helpers

Passwords are stored as a salted PBKDF2-SHA256 digest in the form
``<salt hex>$<hash hex>``; the plain text is never persisted.
"""

import hashlib
import os

PBKDF2_ITERATIONS = 100_000


def hash_password(password: str) -> str:
    """Hash a password with a random 16 byte salt"""
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"

