"""
Password hashing and verification.

Uses bcrypt with automatic salting and a fixed work factor (12 unless
BCRYPT_ROUNDS overrides it). The async variants push the hashing onto a
worker thread; one bcrypt round-trip at cost 12 takes ~250ms of CPU.
"""

import asyncio

import bcrypt

from blogql.config import settings

# bcrypt only reads the first 72 bytes of a secret; newer releases raise
# instead of truncating, so truncate explicitly on both paths
_BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_secret(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_secret(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        # Malformed hash: report a plain mismatch
        return False


async def hash_password_async(password: str) -> str:
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)
