# This file hashes and verifies account passwords with passlib's bcrypt scheme.
# The cost factor comes from configuration so tests can run with the bcrypt minimum.

from __future__ import annotations

from functools import lru_cache

from passlib.context import CryptContext


@lru_cache(maxsize=8)
def _crypt_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, *, rounds: int) -> str:
    return _crypt_context(rounds).hash(password)


def verify_password(password: str, hashed_password: str, *, rounds: int) -> bool:
    if not hashed_password:
        return False
    return _crypt_context(rounds).verify(password, hashed_password)
