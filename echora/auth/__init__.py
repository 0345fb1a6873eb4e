"""
Auth module - accounts, login sessions and the session gate.

The FastAPI dependencies of the session gate live in echora.auth.gate
and are imported from there.
"""
from echora.auth.provider import AuthProvider, hash_password, verify_password

__all__ = [
    "AuthProvider",
    "hash_password",
    "verify_password",
]
