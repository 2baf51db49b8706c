"""
Per-request authentication context.

Two states only: unauthenticated (the default) and authenticated with a
subject. The auth middleware attaches one of these to every request; it is
up to each resolver to decide whether an unauthenticated context is fatal.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthContext:
    is_auth: bool = False
    user_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def for_subject(cls, user_id: str, email: str) -> "AuthContext":
        return cls(is_auth=True, user_id=user_id, email=email)
