"""
BlogQL — ORM Models
====================

Both models are imported here so their relationships resolve against each
other no matter which one a caller imports first (Alembic imports this package).
"""

from blogql.models.post import Post
from blogql.models.user import User

__all__ = ["Post", "User"]
