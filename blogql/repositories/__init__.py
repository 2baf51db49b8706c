# Repositories package init
"""
BlogQL — Persistence Layer
===========================

    - base.py: abstract UserRepository / PostRepository contracts
    - sql.py:  async SQLAlchemy implementations bound to a request session
"""

from blogql.repositories.base import PostRepository, UserRepository
from blogql.repositories.sql import SQLPostRepository, SQLUserRepository

__all__ = [
    "PostRepository",
    "SQLPostRepository",
    "SQLUserRepository",
    "UserRepository",
]
