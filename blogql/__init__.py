"""
BlogQL — Application Package
=============================

Blogging backend: users, bearer-token authentication, and post CRUD over a
GraphQL API, with post images uploaded and served over REST.

Layers:
    ┌─────────────────────────────────────┐
    │  GraphQL schema / REST routes       │  ← transport concerns only
    ├─────────────────────────────────────┤
    │  Services                           │  ← auth checks, validation, rules
    ├─────────────────────────────────────┤
    │  Repositories                       │  ← persistence contract
    ├─────────────────────────────────────┤
    │  Models / Database                  │  ← async SQLAlchemy
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
