# GraphQL package init
"""
BlogQL — GraphQL API
=====================

    - types.py:   strawberry object and input types (the public schema shapes)
    - context.py: per-request context (session, auth context, services)
    - errors.py:  `{message, status, data}` error formatting
    - schema.py:  Query / Mutation resolvers, schema and FastAPI router
"""
