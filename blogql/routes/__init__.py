# Routes package init
"""
BlogQL — REST Routes Package
=============================

What:  The HTTP endpoints that sit beside the GraphQL API.

Route Inventory:
    - images.py:  PUT /post-image            (upload a post image)
                  GET /images/{path}         (serve a stored image)
    - health.py:  GET /health                (service health check)

GraphQL itself is mounted at /graphql by blogql.main (see blogql.graphql).

Routes stay THIN: extract request data, call a service, shape the response.
"""
