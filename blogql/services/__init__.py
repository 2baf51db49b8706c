# Services package init
"""
BlogQL — Services Layer
========================

What:  Business logic between the API layers (GraphQL, REST) and persistence.

Service Inventory:
    - UserService: registration and login
    - PostService: post CRUD with authentication and ownership checks
    - FileService: image validation, storage and cleanup

Services receive repositories and an AuthContext and return the pydantic
schemas from blogql.schemas; they know nothing about HTTP or GraphQL.
"""
