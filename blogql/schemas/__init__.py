# Schemas package init
"""Pydantic shapes returned by the services and exposed by the API layers."""
