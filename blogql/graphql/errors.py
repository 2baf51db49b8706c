"""
GraphQL error formatting.

Every entry in a response's `errors` array is shaped by `format_error`:

    application error (BlogError)     → {"message", "status", "data"?}
    parse / validation / coercion     → standard GraphQL shape, unchanged
    anything else raised in a resolver → {"message": "An unexpected error occurred.",
                                          "status": 500}

Unexpected exceptions never leak their text to the client; they are logged
with traceback by BlogSchema.process_errors.
"""

from typing import Any, Dict

from graphql import GraphQLError

from blogql.exceptions import BlogError

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


def format_error(error: GraphQLError) -> Dict[str, Any]:
    original = error.original_error

    if isinstance(original, BlogError):
        body: Dict[str, Any] = {"message": original.message, "status": original.code}
        if original.data is not None:
            body["data"] = original.data
        return body

    # Errors raised before resolution (syntax, unknown fields, bad variables)
    # have no path; they are the client's to fix and safe to show as-is
    if original is None or error.path is None:
        return error.formatted

    return {"message": UNEXPECTED_ERROR_MESSAGE, "status": 500}


def is_unexpected(error: GraphQLError) -> bool:
    original = error.original_error
    return (
        original is not None
        and error.path is not None
        and not isinstance(original, BlogError)
    )
