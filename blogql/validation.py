"""
BlogQL — Input Validation Gate
===============================

What:  Field-level validators for user and post input.
Why:   Resolvers must report every violation at once, so checks never
       short-circuit; each failing rule appends one {"message": ...} entry.
How:   Composite validators return the error list; ensure_valid() raises a
       single InvalidInputError (422) carrying the whole list.

Rules:
    email            → must look like an email address
    password         → non-empty, at least 5 characters
    title / content  → non-empty, at least 5 characters
"""

from typing import Dict, List, Optional

from email_validator import EmailNotValidError, validate_email

from blogql.exceptions import InvalidInputError

MIN_TEXT_LENGTH = 5

FieldErrors = List[Dict[str, str]]


def is_email(value: Optional[str]) -> bool:
    """Syntax-only check; no DNS lookup."""
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_empty(value: Optional[str]) -> bool:
    return value is None or value == ""


def has_min_length(value: Optional[str], min_length: int = MIN_TEXT_LENGTH) -> bool:
    return value is not None and len(value) >= min_length


def validate_user_input(email: Optional[str], password: Optional[str]) -> FieldErrors:
    errors: FieldErrors = []
    if not is_email(email):
        errors.append({"message": "E-Mail is invalid."})
    if is_empty(password) or not has_min_length(password):
        errors.append({"message": "Password too short!"})
    return errors


def validate_post_input(title: Optional[str], content: Optional[str]) -> FieldErrors:
    errors: FieldErrors = []
    if is_empty(title) or not has_min_length(title):
        errors.append({"message": "Title is invalid."})
    if is_empty(content) or not has_min_length(content):
        errors.append({"message": "Content is invalid."})
    return errors


def ensure_valid(errors: FieldErrors) -> None:
    """Raise InvalidInputError carrying every collected violation."""
    if errors:
        raise InvalidInputError(errors)
