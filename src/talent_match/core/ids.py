"""Identifier helpers.

Identifiers are 24 hex characters, the same shape as a document-store object
id, so ids minted elsewhere can be stored unchanged.
"""

import re
from typing import Any
from uuid import uuid4

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


def new_id() -> str:
    """Return a fresh 24-character hex identifier."""
    return uuid4().hex[:24]


def is_valid_id(value: Any) -> bool:
    """Check whether a value is a well-formed identifier."""
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.fullmatch(value))
