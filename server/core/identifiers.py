# server/core/identifiers.py

import re
from core.errors import InvalidIdentifier


IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_valid_identifier(name) -> bool:
    return isinstance(name, str) and IDENTIFIER_PATTERN.fullmatch(name) is not None


def validate_identifier(name: str) -> str:
    """
    Returns `name` unchanged if it may be interpolated into SQL as a table or
    column name, otherwise raises InvalidIdentifier.
    """
    if not is_valid_identifier(name):
        raise InvalidIdentifier()
    return name
