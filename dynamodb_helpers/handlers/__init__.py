"""
Helper operations, split into write commands and read queries.
"""

from .commands import delete_one, insert_or_update
from .queries import (
    find_all,
    find_many,
    find_many_by_field,
    find_many_plain,
    find_one,
    find_operated,
    find_within,
)

__all__ = [
    # Commands
    "insert_or_update",
    "delete_one",
    # Queries
    "find_one",
    "find_many",
    "find_many_by_field",
    "find_many_plain",
    "find_operated",
    "find_within",
    "find_all",
]
