from .base import DynamoDBHelpersError
from .domain_exceptions import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    RetryableError,
    ValidationError,
)

__all__ = [
    "DynamoDBHelpersError",
    "ConflictError",
    "ConnectionError",
    "NotFoundError",
    "RetryableError",
    "ValidationError",
]
