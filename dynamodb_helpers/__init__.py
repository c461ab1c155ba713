"""
DynamoDB Helpers

Helper functions over boto3's DynamoDB client for the common cases:
upserts, deletes, partition-key lookups, filtered scans, range scans and
paginated full-table reads, without hand-building request parameters.
"""

from .config import DynamoDBConfig
from .exceptions import (
    ConflictError,
    ConnectionError,
    DynamoDBHelpersError,
    NotFoundError,
    RetryableError,
    ValidationError,
)
from .models import (
    ComparisonOperator,
    MarshallOptions,
    TranslateConfig,
    UnmarshallOptions,
)
from .core import (
    DocumentClient,
    configure,
    get_client,
    get_config,
    get_document_client,
    reset_client,
    set_access_key,
    set_config,
    set_region,
)
from .handlers import (
    delete_one,
    find_all,
    find_many,
    find_many_by_field,
    find_many_plain,
    find_one,
    find_operated,
    find_within,
    insert_or_update,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "DynamoDBConfig",
    "configure",
    "get_config",
    "set_region",
    "set_access_key",
    "set_config",
    "reset_client",

    # Clients
    "get_client",
    "get_document_client",
    "DocumentClient",

    # Marshalling policy
    "TranslateConfig",
    "MarshallOptions",
    "UnmarshallOptions",
    "ComparisonOperator",

    # Exceptions
    "DynamoDBHelpersError",
    "ConflictError",
    "ConnectionError",
    "NotFoundError",
    "RetryableError",
    "ValidationError",

    # Operations
    "insert_or_update",
    "delete_one",
    "find_one",
    "find_many",
    "find_many_by_field",
    "find_many_plain",
    "find_operated",
    "find_within",
    "find_all",
]
