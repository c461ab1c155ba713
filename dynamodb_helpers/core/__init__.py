"""
Core infrastructure components for DynamoDB operations.

- Client factory: global configuration and the lazily built boto3 client
- DocumentClient: marshalling policy and error mapping over that client
"""

from .client import (
    configure,
    get_client,
    get_config,
    reset_client,
    set_access_key,
    set_config,
    set_region,
)
from .document import DocumentClient, get_document_client, map_dynamodb_error

__all__ = [
    "DocumentClient",
    "configure",
    "get_client",
    "get_config",
    "get_document_client",
    "map_dynamodb_error",
    "reset_client",
    "set_access_key",
    "set_config",
    "set_region",
]
