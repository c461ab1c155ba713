"""
DynamoDB Document Client

Wraps the low-level boto3 client with a marshalling policy so callers work
with plain Python values instead of typed attribute values.

The document client does not hold a boto3 client itself. It asks its client
provider for one on every request, which is how configuration changes made
through the client factory reach requests issued afterwards.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    RetryableError,
    ValidationError,
)
from ..models import TranslateConfig
from ..utils import is_attribute_value, marshall, unmarshall
from .client import get_client

logger = logging.getLogger(__name__)

# Operation name -> boto3 client method
OPERATIONS = {
    'UpdateItem': 'update_item',
    'DeleteItem': 'delete_item',
    'Query': 'query',
    'Scan': 'scan',
}

_THROTTLING_CODES = {
    'ProvisionedThroughputExceededException', 'RequestLimitExceeded',
    'ThrottlingException', 'TooManyRequestsException',
}

_UNAVAILABLE_CODES = {
    'InternalServerError', 'ServiceUnavailable', 'ServiceUnavailableException',
    'InternalFailure', 'RequestTimeoutException',
}

_AUTH_CODES = {
    'UnrecognizedClientException', 'AccessDeniedException', 'InvalidSignatureException',
    'IncompleteSignatureException', 'ExpiredTokenException', 'MissingAuthenticationTokenException',
}


def map_dynamodb_error(
    error: ClientError,
    operation: str,
    table_name: Optional[str],
    resource_id: Optional[str] = None
) -> Exception:
    """Map a DynamoDB ClientError to the package's exception hierarchy.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "Scan", "UpdateItem")
        table_name: The DynamoDB table name
        resource_id: Optional key value for context

    Returns:
        Exception to raise; the ClientError is kept as ``original_error``
    """
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))

    context = f"{operation} on {table_name}"
    if resource_id:
        context += f" (resource: {resource_id})"

    full_message = f"{context}: {error_message}"

    if error_code == 'ResourceNotFoundException':
        return NotFoundError(f"Table or index not found - {full_message}", 'table', table_name, original_error=error)

    elif error_code == 'ValidationException':
        return ValidationError(f"Validation failed - {full_message}", original_error=error)

    elif error_code == 'ItemCollectionSizeLimitExceededException':
        return ValidationError(f"Item collection size limit exceeded - {full_message}", original_error=error)

    elif error_code in ('ConditionalCheckFailedException', 'TransactionConflictException'):
        return ConflictError(f"Conflicting write - {full_message}", resource_id, original_error=error)

    elif error_code in _THROTTLING_CODES:
        return RetryableError(f"Throttling - {full_message}", original_error=error)

    elif error_code in _UNAVAILABLE_CODES:
        return RetryableError(f"Service unavailable - {full_message}", original_error=error)

    elif error_code in _AUTH_CODES:
        return ConnectionError(f"Authentication/authorization failed - {full_message}", original_error=error)

    logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to ConnectionError")
    return ConnectionError(f"DynamoDB operation failed - {full_message}", original_error=error)


class DocumentClient:
    """
    Document-level access to DynamoDB.

    Converts request values with the configured ``TranslateConfig`` and
    decodes returned items back into native values. Every public method sends
    exactly one request.
    """

    def __init__(
        self,
        client_provider: Optional[Callable[[], Any]] = None,
        translate_config: Optional[TranslateConfig] = None
    ):
        """Initialize document client.

        Args:
            client_provider: Callable returning a low-level boto3 DynamoDB client,
                defaults to the global client factory
            translate_config: Marshalling policy, defaults to ``TranslateConfig()``
        """
        self._client_provider = client_provider or get_client
        self.translate_config = translate_config or TranslateConfig()

    @property
    def client(self):
        """Low-level client for the current configuration."""
        return self._client_provider()

    def marshall(self, values: Mapping) -> Dict[str, Dict[str, Any]]:
        return marshall(values, self.translate_config.marshall_options)

    def unmarshall(self, item: Mapping) -> Dict[str, Any]:
        return unmarshall(item, self.translate_config.unmarshall_options)

    def unmarshall_items(self, items: Optional[List[Mapping]]) -> List[Dict[str, Any]]:
        if not items:
            return []
        return [self.unmarshall(item) for item in items]

    def send(self, operation: str, resource_id: Optional[str] = None, **params) -> Dict[str, Any]:
        """Send one raw request to DynamoDB.

        Args:
            operation: One of UpdateItem, DeleteItem, Query, Scan
            resource_id: Optional key value included in error context
            **params: Low-level boto3 parameters, already marshalled

        Returns:
            Raw DynamoDB response

        Raises:
            DynamoDBHelpersError subclass mapped from the botocore error
        """
        if operation not in OPERATIONS:
            raise ValueError(f"Unsupported operation: {operation}")

        table_name = params.get('TableName')
        client = self.client
        logger.debug(f"{operation} on {table_name}: {params}")
        try:
            return getattr(client, OPERATIONS[operation])(**params)
        except ClientError as e:
            raise map_dynamodb_error(e, operation, table_name, resource_id) from e
        except BotoCoreError as e:
            logger.error(f"{operation} on {table_name} failed: {e}")
            raise ConnectionError(f"{operation} on {table_name} failed: {e}", e, context={'table_name': table_name}) from e

    def update_item(
        self,
        table_name: str,
        key: Mapping,
        update_expression: str,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Mapping] = None,
        return_values: str = 'ALL_NEW'
    ) -> Optional[Dict[str, Any]]:
        """Update (or create) the item at ``key``.

        Returns:
            Decoded attributes selected by ``return_values``, or None
        """
        params = {
            'TableName': table_name,
            'Key': self.marshall(key),
            'UpdateExpression': update_expression,
            'ReturnValues': return_values,
        }
        if expression_attribute_names:
            params['ExpressionAttributeNames'] = expression_attribute_names
        if expression_attribute_values:
            params['ExpressionAttributeValues'] = self.marshall(expression_attribute_values)

        response = self.send('UpdateItem', resource_id=_key_repr(key), **params)
        logger.info(f"Updated item in {table_name}: {dict(key)}")

        attributes = response.get('Attributes')
        return self.unmarshall(attributes) if attributes else None

    def delete_item(self, table_name: str, key: Mapping) -> None:
        self.send('DeleteItem', resource_id=_key_repr(key), TableName=table_name, Key=self.marshall(key))
        logger.info(f"Deleted item from {table_name}: {dict(key)}")

    def query(
        self,
        table_name: str,
        key_condition_expression: str,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Mapping] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[dict] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[dict]]:
        """Query one page.

        Returns:
            Tuple of (decoded items, LastEvaluatedKey or None)
        """
        params = {
            'TableName': table_name,
            'KeyConditionExpression': key_condition_expression,
        }
        params.update(self._expression_params(expression_attribute_names, expression_attribute_values))
        if limit:
            params['Limit'] = limit
        if exclusive_start_key:
            params['ExclusiveStartKey'] = exclusive_start_key

        response = self.send('Query', **params)
        return self.unmarshall_items(response.get('Items')), response.get('LastEvaluatedKey')

    def scan(
        self,
        table_name: str,
        filter_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Mapping] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[dict] = None,
        passthrough_typed: bool = False
    ) -> Tuple[List[Dict[str, Any]], Optional[dict]]:
        """Scan one page.

        With ``passthrough_typed``, ``expression_attribute_values`` entries
        already in typed attribute form (e.g. ``{'S': 'abc'}``) are sent
        unchanged. Otherwise every value is marshalled.

        Returns:
            Tuple of (decoded items, LastEvaluatedKey or None)
        """
        params = {'TableName': table_name}
        if filter_expression:
            params['FilterExpression'] = filter_expression
        params.update(self._expression_params(
            expression_attribute_names, expression_attribute_values, passthrough_typed
        ))
        if limit:
            params['Limit'] = limit
        if exclusive_start_key:
            params['ExclusiveStartKey'] = exclusive_start_key

        response = self.send('Scan', **params)
        return self.unmarshall_items(response.get('Items')), response.get('LastEvaluatedKey')

    def _expression_params(
        self,
        names: Optional[Dict[str, str]],
        values: Optional[Mapping],
        passthrough_typed: bool = False
    ) -> Dict[str, Any]:
        params = {}
        if names:
            params['ExpressionAttributeNames'] = dict(names)
        if values:
            typed = {k: v for k, v in values.items() if passthrough_typed and is_attribute_value(v)}
            native = {k: v for k, v in values.items() if k not in typed}
            params['ExpressionAttributeValues'] = {**typed, **self.marshall(native)}
        return params


def _key_repr(key: Mapping) -> str:
    return ", ".join(f"{k}={v}" for k, v in key.items())


_default_document_client: Optional[DocumentClient] = None


def get_document_client() -> DocumentClient:
    """Return the shared document client bound to the global client factory."""
    global _default_document_client
    if _default_document_client is None:
        _default_document_client = DocumentClient()
    return _default_document_client
