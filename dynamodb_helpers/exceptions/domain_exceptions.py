"""
Exceptions raised by the DynamoDB helpers.

Local validation failures are raised before any request is sent. Errors
reported by DynamoDB are mapped onto the same hierarchy with the botocore
exception kept as ``original_error``.
"""

from typing import Any, Dict, Optional

from .base import DynamoDBHelpersError


class ValidationError(DynamoDBHelpersError):
    """Raised when a request cannot be built or is rejected as malformed.

    Used for:
    - Upserts with no partition key or no fields to update
    - Filters with missing operators or non-scalar values
    - Values the marshaller cannot convert
    - ValidationException responses from DynamoDB
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Dictionary of field-level validation errors
            original_error: The original exception that caused this error
        """
        self.errors = errors or {}
        context = {}
        if self.errors:
            context['validation_errors'] = self.errors
        super().__init__(message, original_error, context)


class NotFoundError(DynamoDBHelpersError):
    """Raised when a DynamoDB table or index does not exist."""

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_name: Optional[str] = None, original_error: Optional[Exception] = None):
        self.resource_type = resource_type
        self.resource_name = resource_name
        context = {}
        if resource_type:
            context['resource_type'] = resource_type
        if resource_name:
            context['resource_name'] = resource_name
        super().__init__(message, original_error, context)


class ConflictError(DynamoDBHelpersError):
    """Raised when DynamoDB rejects a write because of a conflicting operation."""

    def __init__(self, message: str, resource_id: Optional[str] = None, original_error: Optional[Exception] = None):
        self.resource_id = resource_id
        context = {}
        if resource_id:
            context['resource_id'] = resource_id
        super().__init__(message, original_error, context)


class ConnectionError(DynamoDBHelpersError):
    """Raised when DynamoDB cannot be reached or refuses the caller.

    Used for:
    - Network connectivity issues and invalid endpoints
    - Missing, invalid or expired credentials
    - Client construction failures
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, original_error, context)


class RetryableError(DynamoDBHelpersError):
    """Raised for throttling and temporary service failures.

    The helpers never retry on their own; botocore's retry configuration has
    already been exhausted when this is raised.
    """

    def __init__(self, message: str, retry_after_seconds: Optional[int] = None, original_error: Optional[Exception] = None):
        self.retry_after_seconds = retry_after_seconds
        context = {}
        if retry_after_seconds:
            context['retry_after_seconds'] = retry_after_seconds
        super().__init__(message, original_error, context)
