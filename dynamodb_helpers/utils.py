"""
DynamoDB Helpers Utilities

Marshalling between native Python values and DynamoDB attribute values, and
builders for the expressions the helper operations send.

Expressions always reference attributes through placeholders (``#field0``,
``:value0``) so that reserved words and special characters in attribute names
are safe to use.
"""

import dataclasses
import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from pydantic import BaseModel

from .exceptions import ValidationError
from .models import ComparisonOperator, MarshallOptions, UnmarshallOptions

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()

ATTRIBUTE_VALUE_TYPES = frozenset({'S', 'N', 'B', 'SS', 'NS', 'BS', 'M', 'L', 'NULL', 'BOOL'})


# =============================================================================
# Value Helpers
# =============================================================================

def is_number(value: Any) -> bool:
    """Return True for int, float and Decimal values (bool excluded)."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_scalar(value: Any) -> bool:
    """Return True for values allowed in operated filters: strings and numbers."""
    return isinstance(value, str) or is_number(value)


def is_attribute_value(value: Any) -> bool:
    """Return True if ``value`` is already in DynamoDB's typed attribute form.

    Example:
        >>> is_attribute_value({'S': 'abc'})
        True
        >>> is_attribute_value('abc')
        False
    """
    return (
        isinstance(value, Mapping)
        and len(value) == 1
        and next(iter(value)) in ATTRIBUTE_VALUE_TYPES
    )


def to_decimal(value: Any) -> Decimal:
    """Convert a number to Decimal, going through ``str`` for floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


# =============================================================================
# Marshalling
# =============================================================================

def _prepare_value(value: Any, options: MarshallOptions) -> Any:
    """Normalize a native value into something TypeSerializer accepts."""
    if isinstance(value, bool) or value is None:
        return value

    if isinstance(value, float):
        return to_decimal(value)

    if options.convert_class_instance_to_map:
        if isinstance(value, BaseModel):
            value = value.model_dump()
        elif dataclasses.is_dataclass(value) and not isinstance(value, type):
            value = dataclasses.asdict(value)

    if options.convert_empty_values and isinstance(value, (str, bytes, bytearray, set, frozenset)) and len(value) == 0:
        return None

    if isinstance(value, Mapping):
        return _prepare_mapping(value, options)
    if isinstance(value, (list, tuple)):
        return [_prepare_value(v, options) for v in value]
    if isinstance(value, (set, frozenset)):
        return {_prepare_value(v, options) for v in value}
    return value


def _prepare_mapping(values: Mapping, options: MarshallOptions) -> Dict[str, Any]:
    return {
        k: _prepare_value(v, options)
        for k, v in values.items()
        if not (options.remove_none_values and v is None)
    }


def marshall(values: Mapping, options: Optional[MarshallOptions] = None) -> Dict[str, Dict[str, Any]]:
    """Convert a mapping of native values to DynamoDB attribute values.

    Args:
        values: Attribute name (or placeholder) to native value
        options: Marshalling options, defaults when omitted

    Returns:
        Mapping of the same keys to typed attribute values

    Raises:
        ValidationError: If a value cannot be represented in DynamoDB

    Example:
        >>> marshall({'name': 'a', 'count': 2})
        {'name': {'S': 'a'}, 'count': {'N': '2'}}
    """
    options = options or MarshallOptions()
    marshalled = {}
    for key, value in _prepare_mapping(values, options).items():
        try:
            marshalled[key] = _serializer.serialize(value)
        except (TypeError, ArithmeticError) as e:
            logger.error(f"Failed to marshall attribute '{key}': {e}")
            raise ValidationError(
                f"Cannot marshall value for '{key}': {e}",
                errors={key: str(e)},
                original_error=e
            ) from e
    return marshalled


def _unwrap_number(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _unwrap_number(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_unwrap_number(v) for v in value]
    if isinstance(value, set):
        return {_unwrap_number(v) for v in value}
    return value


def unmarshall(item: Mapping, options: Optional[UnmarshallOptions] = None) -> Dict[str, Any]:
    """Convert a DynamoDB item in attribute value form to native values.

    Numbers come back as int or float unless ``options.wrap_numbers`` is set,
    in which case they stay Decimal.
    """
    options = options or UnmarshallOptions()
    native = {k: _deserializer.deserialize(v) for k, v in item.items()}
    if options.wrap_numbers:
        return native
    return _unwrap_number(native)


# =============================================================================
# Expression Building
# =============================================================================

def build_placeholders(fields: List[str]) -> Tuple[List[str], Dict[str, str]]:
    """Build ``#fieldN`` name placeholders for a list of attribute names.

    Example:
        >>> build_placeholders(['name', 'status'])
        (['#field0', '#field1'], {'#field0': 'name', '#field1': 'status'})
    """
    tokens = [f"#field{i}" for i in range(len(fields))]
    return tokens, dict(zip(tokens, fields))


def build_update_expression(
    item: Mapping,
    key_fields: List[str],
    options: Optional[MarshallOptions] = None
) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """Build a SET UpdateExpression covering every non-key field of ``item``.

    Fields holding None are left out when ``options.remove_none_values`` is
    set, matching what ``marshall`` sends.

    Args:
        item: Item being written
        key_fields: Partition and sort key names, excluded from the SET clause
        options: Marshalling options the values will be sent with

    Returns:
        Tuple of (UpdateExpression, ExpressionAttributeNames, native values by placeholder)

    Raises:
        ValidationError: If the item has no fields to set besides its keys

    Example:
        >>> build_update_expression({'id': '1', 'name': 'a'}, ['id'])
        ('SET #field0 = :value0', {'#field0': 'name'}, {':value0': 'a'})
    """
    options = options or MarshallOptions()
    fields = [
        k for k, v in item.items()
        if k not in key_fields and not (options.remove_none_values and v is None)
    ]
    if not fields:
        raise ValidationError("No fields to update", errors={'key_fields': list(key_fields)})

    name_tokens, names = build_placeholders(fields)
    values = {f":value{i}": item[field] for i, field in enumerate(fields)}
    assignments = [f"{token} = :value{i}" for i, token in enumerate(name_tokens)]
    return f"SET {', '.join(assignments)}", names, values


def build_operated_filter(
    filters: Mapping,
    operators: Mapping
) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """Build a conjunctive FilterExpression from field values and operators.

    Args:
        filters: Field name to comparison value (string or number)
        operators: Field name to one of ``<``, ``<=``, ``=``, ``>=``, ``>``

    Returns:
        Tuple of (FilterExpression, ExpressionAttributeNames, native values by placeholder)

    Raises:
        ValidationError: If filters is empty, an operator is missing or unknown,
            or a value is neither a string nor a number

    Example:
        >>> build_operated_filter({'age': 30, 'name': 'bob'}, {'age': '>=', 'name': '='})
        ('#field0 >= :value0 AND #field1 = :value1', {...}, {':value0': 30, ':value1': 'bob'})
    """
    if not filters:
        raise ValidationError("At least one filter is required")

    conditions = []
    names = {}
    values = {}
    for index, (field, value) in enumerate(filters.items()):
        operator = operators.get(field)
        if not operator:
            raise ValidationError(f"Operator for {field} not found", errors={field: 'missing operator'})
        try:
            operator = ComparisonOperator(operator)
        except ValueError:
            raise ValidationError(
                f"Operator '{operator}' for {field} is not supported",
                errors={field: f"unsupported operator {operator!r}"}
            ) from None
        if not is_scalar(value):
            raise ValidationError(
                f"Value for {field} is not a string or number",
                errors={field: type(value).__name__}
            )

        names[f"#field{index}"] = field
        values[f":value{index}"] = value
        conditions.append(f"#field{index} {operator.value} :value{index}")

    return ' AND '.join(conditions), names, values
