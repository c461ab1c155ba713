"""
Read Helpers

Point and multi lookups by partition key (Query) and filtered full-table
reads (Scan). Every list-returning helper returns an empty list when nothing
matches; ``find_one`` is the only helper that returns None.

Scans read the whole table and filter server-side after the read, so they
consume capacity proportional to table size regardless of how many items
match.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from ..core import DocumentClient, get_config, get_document_client
from ..exceptions import DynamoDBHelpersError, ValidationError
from ..models import ComparisonOperator
from ..utils import build_operated_filter, is_number

logger = logging.getLogger(__name__)

Item = Dict[str, Any]


def _query_partition(
    table_name: str,
    partition_key: str,
    key_value: Any,
    client: Optional[DocumentClient]
) -> List[Item]:
    client = client or get_document_client()
    items, _ = client.query(
        get_config().get_table_name(table_name),
        '#pk = :pk',
        expression_attribute_names={'#pk': partition_key},
        expression_attribute_values={':pk': key_value}
    )
    return items


def find_one(
    table_name: str,
    partition_key: str,
    key_value: Any,
    client: Optional[DocumentClient] = None
) -> Optional[Item]:
    """
    Find the first item whose partition key equals ``key_value``.

    DynamoDB Operation: Query with partition key equality

    Returns:
        The first matching item, or None if there is none
    """
    items = _query_partition(table_name, partition_key, key_value, client)
    if not items:
        return None
    return items[0]


def find_many(
    table_name: str,
    partition_key: str,
    key_value: Any,
    client: Optional[DocumentClient] = None
) -> List[Item]:
    """
    Find all items whose partition key equals ``key_value``.

    Useful on tables with a sort key, where one partition holds many items.
    Only the first page of the query is returned.
    """
    return _query_partition(table_name, partition_key, key_value, client)


def find_many_by_field(
    table_name: str,
    field: str,
    value: Any,
    client: Optional[DocumentClient] = None
) -> List[Item]:
    """
    Scan for items where ``field`` equals ``value``.

    DynamoDB Operation: Scan with FilterExpression ``#field0 = :value0``
    """
    client = client or get_document_client()
    items, _ = client.scan(
        get_config().get_table_name(table_name),
        filter_expression='#field0 = :value0',
        expression_attribute_names={'#field0': field},
        expression_attribute_values={':value0': value}
    )
    return items


def find_many_plain(
    table_name: str,
    filter_expression: str,
    expression_attribute_values: Mapping[str, Any],
    expression_attribute_names: Optional[Mapping[str, str]] = None,
    client: Optional[DocumentClient] = None
) -> List[Item]:
    """
    Scan with a caller-written FilterExpression.

    The expression and placeholder maps are sent as given. Placeholder values
    may be native Python values or typed attribute values such as
    ``{'N': '10'}``; the latter are passed through unchanged. Placeholders
    missing from the maps are reported by DynamoDB, not checked here.

    Args:
        table_name: Name of the table
        filter_expression: DynamoDB filter expression, e.g. ``"age > :min"``
        expression_attribute_values: Values for the ``:placeholders``
        expression_attribute_names: Names for any ``#placeholders``
        client: Document client to use (defaults to the shared one)

    Examples:
        >>> find_many_plain('users', 'age > :min', {':min': 18})
    """
    client = client or get_document_client()
    items, _ = client.scan(
        get_config().get_table_name(table_name),
        filter_expression=filter_expression,
        expression_attribute_names=dict(expression_attribute_names) if expression_attribute_names else None,
        expression_attribute_values=expression_attribute_values,
        passthrough_typed=True
    )
    return items


def find_operated(
    table_name: str,
    filters: Mapping[str, Any],
    operators: Mapping[str, Union[str, ComparisonOperator]],
    client: Optional[DocumentClient] = None
) -> List[Item]:
    """
    Scan with a conjunction of comparisons, one per filtered field.

    DynamoDB Operation: Scan with FilterExpression ``#field0 <op> :value0 AND ...``

    Args:
        table_name: Name of the table
        filters: Field name to comparison value (string or number)
        operators: Field name to ``<``, ``<=``, ``=``, ``>=`` or ``>``
        client: Document client to use (defaults to the shared one)

    Raises:
        ValidationError: If a field has a missing or unsupported operator, or a
            value is neither a string nor a number; raised before any request

    Examples:
        >>> find_operated('users', {'age': 30, 'name': 'bob'}, {'age': '>=', 'name': '='})
    """
    filter_expression, names, values = build_operated_filter(filters, operators)

    client = client or get_document_client()
    items, _ = client.scan(
        get_config().get_table_name(table_name),
        filter_expression=filter_expression,
        expression_attribute_names=names,
        expression_attribute_values=values
    )
    return items


def find_within(
    table_name: str,
    field: str,
    start: Union[int, float],
    end: Union[int, float],
    client: Optional[DocumentClient] = None
) -> List[Item]:
    """
    Scan for items whose numeric ``field`` lies in the closed range [start, end].

    DynamoDB Operation: Scan with FilterExpression ``#field0 BETWEEN :start AND :end``

    Raises:
        ValidationError: If either bound is not a number
    """
    for name, bound in (('start', start), ('end', end)):
        if not is_number(bound):
            raise ValidationError(f"Range {name} for {field} is not a number", errors={name: type(bound).__name__})

    client = client or get_document_client()
    items, _ = client.scan(
        get_config().get_table_name(table_name),
        filter_expression='#field0 BETWEEN :start AND :end',
        expression_attribute_names={'#field0': field},
        expression_attribute_values={':start': start, ':end': end}
    )
    return items


def find_all(
    table_name: str,
    batch_size: int = 10,
    suppress_errors: bool = True,
    client: Optional[DocumentClient] = None
) -> Iterator[List[Item]]:
    """
    Iterate over the whole table one scan page at a time.

    DynamoDB Operation: Scan with Limit and ExclusiveStartKey pagination

    Each step sends one Scan of at most ``batch_size`` items and yields the
    decoded page, which may be empty when the page had nothing to return.
    Iteration ends once DynamoDB stops returning a LastEvaluatedKey. Every
    call starts a fresh scan from the beginning of the table.

    Args:
        table_name: Name of the table
        batch_size: Scan page size (``Limit``)
        suppress_errors: When True, a failed page is logged and ends the
            iteration quietly; when False the error is raised to the caller
        client: Document client to use (defaults to the shared one)

    Raises:
        ValidationError: If batch_size is less than 1

    Examples:
        >>> for batch in find_all('users', batch_size=25):
        ...     process(batch)
    """
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise ValidationError(f"batch_size must be a positive integer, got {batch_size!r}")

    return _scan_batches(table_name, batch_size, suppress_errors, client)


def _scan_batches(
    table_name: str,
    batch_size: int,
    suppress_errors: bool,
    client: Optional[DocumentClient]
) -> Iterator[List[Item]]:
    client = client or get_document_client()
    full_table_name = get_config().get_table_name(table_name)
    last_key = None
    page = 0
    try:
        while True:
            items, last_key = client.scan(full_table_name, limit=batch_size, exclusive_start_key=last_key)
            page += 1
            logger.debug(f"Scan page {page} of {full_table_name} returned {len(items)} item(s)")
            yield items
            if not last_key:
                break
    except DynamoDBHelpersError:
        if not suppress_errors:
            raise
        logger.exception(f"Scan of {full_table_name} stopped after {page} page(s)")
