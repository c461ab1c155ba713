"""
Write Helpers

Insert/update and delete operations. Both send a single unconditional
request; neither checks whether the item exists first.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..core import DocumentClient, get_config, get_document_client
from ..exceptions import ValidationError
from ..utils import build_update_expression

logger = logging.getLogger(__name__)


def insert_or_update(
    table_name: str,
    partition_key: str,
    item: Mapping[str, Any],
    sort_key: Optional[str] = None,
    client: Optional[DocumentClient] = None
) -> Optional[Dict[str, Any]]:
    """
    Insert an item, or update the existing item with the same key.

    DynamoDB Operation: UpdateItem with a SET expression over every non-key field

    Args:
        table_name: Name of the table
        partition_key: Name of the partition key attribute; its value is read from ``item``
        item: Attributes to write, including the key attributes
        sort_key: Name of the sort key attribute, if the table has one
        client: Document client to use (defaults to the shared one)

    Returns:
        The item as stored after the update

    Raises:
        ValidationError: If the item lacks the partition key or has no fields
            besides its keys; raised before any request is sent

    Examples:
        >>> insert_or_update('users', 'id', {'id': '1', 'name': 'a'})
        {'id': '1', 'name': 'a'}
    """
    if partition_key not in item:
        raise ValidationError("No partition key is found", errors={partition_key: 'missing'})

    key_fields = [partition_key]
    if sort_key:
        key_fields.append(sort_key)

    client = client or get_document_client()
    update_expression, names, values = build_update_expression(
        item, key_fields, client.translate_config.marshall_options
    )

    key = {partition_key: item[partition_key]}
    if sort_key and sort_key in item:
        key[sort_key] = item[sort_key]

    full_table_name = get_config().get_table_name(table_name)
    logger.debug(f"Upserting {len(names)} field(s) into {full_table_name} for key {key}")

    return client.update_item(
        full_table_name,
        key,
        update_expression,
        expression_attribute_names=names,
        expression_attribute_values=values,
        return_values='ALL_NEW'
    )


def delete_one(
    table_name: str,
    partition_key: str,
    key_value: Any,
    client: Optional[DocumentClient] = None
) -> None:
    """
    Delete the item whose partition key equals ``key_value``.

    The item is assumed to exist. Deleting a missing item is not an error.
    """
    client = client or get_document_client()
    client.delete_item(get_config().get_table_name(table_name), {partition_key: key_value})
