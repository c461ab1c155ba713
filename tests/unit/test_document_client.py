"""
Tests for DocumentClient (core/document.py) and the marshalling utilities.
"""

from dataclasses import dataclass
from decimal import Decimal
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from pydantic import BaseModel

from dynamodb_helpers import (
    DocumentClient,
    MarshallOptions,
    TranslateConfig,
    UnmarshallOptions,
)
from dynamodb_helpers.exceptions import (
    ConnectionError,
    NotFoundError,
    RetryableError,
    ValidationError,
)
from dynamodb_helpers.utils import is_attribute_value, marshall, unmarshall


def create_client_error(error_code: str, message: str = "Test error", operation: str = "Scan") -> ClientError:
    """Helper to create ClientError for testing."""
    return ClientError(
        error_response={
            'Error': {
                'Code': error_code,
                'Message': message
            }
        },
        operation_name=operation
    )


class Address(BaseModel):
    street: str
    number: int


@dataclass
class Point:
    x: int
    y: int


class TestMarshall:
    """Native values to attribute values."""

    def test_scalars(self):
        result = marshall({'name': 'a', 'count': 2, 'active': True, 'missing': None})

        assert result == {
            'name': {'S': 'a'},
            'count': {'N': '2'},
            'active': {'BOOL': True},
            'missing': {'NULL': True},
        }

    def test_floats_become_numbers(self):
        assert marshall({'price': 1.5}) == {'price': {'N': '1.5'}}

    def test_nested_floats(self):
        result = marshall({'data': {'ratio': 0.25, 'values': [1.5, 2]}})

        assert result == {'data': {'M': {
            'ratio': {'N': '0.25'},
            'values': {'L': [{'N': '1.5'}, {'N': '2'}]},
        }}}

    def test_remove_none_values(self):
        options = MarshallOptions(remove_none_values=True)

        assert marshall({'a': None, 'b': 1}, options) == {'b': {'N': '1'}}

    def test_convert_empty_values(self):
        options = MarshallOptions(convert_empty_values=True)

        assert marshall({'s': '', 'b': b''}, options) == {'s': {'NULL': True}, 'b': {'NULL': True}}

    def test_empty_string_kept_by_default(self):
        assert marshall({'s': ''}) == {'s': {'S': ''}}

    def test_class_instances_converted_when_enabled(self):
        options = MarshallOptions(convert_class_instance_to_map=True)

        result = marshall({'address': Address(street='Main', number=5), 'point': Point(1, 2)}, options)

        assert result['address'] == {'M': {'street': {'S': 'Main'}, 'number': {'N': '5'}}}
        assert result['point'] == {'M': {'x': {'N': '1'}, 'y': {'N': '2'}}}

    def test_class_instances_rejected_by_default(self):
        with pytest.raises(ValidationError, match="Cannot marshall value for 'address'"):
            marshall({'address': Address(street='Main', number=5)})

    def test_is_attribute_value(self):
        assert is_attribute_value({'S': 'abc'})
        assert is_attribute_value({'NULL': True})
        assert not is_attribute_value('abc')
        assert not is_attribute_value({'name': 'abc'})
        assert not is_attribute_value({'S': 'a', 'N': '1'})


class TestUnmarshall:
    """Attribute values to native values."""

    def test_numbers_unwrapped_by_default(self):
        result = unmarshall({'n': {'N': '2'}, 'f': {'N': '1.5'}, 's': {'S': 'x'}})

        assert result == {'n': 2, 'f': 1.5, 's': 'x'}
        assert isinstance(result['n'], int)

    def test_nested_numbers_unwrapped(self):
        result = unmarshall({'m': {'M': {'l': {'L': [{'N': '3'}]}}}})

        assert result == {'m': {'l': [3]}}

    def test_wrap_numbers_keeps_decimal(self):
        result = unmarshall({'n': {'N': '2'}}, UnmarshallOptions(wrap_numbers=True))

        assert result == {'n': Decimal('2')}
        assert isinstance(result['n'], Decimal)


class TestDocumentClient:
    """Request building and error mapping."""

    def test_client_resolved_per_request(self):
        clients = [Mock(), Mock()]
        for client in clients:
            client.scan.return_value = {'Items': []}
        provider = Mock(side_effect=clients)
        document_client = DocumentClient(client_provider=provider)

        document_client.scan('users')
        document_client.scan('users')

        clients[0].scan.assert_called_once()
        clients[1].scan.assert_called_once()

    def test_scan_decodes_items_and_returns_last_key(self, document_client, mock_client):
        mock_client.scan.return_value = {
            'Items': [{'id': {'S': '1'}, 'age': {'N': '30'}}],
            'LastEvaluatedKey': {'id': {'S': '1'}},
        }

        items, last_key = document_client.scan('users', limit=1)

        assert items == [{'id': '1', 'age': 30}]
        assert last_key == {'id': {'S': '1'}}
        mock_client.scan.assert_called_once_with(TableName='users', Limit=1)

    def test_typed_values_passed_through(self, document_client, mock_client):
        document_client.scan(
            'users',
            filter_expression='age > :min AND city = :city',
            expression_attribute_values={':min': {'N': '18'}, ':city': 'Oslo'},
            passthrough_typed=True
        )

        kwargs = mock_client.scan.call_args.kwargs
        assert kwargs['ExpressionAttributeValues'] == {':min': {'N': '18'}, ':city': {'S': 'Oslo'}}

    def test_type_tag_shaped_maps_marshalled_by_default(self, document_client, mock_client):
        document_client.scan(
            'users',
            filter_expression='size = :size',
            expression_attribute_values={':size': {'S': 'small'}}
        )

        kwargs = mock_client.scan.call_args.kwargs
        assert kwargs['ExpressionAttributeValues'] == {':size': {'M': {'S': {'S': 'small'}}}}

    def test_update_item_decodes_attributes(self, document_client, mock_client):
        mock_client.update_item.return_value = {'Attributes': {'id': {'S': '1'}, 'name': {'S': 'a'}}}

        result = document_client.update_item(
            'users', {'id': '1'}, 'SET #field0 = :value0',
            expression_attribute_names={'#field0': 'name'},
            expression_attribute_values={':value0': 'a'}
        )

        assert result == {'id': '1', 'name': 'a'}

    def test_custom_translate_config(self, mock_client):
        mock_client.query.return_value = {'Items': [{'n': {'N': '7'}}]}
        document_client = DocumentClient(
            client_provider=lambda: mock_client,
            translate_config=TranslateConfig(unmarshall_options=UnmarshallOptions(wrap_numbers=True))
        )

        items, _ = document_client.query('t', '#pk = :pk', {'#pk': 'id'}, {':pk': 'x'})

        assert items == [{'n': Decimal('7')}]

    def test_client_error_mapped(self, document_client, mock_client):
        error = create_client_error('ResourceNotFoundException', 'Requested resource not found')
        mock_client.scan.side_effect = error

        with pytest.raises(NotFoundError) as exc_info:
            document_client.scan('missing_table')

        assert exc_info.value.original_error is error
        assert exc_info.value.__cause__ is error
        assert 'missing_table' in str(exc_info.value)

    def test_throttling_mapped_to_retryable(self, document_client, mock_client):
        mock_client.query.side_effect = create_client_error('ProvisionedThroughputExceededException', operation='Query')

        with pytest.raises(RetryableError):
            document_client.query('users', '#pk = :pk', {'#pk': 'id'}, {':pk': '1'})

    def test_botocore_error_mapped_to_connection_error(self, document_client, mock_client):
        mock_client.scan.side_effect = EndpointConnectionError(endpoint_url='http://localhost:8000')

        with pytest.raises(ConnectionError, match="Scan on users failed"):
            document_client.scan('users')

    def test_unsupported_operation(self, document_client):
        with pytest.raises(ValueError, match="Unsupported operation"):
            document_client.send('BatchWriteItem', TableName='users')
