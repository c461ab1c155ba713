"""
Test configuration and fixtures for the DynamoDB helpers.

Provides an in-process DynamoDB (moto) with sample tables, and a document
client backed by a Mock low-level client for asserting request parameters.
"""

import logging
from unittest.mock import Mock

import boto3
import pytest
from moto import mock_aws

from dynamodb_helpers import DocumentClient, reset_client


@pytest.fixture(autouse=True)
def aws_environment(monkeypatch):
    """Fake credentials and a clean global configuration for every test."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    for name in ("REGION", "AWS_SESSION_TOKEN", "DYNAMODB_ENDPOINT_URL",
                 "DYNAMODB_TABLE_PREFIX", "DYNAMODB_DEBUG_LOGGING"):
        monkeypatch.delenv(name, raising=False)

    package_logger = logging.getLogger("dynamodb_helpers")
    level = package_logger.level
    reset_client()
    yield
    reset_client()
    package_logger.setLevel(level)


@pytest.fixture
def mock_dynamodb():
    """Low-level DynamoDB client against moto."""
    with mock_aws():
        yield boto3.client('dynamodb', region_name='us-east-1')


@pytest.fixture
def users_table(mock_dynamodb):
    """Create a users table keyed on ``id``."""
    mock_dynamodb.create_table(
        TableName='users',
        KeySchema=[
            {'AttributeName': 'id', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'id', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )
    return 'users'


@pytest.fixture
def events_table(mock_dynamodb):
    """Create an events table keyed on ``user_id`` and ``event_id``."""
    mock_dynamodb.create_table(
        TableName='events',
        KeySchema=[
            {'AttributeName': 'user_id', 'KeyType': 'HASH'},
            {'AttributeName': 'event_id', 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'user_id', 'AttributeType': 'S'},
            {'AttributeName': 'event_id', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )
    return 'events'


@pytest.fixture
def sample_users():
    """Sample users for scan tests."""
    return [
        {'id': 'u1', 'name': 'alice', 'age': 31, 'city': 'Oslo'},
        {'id': 'u2', 'name': 'bob', 'age': 25, 'city': 'Lima'},
        {'id': 'u3', 'name': 'carol', 'age': 42, 'city': 'Oslo'},
        {'id': 'u4', 'name': 'dave', 'age': 18, 'city': 'Pune'},
    ]


@pytest.fixture
def seeded_users(users_table, sample_users):
    """Users table populated with ``sample_users``."""
    table = boto3.resource('dynamodb', region_name='us-east-1').Table(users_table)
    for user in sample_users:
        table.put_item(Item=user)
    return users_table


@pytest.fixture
def mock_client():
    """Mock low-level client returning empty responses."""
    client = Mock()
    client.query.return_value = {'Items': [], 'Count': 0}
    client.scan.return_value = {'Items': [], 'Count': 0}
    client.update_item.return_value = {'Attributes': {}}
    client.delete_item.return_value = {}
    return client


@pytest.fixture
def document_client(mock_client):
    """Document client whose requests go to ``mock_client``."""
    return DocumentClient(client_provider=lambda: mock_client)
