"""
DynamoDB Client Factory

Holds the process-wide configuration and the low-level boto3 DynamoDB client
built from it. The client is created lazily on first use and dropped whenever
the configuration changes, so the next request rebuilds it.

There is no locking around configuration changes: concurrent setters race and
the last write wins. Requests resolve the client when they are sent, so a
change only affects requests issued after it.
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config

from ..config import DynamoDBConfig
from ..exceptions import ConnectionError

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "dynamodb_helpers"

_config: Optional[DynamoDBConfig] = None
_client = None
# Package logger level from before debug logging was switched on
_saved_log_level: Optional[int] = None


def _restore_log_level() -> None:
    global _saved_log_level
    if _saved_log_level is not None:
        logging.getLogger(PACKAGE_LOGGER).setLevel(_saved_log_level)
        _saved_log_level = None


def _apply_logging(config: DynamoDBConfig) -> None:
    """Switch the package logger to DEBUG, or back to its earlier level."""
    global _saved_log_level
    if not config.enable_debug_logging:
        _restore_log_level()
        return
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _saved_log_level is None:
        _saved_log_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)


def _build_client(config: DynamoDBConfig):
    try:
        session_kwargs = {'region_name': config.region_name}

        # Without an explicit key pair boto3 falls back to its credential chain
        if config.has_credentials():
            session_kwargs['aws_access_key_id'] = config.aws_access_key_id
            session_kwargs['aws_secret_access_key'] = config.aws_secret_access_key
            session_kwargs['aws_session_token'] = config.aws_session_token

        session = boto3.Session(**session_kwargs)

        client_kwargs = {
            'region_name': config.region_name
        }

        if config.endpoint_url:
            client_kwargs['endpoint_url'] = config.endpoint_url

        client_kwargs['config'] = Config(
            retries={'max_attempts': config.retries},
            max_pool_connections=config.max_pool_connections,
            read_timeout=config.timeout_seconds,
            connect_timeout=config.timeout_seconds
        )

        client = session.client('dynamodb', **client_kwargs)
        logger.debug(f"Created DynamoDB client for region {config.region_name}")
        return client
    except Exception as e:
        logger.error(f"Failed to create DynamoDB client: {e}")
        raise ConnectionError(
            f"Failed to create DynamoDB client: {e}",
            e,
            context={'region': config.region_name, 'endpoint': config.endpoint_url}
        ) from e


def get_config() -> DynamoDBConfig:
    """Return the current configuration, reading environment defaults on first use."""
    global _config
    if _config is None:
        _config = DynamoDBConfig.from_env()
        _apply_logging(_config)
    return _config


def get_client():
    """Return the low-level boto3 DynamoDB client for the current configuration.

    Raises:
        ConnectionError: If the client cannot be constructed
    """
    global _client
    if _client is None:
        _client = _build_client(get_config())
    return _client


def configure(config: DynamoDBConfig) -> None:
    """Replace the global configuration and drop the cached client.

    Args:
        config: New configuration; takes effect for requests sent after this call
    """
    global _config, _client
    _config = config
    _client = None
    _apply_logging(config)
    logger.info(f"DynamoDB configuration updated (region: {config.region_name})")


def set_region(region: str) -> None:
    """Switch the region used for subsequent requests."""
    configure(get_config().model_copy(update={'region_name': region}))


def set_access_key(access_key_id: str, secret_access_key: str) -> None:
    """Switch the credentials used for subsequent requests."""
    configure(get_config().model_copy(update={
        'aws_access_key_id': access_key_id,
        'aws_secret_access_key': secret_access_key,
    }))


def set_config(access_key_id: str, secret_access_key: str, region: Optional[str] = None) -> None:
    """Switch credentials and, when given, the region in a single update."""
    update = {
        'aws_access_key_id': access_key_id,
        'aws_secret_access_key': secret_access_key,
    }
    if region:
        update['region_name'] = region
    configure(get_config().model_copy(update=update))


def reset_client() -> None:
    """Forget configuration and client; the next request re-reads the environment."""
    global _config, _client
    _config = None
    _client = None
    _restore_log_level()
