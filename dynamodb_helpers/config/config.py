import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load environment variables from .env file if it exists
load_dotenv()


def _default_region() -> str:
    return os.getenv("REGION") or os.getenv("AWS_REGION") or "us-east-1"


class DynamoDBConfig(BaseModel):
    """Configuration for the DynamoDB client and helper operations.

    Region and credential values are not validated here; malformed values only
    surface once a request is sent to DynamoDB.
    """

    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    aws_session_token: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SESSION_TOKEN"),
        description="AWS session token for temporary credentials"
    )

    region_name: str = Field(
        default_factory=_default_region,
        description="AWS region name"
    )

    # DynamoDB specific settings
    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="DynamoDB endpoint URL (for local development)"
    )

    table_prefix: str = Field(
        default_factory=lambda: os.getenv("DYNAMODB_TABLE_PREFIX", ""),
        description="Prefix to add to all table names"
    )

    # Connection settings, forwarded to botocore as-is
    max_pool_connections: int = Field(
        default=10,
        gt=0,
        description="Maximum number of connections in the connection pool"
    )

    retries: int = Field(
        default=3,
        ge=0,
        description="Number of retry attempts botocore makes for failed requests"
    )

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Connect and read timeout in seconds"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: os.getenv("DYNAMODB_DEBUG_LOGGING", "false").lower() == "true",
        description="Enable debug logging for DynamoDB operations"
    )

    def get_table_name(self, base_name: str) -> str:
        """Get the full table name with prefix.

        Args:
            base_name: Base table name

        Returns:
            Table name prefixed with ``table_prefix`` when one is configured
        """
        if self.table_prefix:
            return f"{self.table_prefix}_{base_name}"
        return base_name

    def has_credentials(self) -> bool:
        """Whether an explicit access key pair is configured."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)

    @classmethod
    def from_env(cls) -> 'DynamoDBConfig':
        """Create configuration from environment variables.

        Returns:
            DynamoDBConfig instance
        """
        return cls()

    @classmethod
    def for_local_development(cls) -> 'DynamoDBConfig':
        """Create configuration for local DynamoDB development.

        Returns:
            DynamoDBConfig instance pointed at DynamoDB Local on port 8000
        """
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            endpoint_url="http://localhost:8000",
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        validate_assignment=True,
    )
