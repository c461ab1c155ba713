from .config import DynamoDBConfig

__all__ = [
    "DynamoDBConfig",
]
