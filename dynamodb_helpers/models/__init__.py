from .options import (
    ComparisonOperator,
    MarshallOptions,
    TranslateConfig,
    UnmarshallOptions,
)

__all__ = [
    "ComparisonOperator",
    "MarshallOptions",
    "TranslateConfig",
    "UnmarshallOptions",
]
