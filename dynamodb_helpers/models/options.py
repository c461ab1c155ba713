"""
Marshalling policy and filter operator models.

``TranslateConfig`` controls how native Python values are converted to and
from DynamoDB's typed attribute representation by the document client.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ComparisonOperator(str, Enum):
    """Relational operators accepted by operated scans."""
    LT = "<"
    LTE = "<="
    EQ = "="
    GTE = ">="
    GT = ">"


class MarshallOptions(BaseModel):
    """Options applied when converting native values to attribute values."""

    convert_empty_values: bool = Field(
        default=False,
        description="Convert empty strings, bytes and sets to NULL"
    )

    remove_none_values: bool = Field(
        default=False,
        description="Drop map entries whose value is None instead of storing NULL"
    )

    convert_class_instance_to_map: bool = Field(
        default=False,
        description="Convert pydantic models and dataclass instances to maps"
    )

    model_config = ConfigDict(frozen=True)


class UnmarshallOptions(BaseModel):
    """Options applied when converting attribute values to native values."""

    wrap_numbers: bool = Field(
        default=False,
        description="Return numbers as Decimal instead of int/float"
    )

    model_config = ConfigDict(frozen=True)


class TranslateConfig(BaseModel):
    """Combined marshalling policy for a document client."""

    marshall_options: MarshallOptions = Field(default_factory=MarshallOptions)
    unmarshall_options: UnmarshallOptions = Field(default_factory=UnmarshallOptions)

    model_config = ConfigDict(frozen=True)
