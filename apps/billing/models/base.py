from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# NUMERIC(18,2) holds at most 16 integer digits.
MONEY_LIMIT = Decimal("1e16")

_as_number = PlainSerializer(float, return_type=float, when_used="json")

# Computed figures (tax breakdowns, sums); rendered as JSON numbers.
Amount = Annotated[Decimal, _as_number]

# Stored values; rejected at the request boundary when the column cannot hold them.
Money = Annotated[Decimal, Field(gt=-MONEY_LIMIT, lt=MONEY_LIMIT), _as_number]

class CamelModel(BaseModel):
    """Wire models use camelCase keys; snake_case keys are accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
