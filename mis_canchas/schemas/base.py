from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# En JSON los montos viajan como numero, no como string.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
