from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic.config import ConfigDict


T = TypeVar("T")


def to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class EnvelopeSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Meta(EnvelopeSchema):
    as_of_date: str
    source: str
    time_window: str
    calculation_version: str
    generated_at: Optional[str] = None


class ResponseEnvelope(EnvelopeSchema, Generic[T]):
    data: T
    meta: Optional[Meta] = None
