from __future__ import annotations
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Wire models: camelCase on the wire, snake_case accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class InsertResult(CamelModel):
    success: bool = True
    message: str
    inserted_id: str | None = None

class OperationResult(CamelModel):
    success: bool
    message: str
