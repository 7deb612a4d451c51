from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DeduplicateRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(min_length=1)
    team_id: str = Field(min_length=1)


class ErrorResponse(BaseModel):
    error_code: Optional[str] = None
    message: str
    field: Optional[str] = None
    stage: Optional[str] = None
    retryable_from: Optional[str] = None
