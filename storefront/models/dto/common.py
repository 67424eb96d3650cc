from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class SuccessResponse(CamelModel):
    success: bool = True
    message: str | None = None


class ErrorResponse(CamelModel):
    success: bool = False
    kind: str
    message: str
