"""Base schemas shared by every resource."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base for all schemas.

    ConfigDict settings:
    - from_attributes=True: build schemas straight from SQLAlchemy objects,
      e.g. DocumentRecord.model_validate(document_row)
    - alias_generator=to_camel: camelCase on the wire (createdAt, nextCursor),
      snake_case in Python. populate_by_name lets code use either.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BaseResponse(BaseSchema):
    """Common fields of every stored resource."""

    id: int
    created_at: datetime
    updated_at: datetime
