"""Shared schema base.

Learn: The frontend speaks camelCase (createdAt, boardId). Pydantic's
alias generator gives every field a camelCase alias; populate_by_name
lets requests use either spelling, and FastAPI serializes responses
by alias.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
