# models/base.py

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiModel(BaseModel):
    """
    Request/response schema base.
    Accepts snake_case or camelCase input, serializes camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Pagination(ApiModel):
    total: int
    limit: int
    offset: int
