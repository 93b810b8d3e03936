"""
OrgAdmin Server - Paging API Models

Pydantic models for paged list queries.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_snake

from models.api.user_management import UserResult


# Columns a caller may sort by
SORTABLE_COLUMNS = ["login_id", "name", "email", "phone", "activated", "created_at", "last_modified_at"]


class PageRequest(BaseModel):
    """Paging, ordering and filter parameters for the user list"""
    page: int = Field(1, ge=1)
    size: int = Field(20, ge=1, le=200)
    sort_name: str = "created_at"
    sort_order: str = Field("desc", pattern=r"^(asc|desc)$")
    login_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    org_id: Optional[str] = None
    activated: Optional[bool] = None

    @field_validator("sort_name")
    @classmethod
    def SnakeCaseSortName(cls, value: str) -> str:
        """Accept the camelCase wire name of a column as well as its own name"""
        return to_snake(value)


class PageResult(BaseModel):
    """One page of users plus the total match count"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    size: int
    total: int
    items: List[UserResult] = []
