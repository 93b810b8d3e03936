"""
OrgAdmin Server - Login Request Model

Pydantic model for login endpoint request.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LoginRequest(BaseModel):
    """Request model for login endpoint"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    login_id: str
    password: str
