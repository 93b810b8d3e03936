"""
OrgAdmin Server - Current User Model

Dataclass for the authenticated principal of a request.
Built from the database (or the user cache) on every authenticated call.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional


@dataclass
class CurrentUser:
    """Represents the authenticated caller"""
    user_id: str
    login_id: str
    org_id: Optional[str] = None
    activated: bool = True
    authorities: List[str] = field(default_factory=list)
    data_scopes: List[str] = field(default_factory=list)

    def HasAuthority(self, authority: str) -> bool:
        """Admin permission grants every authority"""
        return "admin" in self.authorities or authority in self.authorities

    def ToDict(self) -> dict:
        return asdict(self)

    @classmethod
    def FromDict(cls, data: dict) -> "CurrentUser":
        return cls(**data)
