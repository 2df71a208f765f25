# userdesk/users_api/schemas.py
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


# --- Records ---
class UserRecord(BaseModel):
    # Records are replaced, never mutated in place; edits go through model_copy(update=...)
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    avatar_url: str = Field(default="", alias="avatar")


# --- Request Models ---
class UserPatch(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for PUT /users/{id}; unset fields are left out."""
        return self.model_dump(exclude_none=True)


# --- Response Models (GET /users?page=n) ---
class UsersPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = 0
    per_page: int = 0
    total: int = 0
    total_pages: int = 0
    data: List[UserRecord] = []
