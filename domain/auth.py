"""Domain Entities - Auth"""
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID, uuid4
from typing import Optional

class User(BaseModel):
    """Staff user allowed to manage the catalog and reservations"""
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID = Field(default_factory=uuid4)
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    disabled: bool = False

class UserInDB(User):
    """User with hashed password for DB storage"""
    hashed_password: str
