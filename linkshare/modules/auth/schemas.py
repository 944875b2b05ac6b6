from pydantic import BaseModel, EmailStr
from typing import Optional, List

from linkshare.modules.groups.schemas import Group
from linkshare.modules.users.schemas import UserProfile


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    nickname: str


class SessionResponse(BaseModel):
    user: Optional[str] = None
    profile: Optional[UserProfile] = None
    loading: bool
    error: Optional[str] = None
    groups: List[Group]
    active_group_id: Optional[str] = None
