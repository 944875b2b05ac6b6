from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    email: str
    nickname: str
    created_at: int = Field(alias="createdAt")

    class Config:
        populate_by_name = True


class ProfileUpdate(BaseModel):
    nickname: str
