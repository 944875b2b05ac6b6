from pydantic import BaseModel, Field
from typing import Optional, List

from linkshare.modules.links.schemas import Link


class Group(BaseModel):
    id: str
    name: str
    avatar: str
    created_by: str = Field(alias="createdBy")
    member_emails: List[str] = Field(alias="memberEmails")
    links: List[Link] = Field(default_factory=list)
    created_at: int = Field(alias="createdAt")
    version: Optional[int] = None

    class Config:
        populate_by_name = True

    def find_link(self, link_id: str) -> Optional[Link]:
        for link in self.links:
            if link.id == link_id:
                return link
        return None


class GroupCreate(BaseModel):
    name: str


class GroupRename(BaseModel):
    name: str


class ActiveGroupSelect(BaseModel):
    group_id: Optional[str] = None


class GroupMemberAdd(BaseModel):
    email: str


class GroupMembersAdd(BaseModel):
    emails: List[str]


class GroupMembersAdded(BaseModel):
    group_id: str
    added: List[str]
