from pydantic import BaseModel, Field
from typing import Optional, List, Literal


VoteDirection = Literal["up", "down"]


class VoteRecord(BaseModel):
    up: List[str] = Field(default_factory=list)
    down: List[str] = Field(default_factory=list)


class Comment(BaseModel):
    id: str
    content: str
    author: str
    author_nickname: str = Field(alias="authorNickname")
    timestamp: int

    class Config:
        populate_by_name = True


class Link(BaseModel):
    id: str
    url: str
    title: str
    description: str = ""
    thumbnail: Optional[str] = None
    author: str
    author_nickname: str = Field(alias="authorNickname")
    timestamp: int
    votes: VoteRecord = Field(default_factory=VoteRecord)
    comments: List[Comment] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @property
    def score(self) -> int:
        return len(self.votes.up) - len(self.votes.down)


class LinkCreate(BaseModel):
    url: str
    title: str
    description: str = ""
    thumbnail: Optional[str] = None


class LinkUpdate(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None


class VoteRequest(BaseModel):
    direction: VoteDirection


class CommentCreate(BaseModel):
    content: str
