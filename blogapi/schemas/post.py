from pydantic import BaseModel, Field
from datetime import datetime
from typing import Annotated, Optional, List
from blogapi.schemas.user import AuthorSummary

# matches the width of the tag name column
TagName = Annotated[str, Field(max_length=50)]

class PostCreate(BaseModel):
    """创建文章请求模型"""
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1)
    tags: List[TagName] = Field(..., min_length=1, description="At least one tag is required")

class PostChanges(BaseModel):
    """Partial post update

    Every field is independently optional: None leaves the stored value
    unchanged, while an explicit empty string is rejected.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    body: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[List[TagName]] = Field(default=None, description="Tag names; omitted or empty keeps current tags")

class PostTagsUpdate(BaseModel):
    tags: List[TagName] = Field(..., min_length=1)

class PostDetails(BaseModel):
    """文章响应模型"""
    id: str
    title: str
    body: str
    author_id: str
    created_at: datetime
    expires_at: datetime
    author: AuthorSummary
    tags: List[str]
    comment_count: int

    class Config:
        from_attributes = True
