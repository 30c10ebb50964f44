from datetime import datetime
from pydantic import BaseModel, Field
from blogapi.schemas.user import AuthorSummary

class CommentCreate(BaseModel):
    """创建评论请求模型"""
    body: str = Field(..., min_length=1, description="评论内容")

class CommentUpdate(BaseModel):
    """更新评论请求模型"""
    body: str = Field(..., min_length=1, description="评论内容")

class CommentWithAuthor(BaseModel):
    """评论响应模型"""
    id: str = Field(..., description="评论ID")
    post_id: str = Field(..., description="文章ID")
    author_id: str = Field(..., description="作者ID")
    body: str = Field(..., description="评论内容")
    created_at: datetime = Field(..., description="创建时间")
    author: AuthorSummary

    class Config:
        from_attributes = True
