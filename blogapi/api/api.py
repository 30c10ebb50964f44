from fastapi import APIRouter
from blogapi.api.endpoints import (
    users,
    posts,
    comments,
    tags
)

api_router = APIRouter()

api_router.include_router(users.router, tags=["users"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(comments.post_comments_router, prefix="/posts/{post_id}/comments", tags=["comments"])
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
