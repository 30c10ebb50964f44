from fastapi import APIRouter, Depends, status
from blogapi.api.deps import get_comment_manager, success
from blogapi.core.errors import NotFoundError
from blogapi.core.security import get_current_user
from blogapi.models.user import User
from blogapi.schemas.comment import CommentCreate, CommentUpdate
from blogapi.services.comments import CommentManager

# mounted under /posts/{post_id}/comments
post_comments_router = APIRouter()

# mounted under /comments
router = APIRouter()

@post_comments_router.get("", summary="List all comments on a post")
def list_comments(
    post_id: str,
    comments: CommentManager = Depends(get_comment_manager)
):
    """List comments on a post, newest first"""
    return success({"comments": comments.list_by_post(post_id)})

@post_comments_router.post("", status_code=status.HTTP_201_CREATED, summary="Create a comment on a post")
def create_comment(
    post_id: str,
    comment: CommentCreate,
    current_user: User = Depends(get_current_user),
    comments: CommentManager = Depends(get_comment_manager)
):
    """Create a comment on a post"""
    created = comments.create(post_id, comment.body, current_user.id)
    return success({"comment": created})

@router.put("/{comment_id}", summary="Update a comment")
def update_comment(
    comment_id: str,
    comment_update: CommentUpdate,
    current_user: User = Depends(get_current_user),
    comments: CommentManager = Depends(get_comment_manager)
):
    """Update a comment"""
    updated = comments.update(comment_id, comment_update.body, actor_id=current_user.id)
    return success({"comment": updated})

@router.delete("/{comment_id}", summary="Delete a comment")
def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    comments: CommentManager = Depends(get_comment_manager)
):
    """Delete a comment"""
    if not comments.delete(comment_id, actor_id=current_user.id):
        raise NotFoundError("Comment not found")
    return success()
