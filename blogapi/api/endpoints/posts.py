import math
from typing import Optional
from fastapi import APIRouter, Depends, status
from blogapi.api.deps import get_post_manager, success
from blogapi.core.errors import NotFoundError
from blogapi.core.security import get_current_user
from blogapi.models.user import User
from blogapi.schemas.post import PostCreate, PostChanges, PostTagsUpdate
from blogapi.services.posts import PostLifecycleManager

router = APIRouter()

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100

def _as_int(value: Optional[str], default: int) -> int:
    """Lenient query integer; anything non-numeric falls back to the default"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default

@router.get("", summary="List posts, optionally filtered by tag or author")
def list_posts(
    tag: Optional[str] = None,
    author_id: Optional[str] = None,
    page: Optional[str] = None,
    per_page: Optional[str] = None,
    posts: PostLifecycleManager = Depends(get_post_manager)
):
    """List posts newest first, paginated"""
    if tag:
        items = posts.list_by_tag(tag)
    elif author_id:
        items = posts.list_by_author(author_id)
    else:
        items = posts.list_all()

    page = max(_as_int(page, 1), 1)
    per_page = min(max(_as_int(per_page, DEFAULT_PER_PAGE), 1), MAX_PER_PAGE)
    start = (page - 1) * per_page

    return success({
        "posts": items[start:start + per_page],
        "meta": {
            "current_page": page,
            "total_pages": math.ceil(len(items) / per_page),
            "total_count": len(items),
        },
    })

@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a new post")
def create_post(
    post: PostCreate,
    current_user: User = Depends(get_current_user),
    posts: PostLifecycleManager = Depends(get_post_manager)
):
    """Create a new post with at least one tag"""
    created = posts.create(post.title, post.body, post.tags, current_user.id)
    return success({"post": created})

@router.get("/{post_id}", summary="Get a specific post")
def get_post(
    post_id: str,
    posts: PostLifecycleManager = Depends(get_post_manager)
):
    """Get a specific post"""
    post = posts.get(post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return success({"post": post})

@router.put("/{post_id}", summary="Update the title, body or tags of a post")
def update_post(
    post_id: str,
    changes: PostChanges,
    current_user: User = Depends(get_current_user),
    posts: PostLifecycleManager = Depends(get_post_manager)
):
    """Update a post; omitted fields keep their current value"""
    updated = posts.update(post_id, changes, actor_id=current_user.id)
    return success({"post": updated})

@router.put("/{post_id}/tags", summary="Replace the tags of a post")
def update_post_tags(
    post_id: str,
    tags_update: PostTagsUpdate,
    current_user: User = Depends(get_current_user),
    posts: PostLifecycleManager = Depends(get_post_manager)
):
    """Reconcile a post's tags with the given names"""
    tags = posts.update_tags(post_id, tags_update.tags, actor_id=current_user.id)
    return success({"tags": sorted(tags)})

@router.delete("/{post_id}", summary="Delete a post with its comments and tag links")
def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    posts: PostLifecycleManager = Depends(get_post_manager)
):
    """Delete a post with its comments and tag links"""
    if not posts.delete(post_id, actor_id=current_user.id):
        raise NotFoundError("Post not found")
    return success()
