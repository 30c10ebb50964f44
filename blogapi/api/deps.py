from fastapi import Depends
from sqlalchemy.orm import Session
from blogapi.db.database import get_session
from blogapi.services.comments import CommentManager
from blogapi.services.posts import PostLifecycleManager
from blogapi.services.tags import TagStore


def success(data=None) -> dict:
    """Wrap a payload in the success envelope"""
    return {"status": "success", "data": data}


def get_post_manager(session: Session = Depends(get_session)) -> PostLifecycleManager:
    return PostLifecycleManager(session)


def get_comment_manager(session: Session = Depends(get_session)) -> CommentManager:
    return CommentManager(session)


def get_tag_store(session: Session = Depends(get_session)) -> TagStore:
    return TagStore(session)
