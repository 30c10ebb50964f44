"""
Comments scoped to a post.
"""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from blogapi.core.clock import Clock, utcnow
from blogapi.core.errors import AuthorizationError, NotFoundError, ValidationError
from blogapi.db.database import translate_storage_errors, unit_of_work
from blogapi.models.comment import Comment
from blogapi.models.post import Post
from blogapi.models.user import User
from blogapi.schemas.comment import CommentWithAuthor
from blogapi.schemas.user import AuthorSummary

logger = logging.getLogger(__name__)


def _with_author(comment: Comment, author: User) -> CommentWithAuthor:
    return CommentWithAuthor(
        id=comment.id,
        post_id=comment.post_id,
        author_id=comment.author_id,
        body=comment.body,
        created_at=comment.created_at,
        author=AuthorSummary(id=author.id, name=author.name),
    )


class CommentManager:
    def __init__(self, session: Session, clock: Clock = utcnow):
        self.session = session
        self.clock = clock

    def create(self, post_id: str, body: str, author_id: str) -> CommentWithAuthor:
        if body is None or not body.strip():
            raise ValidationError("Comment body must not be empty")

        with unit_of_work(self.session):
            if self.session.get(Post, post_id) is None:
                raise NotFoundError("Post not found")
            comment = Comment(post_id=post_id, author_id=author_id, body=body, created_at=self.clock())
            self.session.add(comment)
            self.session.flush()
            comment_id = comment.id

        logger.info(f"Comment {comment_id} added to post {post_id}")
        return self._require_with_author(comment_id)

    def get(self, comment_id: str) -> Optional[Comment]:
        with translate_storage_errors():
            return self.session.get(Comment, comment_id)

    def list_by_post(self, post_id: str) -> List[CommentWithAuthor]:
        """Comments on a post, newest first; comments by missing authors are left out"""
        with translate_storage_errors():
            rows = self.session.execute(
                select(Comment, User)
                .join(User, User.id == Comment.author_id)
                .where(Comment.post_id == post_id)
                .order_by(Comment.created_at.desc())
            ).all()
        return [_with_author(comment, author) for comment, author in rows]

    def update(self, comment_id: str, body: str, actor_id: Optional[str] = None) -> CommentWithAuthor:
        """Replace a comment's body; unlike posts, an empty body is an error"""
        if body is None or not body.strip():
            raise ValidationError("Comment body must not be empty")

        with unit_of_work(self.session):
            comment = self._require_owned(comment_id, actor_id)
            comment.body = body

        return self._require_with_author(comment_id)

    def delete(self, comment_id: str, actor_id: Optional[str] = None) -> bool:
        with unit_of_work(self.session):
            comment = self.get(comment_id)
            if comment is None:
                return False
            self._check_author(comment, actor_id)
            self.session.delete(comment)

        logger.info(f"Comment {comment_id} deleted")
        return True

    def _require_owned(self, comment_id: str, actor_id: Optional[str]) -> Comment:
        comment = self.get(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        self._check_author(comment, actor_id)
        return comment

    @staticmethod
    def _check_author(comment: Comment, actor_id: Optional[str]) -> None:
        if actor_id is not None and comment.author_id != actor_id:
            raise AuthorizationError("You are not authorized to modify this comment")

    def _require_with_author(self, comment_id: str) -> CommentWithAuthor:
        with translate_storage_errors():
            row = self.session.execute(
                select(Comment, User)
                .join(User, User.id == Comment.author_id)
                .where(Comment.id == comment_id)
            ).first()
        if row is None:
            raise NotFoundError("Comment not found")
        return _with_author(row[0], row[1])
