"""
Post lifecycle: creation, lookup, partial update, cascading delete and expiry queries.
"""
import logging
from datetime import timedelta
from typing import Iterable, List, Optional, Set

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from blogapi.core.clock import Clock, utcnow
from blogapi.core.config import get_settings
from blogapi.core.errors import AuthorizationError, NotFoundError, ValidationError
from blogapi.db.database import translate_storage_errors, unit_of_work
from blogapi.models.comment import Comment
from blogapi.models.post import Post
from blogapi.models.post_tag import PostTag
from blogapi.models.user import User
from blogapi.schemas.post import PostChanges, PostDetails
from blogapi.schemas.user import AuthorSummary
from blogapi.services.post_tags import PostTagReconciler
from blogapi.services.tags import TagStore, normalize_tag_names

logger = logging.getLogger(__name__)


def _require_text(value: str, field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value


class PostLifecycleManager:
    """Creates, reads, updates and deletes posts, enforcing authorship."""

    def __init__(
        self,
        session: Session,
        clock: Clock = utcnow,
        max_age_hours: Optional[int] = None,
    ):
        self.session = session
        self.clock = clock
        self.max_age_hours = max_age_hours if max_age_hours is not None else get_settings().post_max_age_hours
        self.tag_store = TagStore(session)
        self.reconciler = PostTagReconciler(session, self.tag_store)

    # -- writes --

    def create(self, title: str, body: str, tag_names: Iterable[str], author_id: str) -> PostDetails:
        title = _require_text(title, "title")
        body = _require_text(body, "body")
        tag_names = list(tag_names or [])
        if not normalize_tag_names(tag_names):
            raise ValidationError("At least one tag is required")

        with unit_of_work(self.session):
            post = Post(title=title, body=body, author_id=author_id, created_at=self.clock())
            self.session.add(post)
            self.session.flush()
            post_id = post.id
            self.reconciler.apply(post_id, tag_names)

        logger.info(f"Post {post_id} created by {author_id}")
        return self._require_details(post_id)

    def update(self, post_id: str, changes: PostChanges, actor_id: Optional[str] = None) -> PostDetails:
        """
        Apply a partial update.

        Fields left as None are not touched. Blank title or body values are
        rejected rather than written. A tags list is reconciled; an empty one
        keeps the current tags.
        """
        if changes.title is not None:
            _require_text(changes.title, "title")
        if changes.body is not None:
            _require_text(changes.body, "body")

        with unit_of_work(self.session):
            post = self._get_post(post_id)
            if post is None:
                raise NotFoundError("Post not found")
            self._check_author(post, actor_id)

            if changes.title is not None:
                post.title = changes.title
            if changes.body is not None:
                post.body = changes.body
            self.session.flush()

            if changes.tags is not None:
                self.reconciler.apply(post_id, changes.tags)

        return self._require_details(post_id)

    def update_tags(self, post_id: str, tag_names: Iterable[str], actor_id: Optional[str] = None) -> Set[str]:
        self.ensure_author(post_id, actor_id)
        return self.reconciler.reconcile(post_id, tag_names)

    def delete(self, post_id: str, actor_id: Optional[str] = None) -> bool:
        """
        Delete a post with its comments and tag links.

        Returns False when the post does not exist. Without an actor (the
        expiry sweep) no ownership check is made.
        """
        with unit_of_work(self.session):
            post = self._get_post(post_id)
            if post is None:
                return False
            self._check_author(post, actor_id)

            self.session.execute(
                delete(Comment).where(Comment.post_id == post_id).execution_options(synchronize_session=False)
            )
            self.session.execute(
                delete(PostTag).where(PostTag.post_id == post_id).execution_options(synchronize_session=False)
            )
            self.session.delete(post)

        logger.info(f"Post {post_id} deleted")
        return True

    # -- authorization --

    def ensure_author(self, post_id: str, actor_id: Optional[str]) -> Post:
        post = self._get_post(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        self._check_author(post, actor_id)
        return post

    @staticmethod
    def _check_author(post: Post, actor_id: Optional[str]) -> None:
        if actor_id is not None and post.author_id != actor_id:
            raise AuthorizationError("You are not authorized to modify this post")

    # -- reads --

    def get(self, post_id: str) -> Optional[PostDetails]:
        """Post with author, tags and comment count; None if the post or its author is missing"""
        post = self._get_post(post_id)
        if post is None:
            return None
        return self._details(post)

    def list_older_than(self, hours: int) -> List[Post]:
        cutoff = self.clock() - timedelta(hours=hours)
        with translate_storage_errors():
            return list(self.session.execute(
                select(Post).where(Post.created_at < cutoff).order_by(Post.created_at)
            ).scalars())

    def list_all(self) -> List[PostDetails]:
        return self._details_for(select(Post))

    def list_by_author(self, author_id: str) -> List[PostDetails]:
        return self._details_for(select(Post).where(Post.author_id == author_id))

    def list_by_tag(self, tag_name: str) -> List[PostDetails]:
        tag = self.tag_store.get_by_name(tag_name)
        if tag is None:
            return []
        return self._details_for(
            select(Post).join(PostTag, PostTag.post_id == Post.id).where(PostTag.tag_id == tag.id)
        )

    def _get_post(self, post_id: str) -> Optional[Post]:
        with translate_storage_errors():
            return self.session.get(Post, post_id)

    def _details_for(self, query) -> List[PostDetails]:
        with translate_storage_errors():
            posts = self.session.execute(query.order_by(Post.created_at.desc())).scalars().all()
        details = []
        for post in posts:
            item = self._details(post)
            if item is not None:
                details.append(item)
        return details

    def _require_details(self, post_id: str) -> PostDetails:
        details = self.get(post_id)
        if details is None:
            raise NotFoundError("Post not found")
        return details

    def _details(self, post: Post) -> Optional[PostDetails]:
        with translate_storage_errors():
            author = self.session.get(User, post.author_id)
            if author is None:
                # tombstone: a post whose author row is gone is reported as not found
                logger.warning(f"Post {post.id} references missing author {post.author_id}")
                return None
            tags = self.reconciler.current_tags(post.id)
            comment_count = self.session.execute(
                select(func.count(Comment.id)).where(Comment.post_id == post.id)
            ).scalar_one()

        return PostDetails(
            id=post.id,
            title=post.title,
            body=post.body,
            author_id=post.author_id,
            created_at=post.created_at,
            expires_at=post.expires_at(self.max_age_hours),
            author=AuthorSummary(id=author.id, name=author.name),
            tags=sorted(tags),
            comment_count=comment_count,
        )
