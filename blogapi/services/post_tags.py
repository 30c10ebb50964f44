"""
Reconciliation of a post's tag links against a desired set of tag names.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Set, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogapi.core.errors import NotFoundError
from blogapi.db.database import translate_storage_errors, unit_of_work
from blogapi.models.post import Post
from blogapi.models.post_tag import PostTag
from blogapi.models.tag import Tag
from blogapi.services.tags import TagStore, normalize_tag_names

logger = logging.getLogger(__name__)


@dataclass
class TagDelta:
    """Outcome of one reconciliation"""
    added: Set[str] = field(default_factory=set)
    removed: Set[str] = field(default_factory=set)
    tags: Set[str] = field(default_factory=set)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def diff_tag_sets(current: Set[str], desired: Set[str]) -> Tuple[Set[str], Set[str]]:
    """Return ``(to_add, to_remove)`` turning ``current`` into ``desired``"""
    return desired - current, current - desired


class PostTagReconciler:
    """Applies the minimal add/remove delta to a post's tag links."""

    def __init__(self, session: Session, tag_store: Optional[TagStore] = None):
        self.session = session
        self.tag_store = tag_store or TagStore(session)

    def current_tags(self, post_id: str) -> Set[str]:
        """Canonical names of the tags linked to a post"""
        with translate_storage_errors():
            names = self.session.execute(
                select(Tag.name)
                .join(PostTag, PostTag.tag_id == Tag.id)
                .where(PostTag.post_id == post_id)
            ).scalars()
            return {name.lower() for name in names}

    def reconcile(self, post_id: str, desired_names: Iterable[str]) -> Set[str]:
        """Make the post's tags equal the canonical form of ``desired_names`` and commit"""
        with unit_of_work(self.session):
            delta = self.apply(post_id, desired_names)
        return delta.tags

    def apply(self, post_id: str, desired_names: Iterable[str]) -> TagDelta:
        """
        Reconcile without committing, for callers that own the transaction.

        An input that normalizes to nothing leaves the existing tags untouched.
        """
        desired = normalize_tag_names(desired_names)

        with translate_storage_errors():
            # row lock on the post serializes concurrent reconciles where supported
            post = self.session.execute(
                select(Post).where(Post.id == post_id).with_for_update()
            ).scalar_one_or_none()
            if post is None:
                raise NotFoundError("Post not found")

            current = self.current_tags(post_id)
            if not desired:
                return TagDelta(tags=current)

            to_add, to_remove = diff_tag_sets(current, desired)

            for name in sorted(to_add):
                tag = self.tag_store.get_or_create(name)
                self._link(post_id, tag.id)

            if to_remove:
                stale_ids = select(Tag.id).where(Tag.name.in_(to_remove))
                self.session.execute(
                    delete(PostTag)
                    .where(PostTag.post_id == post_id, PostTag.tag_id.in_(stale_ids))
                    .execution_options(synchronize_session=False)
                )

            self.session.flush()
            result = self.current_tags(post_id)

        if to_add or to_remove:
            logger.info(f"Post {post_id} tags: +{sorted(to_add)} -{sorted(to_remove)}")
        return TagDelta(added=to_add, removed=to_remove, tags=result)

    def _link(self, post_id: str, tag_id: str) -> None:
        """Create the (post, tag) link unless it already exists"""
        if self._has_link(post_id, tag_id):
            return
        try:
            with self.session.begin_nested():
                self.session.add(PostTag(post_id=post_id, tag_id=tag_id))
        except IntegrityError:
            logger.debug(f"Link {post_id}/{tag_id} already present")

    def _has_link(self, post_id: str, tag_id: str) -> bool:
        return self.session.execute(
            select(PostTag.id).where(PostTag.post_id == post_id, PostTag.tag_id == tag_id)
        ).first() is not None
