"""
Tag normalization and the global tag store.
"""
import logging
from typing import Iterable, List, Optional, Set

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogapi.db.database import translate_storage_errors
from blogapi.models.tag import Tag

logger = logging.getLogger(__name__)


def normalize_tag_names(names: Iterable[Optional[str]]) -> Set[str]:
    """
    Canonicalize raw tag names.

    Each name is trimmed and lower-cased; empty results are dropped and
    duplicates collapse, so ``["Go", " go ", "GO", ""]`` becomes ``{"go"}``.
    """
    canonical = set()
    for name in names or ():
        if name is None:
            continue
        name = name.strip().lower()
        if name:
            canonical.add(name)
    return canonical


class TagStore:
    """Create-or-get access to the shared tag table."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_name(self, name: str) -> Optional[Tag]:
        with translate_storage_errors():
            return self.session.execute(
                select(Tag).where(func.lower(Tag.name) == name.strip().lower())
            ).scalar_one_or_none()

    def get_or_create(self, name: str) -> Tag:
        """
        Return the tag with this canonical name, inserting it if missing.

        The insert runs in a SAVEPOINT; losing a race against a concurrent
        insert of the same name trips the unique constraint, and the winner's
        row is fetched instead.
        """
        tag = self.get_by_name(name)
        if tag is not None:
            return tag

        with translate_storage_errors():
            try:
                with self.session.begin_nested():
                    tag = Tag(name=name)
                    self.session.add(tag)
            except IntegrityError:
                logger.info(f"Tag '{name}' was created concurrently, re-fetching")
                tag = self.session.execute(
                    select(Tag).where(func.lower(Tag.name) == name)
                ).scalar_one()
            else:
                logger.info(f"Created tag '{name}'")
        return tag

    def list_all(self) -> List[Tag]:
        with translate_storage_errors():
            return list(self.session.execute(select(Tag).order_by(Tag.name)).scalars())
