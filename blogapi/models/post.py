from datetime import datetime, timedelta
from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from blogapi.core.clock import utcnow
from blogapi.db.database import Base
import uuid

class Post(Base):
    """Post model

    A post is either present (active) or deleted; there are no draft or archived states.
    """
    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)

    def expires_at(self, max_age_hours: int) -> datetime:
        """Instant after which the expiry sweep removes this post"""
        return self.created_at + timedelta(hours=max_age_hours)
