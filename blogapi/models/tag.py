from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from blogapi.db.database import Base
import uuid

class Tag(Base):
    """Tag model

    Names are stored in canonical form (trimmed, lower-cased), so the unique
    constraint also enforces case-insensitive uniqueness. Tags are shared by
    all posts and never deleted.
    """
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
