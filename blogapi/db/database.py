from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from typing import Optional
from functools import lru_cache
import logging

from blogapi.core.config import get_settings
from blogapi.core.errors import StorageError

# 数据库配置
SQLITE_DEV_DB = "sqlite:///./dev.db"
SQLITE_TEST_DB = "sqlite:///./test.db"
SQLITE_PROD_DB = "sqlite:///./prod.db"

Base = declarative_base()

logger = logging.getLogger(__name__)

@lru_cache()
def get_engine():
    """获取数据库引擎"""
    settings = get_settings()
    if settings.app_env == "test":
        DATABASE_URL = SQLITE_TEST_DB
    elif settings.app_env == "production":
        DATABASE_URL = settings.database_url or SQLITE_PROD_DB
    else:  # development
        DATABASE_URL = SQLITE_DEV_DB

    connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
    return create_engine(DATABASE_URL, connect_args=connect_args)

@lru_cache()
def get_session_maker():
    """获取会话工厂"""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())

def get_session():
    """获取数据库会话"""
    SessionLocal = get_session_maker()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

def create_tables(db_engine: Optional[object] = None):
    """创建所有表

    Args:
        db_engine: 可选的数据库引擎，如果不提供则使用默认引擎
    """
    # models must be imported so their tables are registered on Base.metadata
    from blogapi.models import comment, post, post_tag, tag, user  # noqa: F401

    engine = db_engine or get_engine()
    Base.metadata.create_all(bind=engine)

@contextmanager
def translate_storage_errors():
    """Re-raise SQLAlchemy failures as StorageError"""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"Database operation failed: {exc}")
        raise StorageError("Database operation failed") from exc

@contextmanager
def unit_of_work(session: Session):
    """Commit the session when the block succeeds, roll back on any error

    SQLAlchemy errors are re-raised as StorageError; domain errors propagate as-is.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Database transaction failed: {exc}")
        raise StorageError("Database operation failed") from exc
    except Exception:
        session.rollback()
        raise
