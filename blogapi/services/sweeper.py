"""
Expiry sweep: periodically deletes posts older than the configured maximum age.

Runs on an APScheduler background thread next to request handling. Each post
is deleted in its own session and transaction, so one failure does not stop
the rest of the batch. A single running instance is assumed; several
instances would each sweep and need an external lock to avoid that.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from blogapi.core.clock import Clock, utcnow
from blogapi.core.config import get_settings
from blogapi.services.posts import PostLifecycleManager

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "expire_posts"


@dataclass
class SweepResult:
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class ExpirySweeper:
    """Deletes expired posts on a fixed interval"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        max_age_hours: Optional[int] = None,
        interval_minutes: Optional[int] = None,
        clock: Clock = utcnow,
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.max_age_hours = max_age_hours if max_age_hours is not None else settings.post_max_age_hours
        self.interval_minutes = interval_minutes if interval_minutes is not None else settings.sweep_interval_minutes
        self.clock = clock
        self.scheduler: Optional[BackgroundScheduler] = None

    def _manager(self, session: Session) -> PostLifecycleManager:
        return PostLifecycleManager(session, clock=self.clock, max_age_hours=self.max_age_hours)

    def run_once(self) -> SweepResult:
        """One sweep: list expired posts, then delete each independently"""
        result = SweepResult()
        logger.info("Running scheduled post deletion job...")

        session = self.session_factory()
        try:
            expired_ids = [post.id for post in self._manager(session).list_older_than(self.max_age_hours)]
        finally:
            session.close()

        if not expired_ids:
            logger.info("No posts to delete")
            return result

        logger.info(f"Found {len(expired_ids)} posts to delete")
        for post_id in expired_ids:
            session = self.session_factory()
            try:
                if self._manager(session).delete(post_id):
                    result.deleted.append(post_id)
                    logger.info(f"Deleted post with id: {post_id}")
            except Exception:
                logger.exception(f"Failed to delete expired post {post_id}")
                result.failed.append(post_id)
            finally:
                session.close()

        logger.info(f"Post deletion job finished: {len(result.deleted)} deleted, {len(result.failed)} failed")
        return result

    def start(self) -> None:
        if self.scheduler is not None:
            return
        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            func=self.run_once,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=SWEEP_JOB_ID,
            name="Delete expired posts",
            coalesce=True,
            max_instances=1,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Expiry sweeper started (every {self.interval_minutes} min, max age {self.max_age_hours} h)")

    def shutdown(self) -> None:
        if self.scheduler is None:
            return
        self.scheduler.shutdown(wait=False)
        self.scheduler = None
        logger.info("Expiry sweeper stopped")
