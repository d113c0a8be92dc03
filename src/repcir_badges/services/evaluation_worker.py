"""Background badge evaluation using APScheduler.

Activity handlers publish an evaluation event after their own transaction
commits; each event becomes a one-off job on a single-thread scheduler, so
evaluations run off the request path and one at a time. Results are handed
to registered listeners (notifications, unlock presentation).

Usage:
    worker = BadgeEvaluationWorker(award_service)
    worker.start()
    worker.publish(EvaluationContext(user_id="u1", member_id="m1", trigger="workout"))
    # ... app runs ...
    worker.stop()
"""

import logging
import threading
from typing import Callable, List, Optional

from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_EXECUTED,
    EVENT_JOB_MISSED,
    JobExecutionEvent,
)
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from ..models.badges import EvaluationContext, EvaluationResult
from .award_service import AwardService


logger = logging.getLogger(__name__)

EvaluationListener = Callable[[EvaluationContext, EvaluationResult], None]

JOB_FINISHED = EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED


class BadgeEvaluationWorker:
    """Runs published evaluation events as one-off scheduler jobs.

    Uses APScheduler with:
    - One worker thread, so evaluations for a user never overlap
    - A cap on outstanding events; events beyond it are dropped
    - Listener callbacks invoked with every evaluation result
    """

    def __init__(self, award_service: AwardService, max_queue_size: int = 1000):
        """Initialize the worker.

        Args:
            award_service: Service that runs evaluate_and_award
            max_queue_size: Outstanding events beyond this are dropped with a warning
        """
        self.award_service = award_service
        self.max_queue_size = max_queue_size
        self._listeners: List[EvaluationListener] = []
        self._outstanding = 0
        self._idle = threading.Condition()
        self.scheduler = self._create_scheduler()

    def _create_scheduler(self) -> BackgroundScheduler:
        scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=1)},
            job_defaults={"coalesce": False, "misfire_grace_time": None},
            timezone="UTC",
        )
        scheduler.add_listener(self._on_job_finished, JOB_FINISHED)
        return scheduler

    @property
    def is_running(self) -> bool:
        return self.scheduler.running

    def add_listener(self, listener: EvaluationListener) -> None:
        """Register a callback invoked with every evaluation result."""
        self._listeners.append(listener)

    def start(self) -> None:
        if self.is_running:
            logger.warning("Badge evaluation worker is already running")
            return

        self.scheduler.start()
        logger.info("Badge evaluation worker started")

    def stop(self) -> None:
        """Gracefully shutdown, waiting for the running evaluation.

        Events not yet started are dropped; the next trigger for the same
        user re-evaluates everything.
        """
        if not self.is_running:
            return

        logger.info("Shutting down badge evaluation worker...")
        self.scheduler.shutdown(wait=True)
        # A shut down scheduler's executor cannot be restarted
        self.scheduler = self._create_scheduler()
        with self._idle:
            self._outstanding = 0
            self._idle.notify_all()
        logger.info("Badge evaluation worker stopped")

    def publish(self, context: EvaluationContext) -> bool:
        """Schedule an evaluation to run as soon as the worker is free.

        Returns:
            False if too many events are outstanding and this one was dropped.
        """
        with self._idle:
            if self._outstanding >= self.max_queue_size:
                logger.warning(
                    f"Badge evaluation backlog full, dropping event for user {context.user_id}"
                )
                return False
            self._outstanding += 1

        self.scheduler.add_job(
            self._process,
            DateTrigger(),
            args=[context],
            name=f"Badge evaluation for {context.user_id}",
        )
        return True

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every published event has been processed."""
        with self._idle:
            return self._idle.wait_for(lambda: self._outstanding == 0, timeout)

    def _on_job_finished(self, event: JobExecutionEvent) -> None:
        if event.exception is not None:
            logger.error(f"Badge evaluation job {event.job_id} failed: {event.exception}")
        with self._idle:
            self._outstanding = max(self._outstanding - 1, 0)
            if self._outstanding == 0:
                self._idle.notify_all()

    def _process(self, context: EvaluationContext) -> EvaluationResult:
        result = self.award_service.evaluate_and_award(context)
        for listener in list(self._listeners):
            try:
                listener(context, result)
            except Exception as e:
                logger.error(f"Badge evaluation listener failed: {e}")
        return result
