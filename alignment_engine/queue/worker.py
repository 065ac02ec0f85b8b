"""AlignmentWorker: pulls recalculation jobs from the queue and runs them.

This is the job system around the orchestrator. Retry policy lives here:
a failed job is re-enqueued with its attempt count bumped, and parked on the
dead-letter list once it reaches ``worker_max_attempts``. The orchestrator
itself never retries.

A claimed job is settled (acked, requeued or dead-lettered) only after the
orchestrator returns or raises. If the process dies in between, the job stays
on the worker's processing list and is recovered when the worker restarts.
"""

import asyncio

import structlog
from redis.exceptions import RedisError

from alignment_engine.core.config import get_settings
from alignment_engine.core.exceptions import AlignmentEngineError, InvalidJobError
from alignment_engine.queue.manager import AlignmentQueue
from alignment_engine.services.recalc_service import RecalcOrchestrator

logger = structlog.get_logger(__name__)


async def process_next_job(
    orchestrator: RecalcOrchestrator,
    queue: AlignmentQueue,
    max_attempts: int | None = None,
) -> bool:
    """Pull the next job and run it.

    Returns True if a queue entry was consumed, False if the queue was empty.

    Raises:
        RedisError: the queue itself is unreachable; the claimed job, if any,
            stays on the processing list
    """
    max_attempts = max_attempts or get_settings().worker_max_attempts

    try:
        job = await queue.dequeue()
    except InvalidJobError as exc:
        logger.error("alignment_job_invalid", error=str(exc))
        return True

    if job is None:
        return False

    with structlog.contextvars.bound_contextvars(
        job_id=job.job_id,
        user_id=job.user_id,
        trigger_reason=job.trigger_reason.value,
    ):
        logger.info("alignment_job_started", date=job.date.isoformat(), attempts=job.attempts)
        try:
            metric = await orchestrator.recalc_daily_alignment(job.user_id, job.date)
        except Exception as exc:
            retry = job.model_copy(update={"attempts": job.attempts + 1})
            if retry.attempts >= max_attempts:
                await queue.dead_letter(retry)
                logger.error(
                    "alignment_job_dead_lettered",
                    error=str(exc),
                    error_type=type(exc).__name__,
                    attempts=retry.attempts,
                    exc_info=True,
                )
            else:
                await queue.requeue(retry)
                logger.warning(
                    "alignment_job_failed_requeued",
                    error=str(exc),
                    error_type=type(exc).__name__,
                    attempts=retry.attempts,
                )
            return True

        await queue.ack(job)
        logger.info("alignment_job_completed", skipped=metric is None)
    return True


class AlignmentWorker:
    """Polling loop around ``process_next_job``.

    Usage:
        worker = AlignmentWorker(orchestrator, queue)
        task = asyncio.create_task(worker.run())
        ...
        worker.stop()
        await task
    """

    def __init__(
        self,
        orchestrator: RecalcOrchestrator,
        queue: AlignmentQueue,
        poll_interval: float | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.queue = queue
        self.poll_interval = poll_interval if poll_interval is not None else get_settings().worker_poll_interval_seconds
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        self._stop_event.set()

    async def _wait(self) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            pass

    async def run(self) -> None:
        """Drain the queue, sleeping ``poll_interval`` whenever it is empty, until stopped.

        Jobs left on this worker's processing list by a previous run are
        recovered first. Queue errors are logged and retried after
        ``poll_interval``; they never end the loop.
        """
        recovered = await self.queue.recover()
        logger.info("alignment_worker_started", worker_id=self.queue.worker_id, recovered=recovered)

        while not self._stop_event.is_set():
            try:
                processed = await process_next_job(self.orchestrator, self.queue)
            except (RedisError, AlignmentEngineError) as exc:
                logger.warning(
                    "alignment_worker_poll_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                    exc_info=True,
                )
                await self._wait()
                continue

            if not processed:
                await self._wait()
        logger.info("alignment_worker_stopped")
