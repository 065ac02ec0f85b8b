"""AlignmentQueue — reliable Redis list queue of recalculation jobs.

Jobs wait on the pending list. ``dequeue`` moves a job atomically (LMOVE) onto
this worker's processing list, where it stays until it is settled by ``ack``,
``requeue`` or ``dead_letter``. A worker that dies mid-job leaves the payload on
its processing list, and ``recover`` puts it back on the pending list at the
next startup. Delivery is at-least-once; the recalculation is idempotent.
"""

import uuid
from datetime import date

from pydantic import ValidationError
from redis.asyncio import Redis

from alignment_engine.core import redis_keys
from alignment_engine.core.config import get_settings
from alignment_engine.core.exceptions import InvalidJobError
from alignment_engine.queue.schemas import AlignmentJob, TriggerReason


class AlignmentQueue:
    """Pending list, per-worker processing list and dead-letter list.

    Jobs are JSON-encoded ``AlignmentJob`` payloads pushed on the right of the
    pending list and taken from the left.
    """

    def __init__(self, redis: Redis, worker_id: str | None = None):
        self.redis = redis
        self.worker_id = worker_id or get_settings().worker_id
        # job_id -> exact payload moved onto the processing list, needed for LREM
        self._in_flight: dict[str, str] = {}

    @property
    def processing_key(self) -> str:
        return redis_keys.alignment_processing(self.worker_id)

    async def enqueue(
        self,
        user_id: str,
        day: date,
        trigger_reason: TriggerReason = TriggerReason.TASK_COMPLETE,
    ) -> AlignmentJob:
        """Enqueue a new recalculation request. Returns the queued job."""
        job = AlignmentJob(
            job_id=str(uuid.uuid4()),
            user_id=user_id,
            date=day,
            trigger_reason=trigger_reason,
        )
        await self.redis.rpush(redis_keys.alignment_queue(), job.model_dump_json())
        return job

    async def dequeue(self) -> AlignmentJob | None:
        """Claim the oldest pending job. Returns None if the queue is empty.

        The claimed job stays on the processing list until settled.

        Raises:
            InvalidJobError: payload could not be parsed; it is moved to the dead-letter list
        """
        raw = await self.redis.lmove(redis_keys.alignment_queue(), self.processing_key, "LEFT", "RIGHT")
        if raw is None:
            return None
        try:
            job = AlignmentJob.model_validate_json(raw)
        except ValidationError as exc:
            await self._settle(raw, redis_keys.alignment_dead_letter(), raw)
            raise InvalidJobError(f"Unparseable alignment job: {exc.error_count()} errors") from exc

        self._in_flight[job.job_id] = raw
        return job

    async def ack(self, job: AlignmentJob) -> None:
        """Drop a finished job from the processing list."""
        await self.redis.lrem(self.processing_key, 1, self._claimed_payload(job))

    async def requeue(self, job: AlignmentJob) -> None:
        """Settle a claimed job by pushing ``job`` (e.g. a retry) to the back of the pending list."""
        await self._settle(self._claimed_payload(job), redis_keys.alignment_queue(), job.model_dump_json())

    async def dead_letter(self, job: AlignmentJob) -> None:
        """Settle a claimed job that exhausted its attempts by parking it."""
        await self._settle(self._claimed_payload(job), redis_keys.alignment_dead_letter(), job.model_dump_json())

    async def recover(self) -> int:
        """Return jobs left on this worker's processing list to the head of the pending list.

        Call once at startup, before the first ``dequeue``. Order is preserved.

        Returns:
            Number of jobs recovered
        """
        recovered = 0
        while await self.redis.lmove(self.processing_key, redis_keys.alignment_queue(), "RIGHT", "LEFT") is not None:
            recovered += 1
        self._in_flight.clear()
        return recovered

    async def get_length(self) -> int:
        """Return current pending queue size."""
        return await self.redis.llen(redis_keys.alignment_queue())

    async def get_processing_length(self) -> int:
        return await self.redis.llen(self.processing_key)

    async def get_dead_letter_length(self) -> int:
        return await self.redis.llen(redis_keys.alignment_dead_letter())

    def _claimed_payload(self, job: AlignmentJob) -> str:
        return self._in_flight.pop(job.job_id, None) or job.model_dump_json()

    async def _settle(self, claimed: str, target_key: str, payload: str) -> None:
        """Atomically remove ``claimed`` from processing and push ``payload`` onto ``target_key``."""
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.lrem(self.processing_key, 1, claimed)
            pipe.rpush(target_key, payload)
            await pipe.execute()
