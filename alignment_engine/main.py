"""Worker process entry point.

Wires the SQL stores, Redis sinks and the orchestrator together and runs the
alignment worker until interrupted.
"""

import asyncio
import signal

from alignment_engine.core.config import get_settings
from alignment_engine.core.logging import configure_structlog

_settings = get_settings()
configure_structlog(log_level=_settings.log_level, json_logs=_settings.json_logs)

import structlog  # noqa: E402

from alignment_engine.db.base import close_db, init_db  # noqa: E402
from alignment_engine.db.redis import close_redis, get_redis, init_redis  # noqa: E402
from alignment_engine.queue.manager import AlignmentQueue  # noqa: E402
from alignment_engine.queue.worker import AlignmentWorker  # noqa: E402
from alignment_engine.services.notifications import NullNotifier, RedisOutboxNotifier  # noqa: E402
from alignment_engine.services.recalc_service import RecalcOrchestrator  # noqa: E402
from alignment_engine.services.sweep_service import MissedDaySweep  # noqa: E402
from alignment_engine.services.stores import (  # noqa: E402
    RedisCacheSink,
    SqlExecutionLogStore,
    SqlMetricStore,
    SqlReflectionQualityProvider,
)

logger = structlog.get_logger(__name__)


def build_orchestrator() -> RecalcOrchestrator:
    """Build the production orchestrator. Requires init_db() and init_redis()."""
    settings = get_settings()
    redis = get_redis()
    notifier = RedisOutboxNotifier(redis) if settings.notifications_enabled else NullNotifier()
    return RecalcOrchestrator(
        execution_logs=SqlExecutionLogStore(),
        metrics=SqlMetricStore(),
        reflections=SqlReflectionQualityProvider(),
        cache=RedisCacheSink(redis),
        notifier=notifier,
        redis=redis,
    )


def build_sweep() -> MissedDaySweep:
    """Build the missed-day sweep for the hourly scheduler. Requires init_db() and init_redis()."""
    redis = get_redis()
    return MissedDaySweep(
        execution_logs=SqlExecutionLogStore(),
        queue=AlignmentQueue(redis),
        redis=redis,
        metrics=SqlMetricStore(),
    )


async def run_worker() -> None:
    logger.info("alignment_engine_starting", app_name=_settings.app_name)
    await init_db()
    await init_redis()

    worker = AlignmentWorker(build_orchestrator(), AlignmentQueue(get_redis()))
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    try:
        await worker.run()
    finally:
        await close_redis()
        await close_db()
        logger.info("alignment_engine_stopped")


def main() -> None:
    asyncio.run(run_worker())
