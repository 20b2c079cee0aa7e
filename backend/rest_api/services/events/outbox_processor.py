"""
Background publisher for the outbox table.

Each pass claims up to outbox_batch_size PENDING rows (oldest first,
SKIP LOCKED so several API replicas can share the table), marks them
PROCESSING, publishes them to Redis and settles each one as PUBLISHED,
back to PENDING for another try, or FAILED once outbox_max_retries
attempts have been spent.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import OutboxEvent, OutboxStatus, utcnow
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from shared.infrastructure.events import CircuitOpenError, get_redis_pool, publish_from_payload

logger = get_logger(__name__)

MAX_ERROR_LENGTH = 1000


class OutboxProcessor:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        redis_factory: Callable[[], Awaitable[Any]] = get_redis_pool,
        batch_size: int | None = None,
        max_retries: int | None = None,
        poll_interval: float | None = None,
    ):
        self._session_factory = session_factory
        self._redis_factory = redis_factory
        self._batch_size = batch_size or settings.outbox_batch_size
        self._max_retries = max_retries or settings.outbox_max_retries
        self._poll_interval = poll_interval or settings.outbox_poll_interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            logger.warning("Outbox processor already running")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("Outbox processor started", poll_interval=self._poll_interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Outbox processor stopped")

    async def _loop(self) -> None:
        while True:
            try:
                published = await self.process_batch()
            except Exception as e:
                logger.error("Outbox pass crashed", error=str(e), exc_info=True)
                published = 0
            # A full batch likely means more is waiting
            if published < self._batch_size:
                await asyncio.sleep(self._poll_interval)

    def _claim(self, db: Session) -> Sequence[OutboxEvent]:
        events = db.scalars(
            select(OutboxEvent)
            .where(OutboxEvent.status == OutboxStatus.PENDING)
            .order_by(OutboxEvent.created_at, OutboxEvent.id)
            .limit(self._batch_size)
            .with_for_update(skip_locked=True)
        ).all()
        if events:
            db.execute(
                update(OutboxEvent)
                .where(OutboxEvent.id.in_([e.id for e in events]))
                .values(status=OutboxStatus.PROCESSING)
            )
            db.commit()
        return events

    def _settle(self, event: OutboxEvent, error: str | None) -> None:
        if error is None:
            event.status = OutboxStatus.PUBLISHED
            event.processed_at = utcnow()
            event.last_error = None
            return

        event.retry_count += 1
        event.last_error = error[:MAX_ERROR_LENGTH]
        if event.retry_count < self._max_retries:
            event.status = OutboxStatus.PENDING
            return

        event.status = OutboxStatus.FAILED
        logger.error(
            "Outbox event gave up",
            event_id=event.id,
            event_type=event.event_type,
            attempts=event.retry_count,
        )

    async def process_batch(self) -> int:
        """Run one pass. Returns how many events reached Redis."""
        with self._session_factory() as db:
            try:
                events = self._claim(db)
                if not events:
                    return 0

                published = 0
                for index, event in enumerate(events):
                    try:
                        error = await self._publish(event)
                    except CircuitOpenError:
                        # Not attempted: release the rest without spending a retry
                        for pending in events[index:]:
                            pending.status = OutboxStatus.PENDING
                        logger.warning("Outbox paused, circuit open", released=len(events) - index)
                        break
                    self._settle(event, error)
                    if error is None:
                        published += 1
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Outbox pass failed", error=str(e))
                return 0

        logger.info("Outbox batch processed", claimed=len(events), published=published)
        return published

    async def _publish(self, event: OutboxEvent) -> str | None:
        """None on success, the error text otherwise."""
        try:
            redis_client = await self._redis_factory()
            await publish_from_payload(redis_client, event.event_type, json.loads(event.payload))
        except CircuitOpenError:
            raise
        except Exception as e:
            logger.warning(
                "Outbox publish failed",
                event_id=event.id,
                event_type=event.event_type,
                error=str(e),
            )
            return str(e) or type(e).__name__
        return None


_processor: OutboxProcessor | None = None


def get_outbox_processor() -> OutboxProcessor:
    global _processor
    if _processor is None:
        _processor = OutboxProcessor()
    return _processor


async def start_outbox_processor() -> None:
    await get_outbox_processor().start()


async def stop_outbox_processor() -> None:
    await get_outbox_processor().stop()


async def process_pending_events_once() -> int:
    """One pass outside the background loop (CLI outbox-flush)."""
    return await get_outbox_processor().process_batch()
