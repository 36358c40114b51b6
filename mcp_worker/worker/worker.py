"""Consume, execute and report loop for the MCP worker."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from mcp_worker.config.settings import WorkerSettings
from mcp_worker.schemas.task_models import ResultRecord, Task, TaskDecodeError, decode_task
from mcp_worker.worker.broker import BrokerOperationError
from mcp_worker.worker.handlers import ExecutionOutcome

OUTCOME_PROCESSED = "processed"
OUTCOME_RESULT_LOST = "result_lost"
OUTCOME_DROPPED = "dropped"
OUTCOME_BROKER_ERROR = "broker_error"
OUTCOME_IDLE = "idle"


class BrokerClient(Protocol):
    async def blocking_pop_any(
        self, queue_names: Sequence[str], *, timeout_seconds: int = 0
    ) -> tuple[str, str] | None: ...

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None: ...


class Executor(Protocol):
    async def execute(self, task: Task) -> ExecutionOutcome: ...


class McpWorker:
    """Single-consumer loop that runs one task at a time."""

    def __init__(
        self,
        *,
        config: WorkerSettings,
        broker: BrokerClient,
        executor: Executor,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._broker = broker
        self._executor = executor
        self._logger = logger or logging.getLogger(__name__)
        self._last_run_outcome: str = OUTCOME_IDLE

    @property
    def last_run_outcome(self) -> str:
        return self._last_run_outcome

    async def run_forever(self, *, stop_event: asyncio.Event | None = None) -> None:
        """Continuously process queue items until asked to stop.

        The stop event is only checked between iterations; a pop that blocks
        without a timeout keeps the loop waiting until an item arrives.
        """

        run_stop = stop_event or asyncio.Event()
        self._logger.info(
            "Listening for commands on queues: %s", list(self._config.queue_names)
        )
        while not run_stop.is_set():
            try:
                await self.run_once()
            except Exception:
                self._logger.exception("Unhandled exception in McpWorker.run_forever")
                await asyncio.sleep(self._config.retry_delay_seconds)

    async def run_once(self) -> str:
        """Pop, execute and report at most one task."""

        outcome = await self._run_once_internal()
        self._last_run_outcome = outcome
        return outcome

    async def _run_once_internal(self) -> str:
        try:
            popped = await self._broker.blocking_pop_any(
                self._config.queue_names,
                timeout_seconds=self._config.pop_timeout_seconds,
            )
        except BrokerOperationError as exc:
            self._logger.error("Redis error in loop: %s", exc)
            await asyncio.sleep(self._config.retry_delay_seconds)
            return OUTCOME_BROKER_ERROR

        if popped is None:
            return OUTCOME_IDLE

        queue_name, payload = popped
        self._logger.info(">>> RECEIVED on %s: %s", queue_name, payload)

        try:
            task = decode_task(payload)
        except TaskDecodeError as exc:
            self._logger.error("Dropping undecodable payload from %s: %s", queue_name, exc)
            return OUTCOME_DROPPED

        self._logger.info("Processing task ID: %s", task.id)
        outcome = await self._executor.execute(task)
        record = self._build_record(task, outcome)
        key = self._config.result_key(task.id)
        try:
            await self._broker.set_with_expiry(
                key,
                record.render(),
                self._config.result_ttl_seconds,
            )
        except BrokerOperationError as exc:
            self._logger.error("Result for task %s was not written: %s", task.id, exc)
            return OUTCOME_RESULT_LOST

        self._logger.info(
            "Result for task %s written to %s (%s)", task.id, key, record.status.value
        )
        return OUTCOME_PROCESSED

    @staticmethod
    def _build_record(task: Task, outcome: ExecutionOutcome) -> ResultRecord:
        if outcome.succeeded:
            return ResultRecord.success(task.id, outcome.output or "")
        return ResultRecord.error(task.id, outcome.error_message or "")


__all__ = [
    "BrokerClient",
    "Executor",
    "McpWorker",
    "OUTCOME_BROKER_ERROR",
    "OUTCOME_DROPPED",
    "OUTCOME_IDLE",
    "OUTCOME_PROCESSED",
    "OUTCOME_RESULT_LOST",
]
