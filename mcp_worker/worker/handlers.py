"""Command execution for decoded worker tasks."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from mcp_worker.schemas.task_models import DockerTask, ShellTask, Task

SHELL_ACKNOWLEDGEMENT = "Shell command executed successfully."
LIST_CONTAINERS_COMMAND = "list_containers"


class TaskExecutionError(RuntimeError):
    """Raised when a task cannot be executed; reported back as an ERROR result."""


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Normalized execution result consumed by the worker loop."""

    succeeded: bool
    output: str | None
    error_message: str | None

    @classmethod
    def success(cls, output: str) -> "ExecutionOutcome":
        return cls(succeeded=True, output=output, error_message=None)

    @classmethod
    def failure(cls, message: str) -> "ExecutionOutcome":
        return cls(succeeded=False, output=None, error_message=message)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output from a single subprocess command."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class TaskExecutor:
    """Runs SHELL and DOCKER tasks against the local host."""

    def __init__(
        self,
        *,
        docker_binary: str = "docker",
        logger: logging.Logger | None = None,
    ) -> None:
        self._docker_binary = docker_binary
        self._logger = logger or logging.getLogger(__name__)
        self._docker_commands: dict[str, Callable[[DockerTask], Awaitable[str]]] = {
            LIST_CONTAINERS_COMMAND: self._list_containers,
        }

    async def execute(self, task: Task) -> ExecutionOutcome:
        """Run ``task`` and fold any execution failure into the outcome."""

        self._logger.info("Executing task type: %s", task.task_type)
        try:
            if isinstance(task, ShellTask):
                output = await self._execute_shell(task)
            elif isinstance(task, DockerTask):
                output = await self._execute_docker(task)
            else:
                raise TaskExecutionError(f"Unsupported task type: {task.task_type}")
        except TaskExecutionError as exc:
            self._logger.warning("Task %s failed: %s", task.id, exc)
            return ExecutionOutcome.failure(str(exc))
        return ExecutionOutcome.success(output)

    async def _execute_shell(self, task: ShellTask) -> str:
        # Placeholder: nothing is run for SHELL tasks yet.
        self._logger.info("Task %s is SHELL; not implemented, reporting success", task.id)
        return SHELL_ACKNOWLEDGEMENT

    async def _execute_docker(self, task: DockerTask) -> str:
        command = task.details.command
        action = self._docker_commands.get(command)
        if action is None:
            raise TaskExecutionError(f"Unsupported Docker command: {command}")
        return await action(task)

    async def _list_containers(self, task: DockerTask) -> str:
        result = await self._run_command(
            [self._docker_binary, "ps", "-a", "--format", "{{json .}}"],
            label="docker",
        )
        if result.returncode != 0:
            raise TaskExecutionError(f"Docker command failed: {result.stderr}")
        return result.stdout

    async def _run_command(self, command: list[str], *, label: str) -> CommandResult:
        self._logger.info("Executing %s", " ".join(command))
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout_bytes, stderr_bytes = await process.communicate()
        except OSError as exc:
            raise TaskExecutionError(
                f"Failed to execute {label} command: {exc}"
            ) from exc

        return CommandResult(
            command=tuple(command),
            returncode=process.returncode,
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
        )


__all__ = [
    "CommandResult",
    "ExecutionOutcome",
    "LIST_CONTAINERS_COMMAND",
    "SHELL_ACKNOWLEDGEMENT",
    "TaskExecutionError",
    "TaskExecutor",
]
