"""Pydantic schemas for broker payloads."""

from mcp_worker.schemas.task_models import (
    DockerTask,
    DockerTaskDetails,
    ResultRecord,
    ResultStatus,
    ShellTask,
    ShellTaskDetails,
    Task,
    TaskDecodeError,
    decode_task,
)

__all__ = [
    "DockerTask",
    "DockerTaskDetails",
    "ResultRecord",
    "ResultStatus",
    "ShellTask",
    "ShellTaskDetails",
    "Task",
    "TaskDecodeError",
    "decode_task",
]
