"""Pydantic schemas for queued tasks and their result records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)


class TaskDecodeError(ValueError):
    """Raised when a broker payload cannot be turned into a task."""


class _TaskDetails(BaseModel):
    """Base for per-type detail payloads; unknown keys are preserved."""

    model_config = ConfigDict(frozen=True, extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _non_object_as_empty(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return value
        return {}


class ShellTaskDetails(_TaskDetails):
    """Free-form details for SHELL tasks."""


class DockerTaskDetails(_TaskDetails):
    """Details for DOCKER tasks; ``command`` names the docker action."""

    command: str = ""

    @field_validator("command", mode="before")
    @classmethod
    def _non_string_as_empty(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class _TaskBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    target_host: str = ""


class ShellTask(_TaskBase):
    """Task routed to the shell handler."""

    task_type: Literal["SHELL"]
    details: ShellTaskDetails = Field(default_factory=ShellTaskDetails)


class DockerTask(_TaskBase):
    """Task routed to the docker handler."""

    task_type: Literal["DOCKER"]
    details: DockerTaskDetails = Field(default_factory=DockerTaskDetails)


Task = Annotated[Union[ShellTask, DockerTask], Field(discriminator="task_type")]

_TASK_ADAPTER: TypeAdapter[Task] = TypeAdapter(Task)


def _summarize_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(item) for item in error.get("loc", ())) or "payload"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or str(exc)


def decode_task(payload: str | bytes) -> Task:
    """Parse a JSON broker payload into a typed task.

    Raises:
        TaskDecodeError: the payload is not a JSON object, lacks ``id`` or
            ``task_type``, or names a task type other than SHELL or DOCKER.
    """

    try:
        return _TASK_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise TaskDecodeError(_summarize_validation_error(exc)) from exc


class ResultStatus(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True, slots=True)
class ResultRecord:
    """Outcome of one task as persisted for the submitter."""

    task_id: str
    status: ResultStatus
    body: str

    @classmethod
    def success(cls, task_id: str, output: str) -> "ResultRecord":
        return cls(task_id=task_id, status=ResultStatus.SUCCESS, body=output)

    @classmethod
    def error(cls, task_id: str, message: str) -> "ResultRecord":
        return cls(task_id=task_id, status=ResultStatus.ERROR, body=message)

    def render(self) -> str:
        return f"{self.status.value}: {self.body}"


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
