from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RedisSettings(BaseSettings):
    """Broker connection settings"""

    redis_host: str = Field("127.0.0.1", description="Redis host address.")
    redis_port: int = Field(6379, ge=1, le=65535)
    redis_db: int = Field(0, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("redis_host", mode="before")
    @classmethod
    def _blank_host_to_loopback(cls, value):
        """Treat an empty REDIS_HOST the same as an unset one."""
        if value is None or not str(value).strip():
            return "127.0.0.1"
        return str(value).strip()

    @property
    def url(self) -> str:
        """Construct the redis:// URL from components"""
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


class WorkerSettings(BaseSettings):
    """Settings for the queue consumer loop."""

    namespace: str = Field(
        "mcp",
        description="Key prefix shared by task queues and result records.",
    )
    result_ttl_seconds: int = Field(
        3600,
        ge=1,
        description="Expiry applied to every result record.",
    )
    retry_delay_seconds: float = Field(
        5.0,
        ge=0,
        description="Fixed pause after a failed queue pop.",
    )
    pop_timeout_seconds: int = Field(
        0,
        ge=0,
        description="BLPOP timeout; 0 blocks until an item arrives.",
    )
    docker_binary: str = Field("docker")
    log_file: Optional[str] = Field(
        "mcp-worker.log",
        description="Append-only log file; blank disables the file sink.",
    )
    log_level: str = Field("INFO")
    structured_logs: bool = Field(False)

    model_config = SettingsConfigDict(
        env_prefix="MCP_WORKER_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def _strip_and_blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        text = str(value or "").strip().upper() or "INFO"
        if text not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return text

    @field_validator("structured_logs", mode="before")
    @classmethod
    def _coerce_structured_logs(cls, value):
        """Blank or malformed MCP_WORKER_STRUCTURED_LOGS values become False."""
        from mcp_worker.utils.env_bool import env_to_bool

        return env_to_bool(value, default=False)

    @field_validator("namespace")
    @classmethod
    def _require_namespace(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("namespace must not be blank")
        return text

    @property
    def shell_queue(self) -> str:
        return f"{self.namespace}::tasks::shell"

    @property
    def docker_queue(self) -> str:
        return f"{self.namespace}::tasks::docker"

    @property
    def queue_names(self) -> tuple[str, ...]:
        """Queues consumed by the worker, highest priority first."""
        return (self.shell_queue, self.docker_queue)

    def result_key(self, task_id: str) -> str:
        return f"{self.namespace}::result::{task_id}"


class AppSettings(BaseSettings):
    """Top-level settings for the worker process"""

    redis: RedisSettings = Field(default_factory=RedisSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Create a global settings instance
settings = AppSettings()
