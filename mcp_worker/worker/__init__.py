"""MCP worker daemon package."""

from mcp_worker.worker.broker import (
    BrokerConnectionError,
    BrokerError,
    BrokerOperationError,
    RedisBrokerClient,
)
from mcp_worker.worker.handlers import (
    CommandResult,
    ExecutionOutcome,
    TaskExecutionError,
    TaskExecutor,
)
from mcp_worker.worker.worker import McpWorker

__all__ = [
    "BrokerConnectionError",
    "BrokerError",
    "BrokerOperationError",
    "CommandResult",
    "ExecutionOutcome",
    "McpWorker",
    "RedisBrokerClient",
    "TaskExecutionError",
    "TaskExecutor",
]
