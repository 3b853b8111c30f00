"""Executor adapters for parallel execution."""

from edufs.adapters.executor.executor import (
    SynchronousExecutor,
    ThreadPoolExecutorAdapter,
)


__all__ = ["SynchronousExecutor", "ThreadPoolExecutorAdapter"]
