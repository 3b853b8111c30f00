"""Tests for port protocols and their default implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from tests.conftest import FakeNode


def test_progress_callback_is_callable():
    """ProgressCallback should be a callable type alias."""
    from edufs.core.ports import ProgressCallback

    def my_callback(bytes_done: int, total: int) -> None:
        pass

    callback: ProgressCallback = my_callback
    assert callable(callback)


@pytest.mark.core
class TestNodePort:
    """Tests for NodePort protocol."""

    @pytest.mark.parametrize(
        "method",
        [
            "add",
            "add_directory",
            "pin",
            "cat",
            "publish_name",
            "resolve_name",
            "identity",
            "close",
        ],
    )
    def test_node_port_declares_method(self, method: str) -> None:
        from edufs.core.ports import NodePort

        assert hasattr(NodePort, method)

    def test_fake_node_satisfies_node_port(self, fake_node: FakeNode) -> None:
        from edufs.core.ports import NodePort

        assert isinstance(fake_node, NodePort)

    def test_plain_object_does_not_satisfy_node_port(self) -> None:
        from edufs.core.ports import NodePort

        assert not isinstance(object(), NodePort)


def test_ports_exported_from_package():
    """Ports should be importable from edufs.core."""
    from edufs.core import NodePort, ProgressCallback, ProgressReporter

    assert NodePort is not None
    assert ProgressCallback is not None
    assert ProgressReporter is not None


@pytest.mark.core
class TestProgressReporterProtocol:
    """Tests for ProgressReporter protocol."""

    def test_progress_reporter_is_runtime_checkable(self) -> None:
        """ProgressReporter should be runtime_checkable."""
        from edufs.core.ports import ProgressReporter

        class FakeReporter:
            def start_task(self, name: str, total: int):
                return lambda done, total: None

            def finish_task(self, name: str) -> None:
                pass

        assert isinstance(FakeReporter(), ProgressReporter)


@pytest.mark.core
class TestNullProgressReporter:
    """Tests for NullProgressReporter."""

    def test_null_reporter_satisfies_protocol(self) -> None:
        from edufs.core.ports import NullProgressReporter, ProgressReporter

        assert isinstance(NullProgressReporter(), ProgressReporter)

    def test_start_task_returns_noop_callback(self) -> None:
        from edufs.core.ports import NullProgressReporter

        callback = NullProgressReporter().start_task("a.txt", 100)
        assert callback(50, 100) is None

    def test_finish_task_is_noop(self) -> None:
        from edufs.core.ports import NullProgressReporter

        NullProgressReporter().finish_task("a.txt")


@pytest.mark.core
class TestExecutorPort:
    """Executor adapters satisfy ExecutorPort."""

    def test_adapters_satisfy_protocol(self) -> None:
        from edufs.adapters.executor import SynchronousExecutor, ThreadPoolExecutorAdapter
        from edufs.core.ports import ExecutorPort

        pool = ThreadPoolExecutorAdapter(max_workers=1)
        with pool:
            assert isinstance(pool, ExecutorPort)
        assert isinstance(SynchronousExecutor(), ExecutorPort)

    def test_synchronous_executor_runs_immediately(self) -> None:
        from edufs.adapters.executor import SynchronousExecutor

        calls: list[int] = []
        with SynchronousExecutor() as executor:
            future = executor.submit(lambda x: calls.append(x) or x * 2, 21)
            assert calls == [21]
            assert future.result() == 42

    def test_synchronous_executor_captures_exceptions(self) -> None:
        from edufs.adapters.executor import SynchronousExecutor

        def boom() -> None:
            raise RuntimeError("boom")

        future = SynchronousExecutor().submit(boom)
        with pytest.raises(RuntimeError, match="boom"):
            future.result()

    def test_thread_pool_runs_tasks(self) -> None:
        from edufs.adapters.executor import ThreadPoolExecutorAdapter

        with ThreadPoolExecutorAdapter(max_workers=2) as pool:
            futures = [pool.submit(pow, 2, n) for n in range(5)]
        assert [f.result() for f in futures] == [1, 2, 4, 8, 16]

    def test_thread_pool_can_be_entered_again(self) -> None:
        from edufs.adapters.executor import ThreadPoolExecutorAdapter

        pool = ThreadPoolExecutorAdapter(max_workers=2)
        with pool:
            first = pool.submit(pow, 2, 3)
        with pool:
            second = pool.submit(pow, 3, 2)
        assert (first.result(), second.result()) == (8, 9)
