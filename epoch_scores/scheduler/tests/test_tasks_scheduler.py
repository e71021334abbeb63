import asyncio
from unittest.mock import MagicMock

import pytest

from epoch_scores.scheduler.task import AbstractTask, TaskStatus
from epoch_scores.scheduler.tasks_scheduler import TasksScheduler
from epoch_scores.utils.logger.logger import EpochScoresLogger


def make_task(name: str, interval_seconds: float, run) -> AbstractTask:
    class TestTask(AbstractTask):
        @property
        def name(self):
            return name

        @property
        def interval_seconds(self):
            return interval_seconds

        async def run(self):
            await run()

    return TestTask()


class TestTasksScheduler:
    @pytest.fixture(scope="class")
    def await_start_with_timeout(self):
        async def _await_start_with_timeout(start_future, timeout):
            try:
                return await asyncio.wait_for(start_future, timeout)
            except asyncio.TimeoutError:
                pass

        return _await_start_with_timeout

    @pytest.fixture
    def logger(self):
        return MagicMock(spec=EpochScoresLogger)

    @pytest.fixture(scope="function")
    def scheduler(self, logger):
        return TasksScheduler(logger=logger)

    def test_invalid_logger(self):
        with pytest.raises(TypeError):
            TasksScheduler(logger=None)

    async def test_scheduler_no_tasks(self, scheduler):
        await scheduler.start()

    async def test_add_task(self, scheduler):
        async def run():
            pass

        scheduler.add(make_task("generate-snapshot", 5.0, run))

        assert len(scheduler._TasksScheduler__tasks) == 1
        assert scheduler._TasksScheduler__tasks[0].name == "generate-snapshot"

    async def test_add_duplicate_task_name(self, scheduler):
        async def run():
            pass

        scheduler.add(make_task("generate-snapshot", 5.0, run))

        with pytest.raises(ValueError, match="already added"):
            scheduler.add(make_task("generate-snapshot", 1.0, run))

    async def test_execute(self, scheduler, logger):
        runs = 0

        async def run():
            nonlocal runs
            runs += 1

        task = make_task("generate-snapshot", 5.0, run)

        assert await scheduler.execute(task) is True

        assert runs == 1
        assert task.status == TaskStatus.IDLE
        logger.start_trace.assert_called_once()
        assert [c.args[0] for c in logger.info.call_args_list] == [
            "Task started",
            "Task finished",
        ]

    async def test_execute_error(self, scheduler, logger):
        async def run():
            raise RuntimeError("Simulated error")

        task = make_task("import-post-process-scores", 5.0, run)

        assert await scheduler.execute(task) is False

        assert task.status == TaskStatus.IDLE
        logger.exception.assert_called_once()
        assert logger.exception.call_args.args[0] == "Task errored"
        assert logger.exception.call_args.kwargs["extra"]["task_name"] == (
            "import-post-process-scores"
        )

    async def test_execute_counts_consecutive_failures(self, scheduler, logger):
        outcomes = [RuntimeError("locked"), RuntimeError("locked"), None, RuntimeError("locked")]

        async def run():
            error = outcomes.pop(0)

            if error is not None:
                raise error

        task = make_task("import-post-process-scores", 5.0, run)

        for _ in range(4):
            await scheduler.execute(task)

        failures = [
            c.kwargs["extra"]["consecutive_failures"] for c in logger.exception.call_args_list
        ]

        assert failures == [1, 2, 1]
        assert task.consecutive_failures == 1

    async def test_schedule_task_execution(self, logger, scheduler, await_start_with_timeout):
        runs = 0

        interval_seconds = 0.5

        async def run():
            nonlocal runs
            runs += 1

        scheduler.add(make_task("generate-snapshot", interval_seconds, run))

        await await_start_with_timeout(
            start_future=scheduler.start(), timeout=interval_seconds * 2.1
        )

        # Runs at 0, 0.5 and 1.0 seconds
        assert logger.start_trace.call_count == 3
        assert runs == 3

    async def test_tasks_run_concurrently_at_intervals(
        self, logger, scheduler, await_start_with_timeout
    ):
        interval_seconds = 0.5

        runs = {"merge": 0, "snapshot": 0}

        async def run_merge():
            runs["merge"] += 1

        async def run_snapshot():
            runs["snapshot"] += 1

        scheduler.add(make_task("import-post-process-scores", interval_seconds, run_merge))
        scheduler.add(make_task("generate-snapshot", interval_seconds, run_snapshot))

        await await_start_with_timeout(
            start_future=scheduler.start(), timeout=interval_seconds * 2.1
        )

        assert runs == {"merge": 3, "snapshot": 3}
        assert logger.start_trace.call_count == 6

    async def test_task_execution_error_keeps_loop(self, scheduler, await_start_with_timeout):
        runs = 0

        interval_seconds = 0.5

        async def run():
            nonlocal runs
            runs += 1

            raise Exception("Simulated error")

        task = make_task("generate-snapshot", interval_seconds, run)
        scheduler.add(task)

        await await_start_with_timeout(
            start_future=scheduler.start(), timeout=interval_seconds * 1.5
        )

        assert runs == 2
        assert task.status == TaskStatus.IDLE

    async def test_task_with_invalid_status(self, scheduler, await_start_with_timeout):
        runs = 0

        async def run():
            nonlocal runs
            runs += 1

        task = make_task("generate-snapshot", 0.01, run)
        task.status = TaskStatus.IDLE
        scheduler.add(task)

        await await_start_with_timeout(start_future=scheduler.start(), timeout=1)

        # Already started tasks are not scheduled again
        assert runs == 0
        assert task.status == TaskStatus.IDLE
