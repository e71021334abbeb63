import pytest

from epoch_scores.scheduler.task import AbstractTask, TaskStatus


class SnapshotTask(AbstractTask):
    @property
    def name(self):
        return "generate-snapshot"

    @property
    def interval_seconds(self):
        return 5.0

    async def run(self):
        pass


class TestTask:
    def test_task_initialization_valid(self):
        task = SnapshotTask()

        assert task.name == "generate-snapshot"
        assert task.interval_seconds == 5.0
        assert task.status == TaskStatus.UNSCHEDULED
        assert task.status == "unscheduled"
        assert task.consecutive_failures == 0
        assert callable(task.run)

    def test_task_initialization_invalid(self):
        class InvalidName(SnapshotTask):
            @property
            def name(self):
                return None

        class EmptyName(SnapshotTask):
            @property
            def name(self):
                return ""

        class NegativeInterval(SnapshotTask):
            @property
            def interval_seconds(self):
                return -1.0

        class IntegerInterval(SnapshotTask):
            @property
            def interval_seconds(self):
                return 5

        class UndefinedRun(AbstractTask):
            @property
            def name(self):
                return "generate-snapshot"

            @property
            def interval_seconds(self):
                return 5.0

        with pytest.raises(ValueError, match="name must be a non-empty string, got None"):
            InvalidName()

        with pytest.raises(ValueError, match="name must be a non-empty string"):
            EmptyName()

        with pytest.raises(ValueError, match="'generate-snapshot' interval_seconds .* got -1.0"):
            NegativeInterval()

        with pytest.raises(ValueError, match="got 5"):
            IntegerInterval()

        with pytest.raises(TypeError):
            UndefinedRun()

    def test_record_run(self):
        task = SnapshotTask()

        assert task.record_run(succeeded=False) == 1
        assert task.record_run(succeeded=False) == 2
        assert task.record_run(succeeded=True) == 0
        assert task.consecutive_failures == 0

        # Counters are per instance
        assert SnapshotTask().consecutive_failures == 0
