import asyncio
import time

from epoch_scores.scheduler.task import AbstractTask, TaskStatus
from epoch_scores.utils.logger.logger import EpochScoresLogger


class TasksScheduler:
    """
    Runs every added task forever, each on its own interval.
    A failing run is logged and the task is retried on its next interval.
    """

    __tasks: list[AbstractTask]
    __logger: EpochScoresLogger

    def __init__(self, logger: EpochScoresLogger):
        if not isinstance(logger, EpochScoresLogger):
            raise TypeError("logger must be an instance of EpochScoresLogger.")

        self.__tasks = []
        self.__logger = logger

    async def execute(self, task: AbstractTask) -> bool:
        """Run the task once in a new trace; returns False if it raised"""
        start_time = time.time()

        self.__logger.start_trace()

        task.status = TaskStatus.RUNNING

        self.__logger.info("Task started", extra={"task_name": task.name})

        try:
            await task.run()

            task.record_run(succeeded=True)

            self.__logger.info(
                "Task finished",
                extra={
                    "task_name": task.name,
                    "elapsed_time_ms": round((time.time() - start_time) * 1000),
                },
            )

            return True
        except Exception:
            consecutive_failures = task.record_run(succeeded=False)

            self.__logger.exception(
                "Task errored",
                extra={
                    "task_name": task.name,
                    "consecutive_failures": consecutive_failures,
                    "elapsed_time_ms": round((time.time() - start_time) * 1000),
                },
            )

            return False
        finally:
            task.status = TaskStatus.IDLE

    async def __schedule_task(self, task: AbstractTask):
        while True:
            await self.execute(task)

            await asyncio.sleep(task.interval_seconds)

    def add(self, task: AbstractTask):
        tasks_names = {item.name for item in self.__tasks}

        if task.name in tasks_names:
            raise ValueError(f"Task '{task.name}' already added")

        self.__tasks.append(task)

    async def start(self):
        scheduled_tasks = []

        for task in self.__tasks:
            if task.status != TaskStatus.UNSCHEDULED:
                continue

            scheduled_tasks.append(self.__schedule_task(task))

        await asyncio.gather(*scheduled_tasks)
