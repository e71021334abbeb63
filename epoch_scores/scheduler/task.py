from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class TaskStatus(str, Enum):
    UNSCHEDULED = "unscheduled"
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class AbstractTask(ABC):
    """
    A pipeline job (snapshot, merge, export): run once from the CLI,
    or every `interval_seconds` by the scheduler.
    """

    status: TaskStatus = field(init=False, default=TaskStatus.UNSCHEDULED)

    # Failed runs since the last successful one, kept by the scheduler
    consecutive_failures: int = field(init=False, default=0)

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def interval_seconds(self) -> float:
        pass

    @abstractmethod
    async def run(self) -> None:
        pass

    def record_run(self, succeeded: bool) -> int:
        if succeeded:
            self.consecutive_failures = 0
        else:
            self.consecutive_failures += 1

        return self.consecutive_failures

    def __post_init__(self):
        """
        :raises ValueError: the name is not a non-empty string or the interval is not
            a non-negative float; the scheduler sleeps on it between runs.
        """
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Task name must be a non-empty string, got {self.name!r}.")

        if not callable(self.run):
            raise ValueError(f"Task '{self.name}' run must be callable.")

        if not isinstance(self.interval_seconds, float) or self.interval_seconds < 0.0:
            raise ValueError(
                f"Task '{self.name}' interval_seconds must be a non-negative float, "
                f"got {self.interval_seconds!r}."
            )
