from contextlib import aclosing
from pathlib import Path
from typing import Optional, Union

from epoch_scores.db.operations import SCAN_MIN_EPOCH, DatabaseOperations
from epoch_scores.models.validator import ValidatorSnapshotModel
from epoch_scores.pipeline.index import DuplicateEpochPolicy, ValidatorIndex
from epoch_scores.pipeline.scanner import EpochRowScanner
from epoch_scores.pipeline.snapshot import SnapshotBuilder
from epoch_scores.scheduler.task import AbstractTask
from epoch_scores.utils.logger.logger import EpochScoresLogger


class GenerateSnapshot(AbstractTask):
    interval: float
    db_operations: DatabaseOperations
    snapshot_path: Path
    logger: EpochScoresLogger
    min_epoch: int
    duplicate_policy: DuplicateEpochPolicy
    last_snapshot: Optional[ValidatorSnapshotModel]

    def __init__(
        self,
        interval_seconds: float,
        db_operations: DatabaseOperations,
        snapshot_path: Union[str, Path],
        logger: EpochScoresLogger,
        min_epoch: int = SCAN_MIN_EPOCH,
        duplicate_policy: DuplicateEpochPolicy = DuplicateEpochPolicy.KEEP_ALL,
    ):
        if not isinstance(interval_seconds, float) or interval_seconds <= 0:
            raise ValueError("interval_seconds must be a positive number (float).")

        # Validate db_operations
        if not isinstance(db_operations, DatabaseOperations):
            raise TypeError("db_operations must be an instance of DatabaseOperations.")

        # Validate logger
        if not isinstance(logger, EpochScoresLogger):
            raise TypeError("logger must be an instance of EpochScoresLogger.")

        self.interval = interval_seconds
        self.db_operations = db_operations
        self.snapshot_path = Path(snapshot_path)
        self.logger = logger
        self.min_epoch = min_epoch
        self.duplicate_policy = DuplicateEpochPolicy(duplicate_policy)
        self.last_snapshot = None

    @property
    def name(self):
        return "generate-snapshot"

    @property
    def interval_seconds(self):
        return self.interval

    async def build_snapshot(self) -> tuple[ValidatorSnapshotModel, ValidatorIndex]:
        scanner = EpochRowScanner(db_operations=self.db_operations, min_epoch=self.min_epoch)
        index = ValidatorIndex(policy=self.duplicate_policy, logger=self.logger)

        async with aclosing(scanner.scan()) as rows:
            async for row in rows:
                index = index.observe(row)

        return SnapshotBuilder.build(index), index

    async def run(self):
        snapshot, index = await self.build_snapshot()

        if len(snapshot) == 0:
            self.logger.warning("Scores history is empty", extra={"min_epoch": self.min_epoch})

        SnapshotBuilder.persist(snapshot, self.snapshot_path)

        self.last_snapshot = snapshot

        self.logger.info(
            "Snapshot written",
            extra={
                "path": str(self.snapshot_path),
                "validators": len(snapshot),
                "stats": snapshot.stats_count,
                "rows": index.rows_observed,
                "duplicates": index.duplicates,
            },
        )
