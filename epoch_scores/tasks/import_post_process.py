import hashlib
from pathlib import Path
from typing import Optional, Union

from epoch_scores.db.operations import DatabaseOperations
from epoch_scores.models.post_process import MergeResultModel
from epoch_scores.pipeline.batch_reader import parse_post_process_batch
from epoch_scores.pipeline.merge import EpochMergeUpsert
from epoch_scores.scheduler.task import AbstractTask
from epoch_scores.utils.logger.logger import EpochScoresLogger


class ImportPostProcessScores(AbstractTask):
    interval: float
    db_operations: DatabaseOperations
    batch_path: Path
    logger: EpochScoresLogger
    watch: bool
    merger: EpochMergeUpsert
    last_result: Optional[MergeResultModel]
    _last_merged_digest: Optional[str]
    _last_seen_stat: Optional[tuple[int, int]]

    def __init__(
        self,
        interval_seconds: float,
        db_operations: DatabaseOperations,
        batch_path: Union[str, Path],
        logger: EpochScoresLogger,
        watch: bool = False,
    ):
        """
        :param watch: scheduler mode, a missing batch file is not an error, a batch is
            merged only once its size and mtime held still since the previous run and
            a batch identical to the last merged one is not merged again.
        """
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
        self.batch_path = Path(batch_path)
        self.logger = logger
        self.watch = watch
        self.merger = EpochMergeUpsert(db_operations=db_operations, logger=logger)
        self.last_result = None
        self._last_merged_digest = None
        self._last_seen_stat = None

    @property
    def name(self):
        return "import-post-process-scores"

    @property
    def interval_seconds(self):
        return self.interval

    def batch_stat(self) -> Optional[tuple[int, int]]:
        try:
            stat = self.batch_path.stat()
        except FileNotFoundError:
            return None

        return stat.st_size, stat.st_mtime_ns

    def batch_settled(self) -> bool:
        stat = self.batch_stat()

        if stat == self._last_seen_stat:
            return True

        self._last_seen_stat = stat
        self.logger.debug(
            "Post-process batch changed, waiting for the writer",
            extra={"path": str(self.batch_path)},
        )

        return False

    async def run(self):
        if self.watch:
            if not self.batch_path.exists():
                self.logger.debug(
                    "No post-process batch to import", extra={"path": str(self.batch_path)}
                )

                return

            # Size and mtime must hold still for a full interval
            if not self.batch_settled():
                return

        content = self.batch_path.read_bytes()

        # Rewritten while being read
        if self.watch and not self.batch_settled():
            return

        digest = hashlib.sha256(content).hexdigest()

        if self.watch and digest == self._last_merged_digest:
            self.logger.debug(
                "Post-process batch already merged", extra={"path": str(self.batch_path)}
            )

            return

        batch = parse_post_process_batch(content.decode("utf-8"))

        self.logger.add_context({"batch_digest": digest[:12]})

        self.last_result = await self.merger.merge(batch)
        self._last_merged_digest = digest
