from pathlib import Path
from typing import Union

import pandas as pd

from epoch_scores.db.operations import AVERAGES_FIELDS, DatabaseOperations
from epoch_scores.scheduler.task import AbstractTask
from epoch_scores.utils.files import write_atomic
from epoch_scores.utils.logger.logger import EpochScoresLogger


class ExportAverages(AbstractTask):
    """Writes avg.csv, the input of the external post-process scoring step"""

    interval: float
    db_operations: DatabaseOperations
    output_path: Path
    logger: EpochScoresLogger

    def __init__(
        self,
        interval_seconds: float,
        db_operations: DatabaseOperations,
        output_path: Union[str, Path],
        logger: EpochScoresLogger,
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
        self.output_path = Path(output_path)
        self.logger = logger

    @property
    def name(self):
        return "export-averages"

    @property
    def interval_seconds(self):
        return self.interval

    def to_csv(self, averages: list[dict]) -> str:
        # object dtype: nullable integer columns must not turn into floats
        averages_df = pd.DataFrame(averages, columns=AVERAGES_FIELDS, dtype=object)

        return averages_df.to_csv(index=False, lineterminator="\n")

    async def run(self):
        averages = await self.db_operations.get_averages()

        if not averages:
            self.logger.warning("No averages to export")

        write_atomic(self.output_path, self.to_csv(averages))

        self.logger.info(
            "Averages exported",
            extra={"path": str(self.output_path), "rows": len(averages)},
        )
