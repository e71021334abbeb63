from typing import Any, Mapping, Sequence, Union

from epoch_scores.db.operations import DatabaseOperations
from epoch_scores.models.parse import ParseError, parse_model
from epoch_scores.models.post_process import (
    HEADER_VOTE_ADDRESS,
    MergeResultModel,
    PostProcessRowModel,
)
from epoch_scores.utils.errors import EmptyBatch, MalformedRow, MultiEpochBatch
from epoch_scores.utils.logger.logger import EpochScoresLogger

BatchRow = Union[Mapping[str, Any], PostProcessRowModel]


def _field(row: BatchRow, name: str) -> Any:
    if isinstance(row, PostProcessRowModel):
        return getattr(row, name)

    return row.get(name)


def strip_header_rows(batch: Sequence[BatchRow]) -> tuple[list[tuple[int, BatchRow]], int]:
    """Drop header lines imported as data; keeps the 1-based batch position of the rest"""
    kept = []
    stripped = 0

    for position, row in enumerate(batch, start=1):
        if _field(row, "vote_address") == HEADER_VOTE_ADDRESS:
            stripped += 1
            continue

        kept.append((position, row))

    return kept, stripped


def validate_batch(batch: Sequence[BatchRow]) -> tuple[int, list[PostProcessRowModel], int]:
    """
    Check a whole batch before anything is written.
    Returns (epoch, rows, header_rows_stripped).
    """
    kept, stripped = strip_header_rows(batch)

    rows = []

    for position, row in kept:
        if isinstance(row, PostProcessRowModel):
            rows.append(row)
            continue

        result = parse_model(PostProcessRowModel, row, position=position)

        if isinstance(result, ParseError):
            raise MalformedRow(
                reason=result.reason,
                position=position,
                vote_address=_field(row, "vote_address"),
                epoch=_field(row, "epoch"),
            )

        rows.append(result.value)

    if not rows:
        raise EmptyBatch(header_rows_stripped=stripped)

    epochs = {row.epoch for row in rows}

    if len(epochs) != 1:
        raise MultiEpochBatch(epochs)

    return epochs.pop(), rows, stripped


class EpochMergeUpsert:
    """Replace one epoch of scores2 with a freshly computed post-process batch"""

    db_operations: DatabaseOperations
    logger: EpochScoresLogger

    def __init__(self, db_operations: DatabaseOperations, logger: EpochScoresLogger):
        if not isinstance(db_operations, DatabaseOperations):
            raise TypeError("db_operations must be an instance of DatabaseOperations.")

        if not isinstance(logger, EpochScoresLogger):
            raise TypeError("logger must be an instance of EpochScoresLogger.")

        self.db_operations = db_operations
        self.logger = logger

    async def merge(self, batch: Sequence[BatchRow]) -> MergeResultModel:
        epoch, rows, stripped = validate_batch(batch)

        # One stripped row is the CSV header line itself
        if stripped > 1:
            self.logger.warning(
                "Header rows stripped from batch",
                extra={"epoch": epoch, "header_rows_stripped": stripped},
            )

        deleted, inserted = await self.db_operations.replace_post_process_scores(
            epoch=epoch, rows=rows
        )

        result = MergeResultModel(
            epoch=epoch, inserted=inserted, deleted=deleted, header_rows_stripped=stripped
        )

        self.logger.info("Epoch scores merged", extra=result.model_dump())

        return result
