from contextlib import aclosing
from typing import AsyncIterator, Mapping

from epoch_scores.db.operations import SCAN_MIN_EPOCH, DatabaseOperations
from epoch_scores.models.parse import ParseError, ParseResult, parse_model
from epoch_scores.models.score import ScoreRowModel
from epoch_scores.utils.errors import MalformedRow

REQUIRED_FIELDS = ("vote_address", "epoch")


def parse_score_row(raw: Mapping, position: int) -> ParseResult[ScoreRowModel]:
    for field in REQUIRED_FIELDS:
        value = raw.get(field)

        if value is None or (isinstance(value, str) and not value.strip()):
            return ParseError(reason=f"missing {field}", position=position)

    return parse_model(ScoreRowModel, raw, position=position)


class EpochRowScanner:
    """
    Single pass over the `scores` history, newest epoch first.

    `min_epoch` is the epoch floor of the query; the default keeps the whole history.
    """

    db_operations: DatabaseOperations
    min_epoch: int
    _consumed: bool

    def __init__(self, db_operations: DatabaseOperations, min_epoch: int = SCAN_MIN_EPOCH):
        if not isinstance(db_operations, DatabaseOperations):
            raise TypeError("db_operations must be an instance of DatabaseOperations.")

        if not isinstance(min_epoch, int) or min_epoch < SCAN_MIN_EPOCH:
            raise ValueError(f"min_epoch must be an integer >= {SCAN_MIN_EPOCH}.")

        self.db_operations = db_operations
        self.min_epoch = min_epoch
        self._consumed = False

    async def scan(self) -> AsyncIterator[ScoreRowModel]:
        if self._consumed:
            raise RuntimeError("EpochRowScanner can only be scanned once.")

        self._consumed = True

        position = 0

        async with aclosing(self.db_operations.scan_scores(min_epoch=self.min_epoch)) as rows:
            async for row in rows:
                position += 1

                raw = dict(row)
                result = parse_score_row(raw, position=position)

                if isinstance(result, ParseError):
                    raise MalformedRow(
                        reason=result.reason,
                        position=position,
                        vote_address=raw.get("vote_address"),
                        epoch=raw.get("epoch"),
                    )

                yield result.value
