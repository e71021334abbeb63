from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from epoch_scores.models.score import EpochStatModel, ScoreRowModel
from epoch_scores.models.validator import ValidatorRecordModel
from epoch_scores.utils.errors import DuplicateEpochStat
from epoch_scores.utils.logger.logger import EpochScoresLogger


class DuplicateEpochPolicy(str, Enum):
    """What to do with a second row for an already seen (vote_address, epoch)"""

    KEEP_ALL = "keep-all"
    KEEP_FIRST = "keep-first"
    REJECT = "reject"


@dataclass
class _PendingRecord:
    vote_address: str
    keybase_id: Optional[str]
    description: Optional[str]
    stats: list[EpochStatModel] = field(default_factory=list)
    epochs: set[int] = field(default_factory=set)

    def freeze(self) -> ValidatorRecordModel:
        return ValidatorRecordModel(
            validator_vote_address=self.vote_address,
            keybase_id=self.keybase_id,
            validator_description=self.description,
            stats=tuple(self.stats),
        )


class ValidatorIndex:
    """
    Groups scan rows by vote address.

    Meant to be folded over the scan: `index = index.observe(row)` for every row,
    or `functools.reduce(ValidatorIndex.observe, rows, ValidatorIndex())`.
    Records keep first-seen order (dict insertion order), stats keep scan order.
    """

    policy: DuplicateEpochPolicy
    logger: Optional[EpochScoresLogger]
    rows_observed: int
    duplicates: int
    __records: dict[str, _PendingRecord]

    def __init__(
        self,
        policy: DuplicateEpochPolicy = DuplicateEpochPolicy.KEEP_ALL,
        logger: Optional[EpochScoresLogger] = None,
    ):
        self.policy = DuplicateEpochPolicy(policy)
        self.logger = logger
        self.rows_observed = 0
        self.duplicates = 0
        self.__records = {}

    def __len__(self) -> int:
        return len(self.__records)

    def __contains__(self, vote_address: str) -> bool:
        return vote_address in self.__records

    def observe(self, row: ScoreRowModel) -> "ValidatorIndex":
        self.rows_observed += 1

        record = self.__records.get(row.vote_address)

        if record is None:
            record = _PendingRecord(
                vote_address=row.vote_address,
                keybase_id=row.keybase_id,
                description=row.name,
            )
            self.__records[row.vote_address] = record

        if row.epoch in record.epochs:
            self.duplicates += 1

            if self.policy == DuplicateEpochPolicy.REJECT:
                raise DuplicateEpochStat(
                    vote_address=row.vote_address, epoch=row.epoch, position=self.rows_observed
                )

            if self.logger is not None:
                self.logger.warning(
                    "Duplicate epoch stats for validator",
                    extra={
                        "vote_address": row.vote_address,
                        "epoch": row.epoch,
                        "position": self.rows_observed,
                        "policy": self.policy.value,
                    },
                )

            if self.policy == DuplicateEpochPolicy.KEEP_FIRST:
                return self

        record.epochs.add(row.epoch)
        record.stats.append(row.to_epoch_stat())

        return self

    def records(self) -> list[ValidatorRecordModel]:
        return [record.freeze() for record in self.__records.values()]
