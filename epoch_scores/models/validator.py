from typing import Optional

from pydantic import BaseModel, RootModel, model_validator

from epoch_scores.models.score import EpochStatModel


class ValidatorRecordModel(BaseModel):
    model_config = {"frozen": True}

    validator_vote_address: str
    keybase_id: Optional[str] = None
    validator_description: Optional[str] = None
    # Scan order: epochs are non-increasing
    stats: tuple[EpochStatModel, ...] = ()


class ValidatorSnapshotModel(RootModel[tuple[ValidatorRecordModel, ...]]):
    """Every validator seen by one aggregation run, in first-seen order"""

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_unique_vote_addresses(self) -> "ValidatorSnapshotModel":
        seen = set()

        for record in self.root:
            if record.validator_vote_address in seen:
                raise ValueError(
                    f"Duplicate validator_vote_address {record.validator_vote_address}"
                )

            seen.add(record.validator_vote_address)

        return self

    def __len__(self) -> int:
        return len(self.root)

    def __iter__(self):
        return iter(self.root)

    def __getitem__(self, item) -> ValidatorRecordModel:
        return self.root[item]

    @property
    def stats_count(self) -> int:
        return sum(len(record.stats) for record in self.root)
