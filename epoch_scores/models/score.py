from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

# Store columns are loosely typed, keep ints as ints in the snapshot output
Number = Union[int, float]


class EpochStatModel(BaseModel):
    """One validator's measurements for one epoch, as written to the snapshot"""

    model_config = {"frozen": True}

    epoch: int
    score: Optional[Number] = None
    avg_position: Optional[Number] = None
    commission: Optional[Number] = None
    active_stake: Optional[Number] = None
    epoch_credits: Optional[Number] = None
    data_center_concentration: Optional[Number] = None
    can_halt_the_network_group: Optional[bool] = None
    stake_state: Optional[str] = None
    stake_state_reason: Optional[str] = None
    pct: Optional[Number] = None
    stake_conc: Optional[Number] = None
    adj_credits: Optional[Number] = None

    @field_validator("can_halt_the_network_group", mode="before")
    def parse_can_halt_as_bool(cls, v: Any) -> Optional[bool]:
        # SQLite stores booleans as 0 / 1
        if isinstance(v, int):
            return bool(v)
        return v


class ScoreRowModel(EpochStatModel):
    """A row of the `scores` relation: keep it 1:1 with the columns read by the scan"""

    vote_address: str = Field(min_length=1)
    keybase_id: Optional[str] = None
    name: Optional[str] = None

    def to_epoch_stat(self) -> EpochStatModel:
        return EpochStatModel(**self.model_dump(include=set(EPOCH_STAT_FIELDS)))


EPOCH_STAT_FIELDS = list(EpochStatModel.model_fields.keys())

SCORE_ROW_FIELDS = list(ScoreRowModel.model_fields.keys())
