from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

# The upstream CSV header names this column literally; a header line imported as data
# carries this value in its vote_address cell
HEADER_VOTE_ADDRESS = "vote_address"


class PostProcessRowModel(BaseModel):
    """Post-process scoring row: keep it 1:1 with the scores2 table, same column order"""

    epoch: int
    rank: Optional[int] = None
    score: Optional[int] = None
    name: Optional[str] = None
    credits_observed: Optional[int] = None
    vote_address: str = Field(min_length=1)
    commission: Optional[int] = None
    average_position: Optional[float] = None
    data_center_concentration: Optional[float] = None
    # Averaged upstream; the INTEGER column keeps fractional values as REAL
    avg_active_stake: Optional[float] = None
    apy: Optional[float] = None
    delinquent: Optional[bool] = None
    this_epoch_credits: Optional[int] = None
    pct: Optional[float] = None
    marinade_staked: Optional[float] = None
    should_have: Optional[float] = None
    remove_level: Optional[int] = None
    remove_level_reason: Optional[str] = None
    under_nakamoto_coefficient: Optional[bool] = None
    keybase_id: Optional[str] = None
    identity: Optional[str] = None
    stake_concentration: Optional[float] = None
    base_score: Optional[int] = None

    @field_validator("*", mode="before")
    def parse_empty_cell_as_none(cls, v: Any) -> Any:
        # CSV cells are strings, an empty cell is a NULL column
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @field_validator("delinquent", "under_nakamoto_coefficient", mode="before")
    def parse_flag_as_bool(cls, v: Any) -> Any:
        # SQLite returns 0 / 1, the CSV may hold any casing of true / false
        if isinstance(v, int):
            return bool(v)
        if isinstance(v, str):
            return v.strip().lower()
        return v


class MergeResultModel(BaseModel):
    epoch: int
    inserted: int
    deleted: int
    header_rows_stripped: int = 0


POST_PROCESS_FIELDS = list(PostProcessRowModel.model_fields.keys())
