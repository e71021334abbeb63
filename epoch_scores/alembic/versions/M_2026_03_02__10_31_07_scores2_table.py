"""Scores2 table

Revision ID: 8e35b6c2d1f4
Revises: 4c1f0a7d9b2e
Create Date: 2026-03-02 10:31:07.554120

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8e35b6c2d1f4"
down_revision: Union[str, None] = "4c1f0a7d9b2e"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Column names are read by the stake allocation and report tools, do not rename
    op.execute(
        """
            CREATE TABLE IF NOT EXISTS scores2 (
                epoch INT,
                rank INT,
                score INTEGER,
                name TEXT,
                credits_observed INTEGER,
                vote_address TEXT,
                commission INTEGER,
                average_position DOUBLE,
                data_center_concentration DOUBLE,
                avg_active_stake INTEGER,
                apy DOUBLE,
                delinquent BOOL,
                this_epoch_credits INTEGER,
                pct DOUBLE,
                marinade_staked DOUBLE,
                should_have DOUBLE,
                remove_level INTEGER,
                remove_level_reason TEXT,
                under_nakamoto_coefficient BOOLEAN,
                keybase_id TEXT,
                identity TEXT,
                stake_concentration DOUBLE,
                base_score INTEGER
            )
        """
    )

    op.execute(
        """
            CREATE INDEX IF NOT EXISTS idx_scores2_epoch ON scores2 (epoch)
        """
    )
