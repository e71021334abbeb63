"""Scores table

Revision ID: 4c1f0a7d9b2e
Revises:
Create Date: 2026-03-02 10:14:51.208337

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1f0a7d9b2e"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Filled by the external scoring job, append-only history.
    # No NOT NULL constraints: the scan reports incomplete rows instead of hiding them
    op.execute(
        """
            CREATE TABLE IF NOT EXISTS scores (
                vote_address TEXT,
                keybase_id TEXT,
                name TEXT,
                epoch INTEGER,
                score INTEGER,
                avg_position REAL,
                commission INTEGER,
                active_stake INTEGER,
                epoch_credits INTEGER,
                data_center_concentration REAL,
                can_halt_the_network_group BOOLEAN,
                stake_state TEXT,
                stake_state_reason TEXT,
                pct REAL,
                stake_conc REAL,
                adj_credits INTEGER
            )
        """
    )

    op.execute(
        """
            CREATE INDEX IF NOT EXISTS idx_scores_epoch ON scores (epoch)
        """
    )
