import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiosqlite

from epoch_scores.db.client import DatabaseClient
from epoch_scores.models.post_process import POST_PROCESS_FIELDS, PostProcessRowModel
from epoch_scores.models.score import SCORE_ROW_FIELDS
from epoch_scores.utils.logger.logger import EpochScoresLogger

# Lowest epoch floor accepted by the scan: -1 keeps every epoch
SCAN_MIN_EPOCH = -1

AVERAGES_FIELDS = [
    "rank",
    "pct",
    "epoch",
    "keybase_id",
    "name",
    "vote_address",
    "score",
    "average_position",
    "epoch_credits",
    "commission",
    "data_center_concentration",
    "base_score",
    "mult",
    "avg_score",
    "avg_active_stake",
    "identity",
    "can_halt_the_network_group",
    "stake_conc",
]


class DatabaseOperations:
    __db_client: DatabaseClient
    __epoch_locks: dict[tuple[str, int], tuple[asyncio.Lock, int]]
    logger: EpochScoresLogger

    def __init__(self, db_client: DatabaseClient, logger: EpochScoresLogger):
        if not isinstance(db_client, DatabaseClient):
            raise ValueError("Invalid db_client arg")

        if not isinstance(logger, EpochScoresLogger):
            raise TypeError("logger must be an instance of EpochScoresLogger.")

        self.__db_client = db_client
        self.__epoch_locks = {}
        self.logger = logger

    @asynccontextmanager
    async def epoch_lock(self, relation: str, epoch: int) -> AsyncIterator[None]:
        """
        Writers of the same (relation, epoch) slice run one after the other.
        A lock lives only while it is held or waited for.
        """
        key = (relation, epoch)

        lock, users = self.__epoch_locks.get(key, (None, 0))

        if lock is None:
            lock = asyncio.Lock()

        self.__epoch_locks[key] = (lock, users + 1)

        try:
            async with lock:
                yield
        finally:
            lock, users = self.__epoch_locks[key]

            if users == 1:
                del self.__epoch_locks[key]
            else:
                self.__epoch_locks[key] = (lock, users - 1)

    def scan_scores(self, min_epoch: int = SCAN_MIN_EPOCH) -> AsyncIterator[aiosqlite.Row]:
        """
        Stream the scores history, newest epoch first.
        Rows without an epoch are kept (they sort last) so the caller can report them.
        """
        return self.__db_client.iterate(
            f"""
                SELECT
                    {', '.join(SCORE_ROW_FIELDS)}
                FROM
                    scores
                WHERE
                    epoch IS NULL
                    OR epoch > ?
                ORDER BY
                    epoch DESC,
                    ROWID ASC
            """,
            parameters=[min_epoch],
            use_row_factory=True,
        )

    async def replace_post_process_scores(
        self, epoch: int, rows: list[PostProcessRowModel]
    ) -> tuple[int, int]:
        """
        Replace every scores2 row of `epoch` with `rows` in one transaction.
        Returns (deleted_count, inserted_count).
        """
        columns = ", ".join(POST_PROCESS_FIELDS)
        placeholders = ", ".join("?" for _ in POST_PROCESS_FIELDS)

        # Same column order as the table, rows kept in batch order
        rows_tuples = [tuple(getattr(row, field) for field in POST_PROCESS_FIELDS) for row in rows]

        async def replace(connection: aiosqlite.Connection):
            cursor = await connection.execute(
                """
                    DELETE FROM
                        scores2
                    WHERE
                        epoch = ?
                    RETURNING
                        ROWID
                """,
                [epoch],
            )
            deleted = await cursor.fetchall()
            await cursor.close()

            cursor = await connection.executemany(
                f"""
                    INSERT INTO scores2
                        ({columns})
                    VALUES
                        ({placeholders})
                """,
                rows_tuples,
            )
            await cursor.close()

            return len(deleted), len(rows_tuples)

        async with self.epoch_lock("scores2", epoch):
            return await self.__db_client.transaction(replace)

    async def get_post_process_scores(self, epoch: int) -> list[PostProcessRowModel]:
        rows = await self.__db_client.many(
            f"""
                SELECT
                    {', '.join(POST_PROCESS_FIELDS)}
                FROM
                    scores2
                WHERE
                    epoch = ?
                ORDER BY
                    ROWID ASC
            """,
            parameters=[epoch],
            use_row_factory=True,
        )

        return [PostProcessRowModel(**dict(row)) for row in rows]

    async def count_post_process_scores_by_epoch(self) -> dict[int, int]:
        rows = await self.__db_client.many(
            """
                SELECT
                    epoch,
                    COUNT(*)
                FROM
                    scores2
                GROUP BY
                    epoch
                ORDER BY
                    epoch ASC
            """
        )

        return {row[0]: row[1] for row in rows}

    async def get_averages(self) -> list[dict]:
        """Averaged scores computed by the external scoring job, best first"""
        rows = await self.__db_client.many(
            """
                SELECT
                    rank,
                    pct,
                    epoch,
                    keybase_id,
                    name,
                    vote_address,
                    CASE
                        WHEN pct > 0 THEN CAST(avg_score AS INTEGER)
                        ELSE 0
                    END AS score,
                    avg_pos AS average_position,
                    CAST(avg_ec AS INTEGER) AS epoch_credits,
                    CAST(avg_commiss AS INTEGER) AS commission,
                    dcc2 AS data_center_concentration,
                    base_score,
                    mult,
                    avg_score,
                    avg_active_stake,
                    identity,
                    can_halt_the_network_group,
                    stake_conc
                FROM
                    AVG
                ORDER BY
                    avg_score DESC
            """,
            use_row_factory=True,
        )

        return [dict(row) for row in rows]
