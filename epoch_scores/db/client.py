import sqlite3
import sys
import time
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable, Optional

import aiosqlite
from sqlalchemy.exc import DBAPIError

from epoch_scores.alembic.migrate import run_migrations
from epoch_scores.utils.errors import StoreUnavailable
from epoch_scores.utils.logger.logger import EpochScoresLogger


class DatabaseClient:
    __db_path: str
    __logger: EpochScoresLogger
    __timeout: float

    def __init__(self, db_path: str, logger: EpochScoresLogger, timeout: float = 90.0) -> None:
        # Validate db_path
        if not isinstance(db_path, str):
            raise TypeError("db_path must be an instance of str.")

        # Validate logger
        if not isinstance(logger, EpochScoresLogger):
            raise TypeError("logger must be an instance of EpochScoresLogger.")

        # Validate timeout, seconds to wait for a locked database
        if not isinstance(timeout, (int, float)) or timeout < 0:
            raise ValueError("timeout must be a non-negative number.")

        self.__db_path = db_path
        self.__logger = logger
        self.__timeout = float(timeout)

    @property
    def db_path(self) -> str:
        return self.__db_path

    def __get_caller_name(self, depth: int = 3) -> str:
        try:
            return sys._getframe(depth).f_code.co_name
        except Exception:
            return "unknown"

    async def __connect(self) -> aiosqlite.Connection:
        return await aiosqlite.connect(self.__db_path, timeout=self.__timeout)

    async def __wrap_execution(
        self, operation: Callable[[aiosqlite.Connection], Awaitable[Any]]
    ) -> Any:
        start_time = time.time()

        caller = self.__get_caller_name()

        connection = None

        try:
            connection = await self.__connect()

            query_start_time = time.time()

            response = await operation(connection)

            query_ms = round((time.time() - query_start_time) * 1000)
            elapsed_time_ms = round((time.time() - start_time) * 1000)

            extra = {
                "caller": caller,
                "query_ms": query_ms,
                "elapsed_time_ms": elapsed_time_ms,
            }

            if elapsed_time_ms > 500:
                log_method = self.__logger.warning
            else:
                log_method = self.__logger.debug

            log_method("SQL executed", extra=extra)

            return response
        except sqlite3.DatabaseError as e:
            # Includes corrupt files and constraint failures
            elapsed_time_ms = round((time.time() - start_time) * 1000)

            self.__logger.exception(
                "SQL errored", extra={"elapsed_time_ms": elapsed_time_ms, "caller": caller}
            )

            raise StoreUnavailable(f"{caller}: {e}") from e
        except Exception:
            elapsed_time_ms = round((time.time() - start_time) * 1000)

            self.__logger.exception(
                "SQL errored", extra={"elapsed_time_ms": elapsed_time_ms, "caller": caller}
            )

            raise
        finally:
            if connection is not None:
                await connection.close()

    async def many(
        self,
        sql: str,
        parameters: Optional[Iterable[Any]] = None,
        use_row_factory: bool = False,
    ) -> Iterable[aiosqlite.Row]:
        async def execute(connection: aiosqlite.Connection):
            if use_row_factory:
                connection.row_factory = aiosqlite.Row

            cursor = await connection.execute(sql, parameters)
            rows = await cursor.fetchall()

            await cursor.close()

            if len(rows) > 5000:
                self.__logger.warning(
                    "Query returning many rows, use iterate()", extra={"rows": len(rows)}
                )

            return rows

        return await self.__wrap_execution(execute)

    async def iterate(
        self,
        sql: str,
        parameters: Optional[Iterable[Any]] = None,
        use_row_factory: bool = False,
    ) -> AsyncIterator[aiosqlite.Row]:
        """
        Stream the rows of a single SELECT, fetching them in chunks.
        The statement runs on its own connection, closed when the iteration ends,
        fails, or the generator is closed by the consumer.
        """
        start_time = time.time()

        caller = self.__get_caller_name(depth=2)

        connection = None
        rows_count = 0

        try:
            connection = await self.__connect()

            if use_row_factory:
                connection.row_factory = aiosqlite.Row

            async with connection.execute(sql, parameters) as cursor:
                async for row in cursor:
                    rows_count += 1

                    yield row

            self.__logger.debug(
                "SQL iterated",
                extra={
                    "caller": caller,
                    "rows": rows_count,
                    "elapsed_time_ms": round((time.time() - start_time) * 1000),
                },
            )
        except sqlite3.DatabaseError as e:
            self.__logger.exception(
                "SQL errored", extra={"caller": caller, "rows": rows_count}
            )

            raise StoreUnavailable(f"{caller}: {e}") from e
        except Exception:
            self.__logger.exception(
                "SQL errored", extra={"caller": caller, "rows": rows_count}
            )

            raise
        finally:
            if connection is not None:
                await connection.close()

    async def transaction(
        self, operation: Callable[[aiosqlite.Connection], Awaitable[Any]]
    ) -> Any:
        """
        Run `operation` as one all-or-nothing unit.
        BEGIN IMMEDIATE takes the write lock upfront: concurrent writers wait for it
        (up to the connection timeout) and readers never see a partial result.
        """

        async def execute(connection: aiosqlite.Connection):
            await connection.execute("BEGIN IMMEDIATE")

            try:
                response = await operation(connection)

                await connection.commit()
            except Exception:
                await connection.rollback()

                raise

            return response

        return await self.__wrap_execution(execute)

    async def migrate(self):
        start_time = time.time()

        self.__logger.info("Running migrations")

        try:
            run_migrations(db_file_name=self.__db_path)
        except DBAPIError as e:
            self.__logger.exception("Migrations failed")

            raise StoreUnavailable(f"migrate: {e.orig}") from e

        elapsed_time_ms = round((time.time() - start_time) * 1000)

        self.__logger.info("Migrations complete", extra={"elapsed_time_ms": elapsed_time_ms})
