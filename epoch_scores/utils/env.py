import os
from sqlite3 import sqlite_version
from sys import version_info

from pydantic import BaseModel


class EnvironmentVariables(BaseModel):
    INLINE_LOGS: bool
    GIT_COMMIT_HASH: str
    EPOCH_SCORES_DB_PATH: str


ENVIRONMENT_VARIABLES = EnvironmentVariables(
    INLINE_LOGS=os.getenv("INLINE_LOGS", "false").lower()
    in [
        "true",
        "1",
    ],
    GIT_COMMIT_HASH=os.getenv("GIT_COMMIT_HASH", "-"),
    EPOCH_SCORES_DB_PATH=os.getenv("EPOCH_SCORES_DB_PATH", "scores.sqlite3"),
)


def tuple_version_to_str(version: tuple) -> str:
    return ".".join(map(str, version))


def assert_requirements():
    # Assert Python version
    system_python_version = version_info[:3]

    MIN_PYTHON_VERSION = (3, 10, 0)

    if system_python_version < MIN_PYTHON_VERSION:
        raise AssertionError(
            (
                f"Python version must be at least {tuple_version_to_str(MIN_PYTHON_VERSION)}"
                f", your version is {tuple_version_to_str(system_python_version)}"
            )
        )

    # RETURNING clauses need SQLite 3.35
    MIN_SQLITE_VERSION = (3, 35, 0)

    system_sqlite_version = tuple(map(int, sqlite_version.split(".")))

    if system_sqlite_version[0] != MIN_SQLITE_VERSION[0]:
        raise AssertionError(
            (
                f"SQLite major version must be {MIN_SQLITE_VERSION[0]}"
                f", your version is {system_sqlite_version[0]}"
            )
        )

    if system_sqlite_version < MIN_SQLITE_VERSION:
        raise AssertionError(
            (
                f"SQLite version must be at least {tuple_version_to_str(MIN_SQLITE_VERSION)}"
                f", your version is {tuple_version_to_str(system_sqlite_version)}"
            )
        )

    return {
        "python_version": tuple_version_to_str(system_python_version),
        "sqlite_version": tuple_version_to_str(system_sqlite_version),
    }
