import asyncio
import sqlite3
import sys
from typing import Optional, Sequence

from epoch_scores.db.client import DatabaseClient
from epoch_scores.db.operations import DatabaseOperations
from epoch_scores.scheduler.task import AbstractTask
from epoch_scores.scheduler.tasks_scheduler import TasksScheduler
from epoch_scores.tasks.export_averages import ExportAverages
from epoch_scores.tasks.generate_snapshot import GenerateSnapshot
from epoch_scores.tasks.import_post_process import ImportPostProcessScores
from epoch_scores.utils.config import PipelineConfig, get_config
from epoch_scores.utils.env import assert_requirements
from epoch_scores.utils.errors import EpochScoresError, MalformedRow, StoreUnavailable
from epoch_scores.utils.logger.logger import logger, set_alembic_logger


async def run_once(task: AbstractTask) -> int:
    try:
        await task.run()
    except MalformedRow as e:
        logger.error("Malformed input row", extra={"task_name": task.name, **e.context})

        return 1
    except (EpochScoresError, OSError) as e:
        logger.exception(
            "Task failed",
            extra={"task_name": task.name, "error": type(e).__name__},
        )

        return 1

    return 0


async def main(config: PipelineConfig) -> int:
    logger.start_run()
    logger.setLevel(config.log_level)
    logger.add_context({"command": config.command})

    set_alembic_logger()

    # Components
    db_client = DatabaseClient(db_path=config.db_path, logger=logger)
    db_operations = DatabaseOperations(db_client=db_client, logger=logger)

    # Migrate db
    try:
        await db_client.migrate()
    except StoreUnavailable:
        return 1

    # Tasks
    generate_snapshot_task = GenerateSnapshot(
        interval_seconds=config.snapshot_interval,
        db_operations=db_operations,
        snapshot_path=config.snapshot_path,
        logger=logger,
        min_epoch=config.min_epoch,
        duplicate_policy=config.duplicate_policy,
    )

    import_post_process_task = ImportPostProcessScores(
        interval_seconds=config.merge_interval,
        db_operations=db_operations,
        batch_path=config.batch_path,
        logger=logger,
        watch=config.command == "schedule",
    )

    export_averages_task = ExportAverages(
        interval_seconds=config.snapshot_interval,
        db_operations=db_operations,
        output_path=config.averages_path,
        logger=logger,
    )

    logger.info(
        "Epoch scores started",
        extra={
            "command": config.command,
            "db_path": config.db_path,
            "python": sys.version,
            "sqlite": sqlite3.sqlite_version,
        },
    )

    if config.command == "schedule":
        scheduler = TasksScheduler(logger=logger)

        scheduler.add(task=import_post_process_task)
        scheduler.add(task=generate_snapshot_task)

        await scheduler.start()

        return 0

    tasks = {
        "snapshot": generate_snapshot_task,
        "merge": import_post_process_task,
        "export-averages": export_averages_task,
    }

    return await run_once(tasks[config.command])


def cli(argv: Optional[Sequence[str]] = None) -> int:
    # Assert system requirements
    assert_requirements()

    config = get_config(argv)

    return asyncio.run(main(config))


if __name__ == "__main__":
    sys.exit(cli())
