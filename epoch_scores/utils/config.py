import argparse
from pathlib import Path
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from epoch_scores.db.operations import SCAN_MIN_EPOCH
from epoch_scores.pipeline.index import DuplicateEpochPolicy
from epoch_scores.utils.env import ENVIRONMENT_VARIABLES

CommandType = Literal["snapshot", "merge", "export-averages", "schedule"]

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class PipelineConfig(BaseModel):
    command: CommandType
    db_path: str
    snapshot_path: str
    min_epoch: int
    duplicate_policy: DuplicateEpochPolicy
    batch_path: str
    averages_path: str
    snapshot_interval: float
    merge_interval: float
    log_level: str


def build_parser() -> argparse.ArgumentParser:
    # Shared by every sub-command so options can follow the command name
    common = argparse.ArgumentParser(add_help=False)

    common.add_argument(
        "--db.path",
        type=str,
        default=ENVIRONMENT_VARIABLES.EPOCH_SCORES_DB_PATH,
        help="SQLite database holding the scores and scores2 tables",
    )
    common.add_argument(
        "--log.level", type=str, default="INFO", choices=LOG_LEVELS, help="Log level"
    )
    common.add_argument(
        "--snapshot.path",
        type=str,
        default="validators.json",
        help="Snapshot file written by the snapshot command",
    )
    common.add_argument(
        "--scan.min-epoch",
        type=int,
        default=SCAN_MIN_EPOCH,
        help="Only scan epochs greater than this one (default: every epoch)",
    )
    common.add_argument(
        "--scan.duplicates",
        type=str,
        default=DuplicateEpochPolicy.KEEP_ALL.value,
        choices=[policy.value for policy in DuplicateEpochPolicy],
        help="Handling of several scores rows for the same validator and epoch",
    )
    common.add_argument(
        "--batch.path",
        type=str,
        default="post-process.csv",
        help="Post-process CSV merged into scores2",
    )
    common.add_argument(
        "--output.path",
        type=str,
        default="avg.csv",
        help="CSV written by the export-averages command",
    )
    common.add_argument(
        "--snapshot.interval",
        type=float,
        default=3600.0,
        help="Seconds between snapshot runs in schedule mode",
    )
    common.add_argument(
        "--merge.interval",
        type=float,
        default=300.0,
        help="Seconds between post-process batch checks in schedule mode",
    )

    parser = argparse.ArgumentParser(
        prog="epoch-scores", description="Validator epoch scores snapshot and merge jobs"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "snapshot", parents=[common], help="Rebuild the validators snapshot from scores"
    )
    subparsers.add_parser(
        "merge", parents=[common], help="Replace one epoch of scores2 with a post-process batch"
    )
    subparsers.add_parser(
        "export-averages", parents=[common], help="Export the AVG table as CSV"
    )
    subparsers.add_parser(
        "schedule", parents=[common], help="Run snapshot and merge jobs on their intervals"
    )

    return parser


def get_config(argv: Optional[Sequence[str]] = None) -> PipelineConfig:
    parser = build_parser()

    args = parser.parse_args(argv)

    db_path = getattr(args, "db.path")
    min_epoch = getattr(args, "scan.min_epoch")
    snapshot_interval = getattr(args, "snapshot.interval")
    merge_interval = getattr(args, "merge.interval")

    # Validate db path
    if not Path(db_path).parent.is_dir():
        raise ValueError(f"Invalid db.path '{db_path}': directory does not exist.")

    # Validate scan floor
    if min_epoch < SCAN_MIN_EPOCH:
        raise ValueError(f"Invalid scan.min-epoch {min_epoch}, must be >= {SCAN_MIN_EPOCH}.")

    # Validate intervals
    for option, value in [
        ("snapshot.interval", snapshot_interval),
        ("merge.interval", merge_interval),
    ]:
        if value <= 0:
            raise ValueError(f"Invalid {option} {value}, must be a positive number.")

    return PipelineConfig(
        command=args.command,
        db_path=db_path,
        snapshot_path=getattr(args, "snapshot.path"),
        min_epoch=min_epoch,
        duplicate_policy=getattr(args, "scan.duplicates"),
        batch_path=getattr(args, "batch.path"),
        averages_path=getattr(args, "output.path"),
        snapshot_interval=snapshot_interval,
        merge_interval=merge_interval,
        log_level=getattr(args, "log.level"),
    )
