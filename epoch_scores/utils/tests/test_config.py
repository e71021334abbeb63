import pytest

from epoch_scores.pipeline.index import DuplicateEpochPolicy
from epoch_scores.utils.config import build_parser, get_config


class TestConfig:
    def test_defaults(self, tmp_path):
        db_path = str(tmp_path / "scores.sqlite3")

        config = get_config(["snapshot", "--db.path", db_path])

        assert config.command == "snapshot"
        assert config.db_path == db_path
        assert config.snapshot_path == "validators.json"
        assert config.min_epoch == -1
        assert config.duplicate_policy == DuplicateEpochPolicy.KEEP_ALL
        assert config.batch_path == "post-process.csv"
        assert config.averages_path == "avg.csv"
        assert config.snapshot_interval == 3600.0
        assert config.merge_interval == 300.0
        assert config.log_level == "INFO"

    def test_all_options(self, tmp_path):
        db_path = str(tmp_path / "scores.sqlite3")

        config = get_config(
            [
                "schedule",
                "--db.path",
                db_path,
                "--log.level",
                "DEBUG",
                "--snapshot.path",
                "out/validators.json",
                "--scan.min-epoch",
                "400",
                "--scan.duplicates",
                "reject",
                "--batch.path",
                "batch.csv",
                "--output.path",
                "averages.csv",
                "--snapshot.interval",
                "60",
                "--merge.interval",
                "5.5",
            ]
        )

        assert config.command == "schedule"
        assert config.log_level == "DEBUG"
        assert config.snapshot_path == "out/validators.json"
        assert config.min_epoch == 400
        assert config.duplicate_policy == DuplicateEpochPolicy.REJECT
        assert config.batch_path == "batch.csv"
        assert config.averages_path == "averages.csv"
        assert config.snapshot_interval == 60.0
        assert config.merge_interval == 5.5

    @pytest.mark.parametrize(
        "command",
        ["snapshot", "merge", "export-averages", "schedule"],
    )
    def test_commands(self, command, tmp_path):
        config = get_config([command, "--db.path", str(tmp_path / "db.sqlite3")])

        assert config.command == command

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_unknown_duplicate_policy(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["snapshot", "--scan.duplicates", "keep-last"])

    def test_db_directory_must_exist(self, tmp_path):
        db_path = str(tmp_path / "missing" / "scores.sqlite3")

        with pytest.raises(ValueError, match="directory does not exist"):
            get_config(["snapshot", "--db.path", db_path])

    def test_min_epoch_floor(self, tmp_path):
        with pytest.raises(ValueError, match="scan.min-epoch"):
            get_config(
                ["snapshot", "--db.path", str(tmp_path / "db"), "--scan.min-epoch", "-2"]
            )

    @pytest.mark.parametrize("option", ["--snapshot.interval", "--merge.interval"])
    def test_intervals_positive(self, option, tmp_path):
        with pytest.raises(ValueError, match="positive"):
            get_config(["schedule", "--db.path", str(tmp_path / "db"), option, "0"])
