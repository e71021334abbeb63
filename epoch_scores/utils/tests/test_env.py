from unittest.mock import patch

import pytest

from epoch_scores.utils.env import assert_requirements, tuple_version_to_str


class TestEnv:
    def test_tuple_version_to_str(self):
        assert tuple_version_to_str((3, 10, 0)) == "3.10.0"
        assert tuple_version_to_str((3, 35, 5)) == "3.35.5"

    @pytest.mark.parametrize(
        "python_version,should_pass",
        [
            ((3, 10, 0), True),
            ((3, 12, 1), True),
            ((3, 9, 9), False),
            ((2, 7, 0), False),
        ],
    )
    def test_python_version_check(self, python_version, should_pass):
        with patch("epoch_scores.utils.env.version_info", python_version):
            if should_pass:
                result = assert_requirements()
                assert result["python_version"] == tuple_version_to_str(python_version)
            else:
                with pytest.raises(AssertionError) as exc_info:
                    assert_requirements()
                assert "Python version must be at least" in str(exc_info.value)

    @pytest.mark.parametrize(
        "sqlite_version,should_pass",
        [
            ("3.35.0", True),
            ("3.45.1", True),
            ("3.34.1", False),
            ("4.0.0", False),
            ("2.0.0", False),
        ],
    )
    def test_sqlite_version_check(self, sqlite_version: str, should_pass: bool):
        with patch("epoch_scores.utils.env.sqlite_version", sqlite_version):
            if should_pass:
                result = assert_requirements()
                assert result["sqlite_version"] == sqlite_version
            else:
                with pytest.raises(AssertionError) as exc_info:
                    assert_requirements()
                assert any(
                    x in str(exc_info.value)
                    for x in ["SQLite version must be at least", "SQLite major version must be"]
                )

    def test_successful_requirements_check(self):
        with (
            patch("epoch_scores.utils.env.version_info", (3, 10, 0)),
            patch("epoch_scores.utils.env.sqlite_version", "3.37.0"),
        ):
            result = assert_requirements()

            assert result == {"python_version": "3.10.0", "sqlite_version": "3.37.0"}
