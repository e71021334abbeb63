import subprocess

from epoch_scores.utils.env import ENVIRONMENT_VARIABLES


def get_commit_short_hash() -> str:
    # Deployed artifacts usually ship without a .git directory
    try:
        return (
            subprocess.check_output(
                ["git", "rev-parse", "--short", "HEAD"], stderr=subprocess.DEVNULL
            )
            .strip()
            .decode("utf-8")
        )
    except Exception:
        return ENVIRONMENT_VARIABLES.GIT_COMMIT_HASH


commit_short_hash = get_commit_short_hash()
