import os
import tempfile
from pathlib import Path
from typing import Union

from epoch_scores.utils.errors import WriteFailure


def write_atomic(destination: Union[str, Path], content: str) -> Path:
    """
    Write `content` to a temporary file next to `destination` then rename it over it.
    Readers see either the previous file or the new one, never a partial write.
    On failure the temporary file is removed and the previous file is left as it was.
    """
    destination = Path(destination)

    try:
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=str(destination.parent), prefix=f".{destination.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise WriteFailure(destination=str(destination), reason=str(e)) from e

    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, destination)
    except OSError as e:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass

        raise WriteFailure(destination=str(destination), reason=str(e)) from e

    return destination
