import csv
import io
from pathlib import Path
from typing import Union

from epoch_scores.models.post_process import POST_PROCESS_FIELDS
from epoch_scores.utils.errors import MalformedRow


def parse_post_process_batch(content: str) -> list[dict]:
    """
    Parse post-process CSV text into raw string rows keyed by scores2 column name.

    Every line is data, the header line included: it comes back as a row whose
    cells are the column names, the merge strips it. Blank lines are skipped.
    """
    rows = []

    for cells in csv.reader(io.StringIO(content, newline="")):
        if not cells or all(not cell.strip() for cell in cells):
            continue

        if len(cells) != len(POST_PROCESS_FIELDS):
            vote_address_index = POST_PROCESS_FIELDS.index("vote_address")

            raise MalformedRow(
                reason=f"expected {len(POST_PROCESS_FIELDS)} columns, found {len(cells)}",
                position=len(rows) + 1,
                vote_address=(
                    cells[vote_address_index] if len(cells) > vote_address_index else None
                ),
            )

        rows.append(dict(zip(POST_PROCESS_FIELDS, cells)))

    return rows


def read_post_process_batch(path: Union[str, Path]) -> list[dict]:
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Post-process batch not found: {path}")

    return parse_post_process_batch(path.read_bytes().decode("utf-8"))
