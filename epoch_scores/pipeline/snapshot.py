from pathlib import Path
from typing import Union

from epoch_scores.models.validator import ValidatorSnapshotModel
from epoch_scores.pipeline.index import ValidatorIndex
from epoch_scores.utils.files import write_atomic


class SnapshotBuilder:
    @staticmethod
    def build(index: ValidatorIndex) -> ValidatorSnapshotModel:
        return ValidatorSnapshotModel(tuple(index.records()))

    @staticmethod
    def serialize(snapshot: ValidatorSnapshotModel) -> str:
        # Compact array, the file is served as is
        return snapshot.model_dump_json()

    @classmethod
    def persist(
        cls, snapshot: ValidatorSnapshotModel, destination: Union[str, Path]
    ) -> Path:
        """Replace `destination` with the snapshot; raises WriteFailure, keeping the old file"""
        return write_atomic(destination, cls.serialize(snapshot))
