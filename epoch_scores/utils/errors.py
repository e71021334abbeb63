from typing import Iterable, Optional


class EpochScoresError(Exception):
    """Base pipeline error."""


class MalformedRow(EpochScoresError):
    """Raised when an input row cannot be used; the whole operation fails."""

    def __init__(
        self,
        reason: str,
        position: Optional[int] = None,
        vote_address: Optional[str] = None,
        epoch: Optional[int] = None,
    ):
        self.reason = reason
        self.position = position
        self.vote_address = vote_address
        self.epoch = epoch

        super().__init__(
            f"Malformed row at position {position}"
            f" (vote_address={vote_address}, epoch={epoch}): {reason}"
        )

    @property
    def context(self) -> dict:
        return {
            "position": self.position,
            "vote_address": self.vote_address,
            "epoch": self.epoch,
            "reason": self.reason,
        }


class StoreUnavailable(EpochScoresError):
    """Raised when the store cannot be opened, is locked, or a transaction fails."""


class MultiEpochBatch(EpochScoresError):
    def __init__(self, epochs: Iterable[int]):
        self.epochs = sorted(set(epochs))

        super().__init__(f"Batch spans more than one epoch: {self.epochs}")


class EmptyBatch(EpochScoresError):
    def __init__(self, header_rows_stripped: int = 0):
        self.header_rows_stripped = header_rows_stripped

        super().__init__(
            f"Batch has no rows to merge ({header_rows_stripped} header rows stripped)"
        )


class WriteFailure(EpochScoresError):
    def __init__(self, destination: str, reason: str):
        self.destination = destination
        self.reason = reason

        super().__init__(f"Failed to write {destination}: {reason}")


class DuplicateEpochStat(EpochScoresError):
    def __init__(self, vote_address: str, epoch: int, position: Optional[int] = None):
        self.vote_address = vote_address
        self.epoch = epoch
        self.position = position

        super().__init__(
            f"Duplicate stats for vote_address={vote_address} epoch={epoch}"
            f" at position {position}"
        )
