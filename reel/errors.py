class ReelError(Exception):
    pass


class ObjectNotFound(ReelError):
    def __init__(self, object_id: str) -> None:
        super().__init__(f"Recording {object_id!r} not found")
        self.object_id = object_id


class IntegrityError(ReelError):
    """Metadata and storage disagree about an object's length."""

    def __init__(self, object_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Recording {object_id!r} should be {expected} bytes but storage holds {actual}"
        )
        self.object_id = object_id
        self.expected = expected
        self.actual = actual


class TransferError(ReelError, OSError):
    """Reading from storage failed after the response headers were sent."""


class UploadTooLarge(ReelError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Upload exceeds the {limit} byte limit")
        self.limit = limit
