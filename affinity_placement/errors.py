from __future__ import annotations

from enum import IntEnum
from typing import Iterable, List


class ErrorCode(IntEnum):
    BAD_REQUEST = 400
    NOT_FOUND = 404
    SERVER_ERROR = 500


class PlacementConfigError(Exception):
    """Base error for placement configuration problems.

    ``code`` is the HTTP status the admin API answers with.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.BAD_REQUEST) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class PlacementConfigConflictError(PlacementConfigError):
    """Raised when a collection is under both co-location rules."""

    def __init__(self, collections: Iterable[str]) -> None:
        self.collections: List[str] = list(collections)
        super().__init__(
            "withCollection and withCollectionShards should be disjoint. "
            f"But there are {self.collections} in common.",
            ErrorCode.BAD_REQUEST,
        )


class PlacementConfigLoadError(PlacementConfigError):
    pass
