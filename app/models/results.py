from dataclasses import dataclass
from typing import Generic, Iterator, Optional, TypeVar

from ..core.exceptions import WaterFinderError

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """
    Outcome of one remote operation: either a payload or a typed failure.

    Unpacks as ``success, data, error`` so callers can write
    ``success, sources, error = await repository.get_water_sources()``.
    """
    success: bool
    data: Optional[T] = None
    error: Optional[WaterFinderError] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: WaterFinderError) -> "OperationResult[T]":
        return cls(success=False, error=error)

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def __iter__(self) -> Iterator:
        return iter((self.success, self.data, self.error))
