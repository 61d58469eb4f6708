# smartcv/app/core/result.py

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A capability call that produced a usable value."""
    value: T


@dataclass(frozen=True)
class Unavailable:
    """A capability call that produced nothing; `reason` is also recorded as the store error."""
    reason: str


Result = Union[Ok[T], Unavailable]
