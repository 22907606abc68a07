"""
Types résultat (succès ou erreur) retournés par la validation et par les appels au backend.
Les appelants testent `result.ok` au lieu d'intercepter des exceptions.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, ClassVar, Generic, TypeVar, Union

from student_records.errors import BackendError

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E
    ok: ClassVar[bool] = False


Result = Union[Ok[T], Err[E]]


async def attempt(awaitable: Awaitable[Any]) -> "Result[Any, BackendError]":
    """Attend un appel au backend et convertit une BackendError en Err."""
    try:
        return Ok(await awaitable)
    except BackendError as exc:
        return Err(exc)
