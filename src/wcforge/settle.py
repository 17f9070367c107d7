# src/wcforge/settle.py
"""Run independent async operations to completion and aggregate failures.

`settle_all()` never aborts early: every operation is awaited, then the
batch either yields all values in input order or raises one
`MultiTaskError` that lists every failure.
"""

import asyncio
import textwrap
import traceback
from collections.abc import Awaitable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from apathetic_utils import plural


T = TypeVar("T")


# --- outcomes ---------------------------------------------------------------


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: BaseException


Outcome = Success[T] | Failure


# --- aggregate error ----------------------------------------------------------


def format_error(error: BaseException) -> str:
    """Render an error with its traceback when it has one."""
    if error.__traceback__ is not None:
        return "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).rstrip()
    return f"{type(error).__name__}: {error}"


class MultiTaskError(RuntimeError):
    """One or more operations of a settled batch failed.

    `errors` holds the failures in input order, `total` the number of
    operations that were attempted.
    """

    def __init__(self, outcomes: Sequence[Outcome[Any]]) -> None:
        self.errors: tuple[BaseException, ...] = tuple(
            o.error for o in outcomes if isinstance(o, Failure)
        )
        self.total = len(outcomes)
        super().__init__(self._build_message())

    @property
    def failed(self) -> int:
        return len(self.errors)

    def _build_message(self) -> str:
        lines = [
            f"{self.failed} out of {self.total} task{plural(self.total)} failed.",
            "Errors:",
        ]
        for error in self.errors:
            rendered = textwrap.indent(format_error(error), "    ").lstrip()
            lines.append(f"  - {rendered}")
        return "\n".join(lines)


# --- settling -------------------------------------------------------------------


async def settle(awaitable: Awaitable[T]) -> Outcome[T]:
    """Await one operation and capture its failure instead of raising it."""
    try:
        value = await awaitable
    except Exception as e:  # noqa: BLE001
        return Failure(e)
    return Success(value)


def collect_outcomes(outcomes: Sequence[Outcome[T]]) -> list[T]:
    """Return every value, or raise a MultiTaskError if anything failed."""
    if any(isinstance(o, Failure) for o in outcomes):
        raise MultiTaskError(outcomes)
    return [o.value for o in outcomes if isinstance(o, Success)]


async def settle_all(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """Run all operations concurrently and wait for every one of them.

    Returns the values in input order. If any operation failed, raises a
    MultiTaskError listing all failures once the whole batch has finished.
    """
    pending = [settle(a) for a in awaitables]
    if not pending:
        return []
    outcomes: list[Outcome[T]] = list(await asyncio.gather(*pending))
    return collect_outcomes(outcomes)
