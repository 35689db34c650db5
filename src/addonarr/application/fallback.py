"""Ordered-attempt combinators shared by the debrid chain and stream search.

An *attempt* is a ``(name, factory)`` pair where ``factory`` is a
zero-argument callable returning a fresh coroutine.  An attempt succeeds
when it returns without raising and ``accept(result)`` is true; anything
else (including an exception) counts as a failure and is logged.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")

Attempt = tuple[str, Callable[[], Awaitable[T]]]


@dataclass(frozen=True)
class AttemptOutcome(Generic[T]):
    """Result of one attempt: ``value`` is None unless it succeeded."""

    name: str
    value: T | None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _is_not_none(value: object) -> bool:
    return value is not None


async def _run(
    name: str,
    factory: Callable[[], Awaitable[T]],
    accept: Callable[[T], bool],
) -> AttemptOutcome[T]:
    try:
        value = await factory()
    except asyncio.CancelledError:
        raise
    except Exception as exc:  # noqa: BLE001
        log.warning("attempt_failed", attempt=name, error=str(exc))
        return AttemptOutcome(name=name, value=None, error=exc)
    if not accept(value):
        log.debug("attempt_rejected", attempt=name)
        return AttemptOutcome(name=name, value=None)
    return AttemptOutcome(name=name, value=value)


async def first_success(
    attempts: Sequence[Attempt[T]],
    *,
    accept: Callable[[T], bool] = _is_not_none,
) -> tuple[AttemptOutcome[T] | None, list[str]]:
    """Run attempts one after another, stopping at the first success.

    Returns the winning outcome (or None) and the names of every attempt
    that was actually started, in order.  Attempts after the winner are
    never started.
    """
    tried: list[str] = []
    for name, factory in attempts:
        tried.append(name)
        outcome = await _run(name, factory, accept)
        if outcome.ok:
            return outcome, tried
    return None, tried


async def settle_all(
    attempts: Sequence[Attempt[T]],
    *,
    accept: Callable[[T], bool] = _is_not_none,
) -> list[AttemptOutcome[T]]:
    """Run attempts concurrently and wait for every one to settle.

    Outcomes are returned in the order of ``attempts``, not completion
    order.  One failing attempt never aborts its siblings.
    """
    return list(
        await asyncio.gather(
            *(_run(name, factory, accept) for name, factory in attempts)
        )
    )
