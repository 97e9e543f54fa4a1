"""Concurrent fan-out where individual failures are logged and dropped."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Iterable, List, Tuple, TypeVar

from loguru import logger

KeyT = TypeVar("KeyT")
ResultT = TypeVar("ResultT")


@dataclass
class FanOutResult(Generic[KeyT, ResultT]):
    """Successes and failures of one best-effort batch, in input order."""

    succeeded: List[Tuple[KeyT, ResultT]] = field(default_factory=list)
    failed: List[Tuple[KeyT, Exception]] = field(default_factory=list)

    @property
    def values(self) -> List[ResultT]:
        return [value for _, value in self.succeeded]


async def gather_best_effort(
    keys: Iterable[KeyT],
    operation: Callable[[KeyT], Awaitable[ResultT]],
    *,
    action: str,
) -> FanOutResult[KeyT, ResultT]:
    """
    Run ``operation`` for every key at once and wait for all of them.

    Each failure is logged as a warning naming ``action`` and the key, then
    left out of the successes. Cancellation and other ``BaseException``
    subclasses are re-raised.
    """

    keys = list(keys)
    result: FanOutResult[KeyT, ResultT] = FanOutResult()
    if not keys:
        return result

    outcomes = await asyncio.gather(*(operation(key) for key in keys), return_exceptions=True)
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, Exception):
            logger.warning(
                "Failed to {action} {key}: {error!r}", action=action, key=key, error=outcome
            )
            result.failed.append((key, outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            result.succeeded.append((key, outcome))
    return result
