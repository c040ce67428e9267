"""Sequential stage runner that stops at the first failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

from .errors import VoxlateError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Stage = tuple[str, Callable[[Any], Any]]


@dataclass(frozen=True, slots=True)
class StageResult(Generic[T]):
    """Outcome of an operation: a value, or the error that halted it."""

    value: T | None = None
    error: VoxlateError | None = None
    stage: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: VoxlateError, stage: str | None = None) -> "StageResult[T]":
        return cls(error=error, stage=stage)


def run_stages(value: Any, stages: Sequence[Stage]) -> StageResult[Any]:
    """Feed *value* through *stages* in order, short-circuiting on error."""

    for name, stage in stages:
        try:
            value = stage(value)
        except VoxlateError as exc:
            LOGGER.warning("Stage %s failed: %s", name, exc)
            return StageResult.failure(exc, stage=name)
        LOGGER.debug("Stage %s completed", name)
    return StageResult.success(value)


__all__ = ["Stage", "StageResult", "run_stages"]
