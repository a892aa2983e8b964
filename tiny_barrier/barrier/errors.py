"""Errors raised or reported by the barrier."""
from typing import Any


class BarrierError(RuntimeError):
    """Base class for barrier errors."""


class BarrierConfigError(BarrierError):
    """Barrier used before it was configured. Always raised, never reported."""


class OvercompletionError(BarrierError):
    """Completion hook called more times than the expected count allows."""

    def __init__(self, expected: int) -> None:
        super().__init__("Barrier.done called more times than defined.")
        self.expected = expected


class RepeatedSuccessError(BarrierError):
    """Success triggered after it already fired."""

    def __init__(self) -> None:
        super().__init__("Barrier success called more than once.")


class BarrierTaskError(BarrierError):
    """Wraps a task error value that is not an exception."""

    def __init__(self, value: Any) -> None:
        super().__init__(repr(value))
        self.value = value
