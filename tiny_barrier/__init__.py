"""
Tiny Barrier package entry point.
Provides convenient imports for public API.
"""
from .barrier.barrier import Barrier
from .barrier.errors import (
    BarrierError,
    BarrierConfigError,
    BarrierTaskError,
    OvercompletionError,
    RepeatedSuccessError,
)
from .barrier.progress import BarrierProgress
from .utils.logger import setup_logging

__all__ = [
    "Barrier",
    "BarrierError",
    "BarrierConfigError",
    "BarrierTaskError",
    "OvercompletionError",
    "RepeatedSuccessError",
    "BarrierProgress",
    "setup_logging",
]
