"""Logging setup shared by examples and applications."""
import logging
import sys
from typing import Union

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO, debug_barrier: bool = False) -> None:
    """
    Configure the root logger once with a stdout handler.
    Barrier dispatch logs at DEBUG; pass debug_barrier=True to see it
    without lowering the root level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)
    if debug_barrier:
        logging.getLogger("tiny_barrier.barrier").setLevel(logging.DEBUG)
