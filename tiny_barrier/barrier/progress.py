"""tqdm progress bar fed by barrier observer callbacks."""
import threading
from typing import Optional

from tqdm import tqdm


class BarrierProgress:
    """
    Progress bar whose total follows the barrier's expected count.
    Wire it through the barrier callbacks:
      progress = BarrierProgress(desc="fetch")
      barrier = Barrier(on_add=progress.add_total, on_done=progress.tick)
    """

    def __init__(
        self,
        desc: str = "tasks",
        position: Optional[int] = None,
        leave: bool = True,
        disable: bool = False,
    ) -> None:
        self._lock = threading.RLock()
        self._pbar = tqdm(total=0, desc=desc, dynamic_ncols=True, position=position, leave=leave, disable=disable)

    @property
    def total(self) -> int:
        return self._pbar.total or 0

    @property
    def n(self) -> int:
        return self._pbar.n

    def add_total(self, n: int) -> None:
        with self._lock:
            self._pbar.total = max(0, (self._pbar.total or 0) + n)
            self._pbar.refresh()

    def tick(self) -> None:
        with self._lock:
            self._pbar.update(1)

    def close(self) -> None:
        self._pbar.close()

    def __enter__(self) -> "BarrierProgress":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
