# selection/greedy.py
import math
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Optional

class StopReason(str, Enum):
    BUDGET_EXHAUSTED = 'budget_exhausted'
    ALL_THREADS_EXHAUSTED = 'all_threads_exhausted'
    CANCELLED = 'cancelled'

class GreedyEngine:
    """
    Step-at-a-time scheduler over the threads of one Run.

    Each step asks every thread for its best move weight, commits the lowest
    (ties go to the lowest thread index), logs the thread index and reports
    progress. A step is fully applied before the next one starts scoring.

    on_progress(fraction)  called after every commit and once with 1.0 at the end
    on_step(t, info)       called after every commit, info has
                           t, thread, color, i, j, weight (+ residual)
    """
    def __init__(self, run, on_progress: Optional[Callable] = None,
                 on_step: Optional[Callable] = None, workers: Optional[int] = None):
        self.run = run
        self.on_progress = on_progress
        self.on_step = on_step
        self.workers = int(workers if workers is not None else run.P.get('workers', 1))
        self.track_residual = bool(run.P.get('track_residual', False))
        self.stop_reason = None
        self._cancelled = False
        self._pool = None

    @property
    def done(self):
        return self.stop_reason is not None

    def progress(self) -> float:
        if self.run.budget == 0:
            return 1.0
        return min(1.0, self.run.iteration / self.run.budget)

    def cancel(self):
        self._cancelled = True

    def close(self):
        """Shut down the scan pool; a later step starts a new one."""
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def _weights(self):
        threads = self.run.threads
        if self.workers <= 1:
            return [t.best_move_weight() for t in threads]
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=self.workers)
        # buffers are only read here; every result is in before anything is committed
        return list(self._pool.map(lambda t: t.best_move_weight(), threads))

    def select(self):
        """(index, weight) of the thread to move; ties go to the lowest index."""
        best_idx, best_w = None, math.inf
        for k, w in enumerate(self._weights()):
            if best_idx is None or w < best_w:
                best_idx, best_w = k, w
        return best_idx, best_w

    def step(self) -> bool:
        if self.done:
            return False
        run = self.run
        if self._cancelled:
            self._finish(StopReason.CANCELLED)
            return False
        if run.closed:
            raise RuntimeError("run already closed")
        if run.iteration >= run.budget:
            self._finish(StopReason.BUDGET_EXHAUSTED)
            return False

        idx, weight = self.select()
        if weight == math.inf:
            self._finish(StopReason.ALL_THREADS_EXHAUSTED)
            return False

        thread = run.threads[idx]
        i, j = thread.commit_move()
        run.record(idx)

        if self.on_progress:
            self.on_progress(self.progress())
        if self.on_step:
            info = dict(t=run.iteration, thread=idx, color=thread.color,
                        i=int(i), j=int(j), weight=float(weight))
            if self.track_residual:
                info['residual'] = run.buffers.residual()
            self.on_step(run.iteration, info)

        if run.iteration >= run.budget:
            self._finish(StopReason.BUDGET_EXHAUSTED)
            return False
        return True

    def run_to_end(self) -> StopReason:
        while self.step():
            pass
        return self.stop_reason

    def _finish(self, reason):
        self.stop_reason = reason
        self.close()
        if reason is StopReason.CANCELLED:
            self.run.close()
        if self.on_progress:
            self.on_progress(1.0)
