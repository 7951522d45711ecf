# selection/thread.py
import math

import numpy as np

from scoring.line_diff import score_fan

class NoImprovingMove(RuntimeError):
    """Raised when an exhausted thread is asked to commit a move."""

class Thread:
    """
    One colored thread walking the nails.

    The pending candidate (nail, chord, weight) is cached until the thread
    moves; other threads' commits do not invalidate it. A thread whose best
    chord does not improve the image reports +inf and is exhausted until it
    is invalidated.
    """
    def __init__(self, start_nail, color, cache, buffers, rng=None, eager=True):
        n = cache.num_nails
        if not (0 <= int(start_nail) < n):
            raise ValueError(f"start nail {start_nail} outside [0, {n})")
        self.color = color
        self.cache = cache
        self.buffers = buffers
        self.rng = rng if rng is not None else np.random.default_rng()
        self.eager = bool(eager)

        self.current_nail = int(start_nail)
        self.history = [self.current_nail]
        self.used = np.zeros((n, n), dtype=bool)   # symmetric, canonical pairs
        self.read_head = 0

        self.pending_nail = self.current_nail
        self.pending_chord = None
        self.pending_weight = math.inf
        self.pending_valid = False
        self.exhausted = False

    @property
    def num_moves(self):
        return len(self.history) - 1

    def is_used(self, i, j) -> bool:
        return bool(self.used[i, j])

    def candidate_scores(self):
        """(dests, scores) from the current nail, used pairs forced to 0."""
        fan = self.cache.fan(self.current_nail)
        b = self.buffers
        scores = score_fan(b.target_flat, b.current_flat, fan, self.color, self.cache.fade)
        scores[self.used[self.current_nail, fan.dests]] = 0.0
        return fan, scores

    def best_move_weight(self) -> float:
        if self.pending_valid or self.exhausted:
            return self.pending_weight

        n = self.cache.num_nails
        # seeded fallback, only kept if no chord scores finite
        fallback = int(self.rng.integers(0, n - 1))
        if fallback >= self.current_nail:
            fallback += 1

        fan, scores = self.candidate_scores()
        best_nail, best_chord, best = fallback, None, math.inf
        finite = np.isfinite(scores)
        if finite.any():
            k = int(np.argmin(np.where(finite, scores, np.inf)))  # first minimum
            best = float(scores[k])
            best_nail = int(fan.dests[k])
            best_chord = fan.chords[k]

        if best >= 0:
            self.pending_nail = best_nail
            self.pending_chord = None
            self.pending_weight = math.inf
            self.pending_valid = False
            self.exhausted = True
            return math.inf

        self.pending_nail = best_nail
        self.pending_chord = best_chord
        self.pending_weight = best
        self.pending_valid = True
        return best

    def invalidate(self):
        self.pending_valid = False
        self.exhausted = False
        self.pending_chord = None
        self.pending_weight = math.inf

    def commit_move(self):
        if not self.pending_valid:
            self.best_move_weight()
        if not self.pending_valid:
            raise NoImprovingMove(f"thread {self.color} has no improving move from nail {self.current_nail}")

        i, j = self.current_nail, self.pending_nail
        self.used[i, j] = True
        self.used[j, i] = True
        self.buffers.commit_chord(self.pending_chord, self.color)
        self.current_nail = j
        self.history.append(j)
        self.invalidate()
        if self.eager:
            self.best_move_weight()
        return i, j

    def last_segment(self):
        if len(self.history) < 2:
            return None
        return self.history[-2], self.history[-1]

    def next_history_nail(self):
        if self.read_head >= len(self.history):
            raise IndexError("history exhausted; call reset_read_head()")
        nail = self.history[self.read_head]
        self.read_head += 1
        return nail

    def reset_read_head(self):
        self.read_head = 0
