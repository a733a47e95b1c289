"""
VocalStress v1 Buffers.

Responsibilities:
- Fixed-capacity circular store of raw samples for tremor analysis
- Capped FIFO histories for per-frame measurements

Invariants:
- read_last(n) always returns samples in chronological order
- Memory is allocated once, at construction
- push() is O(block size); no shifting of stored data
"""

import logging
from collections import deque
from itertools import islice

import numpy as np

from vocalstress.contracts import EngineInitError

logger = logging.getLogger(__name__)


class RingBuffer:
    """
    Circular float32 sample store.

    Attributes:
        capacity: Number of samples held once full
        write_pos: Index of the next write
        filled: True once the write cursor has wrapped at least once
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise EngineInitError(f"Ring buffer capacity must be positive, got {capacity}")
        try:
            self._data = np.zeros(capacity, dtype=np.float32)
        except MemoryError as e:
            raise EngineInitError(f"Cannot allocate ring buffer of {capacity} samples") from e

        self.capacity = capacity
        self.write_pos = 0
        self.filled = False
        logger.debug("Allocated ring buffer: %d samples", capacity)

    @property
    def available(self) -> int:
        """Number of valid samples currently held."""
        return self.capacity if self.filled else self.write_pos

    def push(self, samples: np.ndarray) -> None:
        """
        Append samples, overwriting the oldest data once full.

        Args:
            samples: 1D block of samples (copied)
        """
        block = np.asarray(samples, dtype=np.float32).ravel()
        n = len(block)
        if n == 0:
            return

        if n >= self.capacity:
            # Only the tail survives; it lands so that write_pos advances by n
            self.write_pos = (self.write_pos + n) % self.capacity
            tail = block[-self.capacity:]
            first = self.capacity - self.write_pos
            self._data[self.write_pos:] = tail[:first]
            self._data[:self.write_pos] = tail[first:]
            self.filled = True
            return

        end = self.write_pos + n
        if end < self.capacity:
            self._data[self.write_pos:end] = block
            self.write_pos = end
        else:
            first = self.capacity - self.write_pos
            self._data[self.write_pos:] = block[:first]
            self._data[:n - first] = block[first:]
            self.write_pos = n - first
            self.filled = True

    def read_last(self, n: int) -> np.ndarray:
        """
        Return the most recent n samples in chronological order.

        Args:
            n: Requested count, clamped to available data

        Returns:
            New float32 array (never a view into the store)
        """
        n = max(0, min(n, self.available))
        if n == 0:
            return np.zeros(0, dtype=np.float32)

        start = (self.write_pos - n + self.capacity) % self.capacity
        if start + n <= self.capacity:
            return self._data[start:start + n].copy()
        return np.concatenate((self._data[start:], self._data[:start + n - self.capacity]))

    def clear(self) -> None:
        """Zero the store and rewind the cursor."""
        self._data.fill(0.0)
        self.write_pos = 0
        self.filled = False


def capped_history(maxlen: int) -> deque:
    """
    Create a fixed-capacity FIFO history.

    deque(maxlen=...) evicts the oldest entry in O(1) on append.
    """
    if maxlen <= 0:
        raise EngineInitError(f"History capacity must be positive, got {maxlen}")
    return deque(maxlen=maxlen)


def last_n(history: deque, n: int) -> list:
    """Return up to the last n entries of a history, oldest first."""
    if n <= 0:
        return []
    return list(islice(reversed(history), n))[::-1]
