from collections import deque


class SlidingWindow:
    """Fixed-capacity sample buffer. When full, the oldest sample is evicted first."""

    def __init__(self, capacity: int, min_samples: int = 1):
        self._samples: deque[float] = deque(maxlen=capacity)
        self._min = min_samples

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def push(self, value: float) -> None:
        self._samples.append(value)

    def average(self) -> float:
        """Arithmetic mean, or 0.0 while fewer than min_samples are held."""
        if len(self._samples) < self._min:
            return 0.0
        return sum(self._samples) / len(self._samples)

    def values(self) -> tuple[float, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)
