class ExponentialBackoff:
    """Bounded exponential delay: initial, initial*factor, ... capped at `max_seconds`.

    Not thread-safe; each poll loop owns its own instance.
    """

    def __init__(self, *, initial_seconds: float = 1.0, max_seconds: float = 60.0, factor: float = 2.0):
        if initial_seconds <= 0:
            raise ValueError("initial_seconds must be > 0")
        if max_seconds < initial_seconds:
            raise ValueError("max_seconds must be >= initial_seconds")
        if factor < 1:
            raise ValueError("factor must be >= 1")
        self.initial_seconds = float(initial_seconds)
        self.max_seconds = float(max_seconds)
        self.factor = float(factor)
        self._attempts = 0

    @property
    def attempts(self) -> int:
        return self._attempts

    def next_delay(self) -> float:
        delay = self.initial_seconds * (self.factor ** self._attempts)
        if delay >= self.max_seconds:
            delay = self.max_seconds
        else:
            self._attempts += 1
        return delay

    def reset(self) -> None:
        self._attempts = 0
