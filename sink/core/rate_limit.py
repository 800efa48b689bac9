"""
Rate Limiting
=============

"Every Nth call" trigger used by the batch loop to pause writes.

Not thread-safe: one instance belongs to one destination and must be
driven by a single serialized loop, since the trigger depends on the
exact call order.
"""

from dataclasses import dataclass, field


@dataclass
class RateLimitSettings:
    """
    Periodic trigger firing on every ``every_n``-th call.

    Attributes:
        timeout_ms: Pause length surfaced to the writer; not consumed here.
        every_n: Trigger period. 0 disables rate limiting.
        counter: Number of calls so far.
    """
    timeout_ms: int = 0
    every_n: int = 0
    counter: int = field(default=0, init=False)

    def is_triggered(self) -> bool:
        """Count one call and report whether the rate limit fires on it."""
        self.counter += 1
        return (
            self.every_n != 0
            and self.counter >= self.every_n
            and self.counter % self.every_n == 0
        )
