"""Poll timing policy."""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class PollPolicy:
    """
    Timing rules for the job poller.

    Attributes:
        poll_interval: Seconds between steady-state polls
        timeout: Overall polling budget in seconds
        settle_delay: Wait before the first poll so a fresh submission is visible
        network_retry_cap: Upper bound for the wait after a network failure
        tick: Granularity of waits, so progress can animate
        not_found_warning_threshold: Consecutive 404s (with a token) before warning
    """

    poll_interval: float = 10.0
    timeout: float = 7200.0
    settle_delay: float = 5.0
    network_retry_cap: float = 5.0
    tick: float = 0.5
    not_found_warning_threshold: int = 3

    def __post_init__(self):
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got: {self.poll_interval}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got: {self.timeout}")
        if self.settle_delay < 0:
            raise ValueError(f"settle_delay cannot be negative, got: {self.settle_delay}")
        if self.tick <= 0:
            raise ValueError(f"tick must be positive, got: {self.tick}")
        if self.not_found_warning_threshold < 1:
            raise ValueError("not_found_warning_threshold must be >= 1")

    def network_retry_interval(self) -> float:
        """Shortened wait used after a network failure."""
        return min(self.poll_interval, self.network_retry_cap)

    def ticks(self, duration: float) -> List[float]:
        """
        Split a wait into tick-sized pieces.

        A duration that is not a whole number of ticks gets a shorter last
        piece, so the pieces always sum to ``duration``.
        """
        if duration <= 0:
            return []
        full = int(duration // self.tick)
        pieces = [self.tick] * full
        remainder = duration - full * self.tick
        if remainder > 1e-9:
            pieces.append(remainder)
        return pieces
