"""Write-once invocation outcome"""
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class OutcomeState(Enum):
    PENDING = 'pending'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass(frozen=True)
class Outcome:
    state: OutcomeState
    value: Any = None
    error: Any = None

    @classmethod
    def succeeded(cls, value) -> "Outcome":
        return cls(OutcomeState.SUCCEEDED, value=value)

    @classmethod
    def failed(cls, error) -> "Outcome":
        return cls(OutcomeState.FAILED, error=error)

    @property
    def resolved(self) -> bool:
        return self.state is not OutcomeState.PENDING

    @property
    def ok(self) -> bool:
        return self.state is OutcomeState.SUCCEEDED


PENDING = Outcome(OutcomeState.PENDING)


class OutcomeCell:
    """Holds PENDING until the first succeed()/fail(); later writes are no-ops"""

    def __init__(self):
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._outcome = PENDING

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    def succeed(self, value) -> bool:
        return self._resolve(Outcome.succeeded(value))

    def fail(self, error) -> bool:
        return self._resolve(Outcome.failed(error))

    def _resolve(self, outcome: Outcome) -> bool:
        """Returns False when another signal already resolved the cell"""
        with self._lock:
            if self._outcome.resolved:
                return False
            self._outcome = outcome
        self._done.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)
