import math
import time
from collections.abc import Callable

from ..config import settings


class EmailCooldown:
    """Per-email resend throttle held in process memory.

    State is lost on restart and is not shared between workers.
    """

    def __init__(self, cooldown_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_sent: dict[str, float] = {}

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def remaining(self, email: str) -> int:
        """Whole seconds until the next send is allowed, 0 when allowed now."""
        last = self._last_sent.get(self._key(email))
        if last is None:
            return 0
        left = last + self.cooldown_seconds - self._clock()
        if left <= 0:
            return 0
        return math.ceil(left)

    def can_send(self, email: str) -> bool:
        return self.remaining(email) == 0

    def mark_sent(self, email: str) -> None:
        self._last_sent[self._key(email)] = self._clock()

    def reset(self, email: str | None = None) -> None:
        if email is None:
            self._last_sent.clear()
        else:
            self._last_sent.pop(self._key(email), None)


verification_cooldown = EmailCooldown(settings.VERIFICATION_RESEND_COOLDOWN_SECONDS)


def get_verification_cooldown() -> EmailCooldown:
    return verification_cooldown
