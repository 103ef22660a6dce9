from __future__ import annotations

import time
from typing import Callable, Dict, Optional

from padelnity_notify.domain.models.notification import fingerprint_of


class FingerprintDeduplicator:
    """Rejects a toast whose title/description was admitted within ``window_seconds``.

    Rejections do not refresh the record, so a burst of identical toasts lets
    one through per window. Expired fingerprints are pruned on every check.
    """

    def __init__(self, window_seconds: float = 3.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._window = float(window_seconds)
        self._clock = clock
        self._seen: Dict[str, float] = {}

    @property
    def window_seconds(self) -> float:
        return self._window

    def should_admit(self, title: str, description: Optional[str] = None) -> bool:
        now = self._clock()
        self._prune(now)

        key = fingerprint_of(title, description)
        last = self._seen.get(key)
        if last is not None and (now - last) < self._window:
            return False

        self._seen[key] = now
        return True

    def _prune(self, now: float) -> None:
        expire_before = now - self._window
        expired = [k for k, t in self._seen.items() if t <= expire_before]
        for k in expired:
            self._seen.pop(k, None)

    def __len__(self) -> int:
        return len(self._seen)
