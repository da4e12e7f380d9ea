import threading
from typing import Iterable, Set


class Frontier:
    """
    The set of URLs already claimed for visiting during one crawl.

    The set only grows. Claiming is a single check-and-insert under the lock,
    so exactly one caller wins each URL even if several traversal threads
    share the frontier. Reads take the same lock so diagnostics never observe
    a half-applied claim.
    """

    def __init__(self, seed: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._claimed: Set[str] = set(seed)

    def try_claim(self, url: str) -> bool:
        """Claim `url`; return True if the caller is now responsible for visiting it."""
        with self._lock:
            if url in self._claimed:
                return False
            self._claimed.add(url)
            return True

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return url in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)

    def snapshot(self) -> Set[str]:
        """Return a copy of the claimed URLs."""
        with self._lock:
            return set(self._claimed)
