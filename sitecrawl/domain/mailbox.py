import threading
from typing import Optional, Set

from sitecrawl.domain.document import Document


class DocumentMailbox:
    """
    Holding area for fetched documents that no worker has taken yet.

    Delivery is unordered: `take()` returns whichever document the set pops,
    not the oldest one. Every document is handed out at most once.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._documents: Set[Document] = set()

    def put(self, document: Document) -> None:
        with self._lock:
            self._documents.add(document)

    def take(self) -> Optional[Document]:
        """Remove and return one arbitrary document, or None when empty."""
        with self._lock:
            if not self._documents:
                return None
            return self._documents.pop()

    def is_empty(self) -> bool:
        with self._lock:
            return not self._documents

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)
