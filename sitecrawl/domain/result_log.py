from typing import Any, Dict, List

Record = Dict[str, Any]


class ResultLog:
    """Append-only, arrival-ordered list of accepted records.

    Not synchronized on its own: the coordinator appends and checks the dump
    threshold inside one critical section.
    """

    def __init__(self):
        self._records: List[Record] = []

    def append(self, record: Record) -> int:
        """Append `record` and return the new length."""
        self._records.append(record)
        return len(self._records)

    def records(self) -> List[Record]:
        """Shallow copy of the records accepted so far, in arrival order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
